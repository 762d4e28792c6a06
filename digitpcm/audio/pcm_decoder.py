"""
PCM 디코더 및 믹스다운 모듈입니다.

역할:
- 8bit unsigned / 16bit signed little-endian 샘플을 float64로 정규화
- 스테레오 → 모노 믹스다운 (좌우 산술 평균)
- 채널 수/payload 길이 검증

사용 예시:
    >>> signal = decode_to_mono(parse_wave(data))
    >>> signal.sample_rate, len(signal)
    (16000, 12345)
"""

from __future__ import annotations

import logging

import numpy as np

from digitpcm.audio import Signal, WaveDescriptor
from digitpcm.audio.errors import (
    CorruptDataError,
    UnsupportedChannelsError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

_SUPPORTED_CHANNELS = (1, 2)

# 16bit 정규화 기준 (-32768 → -1.0)
_INT16_SCALE = 32768.0
# 8bit unsigned 최대값
_UINT8_MAX = 255.0


def decode_to_mono(desc: WaveDescriptor) -> Signal:
    """
    WaveDescriptor의 샘플 데이터를 mono float64 Signal로 변환합니다.

    파라미터:
        desc: parse_wave()로 검증된 WaveDescriptor

    반환값:
        Signal: 원본 샘플레이트의 mono 신호

    에러:
        UnsupportedChannelsError: 채널 수가 1/2가 아닐 때
        CorruptDataError: 16bit payload 길이가 2 × 채널 수로 나누어지지 않을 때
        UnsupportedFormatError: 8/16 이외의 비트뎁스 (parse_wave를 거치지 않은 경우)
    """
    channels = desc.channel_count
    if channels not in _SUPPORTED_CHANNELS:
        raise UnsupportedChannelsError(
            "unsupported channel count",
            field="channel_count",
            expected=_SUPPORTED_CHANNELS,
            actual=channels,
        )

    if desc.bits_per_sample == 8:
        normalized = _decode_u8(desc.sample_data, channels)
    elif desc.bits_per_sample == 16:
        normalized = _decode_s16le(desc.sample_data, channels)
    else:
        raise UnsupportedFormatError(
            "unsupported bits per sample",
            field="bits_per_sample",
            expected=(8, 16),
            actual=desc.bits_per_sample,
        )

    mono = _mixdown_to_mono(normalized, channels)
    logger.debug(
        f"PCM 디코딩: {desc.bits_per_sample}bit/{channels}ch/{desc.sample_rate}Hz "
        f"→ {mono.shape[0]} samples (mono float64)"
    )
    return Signal(samples=mono, sample_rate=desc.sample_rate)


# =============================================================================
# 모듈 레벨 헬퍼 함수
# =============================================================================

def _decode_u8(data: bytes, channels: int) -> np.ndarray:
    """
    8bit unsigned PCM을 -1.0~+1.0 float64로 정규화합니다.

    스테레오에서 길이가 홀수이면 마지막 반쪽 프레임은 버립니다.

    반환값:
        np.ndarray: shape=(frames, channels) float64 배열
    """
    raw = np.frombuffer(data, dtype=np.uint8)
    frames = raw.shape[0] // channels
    raw = raw[:frames * channels].reshape(frames, channels)
    return (raw.astype(np.float64) / _UINT8_MAX) * 2.0 - 1.0


def _decode_s16le(data: bytes, channels: int) -> np.ndarray:
    """
    16bit signed little-endian PCM을 float64로 정규화합니다.

    반환값:
        np.ndarray: shape=(frames, channels) float64 배열

    에러:
        CorruptDataError: 길이가 프레임 크기(2 × channels)의 배수가 아닐 때
    """
    frame_bytes = 2 * channels
    if len(data) % frame_bytes != 0:
        raise CorruptDataError(
            "corrupt data length vs channels",
            field="sample_data length",
            expected=f"multiple of {frame_bytes}",
            actual=len(data),
        )
    raw = np.frombuffer(data, dtype="<i2").reshape(-1, channels)
    return raw.astype(np.float64) / _INT16_SCALE


def _mixdown_to_mono(arr: np.ndarray, channels: int) -> np.ndarray:
    """
    (frames, channels) 배열을 모노로 믹스다운합니다.

    스테레오는 0.5 × (L + R)로 평균합니다.
    """
    if channels == 1:
        return arr[:, 0].copy()
    return 0.5 * (arr[:, 0] + arr[:, 1])
