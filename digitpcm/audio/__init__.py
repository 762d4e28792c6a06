"""
오디오 디코딩/정규화 모듈 패키지

공통 데이터 타입:
- WaveDescriptor: RIFF/WAVE 파싱 결과 컨테이너
- Signal: 샘플레이트가 짝지어진 mono float64 신호
- TargetFormat: 정규화 목표 포맷 (8kHz/8bit/mono, 고정값)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class WaveDescriptor:
    """
    RIFF/WAVE 컨테이너 파싱 결과입니다.

    parse_wave()가 생성하며, 디코딩 후 폐기됩니다.

    필드:
        sample_rate: 샘플링레이트 (Hz, u32)
        channel_count: 채널 수 (u16)
        bits_per_sample: 비트뎁스 (8 또는 16)
        audio_format_code: fmt 청크의 포맷 코드 (1 = 선형 PCM)
        sample_data: data 청크 원본 바이트 (interleaved)
    """
    sample_rate: int
    channel_count: int
    bits_per_sample: int
    audio_format_code: int
    sample_data: bytes


@dataclass(frozen=True)
class Signal:
    """
    mono float64 오디오 신호입니다.

    필드:
        samples: 1차원 float64 배열 (-1.0~+1.0, 클램핑 전에는 초과 가능)
        sample_rate: 샘플링레이트 (Hz)
    """
    samples: np.ndarray
    sample_rate: int

    def __len__(self) -> int:
        return int(self.samples.shape[0])


@dataclass(frozen=True)
class TargetFormat:
    """
    정규화 목표 포맷입니다.

    코어 파이프라인 내부 상수이며 설정 파일/환경변수로 바꿀 수 없습니다.

    필드:
        sample_rate: 출력 샘플링레이트 (Hz)
        channels: 출력 채널 수
        bits_per_sample: 출력 비트뎁스 (unsigned)
    """
    sample_rate: int = 8000
    channels: int = 1
    bits_per_sample: int = 8

    @property
    def block_align(self) -> int:
        return self.channels * self.bits_per_sample // 8

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align

    def wave_header(self) -> bytes:
        """
        목표 포맷용 RIFF/WAVE 헤더 템플릿을 반환합니다.

        RIFF 크기와 data 크기 필드는 0이며, 헤더는 "data" 태그로 끝납니다.
        소비 측에서 크기를 채우고 샘플 데이터를 이어 붙입니다.

        반환값:
            bytes: 40바이트 헤더
        """
        return (
            b"RIFF"
            + struct.pack("<I", 0)
            + b"WAVE"
            + b"fmt "
            + struct.pack(
                "<IHHIIHH",
                16,                    # fmt 청크 크기
                1,                     # PCM
                self.channels,
                self.sample_rate,
                self.byte_rate,
                self.block_align,
                self.bits_per_sample,
            )
            + b"data"
        )


# 캡차 재생용 고정 포맷: 8kHz / unsigned 8bit / mono, 헤더 없는 raw 바이트
TARGET_FORMAT = TargetFormat()
