"""
SoundNormalizer(파이프라인 오케스트레이터) 단위 테스트

검증 항목:
- 8bit/8kHz 모노 [0, 128, 255] 시나리오 (변환 없이 통과)
- 16bit/16kHz 모노 [16384, -16384] 시나리오 → 1샘플
- 실제 WAV 파일 처리 (44.1kHz 스테레오 → 8kHz 모노 길이)
- 실패 시 원인과 경로를 보존한 SoundFileError, 부분 결과 없음
- 목표 포맷 헤더 템플릿
"""

from __future__ import annotations

import io
import struct
import wave
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
import pytest

from digitpcm import decode_and_normalize, process
from digitpcm.audio import TARGET_FORMAT, TargetFormat
from digitpcm.audio.errors import (
    CorruptDataError,
    DecodeError,
    FormatError,
    SoundFileError,
    UnsupportedChannelsError,
    UnsupportedFormatError,
)
from digitpcm.audio.normalizer import SoundNormalizer


# =============================================================================
# 테스트 헬퍼
# =============================================================================

def _make_wav_bytes(
    frames: bytes,
    sample_rate: int = 8000,
    channels: int = 1,
    sampwidth: int = 1,
) -> bytes:
    """wave 모듈로 WAV 바이트를 생성합니다."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sampwidth)
        wf.setframerate(sample_rate)
        wf.writeframes(frames)
    return buffer.getvalue()


def _make_raw_wav(
    data: bytes,
    fmt_code: int = 1,
    channels: int = 1,
    sample_rate: int = 8000,
    bits: int = 16,
) -> bytes:
    """임의 필드 값을 가진 최소 WAV 바이트를 생성합니다."""
    block_align = max(channels * bits // 8, 1)
    fmt = struct.pack(
        "<HHIIHH", fmt_code, channels, sample_rate, sample_rate * block_align, block_align, bits
    )
    body = (
        b"WAVE"
        + b"fmt " + struct.pack("<I", len(fmt)) + fmt
        + b"data" + struct.pack("<I", len(data)) + data
    )
    return b"RIFF" + struct.pack("<I", len(body)) + body


# =============================================================================
# 변환 시나리오 테스트
# =============================================================================

def test_8bit_8khz_passthrough():
    """8kHz 8bit [0, 128, 255]가 그대로 [0, 128, 255]로 나오는지 확인합니다."""
    wav = _make_wav_bytes(bytes([0, 128, 255]), sample_rate=8000, sampwidth=1)

    assert SoundNormalizer().decode_and_normalize(wav) == bytes([0, 128, 255])


def test_16bit_16khz_downsample():
    """16kHz 16bit [16384, -16384]가 8kHz 1샘플(0.5 → 191)로 변환되는지 확인합니다."""
    wav = _make_wav_bytes(struct.pack("<2h", 16384, -16384), sample_rate=16000, sampwidth=2)

    assert SoundNormalizer().decode_and_normalize(wav) == bytes([191])


def test_stereo_44100_length(tmp_path):
    """44.1kHz 스테레오 0.1초 파일이 8kHz 800샘플로 변환되는지 확인합니다."""
    t = np.arange(4410) / 44100
    sine = (np.sin(2 * np.pi * 440 * t) * 16384).astype("<i2")
    stereo = np.column_stack([sine, sine])
    wav_path = tmp_path / "0.wav"
    wav_path.write_bytes(_make_wav_bytes(stereo.tobytes(), sample_rate=44100, channels=2, sampwidth=2))

    pcm = SoundNormalizer().process_file(wav_path)

    assert len(pcm) == 800
    values = np.frombuffer(pcm, dtype=np.uint8)
    # 진폭 0.5 사인파 → 대략 64~191 범위
    assert values.min() >= 63
    assert values.max() <= 192


def test_silence_maps_to_midscale():
    """16bit 무음이 모두 128로 변환되는지 확인합니다."""
    wav = _make_wav_bytes(bytes(2 * 1600), sample_rate=16000, sampwidth=2)

    assert decode_and_normalize(wav) == bytes([128]) * 800


def test_concurrent_calls_are_independent():
    """여러 스레드에서 동시에 호출해도 결과가 동일한지 확인합니다."""
    rng = np.random.default_rng(7)
    frames = rng.integers(-32768, 32768, size=22050).astype("<i2").tobytes()
    wav = _make_wav_bytes(frames, sample_rate=22050, sampwidth=2)
    normalizer = SoundNormalizer()
    expected = normalizer.decode_and_normalize(wav)

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(normalizer.decode_and_normalize, [wav] * 8))

    assert all(result == expected for result in results)


# =============================================================================
# 거부 테스트
# =============================================================================

def test_not_riff_rejected():
    """RIFF/WAVE가 아닌 입력은 FormatError로 실패하는지 확인합니다."""
    with pytest.raises(FormatError):
        decode_and_normalize(b"OggS" + bytes(40))


def test_24bit_rejected():
    """24bit PCM은 UnsupportedFormatError로 실패하는지 확인합니다."""
    wav = _make_raw_wav(bytes(6), bits=24)

    with pytest.raises(UnsupportedFormatError):
        decode_and_normalize(wav)


def test_multichannel_rejected():
    """4채널 WAV는 UnsupportedChannelsError로 실패하는지 확인합니다."""
    wav = _make_raw_wav(bytes(16), channels=4)

    with pytest.raises(UnsupportedChannelsError):
        decode_and_normalize(wav)


def test_empty_data_chunk_rejected():
    """샘플이 없는 WAV는 빈 결과 대신 CorruptDataError로 실패하는지 확인합니다."""
    wav = _make_raw_wav(b"")

    with pytest.raises(CorruptDataError) as exc_info:
        decode_and_normalize(wav)

    assert exc_info.value.reason == "empty output"


def test_zero_sample_rate_rejected():
    """샘플레이트가 0인 WAV는 리샘플링 전에 DecodeError로 실패하는지 확인합니다."""
    wav = _make_raw_wav(bytes([0, 128, 255]), sample_rate=0, bits=8)

    with pytest.raises(DecodeError) as exc_info:
        SoundNormalizer().decode_and_normalize(wav)

    assert isinstance(exc_info.value, FormatError)
    assert exc_info.value.field == "sample_rate"


def test_process_file_wraps_error_with_path(tmp_path):
    """process_file 실패 시 경로와 원인을 보존한 SoundFileError가 발생하는지 확인합니다."""
    wav_path = tmp_path / "3.wav"
    wav_path.write_bytes(_make_raw_wav(bytes(6), bits=24))

    with pytest.raises(SoundFileError) as exc_info:
        process(wav_path)

    error = exc_info.value
    assert error.path == wav_path
    assert isinstance(error.cause, UnsupportedFormatError)
    assert error.__cause__ is error.cause
    assert error.field == "bits_per_sample"
    assert error.actual == 24
    assert str(wav_path) in str(error)
    assert isinstance(error, DecodeError)


def test_process_file_zero_sample_rate_keeps_path(tmp_path):
    """샘플레이트 0 파일도 경로를 가진 SoundFileError로 감싸지는지 확인합니다."""
    wav_path = tmp_path / "3.wav"
    wav_path.write_bytes(_make_raw_wav(bytes([0, 128, 255]), sample_rate=0, bits=8))

    with pytest.raises(SoundFileError) as exc_info:
        SoundNormalizer().process_file(wav_path)

    error = exc_info.value
    assert error.path == wav_path
    assert isinstance(error.cause, FormatError)
    assert error.field == "sample_rate"
    assert error.actual == 0


def test_process_missing_file(tmp_path):
    """존재하지 않는 파일은 OSError 원인을 가진 SoundFileError로 실패하는지 확인합니다."""
    missing = tmp_path / "missing.wav"

    with pytest.raises(SoundFileError) as exc_info:
        SoundNormalizer().process_file(missing)

    assert isinstance(exc_info.value.cause, FileNotFoundError)
    assert exc_info.value.path == Path(missing)


# =============================================================================
# 목표 포맷 테스트
# =============================================================================

def test_target_format_constants():
    assert TARGET_FORMAT.sample_rate == 8000
    assert TARGET_FORMAT.channels == 1
    assert TARGET_FORMAT.bits_per_sample == 8
    assert SoundNormalizer().target is TARGET_FORMAT


def test_wave_header_template():
    """목표 포맷 헤더 템플릿이 mono 8kHz 8bit PCM 헤더(크기 0)와 일치하는지 확인합니다."""
    expected = bytes([
        0x52, 0x49, 0x46, 0x46,
        0x00, 0x00, 0x00, 0x00,
        0x57, 0x41, 0x56, 0x45,
        0x66, 0x6d, 0x74, 0x20,
        0x10, 0x00, 0x00, 0x00,
        0x01, 0x00,
        0x01, 0x00,
        0x40, 0x1f, 0x00, 0x00,
        0x40, 0x1f, 0x00, 0x00,
        0x01, 0x00,
        0x08, 0x00,
        0x64, 0x61, 0x74, 0x61,
    ])

    assert TARGET_FORMAT.wave_header() == expected


def test_unsupported_target_rejected():
    """mono/8bit가 아닌 목표 포맷은 ValueError가 발생하는지 확인합니다."""
    with pytest.raises(ValueError):
        SoundNormalizer(TargetFormat(sample_rate=8000, channels=2, bits_per_sample=8))


def test_custom_target_rate():
    """목표 샘플레이트를 16kHz로 지정하면 그 레이트로 리샘플링되는지 확인합니다."""
    wav = _make_wav_bytes(bytes([128]) * 8000, sample_rate=8000, sampwidth=1)
    normalizer = SoundNormalizer(TargetFormat(sample_rate=16000))

    assert len(normalizer.decode_and_normalize(wav)) == 16000
