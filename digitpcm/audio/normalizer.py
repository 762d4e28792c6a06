"""
사운드 정규화 파이프라인 오케스트레이터 모듈입니다.

역할:
- WAV 바이트열을 목표 포맷(8kHz/8bit/mono) raw PCM으로 변환
- 파싱 → 디코딩/믹스다운 → 리샘플링 → 양자화 단계를 순서대로 합성
- 파일 단위 처리 시 실패 원인과 파일 경로를 함께 보존

변환 파이프라인:
    bytes
        → parse_wave()        (WaveDescriptor)
        → decode_to_mono()    (Signal, 원본 샘플레이트)
        → resample_signal()   (Signal, 8000Hz)
        → quantize_u8()       (bytes, unsigned 8bit)

각 호출은 상태를 공유하지 않으므로 여러 파일을 동시에 처리해도 안전합니다.

사용 예시:
    >>> normalizer = SoundNormalizer()
    >>> pcm = normalizer.process_file("en/0.wav")
    >>> len(pcm)  # 8kHz 기준 샘플 수
    5120
"""

from __future__ import annotations

import logging
from pathlib import Path

from digitpcm.audio import TARGET_FORMAT, TargetFormat
from digitpcm.audio.errors import CorruptDataError, DecodeError, SoundFileError
from digitpcm.audio.pcm_decoder import decode_to_mono
from digitpcm.audio.quantizer import quantize_u8
from digitpcm.audio.resampler import resample_signal
from digitpcm.audio.wav_parser import parse_wave

logger = logging.getLogger(__name__)


class SoundNormalizer:
    """
    WAV 데이터를 목표 포맷 raw PCM으로 정규화하는 클래스입니다.

    목표 포맷은 생성 시 고정되며 이후 변경되지 않습니다.
    현재 파이프라인은 mono/unsigned 8bit 출력만 지원합니다.
    """

    def __init__(self, target: TargetFormat = TARGET_FORMAT) -> None:
        """
        SoundNormalizer를 초기화합니다.

        파라미터:
            target (TargetFormat): 정규화 목표 포맷

        에러:
            ValueError: mono/8bit가 아닌 목표 포맷
        """
        if target.channels != 1 or target.bits_per_sample != 8:
            raise ValueError(
                f"지원하지 않는 목표 포맷: channels={target.channels}, "
                f"bits_per_sample={target.bits_per_sample} (mono/8bit만 지원)"
            )
        self._target = target

    @property
    def target(self) -> TargetFormat:
        return self._target

    def decode_and_normalize(self, data: bytes) -> bytes:
        """
        WAV 바이트열을 목표 포맷 raw PCM 바이트로 변환합니다.

        파라미터:
            data: WAV 파일 전체 바이트

        반환값:
            bytes: 헤더 없는 unsigned 8bit mono PCM (target.sample_rate 기준)

        에러:
            DecodeError 하위 클래스: 내부 단계 실패 시 그대로 전파
            CorruptDataError: 결과 샘플이 0개일 때 (빈 결과로 성공하지 않음)
        """
        desc = parse_wave(data)
        signal = decode_to_mono(desc)
        resampled = resample_signal(signal, self._target.sample_rate)
        pcm = quantize_u8(resampled.samples)

        if len(pcm) == 0:
            raise CorruptDataError(
                "empty output",
                field="samples",
                expected="> 0",
                actual=f"0 (data chunk {len(desc.sample_data)} bytes)",
            )
        return pcm

    def process_file(self, path: str | Path) -> bytes:
        """
        WAV 파일을 읽어 목표 포맷 raw PCM으로 변환합니다.

        파라미터:
            path: WAV 파일 경로

        반환값:
            bytes: 헤더 없는 unsigned 8bit mono PCM

        에러:
            SoundFileError: 파일 읽기 또는 디코딩 실패 시 (원인은 __cause__ 및 cause에 보존)
        """
        path = Path(path)
        try:
            data = path.read_bytes()
            pcm = self.decode_and_normalize(data)
        except (DecodeError, OSError) as exc:
            logger.debug(f"사운드 파일 처리 실패: {path}: {exc}")
            raise SoundFileError(path, exc) from exc

        logger.debug(
            f"{path.name} → {len(pcm)} samples "
            f"({self._target.sample_rate}Hz u{self._target.bits_per_sample})"
        )
        return pcm


_default_normalizer = SoundNormalizer()


def decode_and_normalize(data: bytes) -> bytes:
    """기본 목표 포맷으로 WAV 바이트열을 정규화합니다."""
    return _default_normalizer.decode_and_normalize(data)


def process(path: str | Path) -> bytes:
    """기본 목표 포맷으로 WAV 파일을 정규화합니다."""
    return _default_normalizer.process_file(path)
