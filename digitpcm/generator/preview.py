"""
미리듣기 WAV 저장 모듈입니다.

정규화된 raw PCM을 8kHz/unsigned 8bit/mono WAV로 저장하여
생성 결과를 직접 들어볼 수 있게 합니다.

soundfile(libsndfile)의 int16 → PCM_U8 변환은 (x >> 8) + 128 이므로
(u8 - 128) << 8 로 넘기면 저장된 바이트가 원본 raw PCM과 정확히 같습니다.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import soundfile as sf

from digitpcm.audio import TARGET_FORMAT, TargetFormat
from digitpcm.generator import SoundBank

logger = logging.getLogger(__name__)


def write_preview_wav(path: str | Path, pcm: bytes, target: TargetFormat = TARGET_FORMAT) -> Path:
    """
    unsigned 8bit raw PCM 하나를 WAV 파일로 저장합니다.

    파라미터:
        path: 저장할 WAV 경로
        pcm: unsigned 8bit mono raw PCM
        target: 샘플레이트를 가져올 목표 포맷

    반환값:
        Path: 저장된 파일 경로
    """
    path = Path(path)
    samples = (np.frombuffer(pcm, dtype=np.uint8).astype(np.int16) - 128) << 8
    sf.write(str(path), samples, target.sample_rate, subtype="PCM_U8", format="WAV")
    return path


def write_preview_wavs(
    bank: SoundBank,
    out_dir: str | Path,
    target: TargetFormat = TARGET_FORMAT,
) -> list[Path]:
    """
    SoundBank 전체를 <lang>_<digit>.wav, beep.wav로 저장합니다.

    파라미터:
        bank: 변환 결과
        out_dir: 저장 디렉토리 (없으면 생성)

    반환값:
        list[Path]: 저장된 파일 경로 목록
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for lang in sorted(bank.languages):
        for digit, pcm in enumerate(bank.languages[lang]):
            written.append(write_preview_wav(out_dir / f"{lang}_{digit}.wav", pcm, target))
    if bank.beep:
        written.append(write_preview_wav(out_dir / "beep.wav", bank.beep, target))

    logger.info(f"미리듣기 WAV 저장 완료: {out_dir} ({len(written)}개)")
    return written
