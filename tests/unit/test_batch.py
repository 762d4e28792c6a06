"""
SoundBatch 배치 변환 단위 테스트

검증 항목:
- 언어별 10개 숫자 사운드가 숫자 순서대로 변환되는지
- beep.wav 포함/생략
- fail_fast=True: 첫 실패에서 BatchError (원인 보존)
- fail_fast=False: 실패 기록, 실패한 언어만 제외
"""

from __future__ import annotations

import io
import wave
from pathlib import Path

import pytest

from digitpcm.audio.errors import FormatError, SoundFileError
from digitpcm.config.schema import AppConfig
from digitpcm.generator.batch import BatchError, SoundBatch
from digitpcm.sources.discovery import SourceDiscoveryError


# =========================================================================
# 테스트 헬퍼
# =========================================================================

def _wav_bytes(frames: bytes, sample_rate: int = 8000, sampwidth: int = 1) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(sampwidth)
        wf.setframerate(sample_rate)
        wf.writeframes(frames)
    return buffer.getvalue()


def _digit_pcm(lang_index: int, digit: int) -> bytes:
    """언어/숫자마다 다른 8kHz 8bit 샘플 (변환 없이 그대로 통과)."""
    return bytes([10 * lang_index + digit + 1]) * (digit + 1)


def _make_sound_tree(root: Path, langs=("en",), beep: bool = False) -> Path:
    for lang_index, lang in enumerate(langs):
        lang_dir = root / lang
        lang_dir.mkdir(parents=True)
        for digit in range(10):
            (lang_dir / f"{digit}.wav").write_bytes(_wav_bytes(_digit_pcm(lang_index, digit)))
    if beep:
        (root / "beep.wav").write_bytes(_wav_bytes(bytes([200, 50]) * 4))
    return root


def _config(in_dir: Path, **generate) -> AppConfig:
    return AppConfig(input={"in_dir": str(in_dir)}, generate=generate)


# =========================================================================
# 정상 변환
# =========================================================================

@pytest.mark.asyncio
async def test_converts_all_digits_in_order(tmp_path):
    _make_sound_tree(tmp_path, langs=("en", "ja"))

    bank = await SoundBatch(_config(tmp_path)).run()

    assert sorted(bank.languages) == ["en", "ja"]
    assert bank.languages["en"] == [_digit_pcm(0, d) for d in range(10)]
    assert bank.languages["ja"] == [_digit_pcm(1, d) for d in range(10)]
    assert bank.beep is None
    assert bank.ok


@pytest.mark.asyncio
async def test_beep_included(tmp_path):
    _make_sound_tree(tmp_path, beep=True)

    bank = await SoundBatch(_config(tmp_path)).run()

    assert bank.beep == bytes([200, 50]) * 4


@pytest.mark.asyncio
async def test_explicit_beep_and_langs(tmp_path):
    _make_sound_tree(tmp_path, langs=("en", "es"))
    beep = tmp_path / "tones" / "short.wav"
    beep.parent.mkdir()
    beep.write_bytes(_wav_bytes(bytes([128]) * 3))
    config = AppConfig(input={"in_dir": str(tmp_path), "langs": ["es"], "beep": str(beep)})

    bank = await SoundBatch(config).run()

    assert list(bank.languages) == ["es"]
    assert bank.beep == bytes([128]) * 3


@pytest.mark.asyncio
async def test_resamples_to_target_rate(tmp_path):
    _make_sound_tree(tmp_path)
    # 16kHz 16bit 무음 1600프레임 → 8kHz 800샘플
    (tmp_path / "en" / "4.wav").write_bytes(
        _wav_bytes(bytes(3200), sample_rate=16000, sampwidth=2)
    )

    bank = await SoundBatch(_config(tmp_path)).run()

    assert bank.languages["en"][4] == bytes([128]) * 800


@pytest.mark.asyncio
async def test_single_worker(tmp_path):
    _make_sound_tree(tmp_path, langs=("en", "ru"), beep=True)

    bank = await SoundBatch(_config(tmp_path, workers=1)).run()

    assert len(bank.languages["ru"]) == 10
    assert bank.beep is not None


@pytest.mark.asyncio
async def test_no_languages_raises(tmp_path):
    with pytest.raises(SourceDiscoveryError):
        await SoundBatch(_config(tmp_path)).run()


# =========================================================================
# 실패 정책
# =========================================================================

@pytest.mark.asyncio
async def test_fail_fast_raises_batch_error(tmp_path):
    _make_sound_tree(tmp_path)
    bad = tmp_path / "en" / "7.wav"
    bad.write_bytes(b"not a wav file")

    with pytest.raises(BatchError) as exc_info:
        await SoundBatch(_config(tmp_path, fail_fast=True)).run()

    failure = exc_info.value.failure
    assert failure.lang == "en"
    assert failure.digit == 7
    assert failure.path == bad
    assert isinstance(failure.error, SoundFileError)
    assert isinstance(failure.error.cause, FormatError)
    assert exc_info.value.__cause__ is failure.error
    assert "lang=en digit=7" in str(exc_info.value)


@pytest.mark.asyncio
async def test_keep_going_drops_failed_language(tmp_path):
    _make_sound_tree(tmp_path, langs=("en", "ja"))
    (tmp_path / "ja" / "2.wav").write_bytes(b"RIFF")

    bank = await SoundBatch(_config(tmp_path, fail_fast=False)).run()

    assert list(bank.languages) == ["en"]
    assert not bank.ok
    assert len(bank.failures) == 1
    failure = bank.failures[0]
    assert failure.label == "lang=ja digit=2"
    assert isinstance(failure.error, SoundFileError)


@pytest.mark.asyncio
async def test_keep_going_failed_beep(tmp_path):
    _make_sound_tree(tmp_path)
    (tmp_path / "beep.wav").write_bytes(b"garbage")

    bank = await SoundBatch(_config(tmp_path, fail_fast=False)).run()

    assert list(bank.languages) == ["en"]
    assert bank.beep is None
    assert [f.label for f in bank.failures] == ["beep"]
