"""
배치 변환 모듈입니다.

역할:
- 언어별 0.wav..9.wav 및 선택적 beep.wav를 SoundNormalizer로 변환
- 파일 단위 변환을 asyncio.to_thread로 병렬 실행 (Semaphore로 동시 처리 수 제한)
- 실패 정책: fail_fast=True면 첫 실패에서 중단, False면 실패를 기록하고 계속 진행

사용 예시:
    >>> batch = SoundBatch(config)
    >>> bank = asyncio.run(batch.run())
    >>> len(bank.languages["en"])
    10
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from digitpcm.audio.normalizer import SoundNormalizer
from digitpcm.config.schema import AppConfig
from digitpcm.generator import FileFailure, SoundBank
from digitpcm.logging.structured_logger import ClipLoggerAdapter, StructuredLogger
from digitpcm.sources.discovery import (
    DIGIT_COUNT,
    digit_paths,
    discover_languages,
    resolve_beep_path,
)

logger = logging.getLogger(__name__)


class BatchError(Exception):
    """
    fail_fast 모드에서 파일 하나가 실패했을 때 발생하는 에러입니다.

    필드:
        failure: 실패 기록 (원인 예외는 __cause__에도 보존)
    """

    def __init__(self, failure: FileFailure) -> None:
        self.failure = failure
        super().__init__(f"{failure.label}: {failure.error}")


@dataclass(frozen=True)
class _Job:
    """변환 대상 파일 하나 (beep이면 lang/digit이 None)"""
    path: Path
    lang: Optional[str] = None
    digit: Optional[int] = None


class SoundBatch:
    """
    설정에 따라 전체 사운드 세트를 변환하는 배치 실행기입니다.

    실행 흐름:
        언어 탐지 → 작업 목록 생성 → 병렬 변환 → SoundBank 조립
    """

    def __init__(
        self,
        config: AppConfig,
        normalizer: Optional[SoundNormalizer] = None,
    ) -> None:
        """
        SoundBatch를 초기화합니다.

        파라미터:
            config (AppConfig): 전체 애플리케이션 설정 객체
            normalizer (SoundNormalizer): 사용할 정규화기 (None이면 기본 목표 포맷)
        """
        self._config = config
        self._normalizer = normalizer or SoundNormalizer()
        self._in_dir = Path(config.input.in_dir)
        self._workers = config.generate.workers
        self._fail_fast = config.generate.fail_fast

    async def run(self) -> SoundBank:
        """
        배치 변환을 실행합니다.

        반환값:
            SoundBank: 변환 결과 (fail_fast=False면 failures 포함 가능)

        에러:
            SourceDiscoveryError: 처리할 언어가 없을 때
            BatchError: fail_fast=True에서 파일 하나라도 실패했을 때
        """
        langs = discover_languages(self._in_dir, self._config.input.langs)
        jobs = [
            _Job(path=path, lang=lang, digit=digit)
            for lang in langs
            for digit, path in enumerate(digit_paths(self._in_dir, lang))
        ]
        beep_path = resolve_beep_path(self._in_dir, self._config.input.beep or None)
        if beep_path is not None:
            jobs.append(_Job(path=beep_path))

        logger.info(
            f"배치 변환 시작: langs={langs}, files={len(jobs)}, "
            f"workers={self._workers}, fail_fast={self._fail_fast}"
        )

        semaphore = asyncio.Semaphore(self._workers)
        tasks = [
            asyncio.create_task(self._convert(job, semaphore), name=f"convert:{job.path}")
            for job in jobs
        ]

        if self._fail_fast:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in tasks:
                if task in done and task.exception() is not None:
                    failure = self._to_failure(jobs[tasks.index(task)], task.exception())
                    raise BatchError(failure) from failure.error

        results = await asyncio.gather(*tasks, return_exceptions=True)
        bank = self._assemble(langs, jobs, results)

        logger.info(
            f"배치 변환 완료: langs={sorted(bank.languages)}, "
            f"beep={'yes' if bank.beep is not None else 'no'}, "
            f"failures={len(bank.failures)}"
        )
        return bank

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    async def _convert(self, job: _Job, semaphore: asyncio.Semaphore) -> bytes:
        """파일 하나를 워커 스레드에서 변환합니다."""
        async with semaphore:
            pcm = await asyncio.to_thread(self._normalizer.process_file, job.path)
        self._clip_logger(job).info(
            f"변환 완료: {job.path} -> {len(pcm)} samples", extra={"samples": len(pcm)}
        )
        return pcm

    def _to_failure(self, job: _Job, error: BaseException) -> FileFailure:
        failure = FileFailure(path=job.path, lang=job.lang, digit=job.digit, error=error)
        self._clip_logger(job).error(f"변환 실패 ({failure.label}): {error}")
        return failure

    @staticmethod
    def _clip_logger(job: _Job) -> ClipLoggerAdapter:
        return StructuredLogger.for_clip(__name__, job.path, lang=job.lang, digit=job.digit)

    def _assemble(
        self,
        langs: list[str],
        jobs: list[_Job],
        results: list,
    ) -> SoundBank:
        """
        작업 결과를 SoundBank로 조립합니다.

        숫자 하나라도 실패한 언어는 languages에서 제외됩니다.
        """
        bank = SoundBank()
        digits: dict[str, list[Optional[bytes]]] = {lang: [None] * DIGIT_COUNT for lang in langs}

        for job, result in zip(jobs, results):
            if isinstance(result, BaseException):
                bank.failures.append(self._to_failure(job, result))
                continue
            if job.lang is None:
                bank.beep = result
            else:
                digits[job.lang][job.digit] = result

        for lang in langs:
            sounds = digits[lang]
            if all(sound is not None for sound in sounds):
                bank.languages[lang] = sounds
            else:
                logger.warning(f"언어 {lang} 제외: 변환 실패한 숫자 파일 있음")
        return bank
