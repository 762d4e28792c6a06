"""
사운드 생성 모듈 패키지

공통 데이터 타입:
- FileFailure: 파일 단위 처리 실패 기록
- SoundBank: 언어별 숫자 사운드 + beep 변환 결과 컨테이너
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class FileFailure:
    """
    파일 단위 처리 실패 기록입니다.

    필드:
        path: 실패한 WAV 파일 경로
        lang: 언어 코드 (beep이면 None)
        digit: 숫자 0~9 (beep이면 None)
        error: 발생한 예외 (보통 SoundFileError)
    """
    path: Path
    lang: Optional[str]
    digit: Optional[int]
    error: BaseException

    @property
    def label(self) -> str:
        """로그 출력용 라벨 (예: "lang=en digit=3", "beep")"""
        if self.lang is None:
            return "beep"
        return f"lang={self.lang} digit={self.digit}"


@dataclass
class SoundBank:
    """
    배치 변환 결과 컨테이너입니다.

    필드:
        languages: 언어 코드 → 숫자 0~9 순서의 raw PCM 바이트 목록 (항상 10개)
        beep: beep 사운드 raw PCM (없으면 None)
        failures: 실패한 파일 목록 (fail_fast=False일 때만 채워짐)
    """
    languages: dict[str, list[bytes]] = field(default_factory=dict)
    beep: Optional[bytes] = None
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
