"""
입력 WAV 탐색 모듈입니다.

역할:
- 언어별 하위 폴더(<in_dir>/<lang>/0.wav..9.wav) 자동 탐지
- 명시적 언어 목록 정리 (공백 제거, 빈 항목 제외, 정렬)
- 선택적 beep.wav 경로 결정

사용 예시:
    >>> discover_languages(Path("sounds"))
    ['en', 'es', 'ja']
    >>> digit_paths(Path("sounds"), "en")[3]
    PosixPath('sounds/en/3.wav')
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DIGIT_COUNT = 10
BEEP_FILENAME = "beep.wav"


class SourceDiscoveryError(Exception):
    """처리할 언어를 찾지 못했을 때 발생하는 에러입니다."""
    pass


def digit_paths(in_dir: str | Path, lang: str) -> list[Path]:
    """<in_dir>/<lang>/0.wav..9.wav 경로를 숫자 순서대로 반환합니다."""
    lang_dir = Path(in_dir) / lang
    return [lang_dir / f"{digit}.wav" for digit in range(DIGIT_COUNT)]


def has_all_digit_files(lang_dir: str | Path) -> bool:
    """디렉토리에 0.wav..9.wav가 모두 있는지 확인합니다."""
    lang_dir = Path(lang_dir)
    return all((lang_dir / f"{digit}.wav").is_file() for digit in range(DIGIT_COUNT))


def discover_languages(
    in_dir: str | Path,
    langs: Optional[str | Iterable[str]] = None,
) -> list[str]:
    """
    처리할 언어 목록을 결정합니다.

    langs가 주어지면 그 목록(쉼표 구분 문자열 허용)을 정리해 사용하고,
    없으면 in_dir 하위 폴더 중 0.wav..9.wav를 모두 가진 폴더를 언어로 간주합니다.

    파라미터:
        in_dir: 언어 하위 폴더를 포함하는 입력 디렉토리
        langs: 명시적 언어 목록 또는 쉼표 구분 문자열 (None/빈 값이면 자동 탐지)

    반환값:
        list[str]: 정렬된 언어 목록

    에러:
        SourceDiscoveryError: 언어를 하나도 찾지 못했을 때
    """
    in_dir = Path(in_dir)

    if isinstance(langs, str):
        langs = langs.split(",")
    selected = sorted({lang.strip() for lang in (langs or []) if lang.strip()})

    if not selected:
        if not in_dir.is_dir():
            raise SourceDiscoveryError(f"입력 디렉토리가 없습니다: {in_dir}")
        selected = sorted(
            entry.name
            for entry in in_dir.iterdir()
            if entry.is_dir() and has_all_digit_files(entry)
        )
        logger.debug(f"언어 자동 탐지: {in_dir} → {selected}")

    if not selected:
        raise SourceDiscoveryError(
            f"언어를 찾지 못했습니다: {in_dir}. "
            f"langs를 지정하거나 하위 폴더(en, es, ...)에 0.wav..9.wav를 두세요."
        )
    return selected


def resolve_beep_path(in_dir: str | Path, beep: Optional[str | Path] = None) -> Optional[Path]:
    """
    beep.wav 경로를 결정합니다.

    파라미터:
        in_dir: 입력 디렉토리 (beep 미지정 시 <in_dir>/beep.wav 사용)
        beep: 명시적 beep 파일 경로

    반환값:
        Optional[Path]: 존재하는 beep 파일 경로, 없으면 None
    """
    beep_path = Path(beep) if beep else Path(in_dir) / BEEP_FILENAME
    if beep_path.is_file():
        return beep_path
    logger.info(f"Beep: {beep_path} 없음, beepSound 생성 생략")
    return None
