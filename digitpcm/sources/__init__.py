"""
입력 탐색 패키지

- discover_languages: 언어 폴더 자동 탐지
- digit_paths / resolve_beep_path: 처리할 WAV 경로 결정
"""

from digitpcm.sources.discovery import (
    DIGIT_COUNT,
    SourceDiscoveryError,
    digit_paths,
    discover_languages,
    has_all_digit_files,
    resolve_beep_path,
)

__all__ = [
    "DIGIT_COUNT",
    "SourceDiscoveryError",
    "digit_paths",
    "discover_languages",
    "has_all_digit_files",
    "resolve_beep_path",
]
