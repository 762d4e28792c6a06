"""
Go 소스 생성 모듈입니다.

역할:
- SoundBank를 캡차 패키지용 Go 소스(sounds.go)로 직렬화
- waveHeader / digitSounds / beepSound(선택) 변수 정의
- gofmt 결과와 동일한 들여쓰기(탭)와 줄바꿈 규칙으로 바이트 배열 출력

생성 예시:
    // Code generated by digitpcm; DO NOT EDIT.
    package captcha

    var waveHeader = []byte{
    	0x52, 0x49, 0x46, 0x46, ...
    }

    var digitSounds = map[string][][]byte{
    	"en": [][]byte{
    		{ // 0
    			0x80, 0x81, ...
    		},
    	...
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from digitpcm.generator import SoundBank

logger = logging.getLogger(__name__)

# 한 줄에 출력할 바이트 수
_HEADER_BYTES_PER_LINE = 12
_DIGIT_BYTES_PER_LINE = 11
_BEEP_BYTES_PER_LINE = 12

# Go strconv.Quote가 이름 있는 이스케이프로 출력하는 문자
_GO_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def format_bytes(buf: bytes, per_line: int) -> str:
    """
    바이트열을 Go 복합 리터럴 본문으로 포맷합니다.

    각 줄은 탭으로 시작하고, 마지막 요소를 포함해 모든 줄이 쉼표로 끝납니다.

    파라미터:
        buf: 출력할 바이트
        per_line: 한 줄당 바이트 수

    반환값:
        str: 줄바꿈으로 끝나는 문자열 (buf가 비어있으면 빈 문자열)
    """
    lines = []
    for offset in range(0, len(buf), per_line):
        row = buf[offset:offset + per_line]
        lines.append("\t" + ", ".join(f"0x{value:02x}" for value in row) + ",\n")
    return "".join(lines)


def indent(text: str, tabs: int) -> str:
    """비어있지 않은 각 줄 앞에 탭 tabs개를 붙입니다."""
    prefix = "\t" * tabs
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def generate_source(
    package: str,
    bank: SoundBank,
    wave_header: bytes,
    generated_at: Optional[datetime] = None,
) -> str:
    """
    SoundBank를 Go 소스 문자열로 변환합니다.

    파라미터:
        package: Go 패키지 이름
        bank: 변환 결과 (languages는 언어 코드 순으로 정렬되어 출력)
        wave_header: 목표 포맷 RIFF 헤더 템플릿 (TargetFormat.wave_header())
        generated_at: 생성 시각 (None이면 현재 UTC 시각)

    반환값:
        str: Go 소스 코드
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    parts = [
        "// Code generated by digitpcm; DO NOT EDIT.\n",
        f"// Generated at {generated_at.isoformat(timespec='seconds')}\n\n",
        f"package {package}\n\n",
        "// This file has been generated from .wav files using digitpcm.\n\n",
        f"var waveHeader = []byte{{\n{format_bytes(wave_header, _HEADER_BYTES_PER_LINE)}}}\n\n",
        "// Byte slices contain raw 8 kHz unsigned 8-bit PCM data (without wav header).\n\n",
        "var digitSounds = map[string][][]byte{\n",
    ]
    for lang in sorted(bank.languages):
        parts.append(f"\t{_go_quote(lang)}: [][]byte{{\n")
        for digit, sound in enumerate(bank.languages[lang]):
            body = indent(format_bytes(sound, _DIGIT_BYTES_PER_LINE), 2)
            parts.append(f"\t\t{{ // {digit}\n{body}\t\t}},\n")
        parts.append("\t},\n")
    parts.append("}\n")

    if bank.beep:
        parts.append(
            "// beepSound contains raw 8 kHz unsigned 8-bit PCM (no WAV header), "
            "derived from beep.wav.\n"
        )
        parts.append(f"var beepSound = []byte{{\n{format_bytes(bank.beep, _BEEP_BYTES_PER_LINE)}}}\n")

    return "".join(parts)


def write_source(path: str | Path, source: str) -> int:
    """
    생성된 Go 소스를 파일로 저장합니다.

    반환값:
        int: 저장한 바이트 수
    """
    path = Path(path)
    if path.parent != Path(""):
        path.parent.mkdir(parents=True, exist_ok=True)
    data = source.encode("utf-8")
    path.write_bytes(data)
    logger.info(f"Go 소스 저장 완료: {path} ({len(data)} bytes)")
    return len(data)


def _go_quote(value: str) -> str:
    """Go 문자열 리터럴로 인용합니다 (%q처럼 제어 문자도 이스케이프)."""
    escaped = []
    for char in value:
        if char in _GO_ESCAPES:
            escaped.append(_GO_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\x{ord(char):02x}")
        else:
            escaped.append(char)
    quoted = "".join(escaped)
    return f'"{quoted}"'
