"""
오디오 디코딩 에러 정의 모듈입니다.

모든 에러는 해당 파일에 대해 종료성(terminal)이며 재시도하지 않습니다.

계층 구조:
    DecodeError
    ├── FormatError              RIFF/WAVE 구조 오류
    ├── UnsupportedFormatError   PCM이 아닌 포맷 코드, 허용되지 않는 비트뎁스
    ├── UnsupportedChannelsError 1/2 이외의 채널 수
    ├── CorruptDataError         payload 길이가 프레임 크기와 불일치
    └── SoundFileError           파일 경로를 포함한 오케스트레이터 래퍼
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class DecodeError(Exception):
    """
    오디오 디코딩 에러의 기본 클래스입니다.

    필드:
        reason: 짧은 에러 사유 (예: "not RIFF/WAVE")
        field: 문제가 된 필드 이름 (없으면 None)
        expected: 기대값 (없으면 None)
        actual: 실제값 (없으면 None)
    """

    def __init__(
        self,
        reason: str,
        field: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        self.reason = reason
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field is None:
            return self.reason
        return (
            f"{self.reason}: {self.field} "
            f"(기대값={self.expected}, 실제값={self.actual})"
        )


class FormatError(DecodeError):
    """RIFF/WAVE 컨테이너 구조가 잘못되었을 때 발생하는 에러입니다."""
    pass


class UnsupportedFormatError(DecodeError):
    """PCM(1)이 아닌 오디오 포맷 코드 또는 8/16 이외의 비트뎁스일 때 발생합니다."""
    pass


class UnsupportedChannelsError(DecodeError):
    """채널 수가 1 또는 2가 아닐 때 발생하는 에러입니다."""
    pass


class CorruptDataError(DecodeError):
    """샘플 데이터가 선언된 채널/비트뎁스 프레이밍과 맞지 않을 때 발생합니다."""
    pass


class SoundFileError(DecodeError):
    """
    특정 파일 처리 실패를 나타내는 래퍼 에러입니다.

    원인 에러는 cause 필드와 __cause__ (raise ... from) 양쪽에 보존됩니다.

    필드:
        path: 처리 중이던 파일 경로
        cause: 내부 단계에서 발생한 원본 예외
    """

    def __init__(self, path: str | Path, cause: BaseException) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(
            f"{self.path}: {cause}",
            field=getattr(cause, "field", None),
            expected=getattr(cause, "expected", None),
            actual=getattr(cause, "actual", None),
        )

    def _format_message(self) -> str:
        return self.reason
