"""
digitpcm 구조화 로깅 모듈입니다.

역할:
- 콘솔(stderr) + 회전 로그 파일(digitpcm.log, 10MB × 5) 핸들러 구성
- json 포맷: python-json-logger로 session_id/module/level 및 클립 필드(lang, digit, path) 출력
- text 포맷: 세션 접두어와 클립 문맥 접미어를 붙인 한 줄 로그
- 클립 단위 로거(ClipLoggerAdapter)로 파일별 로그에 lang/digit/path 자동 첨부

사용 예시:
    >>> session_id = setup_logging(config)
    >>> log = StructuredLogger.for_clip(__name__, Path("en/3.wav"), lang="en", digit=3)
    >>> log.info("변환 완료", extra={"samples": 4000})
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import uuid
from pathlib import Path
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from digitpcm.config.schema import AppConfig

LOG_FILENAME = "digitpcm.log"
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

# 클립 문맥으로 LogRecord에 실리는 필드
_CLIP_FIELDS = ("lang", "digit", "path")

_SESSION_ID: str = ""


def setup_logging(config: AppConfig, session_id: Optional[str] = None) -> str:
    """
    root logger에 digitpcm 로그 핸들러를 설치합니다.

    이미 설치된 핸들러는 제거 후 닫으므로 여러 번 호출해도 핸들러가 쌓이지 않습니다.

    파라미터:
        config: system 섹션(log_level, log_format, log_dir, session_id)을 사용
        session_id: 명시적 세션 ID (None이면 config 값, 그것도 비어있으면 UUID4)

    반환값:
        str: 적용된 세션 ID
    """
    global _SESSION_ID
    _SESSION_ID = session_id or config.system.session_id or str(uuid.uuid4())

    level = logging.getLevelName(config.system.log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _remove_handlers(root_logger)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_handler = _build_file_handler(Path(config.system.log_dir))
    if file_handler is not None:
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(_build_formatter(config.system.log_format, _SESSION_ID))
        root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        f"로깅 초기화: level={config.system.log_level}, format={config.system.log_format}, "
        f"file={file_handler.baseFilename if file_handler else '-'}, session={_SESSION_ID}"
    )
    return _SESSION_ID


def _remove_handlers(root_logger: logging.Logger) -> None:
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()


def _build_file_handler(log_dir: Path) -> Optional[logging.Handler]:
    """로그 디렉토리에 회전 파일 핸들러를 만듭니다. 디렉토리를 만들 수 없으면 None."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=log_dir / LOG_FILENAME,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        logging.getLogger(__name__).warning(f"로그 파일 핸들러 생성 실패 ({log_dir}): {exc}")
        return None


def _build_formatter(log_format: str, session_id: str) -> logging.Formatter:
    if log_format == "json":
        return _JsonFormatter(session_id)
    return _TextFormatter(session_id)


# =============================================================================
# 포맷터
# =============================================================================

class _JsonFormatter(jsonlogger.JsonFormatter):
    """
    한 줄 JSON 포맷터입니다.

    공통 필드 session_id, module(로거 이름), level을 추가하고
    extra로 넘어온 클립 필드(lang, digit, path, samples 등)는 python-json-logger가 그대로 싣습니다.
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            json_ensure_ascii=False,
        )
        self._session_id = session_id

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["session_id"] = self._session_id
        log_record["module"] = record.name
        log_record["level"] = record.levelname


class _TextFormatter(logging.Formatter):
    """
    사람이 읽는 한 줄 포맷터입니다.

    예: 2024-01-02 03:04:05 [1a2b3c4d] INFO     digitpcm.generator.batch: 변환 완료 (lang=en digit=3)
    """

    def __init__(self, session_id: str) -> None:
        prefix = session_id[:8] if session_id else "no-sid"
        super().__init__(
            fmt=f"%(asctime)s [{prefix}] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{name}={getattr(record, name)}"
            for name in ("lang", "digit")
            if getattr(record, name, None) is not None
        )
        return f"{line} ({context})" if context else line


# =============================================================================
# 로거 팩토리
# =============================================================================

class ClipLoggerAdapter(logging.LoggerAdapter):
    """
    WAV 클립 하나에 대한 로그에 lang/digit/path를 자동으로 붙이는 어댑터입니다.

    호출 시 넘긴 extra는 클립 필드와 합쳐집니다 (호출 쪽 값 우선).
    """

    def process(self, msg: Any, kwargs: dict) -> tuple[Any, dict]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


class StructuredLogger:
    """모듈 로거와 클립 로거를 반환하는 팩토리입니다."""

    @staticmethod
    def get(name: str) -> logging.Logger:
        """표준 logging.Logger를 그대로 반환합니다."""
        return logging.getLogger(name)

    @staticmethod
    def for_clip(
        name: str,
        path: Path,
        lang: Optional[str] = None,
        digit: Optional[int] = None,
    ) -> ClipLoggerAdapter:
        """
        클립 문맥이 붙은 로거를 반환합니다.

        파라미터:
            name: 로거 이름 (보통 __name__)
            path: WAV 파일 경로
            lang: 언어 코드 (beep이면 None)
            digit: 숫자 0~9 (beep이면 None)
        """
        fields = dict(zip(_CLIP_FIELDS, (lang, digit, str(path))))
        return ClipLoggerAdapter(logging.getLogger(name), fields)

    @staticmethod
    def get_session_id() -> str:
        """마지막 setup_logging()이 적용한 세션 ID를 반환합니다."""
        return _SESSION_ID
