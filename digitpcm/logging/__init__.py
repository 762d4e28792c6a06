"""
구조화 로깅 패키지

- setup_logging: 콘솔/파일 핸들러 설치
- StructuredLogger: 모듈 로거 및 클립(lang/digit/path) 로거 팩토리
"""

from digitpcm.logging.structured_logger import (
    LOG_FILENAME,
    ClipLoggerAdapter,
    StructuredLogger,
    setup_logging,
)

__all__ = ["LOG_FILENAME", "ClipLoggerAdapter", "StructuredLogger", "setup_logging"]
