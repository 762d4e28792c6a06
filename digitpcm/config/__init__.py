"""
설정 패키지

- AppConfig: config.yaml 스키마 루트 모델
- ConfigManager: YAML 로드 + DPCM_ 환경변수 + 커맨드라인 오버라이드 병합
"""

from digitpcm.config.config_manager import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigManager,
    ConfigValidationError,
    DEFAULT_CONFIG_PATH,
)
from digitpcm.config.schema import AppConfig

__all__ = [
    "AppConfig",
    "ConfigManager",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigFileNotFoundError",
    "DEFAULT_CONFIG_PATH",
]
