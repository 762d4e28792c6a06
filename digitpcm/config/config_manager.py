"""
digitpcm 설정 관리 모듈입니다.

설정 값 우선순위 (뒤가 앞을 덮어씀):
    스키마 기본값 < config.yaml < DPCM_ 환경변수 < 커맨드라인 오버라이드

역할:
- YAML 파일 로드 (경로 미지정 시 작업 디렉토리의 config.yaml, 없으면 기본값)
- DPCM_<SECTION>_<FIELD> 환경변수를 스키마에 있는 필드로만 매핑
- dot-notation 키("input.in_dir") 오버라이드 병합 후 AppConfig 한 번만 검증
- dot-notation 조회

사용 예시:
    >>> manager = ConfigManager()
    >>> config = manager.load("config.yaml", overrides={"output.package": "voice"})
    >>> manager.get("output.package")
    'voice'
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from digitpcm.config.schema import AppConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "DPCM_"
DEFAULT_CONFIG_PATH = Path("config.yaml")


class ConfigLoadError(Exception):
    """설정을 만들 수 없을 때 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigFileNotFoundError(ConfigLoadError):
    """명시한 설정 파일이 없을 때 발생하는 에러입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """
    병합된 설정이 스키마 검증에 실패했을 때 발생하는 에러입니다.

    필드:
        problems: "section.field: 메시지" 형식의 실패 목록
    """

    def __init__(self, message: str, problems: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class ConfigManager:
    """
    digitpcm 실행 설정을 만들고 보관합니다.

    load()/load_defaults() 호출마다 새 AppConfig를 만들어 활성 설정으로 교체합니다.
    """

    def __init__(self) -> None:
        self._config: Optional[AppConfig] = None
        self._config_filepath: Optional[Path] = None

    @property
    def config(self) -> Optional[AppConfig]:
        """현재 활성 설정 (로드 전에는 None)"""
        return self._config

    @property
    def config_filepath(self) -> Optional[Path]:
        """활성 설정을 읽어온 YAML 경로 (파일 없이 만든 경우 None)"""
        return self._config_filepath

    def load(
        self,
        filepath: Optional[str | Path] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> AppConfig:
        """
        YAML, 환경변수, 오버라이드를 병합해 설정을 만듭니다.

        파라미터:
            filepath: YAML 경로. None이면 DEFAULT_CONFIG_PATH가 있을 때만 사용
            overrides: dot-notation 키 → 값. 값이 None인 항목은 무시

        반환값:
            AppConfig: 검증 완료된 설정

        에러:
            ConfigFileNotFoundError: 명시한 filepath가 없을 때
            ConfigLoadError: YAML 읽기/파싱 실패, 최상위가 매핑이 아닐 때
            ConfigValidationError: 병합 결과가 스키마 검증에 실패할 때
        """
        if filepath is None:
            if not DEFAULT_CONFIG_PATH.is_file():
                return self.load_defaults(overrides)
            filepath = DEFAULT_CONFIG_PATH

        filepath = Path(filepath)
        if not filepath.is_file():
            raise ConfigFileNotFoundError(f"설정 파일을 찾을 수 없습니다: {filepath}")

        raw_config = self._parse_yaml_file(filepath)
        logger.debug(f"YAML 로드: {filepath} (섹션: {sorted(raw_config)})")
        return self._build(raw_config, filepath, overrides)

    def load_defaults(self, overrides: Optional[Mapping[str, Any]] = None) -> AppConfig:
        """
        YAML 없이 스키마 기본값 + 환경변수 + 오버라이드로 설정을 만듭니다.

        에러:
            ConfigValidationError: 환경변수/오버라이드 값이 검증에 실패할 때
        """
        return self._build({}, None, overrides)

    def get(self, key: str, default: Any = None) -> Any:
        """
        dot-notation 키로 활성 설정 값을 조회합니다 (예: "generate.workers").

        스키마에 없는 키는 default를 반환합니다.

        에러:
            RuntimeError: 아직 설정을 로드하지 않았을 때
        """
        if self._config is None:
            raise RuntimeError("설정이 아직 로드되지 않았습니다. load()를 먼저 호출하세요.")

        value: Any = self._config
        for part in key.split("."):
            if not isinstance(value, BaseModel) or part not in type(value).model_fields:
                return default
            value = getattr(value, part)
        return value

    # =========================================================================
    # 내부 메서드 (private)
    # =========================================================================

    def _build(
        self,
        raw_config: dict,
        filepath: Optional[Path],
        overrides: Optional[Mapping[str, Any]],
    ) -> AppConfig:
        """환경변수와 오버라이드를 차례로 병합하고 검증한 뒤 활성 설정으로 교체합니다."""
        merged = _merge_dotted(raw_config, self._env_overrides())
        cli_overrides = {key: value for key, value in (overrides or {}).items() if value is not None}
        merged = _merge_dotted(merged, cli_overrides)

        config = self._validate_config(merged)
        self._config = config
        self._config_filepath = filepath

        logger.info(
            f"설정 로드: source={filepath or '기본값'}, in_dir={config.input.in_dir}, "
            f"out_file={config.output.out_file}, package={config.output.package}, "
            f"workers={config.generate.workers}, fail_fast={config.generate.fail_fast}"
        )
        return config

    def _parse_yaml_file(self, filepath: Path) -> dict:
        """
        YAML 파일을 최상위 매핑으로 읽습니다. 빈 파일은 빈 딕셔너리입니다.

        에러:
            ConfigLoadError: 읽기/파싱 실패, 최상위가 매핑이 아닐 때
        """
        try:
            raw_data = yaml.safe_load(filepath.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            logger.error(f"설정 파일 읽기 실패: {filepath}: {exc}")
            raise ConfigLoadError(f"설정 파일을 읽을 수 없습니다: {filepath}: {exc}") from exc

        if raw_data is None:
            logger.warning(f"설정 파일이 비어있습니다: {filepath}")
            return {}
        if not isinstance(raw_data, dict):
            raise ConfigLoadError(
                f"설정 파일의 최상위는 매핑이어야 합니다: {filepath} ({type(raw_data).__name__})"
            )
        return raw_data

    def _env_overrides(self) -> dict[str, str]:
        """
        DPCM_ 환경변수를 dot-notation 오버라이드로 변환합니다.

        DPCM_<SECTION>_<FIELD>에서 첫 언더스코어가 섹션 구분자입니다
        (DPCM_INPUT_IN_DIR → input.in_dir). 스키마에 없는 키는 경고 후 무시합니다.
        문자열 → bool/int 변환과 쉼표 목록 분리는 스키마 검증이 담당합니다.
        """
        overrides = {}
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue
            dotted_key = _resolve_env_key(env_key[len(ENV_PREFIX):].lower())
            if dotted_key is None:
                logger.warning(f"알 수 없는 설정 환경변수 무시: {env_key}")
                continue
            overrides[dotted_key] = env_value
            logger.info(f"환경변수 오버라이드: {env_key} -> {dotted_key}")
        return overrides

    def _validate_config(self, raw_config: dict) -> AppConfig:
        """
        병합된 딕셔너리를 AppConfig로 검증합니다.

        에러:
            ConfigValidationError: 검증 실패 (실패 필드 목록 포함)
        """
        try:
            return AppConfig(**raw_config)
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            ]
            for problem in problems:
                logger.error(f"설정 검증 실패 - {problem}")
            raise ConfigValidationError(
                f"설정 검증 실패: {'; '.join(problems)}", problems
            ) from exc


# =============================================================================
# 모듈 레벨 헬퍼 함수
# =============================================================================

def _resolve_env_key(name: str) -> Optional[str]:
    """환경변수 이름(예: output_package)을 스키마 키(output.package)로 바꿉니다. 없으면 None."""
    section_name, _, field_name = name.partition("_")
    section = AppConfig.model_fields.get(section_name)
    if section is None or field_name not in section.annotation.model_fields:
        return None
    return f"{section_name}.{field_name}"


def _merge_dotted(raw_config: dict, overrides: Mapping[str, Any]) -> dict:
    """{"section.field": value} 오버라이드를 중첩 딕셔너리에 덮어씁니다."""
    for dotted_key, value in overrides.items():
        section_name, field_name = dotted_key.split(".", 1)
        section = raw_config.get(section_name)
        if not isinstance(section, dict):
            section = raw_config[section_name] = {}
        section[field_name] = value
    return raw_config
