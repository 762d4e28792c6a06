"""
digitpcm 설정 스키마 정의 모듈입니다.

역할:
- Pydantic v2 BaseModel 기반으로 config.yaml의 전체 구조를 타입 안전하게 정의
- 각 섹션(system, input, output, generate)을 독립적인 중첩 모델로 분리
- 필드별 기본값, 유효성 검증(validator)을 포함

목표 오디오 포맷(8kHz/8bit/mono)은 코어 상수(digitpcm.audio.TARGET_FORMAT)이며
설정으로 변경할 수 없습니다.

사용 예시:
    >>> from digitpcm.config.schema import AppConfig
    >>> config = AppConfig(**yaml_data)
    >>> print(config.output.package)
    'captcha'
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Go 패키지 이름 규칙 (소문자 식별자)
_GO_PACKAGE_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


# =============================================================================
# system 섹션: 로깅/세션
# =============================================================================

class SystemConfig(BaseModel):
    """
    로그 출력과 실행 세션 설정입니다.

    log_dir 아래에 digitpcm.log가 회전 저장되며, 콘솔 로그는 stderr로 나갑니다.
    """
    log_level: str = Field(default="INFO", description="DEBUG | INFO | WARNING | ERROR | CRITICAL")
    log_format: Literal["json", "text"] = Field(default="text", description="로그 한 줄 포맷")
    log_dir: str = Field(default="output/logs", description="digitpcm.log 저장 디렉토리")
    # 비어있으면 setup_logging()이 UUID4를 발급
    session_id: str = Field(default="", description="로그에 찍을 실행 세션 ID")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """대소문자 구분 없이 받아 표준 logging 레벨 이름(대문자)으로 정규화합니다."""
        level_name = value.strip().upper()
        if level_name not in _LOG_LEVELS:
            raise ValueError(f"log_level은 {_LOG_LEVELS} 중 하나여야 합니다. 입력값: '{value}'")
        return level_name


# =============================================================================
# input 섹션: 입력 WAV 위치
# =============================================================================

class InputConfig(BaseModel):
    """
    입력 WAV 파일 위치 설정입니다.

    디렉토리 구조:
        <in_dir>/<lang>/0.wav .. 9.wav
        <in_dir>/beep.wav (선택)
    """
    # 언어별 하위 폴더를 포함하는 입력 디렉토리
    in_dir: str = Field(default=".", description="언어 하위 폴더를 포함하는 입력 디렉토리")
    # 포함할 언어 목록 (비어있으면 하위 폴더 자동 탐지)
    langs: list[str] = Field(default_factory=list, description="포함할 언어 목록 (비어있으면 자동 탐지)")
    # beep.wav 경로 (비어있으면 <in_dir>/beep.wav)
    beep: str = Field(default="", description="beep.wav 경로 (비어있으면 <in_dir>/beep.wav)")

    @field_validator("langs", mode="before")
    @classmethod
    def split_langs(cls, value):
        """쉼표 구분 문자열도 언어 목록으로 받아들입니다 (환경변수 오버라이드용)."""
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


# =============================================================================
# output 섹션: 생성 결과물 설정
# =============================================================================

class OutputConfig(BaseModel):
    """
    생성되는 Go 소스 및 미리듣기 WAV 출력 설정입니다.
    """
    # 생성할 Go 소스 파일 경로
    out_file: str = Field(default="sounds.go", description="생성할 Go 소스 파일 경로")
    # 생성 Go 파일의 패키지 이름
    package: str = Field(default="captcha", description="Go 패키지 이름")
    # 정규화된 클립을 WAV로 저장할 디렉토리 (비어있으면 저장하지 않음)
    preview_dir: str = Field(default="", description="미리듣기 WAV 저장 디렉토리 (비어있으면 생략)")

    @field_validator("package")
    @classmethod
    def validate_package(cls, value: str) -> str:
        """Go 패키지 이름이 유효한 식별자인지 검증합니다."""
        if not _GO_PACKAGE_PATTERN.match(value):
            error_message = f"package는 소문자 Go 식별자여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# generate 섹션: 배치 실행 정책
# =============================================================================

class GenerateConfig(BaseModel):
    """
    배치 변환 실행 정책입니다.

    역할:
    - 동시에 처리할 파일 수 제한
    - 파일 하나가 실패했을 때 전체 중단 여부 결정
    """
    # 동시 처리 파일 수
    workers: int = Field(default=4, description="동시 처리 파일 수")
    # 첫 실패에서 중단할지 여부 (False면 실패 파일을 기록하고 계속 진행)
    fail_fast: bool = Field(default=True, description="첫 실패 시 중단 여부")

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, value: int) -> int:
        """동시 처리 수가 1 이상인지 검증합니다."""
        if value < 1:
            error_message = f"workers는 1 이상이어야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value


# =============================================================================
# 최상위 AppConfig: 모든 섹션을 통합하는 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    애플리케이션 전체 설정을 통합하는 최상위 모델입니다.

    역할:
    - config.yaml의 모든 섹션을 하나의 타입 안전한 객체로 통합
    - 각 섹션이 누락된 경우 기본값으로 자동 생성

    사용 예시:
        >>> import yaml
        >>> with open("config.yaml") as f:
        ...     raw = yaml.safe_load(f)
        >>> config = AppConfig(**raw)
        >>> print(config.generate.workers)
        4
    """
    # 시스템 전역 설정
    system: SystemConfig = Field(default_factory=SystemConfig, description="시스템 설정")
    # 입력 설정
    input: InputConfig = Field(default_factory=InputConfig, description="입력 설정")
    # 출력 설정
    output: OutputConfig = Field(default_factory=OutputConfig, description="출력 설정")
    # 배치 실행 설정
    generate: GenerateConfig = Field(default_factory=GenerateConfig, description="배치 실행 설정")
