"""
digitpcm 커맨드라인 진입점

역할:
- 설정 로드 (config.yaml + DPCM_ 환경변수) 및 커맨드라인 오버라이드
- 구조화 로깅 초기화
- SoundBatch 실행 → Go 소스 생성 → (선택) 미리듣기 WAV 저장
- 실패 시 오류 로깅 후 종료 코드 1 반환

실행 예시:
    자동 탐지:
        digitpcm --in sounds --out sounds.go --pkg captcha

    언어 지정 + 실패 파일 건너뛰기:
        digitpcm --in sounds --langs en,es,ja --keep-going

    설정 파일 사용:
        digitpcm --config config.yaml --preview-dir output/preview
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from digitpcm.audio import TARGET_FORMAT
from digitpcm.config.config_manager import DEFAULT_CONFIG_PATH, ConfigLoadError, ConfigManager
from digitpcm.config.schema import AppConfig
from digitpcm.generator.batch import BatchError, SoundBatch
from digitpcm.generator.go_emitter import generate_source, write_source
from digitpcm.generator.preview import write_preview_wavs
from digitpcm.logging.structured_logger import setup_logging
from digitpcm.sources.discovery import SourceDiscoveryError

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        prog="digitpcm",
        description="언어별 숫자 음성 WAV를 8kHz/8bit/mono PCM Go 소스로 변환합니다",
    )
    parser.add_argument(
        "--config", default=None,
        help=f"설정 파일 경로 (기본: {DEFAULT_CONFIG_PATH}, 없으면 기본값 사용)",
    )
    parser.add_argument(
        "--in", dest="in_dir", help="언어 하위 폴더(en, es, ...)를 포함하는 입력 디렉토리"
    )
    parser.add_argument("--out", dest="out_file", help="생성할 Go 소스 파일 경로")
    parser.add_argument("--pkg", dest="package", help="생성 Go 파일의 패키지 이름")
    parser.add_argument(
        "--langs", help="쉼표로 구분한 언어 목록 (기본: 하위 폴더 자동 탐지)"
    )
    parser.add_argument(
        "--beep", help="beep.wav 경로 (기본: <in>/beep.wav, 없으면 beepSound 생략)"
    )
    parser.add_argument(
        "--preview-dir", help="정규화된 클립을 WAV로 저장할 디렉토리"
    )
    parser.add_argument("--workers", type=int, help="동시 처리 파일 수")
    parser.add_argument(
        "--keep-going", action="store_true",
        help="파일 하나가 실패해도 나머지를 계속 처리 (실패 시 종료 코드 1)",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> AppConfig:
    """
    설정을 만듭니다 (기본값 < config.yaml < DPCM_ 환경변수 < 커맨드라인).

    --config를 지정하지 않으면 작업 디렉토리의 config.yaml을, 그것도 없으면 기본값을 사용합니다.

    에러:
        ConfigLoadError: 설정 파일 로드 또는 병합 결과 검증 실패 시
    """
    overrides = {
        "input.in_dir": args.in_dir,
        "input.langs": args.langs,
        "input.beep": args.beep,
        "output.out_file": args.out_file,
        "output.package": args.package,
        "output.preview_dir": args.preview_dir,
        "generate.workers": args.workers,
        "generate.fail_fast": False if args.keep_going else None,
    }
    return ConfigManager().load(args.config, overrides)


async def generate(config: AppConfig) -> int:
    """
    배치 변환 후 Go 소스와 미리듣기 WAV를 생성합니다.

    반환값:
        int: 종료 코드 (0=성공, 1=실패 파일 있음)
    """
    bank = await SoundBatch(config).run()

    if not bank.languages:
        logger.error("변환에 성공한 언어가 없어 Go 소스를 생성하지 않습니다")
        return 1

    source = generate_source(config.output.package, bank, TARGET_FORMAT.wave_header())
    size = write_source(config.output.out_file, source)
    print(f"OK. Wrote {config.output.out_file} ({size} bytes)")

    if config.output.preview_dir:
        write_preview_wavs(bank, config.output.preview_dir)

    if not bank.ok:
        for failure in bank.failures:
            logger.error(f"실패 파일: {failure.label} path={failure.path}: {failure.error}")
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """커맨드라인 진입점입니다. 종료 코드를 반환합니다."""
    args = _parse_args(argv)

    try:
        config = load_config(args)
    except ConfigLoadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    setup_logging(config)

    try:
        return asyncio.run(generate(config))
    except BatchError as exc:
        failure = exc.failure
        logger.error(f"변환 중단 ({failure.label}, path={failure.path}): {failure.error}")
        return 1
    except SourceDiscoveryError as exc:
        logger.error(str(exc))
        return 1
    except OSError as exc:
        logger.error(f"출력 저장 실패: {exc}")
        return 1


def run() -> None:
    """console_scripts 진입점"""
    sys.exit(main())


if __name__ == "__main__":
    run()
