#!/usr/bin/env python
"""
twitch-bot-config 동기화 실행 스크립트

twitch-bot.yaml을 감시하며 변경될 때마다 Redis로 발행합니다.

사용법:
    # 기본 실행
    python scripts/config_sync.py

    # 환경 지정
    python scripts/config_sync.py --env prod

    # 설정 디렉토리 추가 + 디버그 로그
    python scripts/config_sync.py --config-dir /etc/twitch-bot --log-level DEBUG
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def setup_logging(level: str = "INFO") -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_env_file(env: str) -> None:
    """환경별 .env 파일 로드"""
    from dotenv import load_dotenv

    env_files = [
        PROJECT_ROOT / f".env.{env}",
        PROJECT_ROOT / ".env.local",
        PROJECT_ROOT / ".env",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file)
            print(f"[Config] 환경 파일 로드: {env_file}")
            break


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="twitch-bot 설정 → Redis 동기화",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
    # 기본 실행
    python scripts/config_sync.py

    # 프로덕션 환경
    python scripts/config_sync.py --env prod

    # 디버그 모드 (리로드 디바운스 없음)
    python scripts/config_sync.py --env dev --debounce 0 --log-level DEBUG
        """,
    )

    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default="dev",
        help="실행 환경 (기본: dev)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        default=[],
        help="설정 파일 검색 디렉토리 (기본 검색 경로보다 우선, 반복 가능)",
    )
    parser.add_argument(
        "--debounce",
        type=float,
        default=None,
        help="리로드 디바운스 (초, 기본: CONFIG_RELOAD_DEBOUNCE 또는 0.5)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="로그 레벨 (설정 파일의 log.level이 있으면 로드 후 덮어씀)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """메인 함수"""
    args = build_parser().parse_args(argv)

    os.environ["ENV"] = args.env
    load_env_file(args.env)

    log_level = args.log_level or ("DEBUG" if args.env == "dev" else "INFO")
    setup_logging(log_level)

    from syncer.config import SyncerConfig
    from syncer.main import run

    config = SyncerConfig.from_env()
    if args.config_dir:
        config.search_paths = args.config_dir + config.search_paths
    if args.debounce is not None:
        config.reload_debounce = args.debounce

    run(config)


if __name__ == "__main__":
    main()
