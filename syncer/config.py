"""
동기화 프로세스 설정

환경변수 기반 설정 관리. 발행할 설정 값 자체는 twitch-bot.yaml에서 읽습니다.
"""

import logging
import os
from dataclasses import dataclass, field

from config.config_manager import CONFIG_NAME, CONFIG_SEARCH_PATHS
from lib.publisher import REDIS_DEFAULT_DATABASE, REDIS_DEFAULT_PORT

logger = logging.getLogger(__name__)


def _int_from_env(name: str, default: int) -> int:
    """정수 환경변수 (변환 실패 시 기본값)"""
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            f"[Config] {name} 변환 실패: {raw!r}, 기본값 {default} 사용"
        )
        return default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(
            f"[Config] {name} 변환 실패: {raw!r}, 기본값 {default} 사용"
        )
        return default


@dataclass
class SyncerConfig:
    """동기화 프로세스 설정"""

    # Redis
    redis_uri: str = "localhost"
    redis_port: int = REDIS_DEFAULT_PORT
    redis_password: str = ""
    redis_database: int = REDIS_DEFAULT_DATABASE

    # 설정 파일
    config_name: str = CONFIG_NAME
    search_paths: list[str] = field(
        default_factory=lambda: list(CONFIG_SEARCH_PATHS)
    )
    reload_debounce: float = 0.5  # 초

    # 헬스 서버 (0 = 비활성화)
    health_port: int = 0

    @classmethod
    def from_env(cls) -> "SyncerConfig":
        """환경변수에서 설정 로드"""
        return cls(
            redis_uri=os.getenv("REDIS_URI", "") or "localhost",
            redis_port=_int_from_env("REDIS_PORT", REDIS_DEFAULT_PORT),
            redis_password=os.getenv("REDIS_PASSWORD", ""),
            redis_database=_int_from_env("REDIS_DATABASE", REDIS_DEFAULT_DATABASE),
            reload_debounce=_float_from_env("CONFIG_RELOAD_DEBOUNCE", 0.5),
            health_port=_int_from_env("HEALTH_PORT", 0),
        )

    @property
    def redis_address(self) -> str:
        """host:port/db 형식 주소 (로그용)"""
        return f"{self.redis_uri}:{self.redis_port}/{self.redis_database}"
