"""
twitch-bot-config 동기화 모듈

설정 파일 감시 및 Redis 발행 프로세스.
"""

from .config import SyncerConfig
from .health import HealthServer
from .main import ConfigSyncer, apply_log_level, parse_log_level, run

__all__ = [
    "SyncerConfig",
    "HealthServer",
    "ConfigSyncer",
    "apply_log_level",
    "parse_log_level",
    "run",
]
