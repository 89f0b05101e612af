"""
설정 관리 모듈

ConfigStore, ConfigWatcher를 통해 twitch-bot.yaml을 관리하고 핫 리로드를 지원합니다.
"""

from .config_manager import (
    CONFIG_NAME,
    CONFIG_SEARCH_PATHS,
    ConfigDocument,
    ConfigStore,
    ConfigWatcher,
)

__all__ = [
    "CONFIG_NAME",
    "CONFIG_SEARCH_PATHS",
    "ConfigDocument",
    "ConfigStore",
    "ConfigWatcher",
]
