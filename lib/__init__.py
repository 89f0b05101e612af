"""
twitch-bot-config 공통 라이브러리

Redis 발행 클라이언트, 키 레지스트리, 타입 변환, 에러 처리 제공.
"""

from .errors import (
    ConfigLoadError,
    ConfigSyncError,
    ErrorCategory,
    ErrorClassifier,
    PublishError,
    StoreUnavailableError,
)
from .publisher import REDIS_DEFAULT_DATABASE, REDIS_DEFAULT_PORT, RedisPublisher
from .registry import KEY_REGISTRY, iter_publish_order, keys_of_type
from .types import KeySpec, KeyType, StoreState, coerce

__all__ = [
    # Publisher
    "RedisPublisher",
    "REDIS_DEFAULT_PORT",
    "REDIS_DEFAULT_DATABASE",
    # Errors
    "ConfigLoadError",
    "ConfigSyncError",
    "ErrorCategory",
    "ErrorClassifier",
    "PublishError",
    "StoreUnavailableError",
    # Registry
    "KEY_REGISTRY",
    "iter_publish_order",
    "keys_of_type",
    # Types
    "KeySpec",
    "KeyType",
    "StoreState",
    "coerce",
]
