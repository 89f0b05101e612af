"""
발행 키 레지스트리

Redis로 발행할 설정 경로를 타입과 함께 한 곳에서 선언합니다.
문서 스키마와의 일치 여부는 검증하지 않습니다:
- 레지스트리에서 빠진 키는 발행되지 않음
- 문서에 없는 키는 타입 기본값으로 발행됨
"""

from typing import Iterator

from .types import KeySpec, KeyType

_STRING_KEYS = [
    "jaeger.uri",
    "jaeger.service",
    "jaeger.environment",
    "irc.target",
    "irc.nickname",
    "irc.password",
    "mqtt.broker",
    "mqtt.port",
    "mqtt.clientId",
    "redis.uri",
    "redis.password",
    "log.level",
    "log.path",
    "triggers.guestbook.topic",
    "triggers.bot.owner",
    "triggers.bot.repository",
    "triggers.socialmedia.github",
    "triggers.socialmedia.twitter",
    "triggers.socialmedia.#youtube",
]

_INT_KEYS = [
    "jaeger.id",
    "prometheus.port",
    "redis.port",
    "redis.database",
]

_BOOL_KEYS = [
    "irc.ssl",
]

_STRING_LIST_KEYS = [
    "irc.channels",
    "triggers.streamholics.friends",
]

# 발행 순서: string → int → bool → string_list
PUBLISH_ORDER = (KeyType.STRING, KeyType.INT, KeyType.BOOL, KeyType.STRING_LIST)


def _build_registry() -> dict[str, KeySpec]:
    registry: dict[str, KeySpec] = {}
    for key_type, paths in (
        (KeyType.STRING, _STRING_KEYS),
        (KeyType.INT, _INT_KEYS),
        (KeyType.BOOL, _BOOL_KEYS),
        (KeyType.STRING_LIST, _STRING_LIST_KEYS),
    ):
        for path in paths:
            if path in registry:
                raise ValueError(f"중복 키: {path}")
            registry[path] = KeySpec(path=path, key_type=key_type)
    return registry


KEY_REGISTRY: dict[str, KeySpec] = _build_registry()


def keys_of_type(
    key_type: KeyType, registry: dict[str, KeySpec] | None = None
) -> list[KeySpec]:
    """타입별 키 목록 (선언 순서 유지)"""
    registry = KEY_REGISTRY if registry is None else registry
    return [spec for spec in registry.values() if spec.key_type is key_type]


def iter_publish_order(
    registry: dict[str, KeySpec] | None = None,
) -> Iterator[KeySpec]:
    """발행 순서대로 전체 키 순회"""
    for key_type in PUBLISH_ORDER:
        yield from keys_of_type(key_type, registry)


def get_spec(path: str) -> KeySpec | None:
    """경로로 키 정의 조회"""
    return KEY_REGISTRY.get(path)
