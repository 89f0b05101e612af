"""
Pytest 설정 및 공통 Fixture
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

import pytest

from config.config_manager import ConfigStore
from lib.publisher import RedisPublisher
from syncer.config import SyncerConfig


class FakeRedis:
    """테스트용 인메모리 redis.asyncio 클라이언트

    decode_responses=True 클라이언트처럼 문자열을 반환합니다.
    """

    def __init__(self, available: bool = True):
        self.available = available
        self.strings: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.calls: list[tuple[str, Any]] = []
        # 다른 타입 값이 이미 있는 것처럼 쓰기를 거부할 키
        self.wrong_type_keys: set[str] = set()

    def _check(self) -> None:
        if not self.available:
            from redis.exceptions import ConnectionError

            raise ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def ping(self) -> bool:
        self._check()
        return True

    def _check_type(self, key: str) -> None:
        if key in self.wrong_type_keys:
            from redis.exceptions import ResponseError

            raise ResponseError(
                "WRONGTYPE Operation against a key holding the wrong kind of value"
            )

    async def set(self, key: str, value: Any, ex: int | None = None) -> bool:
        self._check()
        self._check_type(key)
        self.calls.append(("set", key))
        self.strings[key] = str(value)
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        return self.strings.get(key)

    async def sadd(self, key: str, *members: str) -> int:
        self._check()
        if not members:
            from redis.exceptions import ResponseError

            raise ResponseError("wrong number of arguments for 'sadd' command")
        self._check_type(key)
        self.calls.append(("sadd", key))
        current = self.sets.setdefault(key, set())
        before = len(current)
        current.update(members)
        return len(current) - before

    async def smembers(self, key: str) -> set[str]:
        self._check()
        return set(self.sets.get(key, set()))

    def snapshot(self) -> tuple[dict[str, str], dict[str, set[str]]]:
        """현재 저장 상태 복사본"""
        return dict(self.strings), {k: set(v) for k, v in self.sets.items()}


@pytest.fixture(autouse=True)
def reset_config_store():
    """ConfigStore 싱글톤 리셋"""
    ConfigStore._instance = None
    yield
    ConfigStore._instance = None


@pytest.fixture(autouse=True)
def restore_root_log_level():
    """log.level 적용 테스트 후 루트 로거 레벨 복원"""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def fake_redis() -> FakeRedis:
    """인메모리 Redis"""
    return FakeRedis()


@pytest.fixture
def publisher(fake_redis: FakeRedis) -> RedisPublisher:
    """인메모리 Redis를 사용하는 RedisPublisher"""
    return RedisPublisher(fake_redis)


@pytest.fixture
def temp_config_dir():
    """임시 설정 디렉토리 (config/ 하위 디렉토리 포함)"""
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "config").mkdir()
        yield Path(tmpdir)


@pytest.fixture
def syncer_config(temp_config_dir: Path) -> SyncerConfig:
    """테스트용 SyncerConfig

    환경변수 대신 임시 디렉토리를 검색 경로로 사용.
    """
    return SyncerConfig(
        redis_uri="localhost",
        redis_port=6379,
        search_paths=[
            str(temp_config_dir / "config"),
            str(temp_config_dir),
        ],
        reload_debounce=0.0,
        health_port=0,
    )
