"""
Redis 설정 발행 클라이언트

설정 문서를 레지스트리 기준으로 Redis 키에 기록하고 타입별 조회를 제공합니다.

저장 규칙:
- 문자열/정수/불리언: SET (만료 없음), 불리언은 "1" / "0"
- 문자열 리스트: SADD (순서 보존 안 함, 기존 멤버 삭제 안 함)
"""

import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .errors import PublishError
from .registry import KEY_REGISTRY, iter_publish_order
from .types import KeySpec, KeyType, StoreState, coerce, encode_scalar

logger = logging.getLogger(__name__)

REDIS_DEFAULT_PORT = 6379
REDIS_DEFAULT_DATABASE = 0


class RedisPublisher:
    """Redis 설정 발행기

    연결은 프로세스 수명 동안 하나만 유지하며 재연결하지 않습니다.
    연결이 끊긴 뒤의 읽기 에러는 호출마다 그대로 전달됩니다.
    쓰기 에러는 키 단위로 기록 후 PublishError로 모아 전달합니다.
    """

    def __init__(
        self,
        client: Any,
        registry: dict[str, KeySpec] | None = None,
    ):
        """
        Args:
            client: redis.asyncio.Redis 호환 클라이언트 (decode_responses=True)
            registry: 발행 키 레지스트리 (기본: KEY_REGISTRY)
        """
        self.client = client
        self.registry = KEY_REGISTRY if registry is None else registry
        self.state = StoreState.CONNECTED

    @classmethod
    def connect(
        cls,
        address: str,
        port: int = REDIS_DEFAULT_PORT,
        password: str = "",
        database: int = REDIS_DEFAULT_DATABASE,
    ) -> "RedisPublisher":
        """Redis 연결 생성

        실제 접속 가능 여부는 확인하지 않습니다 (ping() 사용).
        """
        client = aioredis.Redis(
            host=address,
            port=port,
            password=password or None,
            db=database,
            decode_responses=True,
        )
        logger.info(f"[Publisher] Redis 클라이언트 생성: {address}:{port}/{database}")
        return cls(client)

    async def ping(self) -> bool:
        """Redis 응답 확인

        Returns:
            bool: PONG 응답 여부
        """
        try:
            reply = await self.client.ping()
        except (RedisError, OSError) as e:
            logger.error(f"[Publisher] Redis ping 실패: {e}")
            return False

        if reply is True:
            return True
        return str(reply).upper() == "PONG"

    async def publish_all(self, document: Any) -> int:
        """레지스트리의 모든 키를 Redis에 기록

        키마다 독립적으로 기록하므로 한 키의 실패가 나머지 키를 막지 않습니다.

        Args:
            document: get(path) 접근자를 가진 설정 문서 (ConfigDocument)

        Returns:
            int: 기록한 키 수

        Raises:
            PublishError: 하나 이상의 키 기록 실패 (나머지 키는 기록됨)
        """
        written = 0
        failed: list[str] = []

        for spec in iter_publish_order(self.registry):
            raw = document.get(spec.path)
            value = (
                spec.default_value if raw is None else coerce(spec.key_type, raw)
            )

            try:
                if spec.key_type is KeyType.STRING_LIST:
                    # 빈 리스트는 SADD 불가 (기존 멤버는 그대로 남음)
                    if not value:
                        continue
                    await self.client.sadd(spec.path, *value)
                else:
                    await self.client.set(
                        spec.path, encode_scalar(spec.key_type, value)
                    )
            except (RedisError, OSError) as e:
                logger.error(f"[Publisher] 키 기록 실패: {spec.path}: {e}")
                failed.append(spec.path)
                continue

            written += 1

        if failed:
            raise PublishError(failed, written)

        logger.info(f"[Publisher] 설정 발행 완료: {written}개 키")
        return written

    async def get_string(self, key: str) -> str:
        """문자열 조회 (없으면 빈 문자열)"""
        value = await self.client.get(key)
        return value if value is not None else ""

    async def get_int(self, key: str) -> int:
        """정수 조회 (없거나 변환 실패 시 0)"""
        value = await self.client.get(key)
        if value is None:
            return 0
        # 저장 값은 10진수 텍스트
        try:
            return int(value)
        except ValueError:
            return 0

    async def get_bool(self, key: str) -> bool:
        """불리언 조회 ("1"만 True)"""
        return await self.get_int(key) == 1

    async def get_string_list(self, key: str) -> list[str]:
        """문자열 리스트 조회 (집합이므로 정렬하여 반환)"""
        members = await self.client.smembers(key)
        return sorted(members or [])

