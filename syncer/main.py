"""
twitch-bot-config 동기화 메인 엔트리포인트

설정 파일 → Redis 동기화 프로세스:
- 시작 시 설정 로드 (실패하면 종료)
- 최초 발행 후 파일 변경마다 리로드 + 재발행
- 종료 신호 수신 시 즉시 종료
"""

import asyncio
import logging
import signal
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

# .env 파일 로드 (프로젝트 루트)
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from config.config_manager import ConfigDocument, ConfigStore, ConfigWatcher
from lib.errors import (
    ConfigLoadError,
    ErrorClassifier,
    PublishError,
    StoreUnavailableError,
)
from lib.publisher import RedisPublisher

from .config import SyncerConfig
from .health import HealthServer

logger = logging.getLogger(__name__)

# logrus 레벨 이름 → logging 레벨
LOG_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def parse_log_level(raw_level: str) -> int | None:
    """log.level 값 파싱

    Returns:
        logging 레벨 또는 None (값 없음)

    Raises:
        ConfigLoadError: 알 수 없는 레벨 이름
    """
    name = (raw_level or "").strip().lower()
    if not name:
        return None
    if name not in LOG_LEVELS:
        raise ConfigLoadError(f"invalid log level for LOG.LEVEL: {raw_level!r}")
    return LOG_LEVELS[name]


def apply_log_level(raw_level: str) -> None:
    """log.level 값을 루트 로거에 적용"""
    level = parse_log_level(raw_level)
    if level is not None:
        logging.getLogger().setLevel(level)


class ConfigSyncer:
    """설정 파일 → Redis 동기화기

    하나의 Redis 연결을 프로세스 수명 동안 유지하며,
    리로드는 ConfigStore 락으로 직렬화됩니다.
    """

    def __init__(
        self,
        config: SyncerConfig,
        store: ConfigStore | None = None,
        publisher: RedisPublisher | None = None,
    ):
        """
        Args:
            config: 프로세스 설정
            store: ConfigStore (기본: 싱글톤)
            publisher: RedisPublisher (기본: 시작 시 config로 연결)
        """
        self.config = config
        self.store = store or ConfigStore(config.config_name, config.search_paths)
        self.publisher = publisher
        self.watcher: ConfigWatcher | None = None
        self.health_server = HealthServer(self) if config.health_port else None
        self.running = False
        self.started_at = datetime.now(timezone.utc)
        self.last_publish_at: datetime | None = None
        self.last_publish_ok: bool | None = None
        self._stop_event: asyncio.Event | None = None

    async def start(self) -> None:
        """설정 로드, 최초 발행, 파일 감시 시작

        Raises:
            ConfigLoadError: 설정 파일 없음/파싱 실패/잘못된 로그 레벨
        """
        logger.warning("[Syncer] 설정 파일 읽는 중")
        await self.store.load()
        apply_log_level(self.store.get_string("log.level"))

        if self.publisher is None:
            self.publisher = RedisPublisher.connect(
                self.config.redis_uri,
                self.config.redis_port,
                self.config.redis_password,
                self.config.redis_database,
            )

        await self.publish(self.store.document)
        logger.info("[Syncer] 최초 설정 발행 완료")

        self.store.on_reload(self._on_reload)
        self.watcher = ConfigWatcher(
            self.store, debounce_seconds=self.config.reload_debounce
        )
        self.watcher.start()

        if self.health_server:
            await self.health_server.start()

        self.running = True

    async def publish(self, document: ConfigDocument | None = None) -> bool:
        """현재 설정을 Redis에 발행

        Redis가 응답하지 않으면 이번 발행은 건너뜁니다 (재시도 없음).
        일부 키 기록 실패는 로그만 남기고 계속 진행합니다.

        Returns:
            bool: 발행 여부
        """
        document = document if document is not None else self.store.document

        if not await self.publisher.ping():
            error = StoreUnavailableError()
            logger.error(
                f"[Syncer] Redis 연결 실패, 발행 생략: "
                f"{ErrorClassifier.format_message(error)}"
            )
            self.last_publish_ok = False
            return False

        try:
            await self.publisher.publish_all(document)
        except PublishError as e:
            # 기록된 키는 그대로 두고 다음 변경 때 다시 발행
            logger.error(
                f"[Syncer] 일부 키 발행 실패: {ErrorClassifier.format_message(e)}"
            )
            self.last_publish_ok = False
            return False

        self.last_publish_at = datetime.now(timezone.utc)
        self.last_publish_ok = True
        return True

    async def _on_reload(self, document: ConfigDocument) -> None:
        """리로드 콜백: 로그 레벨 갱신 후 재발행"""
        try:
            apply_log_level(document.get_string("log.level"))
        except ConfigLoadError as e:
            logger.error(f"[Syncer] 로그 레벨 변경 무시: {e}")

        if await self.publish(document):
            logger.info(
                f"[Syncer] 설정 파일 변경 반영 완료: {self.store.config_path}"
            )

    async def serve(self) -> None:
        """시작 후 종료 신호까지 대기"""
        self._stop_event = asyncio.Event()
        await self.start()

        # 시그널 핸들러 등록 (Windows 호환)
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self._handle_signal, sig)
        else:
            signal.signal(signal.SIGINT, lambda s, f: self._handle_signal(s))

        await self._stop_event.wait()

    def _handle_signal(self, sig: int) -> None:
        """종료 신호: 진행 중 작업을 기다리지 않고 즉시 종료"""
        logger.warning(f"[Syncer] 종료 신호 수신 ({signal.Signals(sig).name}), 종료")
        sys.exit(0)

    async def stop(self) -> None:
        """감시/헬스 서버 중지"""
        self.running = False

        if self.watcher:
            self.watcher.stop()
            self.watcher = None

        if self.health_server:
            await self.health_server.stop()

        if self._stop_event:
            self._stop_event.set()

        logger.info("[Syncer] 종료 완료")


# ============================================================================
# 엔트리포인트
# ============================================================================


def run(config: SyncerConfig | None = None) -> None:
    """동기화 실행 (엔트리포인트)

    환경변수에서 설정을 로드하고 동기화를 시작합니다.
    설정 로드 실패 시 종료 코드 1로 종료합니다.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    config = config or SyncerConfig.from_env()
    logger.info(f"Redis: {config.redis_address}")
    logger.info(f"Config search paths: {config.search_paths}")

    syncer = ConfigSyncer(config)
    try:
        asyncio.run(syncer.serve())
    except ConfigLoadError as e:
        logger.critical(
            f"[Syncer] 설정 파일 처리 실패: {ErrorClassifier.format_message(e)}"
        )
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("[Syncer] KeyboardInterrupt 수신, 종료 중...")


if __name__ == "__main__":
    run()
