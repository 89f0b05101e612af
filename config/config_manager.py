"""
설정 관리 및 핫 리로드 시스템

twitch-bot.yaml을 읽어 메모리에 보관하고, 파일이 바뀌면 다시 읽어
등록된 콜백(Redis 발행)을 실행합니다.

설계 원칙:
- 설정 문서는 리로드마다 통째로 교체 (부분 diff 없음)
- 파싱에 실패하면 이전 문서 유지
- 리로드는 한 번에 하나만 실행, 콜백까지 끝나야 다음 리로드 시작
- 싱글톤 패턴으로 전역 접근

사용법:
    ```python
    store = ConfigStore()
    store.on_reload(publish)
    await store.reload()

    channels = store.get_string_list("irc.channels")

    watcher = ConfigWatcher(store)
    watcher.start()
    ```
"""

import asyncio
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import yaml

from lib.errors import ConfigLoadError, ErrorCategory, ErrorClassifier
from lib.types import KeyType, coerce

logger = logging.getLogger(__name__)

CONFIG_NAME = "twitch-bot"
CONFIG_EXTENSIONS = (".yaml", ".yml")
CONFIG_SEARCH_PATHS = ["./config", "."]

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigDocument:
    """파싱된 설정 문서 (읽기 전용 스냅샷)

    키는 점 구분 경로로 조회하며 대소문자를 구분하지 않습니다.
    """

    def __init__(self, data: dict[str, Any] | None = None):
        self._data = _lower_keys(data or {})

    def get(self, path: str) -> Any:
        """경로 값 조회 (없으면 None)"""
        node: Any = self._data
        for part in path.lower().split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def __contains__(self, path: str) -> bool:
        return self.get(path) is not None

    def _typed(self, path: str, key_type: KeyType) -> Any:
        value = self.get(path)
        if value is None:
            return key_type.zero_value
        return coerce(key_type, value)

    def get_string(self, path: str) -> str:
        return self._typed(path, KeyType.STRING)

    def get_int(self, path: str) -> int:
        return self._typed(path, KeyType.INT)

    def get_bool(self, path: str) -> bool:
        return self._typed(path, KeyType.BOOL)

    def get_string_list(self, path: str) -> list[str]:
        return self._typed(path, KeyType.STRING_LIST)

    def to_dict(self) -> dict[str, Any]:
        """원본 트리 복사본 (키는 소문자)"""
        return _copy_tree(self._data)


def _lower_keys(node: Any) -> Any:
    if isinstance(node, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_lower_keys(item) for item in node]
    return node


def _copy_tree(node: Any) -> Any:
    if isinstance(node, dict):
        return {k: _copy_tree(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_copy_tree(item) for item in node]
    return node


class ConfigStore:
    """설정 저장소 (싱글톤)

    모든 설정은 이 클래스를 통해 접근합니다.
    핫 리로드 시 문서가 교체되고 콜백이 호출됩니다.
    """

    _instance = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        config_name: str = CONFIG_NAME,
        search_paths: list[str] | None = None,
    ):
        if self._initialized:
            return
        self._initialized = True

        self.config_name = config_name
        self.search_paths = list(search_paths or CONFIG_SEARCH_PATHS)
        self._document = ConfigDocument()
        self._lock = asyncio.Lock()
        self._callbacks: list[Callable] = []
        self._config_path: str = ""
        self._loaded_at: datetime | None = None
        self._reload_count = 0

    def resolve_config_path(self) -> Path:
        """검색 경로에서 설정 파일 찾기

        Raises:
            ConfigLoadError: 어느 경로에도 파일이 없을 때
        """
        for directory in self.search_paths:
            for ext in CONFIG_EXTENSIONS:
                candidate = Path(directory) / f"{self.config_name}{ext}"
                if candidate.is_file():
                    return candidate

        raise ConfigLoadError(
            f"Config file \"{self.config_name}\" not found in {self.search_paths}"
        )

    async def reload(self, config_path: str | None = None) -> None:
        """설정 파일 리로드

        새 문서는 파싱이 끝난 뒤에만 교체되며 콜백은 락 안에서 실행됩니다.

        Args:
            config_path: 설정 파일 경로 (없으면 검색 경로에서 찾기)

        Raises:
            ConfigLoadError: 파일 없음 또는 파싱 실패
        """
        async with self._lock:
            path = Path(config_path) if config_path else self._locate()
            logger.info(f"[ConfigStore] 설정 리로드 시작: {path}")

            document = self._read_document(path)

            self._document = document
            self._config_path = str(path)
            self._loaded_at = datetime.now(timezone.utc)
            self._reload_count += 1

            logger.info(
                f"[ConfigStore] 설정 리로드 완료: {path} "
                f"(#{self._reload_count})"
            )

            # 콜백 호출
            for callback in self._callbacks:
                try:
                    if asyncio.iscoroutinefunction(callback):
                        await callback(document)
                    else:
                        callback(document)
                except Exception as e:
                    logger.error(f"[ConfigStore] 콜백 실행 실패: {e}")

    async def load(self) -> None:
        """최초 로드 (검색 경로 기준)"""
        await self.reload()

    def _locate(self) -> Path:
        # 한 번 찾은 파일은 계속 사용
        if self._config_path and Path(self._config_path).is_file():
            return Path(self._config_path)
        return self.resolve_config_path()

    def _read_document(self, path: Path) -> ConfigDocument:
        """YAML 파싱 및 환경변수 치환"""
        try:
            with open(path, encoding="utf-8") as f:
                raw_config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigLoadError(f"Config file not found: {path}") from e
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoadError(f"Malformed config file {path}: {e}") from e

        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, dict):
            raise ConfigLoadError(
                f"Malformed config file {path}: top level must be a mapping, "
                f"got {type(raw_config).__name__}"
            )

        return ConfigDocument(self._substitute_env_vars(raw_config))

    def _substitute_env_vars(self, config: Any) -> Any:
        """설정 값에서 환경변수 치환

        ${VAR_NAME} 형식만 치환하며, 없는 변수는 그대로 둡니다.
        """
        if isinstance(config, dict):
            return {k: self._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):

            def replace(match: re.Match) -> str:
                return os.getenv(match.group(1), match.group(0))

            return _ENV_PATTERN.sub(replace, config)
        return config

    @property
    def document(self) -> ConfigDocument:
        """현재 설정 문서 복사본

        반환된 문서는 이후 리로드나 호출자의 수정과 무관합니다.
        """
        return ConfigDocument(self._document.to_dict())

    def get(self, path: str) -> Any:
        return self._document.get(path)

    def get_string(self, path: str) -> str:
        return self._document.get_string(path)

    def get_int(self, path: str) -> int:
        return self._document.get_int(path)

    def get_bool(self, path: str) -> bool:
        return self._document.get_bool(path)

    def get_string_list(self, path: str) -> list[str]:
        return self._document.get_string_list(path)

    def on_reload(self, callback: Callable) -> None:
        """리로드 콜백 등록 (인자: 새 ConfigDocument)"""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable) -> None:
        """리로드 콜백 제거"""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def config_path(self) -> str:
        """로드된 설정 파일 경로"""
        return self._config_path

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    @property
    def reload_count(self) -> int:
        return self._reload_count


class ConfigWatcher:
    """파일 시스템 감시 기반 핫 리로드

    watchdog 라이브러리를 사용하여 설정 파일 변경을 감지하고
    자동으로 ConfigStore를 리로드합니다.

    리로드 실패 시 이전 설정을 유지하고 에러만 기록합니다 (재시도 없음).

    사용법:
        ```python
        store = ConfigStore()
        await store.load()
        watcher = ConfigWatcher(store)
        watcher.start()

        # 앱 종료 시
        watcher.stop()
        ```
    """

    def __init__(
        self,
        config_store: ConfigStore,
        debounce_seconds: float = 0.5,
    ):
        """
        Args:
            config_store: 로드가 끝난 ConfigStore 인스턴스
            debounce_seconds: 디바운스 시간 (초)
        """
        self.config_store = config_store
        self.debounce_seconds = debounce_seconds
        self._observer = None
        self._debounce_task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._watched_file: Path | None = None

    def start(self) -> None:
        """파일 감시 시작

        이벤트 루프 안에서 호출해야 합니다.
        """
        from watchdog.events import FileSystemEventHandler
        from watchdog.observers import Observer

        if not self.config_store.config_path:
            raise ConfigLoadError(
                "ConfigStore must be loaded before watching",
                ErrorCategory.FATAL,
            )

        self._loop = asyncio.get_running_loop()
        self._watched_file = Path(self.config_store.config_path).resolve()

        class Handler(FileSystemEventHandler):
            def __init__(handler_self, watcher: "ConfigWatcher"):
                handler_self.watcher = watcher

            def on_modified(handler_self, event):
                handler_self.watcher._on_event(event)

            def on_created(handler_self, event):
                handler_self.watcher._on_event(event)

            def on_moved(handler_self, event):
                handler_self.watcher._on_event(event)

        handler = Handler(self)
        self._observer = Observer()
        self._observer.schedule(
            handler, str(self._watched_file.parent), recursive=False
        )
        self._observer.start()
        logger.info(f"[ConfigWatcher] 파일 감시 시작: {self._watched_file}")

    def stop(self) -> None:
        """파일 감시 중지"""
        if self._debounce_task:
            self._debounce_task.cancel()
            self._debounce_task = None
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("[ConfigWatcher] 파일 감시 중지")

    def _matches(self, event) -> bool:
        """설정 파일에 대한 이벤트인지 확인"""
        if event.is_directory or self._watched_file is None:
            return False

        paths = [event.src_path, getattr(event, "dest_path", "")]
        for raw in paths:
            if raw and Path(os.fsdecode(raw)).resolve() == self._watched_file:
                return True
        return False

    def _on_event(self, event) -> None:
        """watchdog 스레드에서 호출됨"""
        if not self._matches(event):
            return

        logger.debug(
            f"[ConfigWatcher] 파일 변경 감지: {event.event_type} {event.src_path}"
        )
        if self._loop and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._schedule_reload)

    def _schedule_reload(self) -> None:
        """디바운스 후 리로드 스케줄 (이벤트 루프에서 실행)"""
        if self._debounce_task:
            self._debounce_task.cancel()

        self._debounce_task = asyncio.ensure_future(self._debounced_reload())

    async def _debounced_reload(self) -> None:
        """디바운스 후 리로드 실행"""
        try:
            await asyncio.sleep(self.debounce_seconds)
        except asyncio.CancelledError:
            return

        # 대기가 끝난 리로드는 취소 대상에서 제외
        self._debounce_task = None

        logger.info("[ConfigWatcher] 설정 리로드 실행")
        try:
            await self.config_store.reload(self.config_store.config_path)
        except ConfigLoadError as e:
            # 실행 중 리로드 실패는 이전 설정으로 계속 동작
            e.category = ErrorCategory.RECOVERABLE
            logger.error(
                f"[ConfigWatcher] 리로드 실패, 이전 설정 유지: "
                f"{ErrorClassifier.format_message(e)}"
            )
        except Exception as e:
            logger.error(f"[ConfigWatcher] 리로드 실패: {e}")
