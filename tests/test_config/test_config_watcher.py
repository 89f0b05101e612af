"""
ConfigWatcher 핫 리로드 테스트
"""

import asyncio
from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from config.config_manager import ConfigStore, ConfigWatcher
from lib.errors import ConfigLoadError
from tests.sample_data import generate_sample_config, write_config


@pytest.fixture
def config_file(temp_config_dir: Path) -> Path:
    return write_config(
        temp_config_dir / "config" / "twitch-bot.yaml", generate_sample_config()
    )


async def loaded_store(base: Path) -> ConfigStore:
    store = ConfigStore(search_paths=[str(base / "config"), str(base)])
    await store.load()
    return store


class TestEventFiltering:
    """이벤트 필터링 테스트"""

    @pytest.mark.asyncio
    async def test_matches_config_file_events(self, temp_config_dir, config_file):
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store)
        watcher._watched_file = config_file.resolve()

        assert watcher._matches(FileModifiedEvent(str(config_file)))
        assert watcher._matches(FileCreatedEvent(str(config_file)))
        # 에디터의 임시 파일 → 설정 파일 rename
        tmp = config_file.with_name(".twitch-bot.yaml.swp")
        assert watcher._matches(FileMovedEvent(str(tmp), str(config_file)))
        assert watcher._matches(FileMovedEvent(str(config_file), str(tmp)))

    @pytest.mark.asyncio
    async def test_ignores_other_files(self, temp_config_dir, config_file):
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store)
        watcher._watched_file = config_file.resolve()

        other = config_file.with_name("other.yaml")
        assert not watcher._matches(FileModifiedEvent(str(other)))
        assert not watcher._matches(DirModifiedEvent(str(config_file.parent)))

    @pytest.mark.asyncio
    async def test_start_requires_loaded_store(self, temp_config_dir):
        store = ConfigStore(search_paths=[str(temp_config_dir)])
        watcher = ConfigWatcher(store)

        with pytest.raises(ConfigLoadError):
            watcher.start()


class TestDebouncedReload:
    """디바운스 리로드 테스트"""

    @pytest.mark.asyncio
    async def test_rapid_events_coalesced(self, temp_config_dir, config_file):
        """연속 이벤트는 한 번의 리로드로 합쳐짐"""
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store, debounce_seconds=0.05)

        for _ in range(5):
            watcher._schedule_reload()
        await asyncio.sleep(0.2)

        assert store.reload_count == 2

    @pytest.mark.asyncio
    async def test_reload_picks_up_change(self, temp_config_dir, config_file):
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store, debounce_seconds=0)

        write_config(config_file, generate_sample_config(irc={"channels": ["#a"]}))
        await watcher._debounced_reload()

        assert store.get_string_list("irc.channels") == ["#a"]

    @pytest.mark.asyncio
    async def test_failed_reload_logged_and_retained(
        self, temp_config_dir, config_file, caplog
    ):
        """리로드 실패 시 예외 없이 이전 설정 유지"""
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store, debounce_seconds=0)

        write_config(config_file, "irc:\n  nickname: a: b\n")
        await watcher._debounced_reload()

        assert store.get_string("irc.nickname") == "otaviokr_bot"
        assert "이전 설정 유지" in caplog.text
        assert "[복구 가능] ConfigLoadError" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_file_on_reload_is_recoverable(
        self, temp_config_dir, config_file, caplog
    ):
        """실행 중 파일 삭제는 치명적 에러로 기록하지 않음"""
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store, debounce_seconds=0)

        config_file.unlink()
        await watcher._debounced_reload()

        assert store.get_string("irc.nickname") == "otaviokr_bot"
        assert "[복구 가능]" in caplog.text
        assert "[치명적]" not in caplog.text

    @pytest.mark.asyncio
    async def test_inflight_reload_not_cancelled(self, temp_config_dir, config_file):
        """진행 중인 리로드는 새 이벤트로 취소되지 않음"""
        store = await loaded_store(temp_config_dir)
        watcher = ConfigWatcher(store, debounce_seconds=0)
        started = asyncio.Event()
        finished = []

        async def slow_publish(document):
            started.set()
            await asyncio.sleep(0.05)
            finished.append(document.get_string("irc.nickname"))

        store.on_reload(slow_publish)

        watcher._schedule_reload()
        await started.wait()
        watcher._schedule_reload()
        await asyncio.sleep(0.2)

        assert len(finished) == 2


class TestWatcherIntegration:
    """실제 파일 시스템 이벤트 테스트"""

    @pytest.mark.asyncio
    async def test_file_write_triggers_reload(self, temp_config_dir, config_file):
        store = await loaded_store(temp_config_dir)
        reloaded = asyncio.Event()
        store.on_reload(lambda document: reloaded.set())

        watcher = ConfigWatcher(store, debounce_seconds=0.05)
        watcher.start()
        try:
            await asyncio.sleep(0.1)
            write_config(
                config_file, generate_sample_config(irc={"nickname": "changed"})
            )
            await asyncio.wait_for(reloaded.wait(), timeout=10)
        finally:
            watcher.stop()

        assert store.get_string("irc.nickname") == "changed"
