"""
헬스체크 HTTP 서버

동기화 상태 모니터링을 위한 간단한 HTTP 서버.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from aiohttp import web

if TYPE_CHECKING:
    from .main import ConfigSyncer

logger = logging.getLogger(__name__)


class HealthServer:
    """헬스체크 HTTP 서버

    aiohttp를 사용하여 동기화 상태를 노출하는 간단한 HTTP 서버입니다.
    """

    def __init__(self, syncer: "ConfigSyncer"):
        """
        Args:
            syncer: ConfigSyncer 인스턴스 (상태 참조용)
        """
        self.syncer = syncer
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None

        # 라우트 등록
        self.app.router.add_get("/health", self._health_handler)

    async def _health_handler(self, request: web.Request) -> web.Response:
        """GET /health 엔드포인트 핸들러

        Returns:
            JSON 응답:
                {
                    "status": "ok" | "degraded",
                    "config_path": "config/twitch-bot.yaml",
                    "reload_count": 3,
                    "last_publish_at": "2024-01-01T00:00:00+00:00" | null,
                    "last_publish_ok": true | false | null,
                    "store_state": "connected" | "disconnected",
                    "uptime_seconds": 1234
                }
        """
        syncer = self.syncer
        uptime = (datetime.now(timezone.utc) - syncer.started_at).total_seconds()
        publisher = syncer.publisher

        return web.json_response(
            {
                "status": "degraded" if syncer.last_publish_ok is False else "ok",
                "config_path": syncer.store.config_path,
                "reload_count": syncer.store.reload_count,
                "last_publish_at": (
                    syncer.last_publish_at.isoformat()
                    if syncer.last_publish_at
                    else None
                ),
                "last_publish_ok": syncer.last_publish_ok,
                "store_state": (
                    publisher.state.value if publisher else "disconnected"
                ),
                "uptime_seconds": int(uptime),
            }
        )

    async def start(self) -> None:
        """헬스 서버 시작"""
        port = self.syncer.config.health_port

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        self.site = web.TCPSite(self.runner, "0.0.0.0", port)
        await self.site.start()

        logger.info(f"[Health] 헬스 서버 시작: http://0.0.0.0:{port}/health")

    async def stop(self) -> None:
        """헬스 서버 종료"""
        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info("[Health] 헬스 서버 종료 완료")
