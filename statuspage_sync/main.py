"""
Main entry point — the StatusPageService orchestrator.

Loads the configuration, restores active incidents from the local store,
then serves a small HTTP API that health checkers post their reports to.
Handles graceful shutdown on Ctrl+C / SIGTERM.

Usage:
    statuspage-sync
    python -m statuspage_sync.main
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import Optional

import aiohttp
from aiohttp import web

from statuspage_sync.client import StatusPageClient
from statuspage_sync.config import load_config
from statuspage_sync.engine import TransitionEngine
from statuspage_sync.models import HealthReport, StatusPageConfig, SyncSettings
from statuspage_sync.statuspage import StatusPage
from statuspage_sync.store import IncidentStore
from statuspage_sync.tracker import IncidentTracker
from statuspage_sync import notifier

STATUSPAGE_KEY = web.AppKey("statuspage", StatusPage)


async def handle_report(request: web.Request) -> web.Response:
    """POST /reports — feed one health report to the dispatcher."""
    try:
        data = await request.json()
        report = HealthReport.from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        return web.json_response({"error": f"invalid report: {exc}"}, status=400)

    statuspage = request.app[STATUSPAGE_KEY]
    decision = statuspage.update_status_page(report)
    return web.json_response(
        {"service": report.name, "action": decision.action.value, "severity": decision.severity},
        status=202,
    )


async def handle_index(request: web.Request) -> web.Response:
    statuspage = request.app[STATUSPAGE_KEY]
    return web.json_response({
        "status": "running",
        "message": "Statuspage sync is active",
        "pending_requests": len(statuspage.pending),
        "incidents": statuspage.tracker.snapshot(),
    })


async def handle_health(_: web.Request) -> web.Response:
    return web.json_response({"status": "healthy"})


def build_app(statuspage: StatusPage) -> web.Application:
    """Create the aiohttp application exposing the report endpoint."""
    app = web.Application()
    app[STATUSPAGE_KEY] = statuspage
    app.router.add_post("/reports", handle_report)
    app.router.add_get("/", handle_index)
    app.router.add_get("/health", handle_health)
    return app


class StatusPageService:
    """
    Top-level orchestrator.

    Owns the shared aiohttp session, the store and the web server, and
    keeps them alive until shutdown is requested.
    """

    def __init__(self, page: StatusPageConfig, settings: SyncSettings) -> None:
        self.page = page
        self.settings = settings
        self._stop = asyncio.Event()
        self.statuspage: Optional[StatusPage] = None

    async def run(self) -> None:
        """Restore state, serve reports, and wait until interrupted."""
        notifier.print_banner()

        store = IncidentStore(self.settings.database_path)
        tracker = IncidentTracker()
        engine = TransitionEngine(
            tracker,
            self.page,
            reopen_resolved=self.settings.reopen_resolved,
        )

        async with aiohttp.ClientSession() as session:
            client = StatusPageClient(session, self.page, timeout=self.settings.request_timeout)
            self.statuspage = StatusPage(engine, client, store, self.settings)

            # Reports are only accepted once the store has been loaded
            await self.statuspage.load()

            runner = web.AppRunner(build_app(self.statuspage))
            await runner.setup()
            site = web.TCPSite(runner, "0.0.0.0", self.settings.port)
            await site.start()
            notifier.print_ready(self.settings.port)

            try:
                await self._stop.wait()
            finally:
                await runner.cleanup()
                await self.statuspage.drain()
                await store.close()

    def shutdown(self) -> None:
        self._stop.set()


def _handle_signals(service: StatusPageService, loop: asyncio.AbstractEventLoop) -> None:
    """Register signal handlers for graceful shutdown."""
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda: _do_shutdown(service))
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass


def _do_shutdown(service: StatusPageService) -> None:
    """Trigger graceful shutdown."""
    notifier.print_shutdown()
    service.shutdown()


async def async_main() -> None:
    """Async entry point."""
    page, settings = load_config()
    service = StatusPageService(page, settings)

    loop = asyncio.get_running_loop()
    _handle_signals(service, loop)

    await service.run()


def main() -> None:
    """Sync entry point."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        # Signal handler already printed shutdown message
        sys.exit(0)


if __name__ == "__main__":
    main()
