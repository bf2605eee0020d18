"""
Status page dispatcher.

`StatusPage.update_status_page` is the fire-and-forget entry point: it
asks the transition engine what to do with a report and, when there is
something to send, schedules one asyncio task for the request. The task's
completion updates the tracker and writes the result to the store.

Failures end in the console log: the tracker is left untouched and
nothing is retried. Two reports for the same service arriving faster
than the API answers both get dispatched; only a warning is printed.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Optional, Set

from statuspage_sync import notifier
from statuspage_sync.client import StatusPageClient
from statuspage_sync.engine import TransitionEngine
from statuspage_sync.exceptions import StatusPageAPIError
from statuspage_sync.models import Action, Decision, HealthReport, SyncSettings
from statuspage_sync.store import IncidentStore


class StatusPage:
    """
    Wires the transition engine to the API client and the local store.

    Attributes:
        engine: Decides CREATE / UPDATE / NONE and owns the tracker.
        client: Remote incident API.
        store: Local mirror of the tracked incidents.
    """

    def __init__(
        self,
        engine: TransitionEngine,
        client: StatusPageClient,
        store: IncidentStore,
        settings: Optional[SyncSettings] = None,
    ) -> None:
        self.engine = engine
        self.client = client
        self.store = store
        self.settings = settings or SyncSettings()

        self.pending: Set[asyncio.Task] = set()
        self._in_flight: Counter = Counter()

    @property
    def tracker(self):
        return self.engine.tracker

    async def load(self) -> int:
        """Initialise the store and restore its active incidents."""
        await self.store.init()
        records = await self.store.get_active_incidents()
        loaded = self.tracker.load_active(records)
        notifier.print_loaded(loaded)
        return loaded

    def update_status_page(self, report: HealthReport) -> Decision:
        """
        Handle one health report.

        Returns the engine decision right away; the request itself runs
        in a task tracked in `pending`. Must be called from within a
        running event loop.
        """
        decision = self.engine.decide(report)

        if self.settings.log_level == "DEBUG":
            notifier.print_decision(
                report.name, decision.action.value, decision.severity, decision.reason
            )

        if decision.action is Action.NONE:
            return decision

        in_flight = self._in_flight[report.name]
        if in_flight:
            notifier.print_concurrent_dispatch(report.name, in_flight)

        self._in_flight[report.name] += 1
        task = asyncio.create_task(
            self._dispatch(decision),
            name=f"statuspage-{decision.action.value}-{report.name}",
        )
        self.pending.add(task)
        task.add_done_callback(self._forget)
        return decision

    async def drain(self) -> None:
        """Wait for every in-flight dispatch to finish."""
        while self.pending:
            await asyncio.gather(*list(self.pending), return_exceptions=True)

    def _forget(self, task: asyncio.Task) -> None:
        self.pending.discard(task)

    async def _dispatch(self, decision: Decision) -> None:
        service_name = decision.service_name
        payload = decision.payload
        try:
            try:
                if decision.action is Action.CREATE:
                    record = await self.client.create_incident(payload)
                else:
                    record = await self.client.update_incident(payload.incident_id, payload)
            except StatusPageAPIError as exc:
                notifier.print_sync_failed(service_name, decision.action.value, exc)
                return

            incident = self.engine.apply(decision, record)
            if decision.action is Action.CREATE:
                notifier.print_incident_created(service_name, incident.id, incident.impact)
            else:
                notifier.print_incident_updated(service_name, incident.id, incident.status)

            try:
                await self.store.add_incident(service_name, incident, record)
            except Exception as exc:
                notifier.print_persist_failed(service_name, exc)
        finally:
            self._in_flight[service_name] -= 1
            if self._in_flight[service_name] <= 0:
                del self._in_flight[service_name]
