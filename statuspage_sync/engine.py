"""
Transition Engine — the incident state machine.

For each health report the engine compares the report's severity with
the incident tracked for that service and picks one action:

  - no tracked incident, severity > 0   -> CREATE
  - no tracked incident, severity == 0  -> NONE
  - tracked incident, same severity     -> NONE
  - tracked incident, severity changed  -> UPDATE, if a narrative exists
                                           for the pair, NONE otherwise

A resolved incident stays tracked and is compared like an open one,
unless `reopen_resolved` is set, in which case a new non-zero report
opens a fresh incident.

The engine never performs I/O. Once a dispatch succeeds, `apply` writes
the result back into the tracker.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from statuspage_sync import severity as sev
from statuspage_sync.models import (
    Action,
    Decision,
    HealthReport,
    Incident,
    IncidentPayload,
    StatusPageConfig,
)
from statuspage_sync.narrative import (
    UNKNOWN_ERROR,
    build_creation_narrative,
    build_transition_narrative,
)
from statuspage_sync.tracker import IncidentTracker

# Length of the window announced with every create/update
SCHEDULED_WINDOW = timedelta(days=4)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransitionEngine:
    """
    Decides what to do with health reports and assembles the payloads.

    Attributes:
        tracker: The tracker owning the per-service incidents.
        config: Status page config (component mapping, footer message).
        reopen_resolved: Open a new incident when a resolved one regresses.
    """

    def __init__(
        self,
        tracker: IncidentTracker,
        config: StatusPageConfig,
        clock: Optional[Callable[[], datetime]] = None,
        reopen_resolved: bool = False,
    ) -> None:
        self.tracker = tracker
        self.config = config
        self.reopen_resolved = reopen_resolved
        self._clock = clock or _utcnow

    def decide(self, report: HealthReport) -> Decision:
        """Pick CREATE, UPDATE or NONE for a report, with its payload."""
        current = sev.severity(report.status)
        tracked = self.tracker.get(report.name)

        if tracked is not None and tracked.is_resolved and self.reopen_resolved:
            tracked = None

        if tracked is None:
            if current == 0:
                return Decision(Action.NONE, report.name, current, reason="healthy")
            return Decision(
                Action.CREATE,
                report.name,
                current,
                reason="new incident",
                payload=self._creation_payload(report, current),
            )

        if tracked.severity == current:
            return Decision(Action.NONE, report.name, current, reason="unchanged")

        narrative = build_transition_narrative(tracked.severity, current, report.display_name)
        if narrative is None:
            return Decision(
                Action.NONE,
                report.name,
                current,
                reason=f"no narrative for {tracked.severity} -> {current}",
            )

        payload = self._base_payload(report, current, narrative.lifecycle_status, narrative.body)
        payload.incident_id = tracked.id
        return Decision(
            Action.UPDATE,
            report.name,
            current,
            reason=f"severity {tracked.severity} -> {current}",
            payload=payload,
            narrative=narrative,
        )

    def apply(self, decision: Decision, server_record: Mapping[str, Any]) -> Incident:
        """
        Record a successful create/update in the tracker.

        The id returned by the server wins; an update whose response lacks
        one keeps the id that was sent.
        """
        if decision.payload is None:
            raise ValueError(f"cannot apply a {decision.action.value} decision without payload")

        incident_id = server_record.get("id") or decision.payload.incident_id
        incident = Incident.from_payload(decision.service_name, decision.payload, incident_id)
        self.tracker.put(decision.service_name, incident)
        return incident

    # ── Payload assembly ─────────────────────────────────

    def _creation_payload(self, report: HealthReport, current: int) -> IncidentPayload:
        body = build_creation_narrative(
            report.display_name,
            report.status,
            report.error,
            self.config.footer_message,
        )
        payload = self._base_payload(report, current, "in_progress", body)
        component_id = self.config.component_id(report.name)
        payload.component_ids = [component_id] if component_id else []
        return payload

    def _base_payload(
        self,
        report: HealthReport,
        current: int,
        status: str,
        body: str,
    ) -> IncidentPayload:
        start = self._clock()
        return IncidentPayload(
            severity=current,
            name=f"{report.display_name} incident, {report.error or UNKNOWN_ERROR}",
            status=status,
            impact=sev.impact(report.status),
            body=body,
            components=self._components(report),
            scheduled_for=start,
            scheduled_until=start + SCHEDULED_WINDOW,
            deliver_notifications=sev.is_critical(report.status),
        )

    def _components(self, report: HealthReport) -> Dict[str, str]:
        component_id = self.config.component_id(report.name)
        if not component_id:
            return {}
        return {component_id: sev.component_status(report.status)}
