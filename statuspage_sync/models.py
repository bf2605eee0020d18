"""
Data models for the status page sync.

Defines the health reports coming in, the incidents tracked per service,
the payloads sent to the incident API, and the configuration objects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from dateutil import parser as dateutil_parser

from statuspage_sync.exceptions import IncidentDecodeError


class Action(str, Enum):
    """What the transition engine decided to do with a report."""

    NONE = "none"
    CREATE = "create"
    UPDATE = "update"


class IncidentState(str, Enum):
    """Lifecycle tag of a tracked incident."""

    OPEN = "open"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class HealthReport:
    """
    One health check result for one service.

    Attributes:
        name: Service key, matches the keys of the component mapping.
        display_name: Human-readable service name used in incident text.
        status: Raw status value ("ok", "error", "warning", ...).
        error: Error message reported by the health check, if any.
    """

    name: str
    display_name: str
    status: str
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthReport":
        return cls(
            name=str(data["name"]),
            display_name=str(data.get("display_name") or data["name"]),
            status=str(data.get("status", "")),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class Narrative:
    """Body text and lifecycle status for an incident update."""

    body: str
    lifecycle_status: str


def _format_ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_ts(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return dateutil_parser.isoparse(str(value))


@dataclass
class IncidentPayload:
    """
    The incident fields sent to the remote API on create or update.

    `incident_id` is only set for updates; `component_ids` only for creates.
    """

    severity: int
    name: str
    status: str
    impact: str
    body: str
    components: Dict[str, str]
    scheduled_for: datetime
    scheduled_until: datetime
    deliver_notifications: bool
    component_ids: Optional[List[str]] = None
    incident_id: Optional[str] = None
    auto_transition_to_maintenance_state: bool = False
    auto_transition_to_operational_state: bool = False

    def to_request_body(self) -> Dict[str, Any]:
        """JSON body for POST/PUT /pages/{page_id}/incidents."""
        incident: Dict[str, Any] = {
            "name": self.name,
            "status": self.status,
            "impact_override": self.impact,
            "body": self.body,
            "components": dict(self.components),
            "scheduled_for": _format_ts(self.scheduled_for),
            "scheduled_until": _format_ts(self.scheduled_until),
            "deliver_notifications": self.deliver_notifications,
            "auto_transition_to_maintenance_state": self.auto_transition_to_maintenance_state,
            "auto_transition_to_operational_state": self.auto_transition_to_operational_state,
        }
        if self.component_ids is not None:
            incident["component_ids"] = list(self.component_ids)
        return {"incident": incident}


@dataclass
class Incident:
    """
    The single tracked incident of one service.

    Attributes:
        service_name: Key of the service this incident belongs to.
        severity: Severity rank (0-4) of the last report that changed it.
        status: Lifecycle label sent with the last create/update.
        id: Identifier assigned by the remote API.
        state: OPEN, or RESOLVED once the service went back to severity 0.
    """

    service_name: str
    severity: int
    status: str
    name: str = ""
    body: str = ""
    impact: str = ""
    components: Dict[str, str] = field(default_factory=dict)
    scheduled_for: Optional[datetime] = None
    scheduled_until: Optional[datetime] = None
    deliver_notifications: bool = False
    auto_transition_to_maintenance_state: bool = False
    auto_transition_to_operational_state: bool = False
    id: Optional[str] = None
    state: IncidentState = IncidentState.OPEN

    @property
    def is_resolved(self) -> bool:
        return self.state is IncidentState.RESOLVED

    @classmethod
    def from_payload(
        cls,
        service_name: str,
        payload: IncidentPayload,
        incident_id: Optional[str],
    ) -> "Incident":
        return cls(
            service_name=service_name,
            severity=payload.severity,
            status=payload.status,
            name=payload.name,
            body=payload.body,
            impact=payload.impact,
            components=dict(payload.components),
            scheduled_for=payload.scheduled_for,
            scheduled_until=payload.scheduled_until,
            deliver_notifications=payload.deliver_notifications,
            auto_transition_to_maintenance_state=payload.auto_transition_to_maintenance_state,
            auto_transition_to_operational_state=payload.auto_transition_to_operational_state,
            id=incident_id,
            state=IncidentState.RESOLVED if payload.severity == 0 else IncidentState.OPEN,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "service_name": self.service_name,
            "severity": self.severity,
            "status": self.status,
            "name": self.name,
            "body": self.body,
            "impact": self.impact,
            "components": dict(self.components),
            "scheduled_for": _format_ts(self.scheduled_for),
            "scheduled_until": _format_ts(self.scheduled_until),
            "deliver_notifications": self.deliver_notifications,
            "auto_transition_to_maintenance_state": self.auto_transition_to_maintenance_state,
            "auto_transition_to_operational_state": self.auto_transition_to_operational_state,
            "state": self.state.value,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], service_name: Optional[str] = None) -> "Incident":
        """
        Rebuild an incident from its stored form.

        Also accepts the older nested layout `{"id", "severity",
        "incident": {...}}` where the incident fields sit one level down.

        Raises:
            IncidentDecodeError: If required fields are missing or invalid.
        """
        if not isinstance(data, dict):
            raise IncidentDecodeError(f"expected an object, got {type(data).__name__}")

        fields = data
        if isinstance(data.get("incident"), dict):
            fields = {**data["incident"], "id": data.get("id"), "severity": data.get("severity")}

        name = service_name or fields.get("service_name")
        if not name:
            raise IncidentDecodeError("incident record has no service name")

        try:
            severity = int(fields["severity"])
            incident = cls(
                service_name=str(name),
                severity=severity,
                status=str(fields.get("status", "")),
                name=str(fields.get("name", "")),
                body=str(fields.get("body", "")),
                impact=str(fields.get("impact") or fields.get("impact_override") or ""),
                components=dict(fields.get("components") or {}),
                scheduled_for=_parse_ts(fields.get("scheduled_for")),
                scheduled_until=_parse_ts(fields.get("scheduled_until")),
                deliver_notifications=bool(fields.get("deliver_notifications", False)),
                auto_transition_to_maintenance_state=bool(
                    fields.get("auto_transition_to_maintenance_state", False)
                ),
                auto_transition_to_operational_state=bool(
                    fields.get("auto_transition_to_operational_state", False)
                ),
                id=fields.get("id"),
                state=IncidentState(
                    fields.get("state")
                    or (IncidentState.RESOLVED.value if severity == 0 else IncidentState.OPEN.value)
                ),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise IncidentDecodeError(f"invalid incident record for {name}: {exc}") from exc

        return incident

    @classmethod
    def from_json(cls, raw: str, service_name: Optional[str] = None) -> "Incident":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise IncidentDecodeError(f"stored incident is not valid JSON: {exc}") from exc
        return cls.from_dict(data, service_name=service_name)


@dataclass
class Decision:
    """Outcome of running one report through the transition engine."""

    action: Action
    service_name: str
    severity: int
    reason: str = ""
    payload: Optional[IncidentPayload] = None
    narrative: Optional[Narrative] = None


@dataclass
class StatusPageConfig:
    """Connection details and component mapping for the status page."""

    url: str = "https://api.statuspage.io/v1"
    page_id: str = ""
    api_key: str = ""
    footer_message: str = ""
    components: Dict[str, str] = field(default_factory=dict)

    def component_id(self, service_name: str) -> Optional[str]:
        return self.components.get(service_name)


@dataclass
class SyncSettings:
    """Process-level settings."""

    log_level: str = "INFO"
    database_path: str = "data/incidents.db"
    request_timeout: float = 15.0
    reopen_resolved: bool = False
    port: int = 10000
