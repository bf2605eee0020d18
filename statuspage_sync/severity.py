"""
Severity mapping.

Maps a raw service status onto the labels the status page understands.
All functions are pure; any status outside the known set (including None)
is treated as maintenance.
"""

from __future__ import annotations

from typing import Optional

OK = "ok"
LOW_PERFORMANCE = "low_performance"
WARNING = "warning"
ERROR = "error"

_SEVERITY = {
    OK: 0,
    LOW_PERFORMANCE: 1,
    WARNING: 2,
    ERROR: 3,
}
MAINTENANCE_SEVERITY = 4

_IMPACT = {
    OK: "resolved",
    ERROR: "critical",
    WARNING: "major",
    LOW_PERFORMANCE: "minor",
}

_COMPONENT_STATUS = {
    OK: "operational",
    ERROR: "major_outage",
    WARNING: "partial_outage",
    LOW_PERFORMANCE: "degraded_performance",
}


def severity(status: Optional[str]) -> int:
    """Rank a status: ok=0, low_performance=1, warning=2, error=3, other=4."""
    return _SEVERITY.get(status, MAINTENANCE_SEVERITY)


def impact(status: Optional[str]) -> str:
    """Impact label sent as `impact_override`."""
    return _IMPACT.get(status, "maintenance")


def lifecycle_impact(status: Optional[str]) -> str:
    """Status label used to decide on notifications. Same table as `impact`."""
    return impact(status)


def component_status(status: Optional[str]) -> str:
    """Status shown on the page for the affected component."""
    return _COMPONENT_STATUS.get(status, "under_maintenance")


def is_critical(status: Optional[str]) -> bool:
    return lifecycle_impact(status) == "critical"
