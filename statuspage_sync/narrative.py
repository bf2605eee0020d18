"""
Incident narratives.

Builds the human-readable body of an incident, either for its creation
or for an update after the severity moved.
"""

from __future__ import annotations

from typing import Optional

from statuspage_sync.models import Narrative

UNKNOWN_ERROR = "unknown error"


def build_transition_narrative(
    previous_severity: int,
    current_severity: int,
    display_name: str,
) -> Optional[Narrative]:
    """
    Describe a severity change for an already open incident.

    Returns None when the (previous, current) pair is not covered, e.g.
    an escalation from low_performance (1) to warning (2). Callers treat
    that as "nothing to send".
    """
    service = f'The service "{display_name}"'

    if current_severity == 0 and previous_severity != 0:
        return Narrative(f"{service} is now back to normal.", "completed")
    if current_severity == 1 and previous_severity > 1:
        return Narrative(
            f"{service} seems to be recovering, but the performance is still degraded.",
            "verifying",
        )
    # Rank 2 is "major" for the impact label, the wording stays "minor".
    if current_severity == 2 and previous_severity > 1:
        return Narrative(f"{service} is now experiencing minor issues.", "verifying")
    if current_severity == 3 and previous_severity > 1:
        return Narrative(f"{service} is now experiencing major issues.", "verifying")
    if current_severity == 4 and previous_severity != 4:
        return Narrative(f"{service} is now under maintenance.", "in_progress")
    return None


def build_creation_narrative(
    display_name: str,
    status: str,
    error: Optional[str],
    footer_message: str = "",
) -> str:
    """Body of a freshly opened incident."""
    return (
        f'The service "{display_name}" is currently experiencing issues.\n'
        f"The error reported is: <b>{error or UNKNOWN_ERROR}</b> and the status of the service "
        f"is now <b>{status}</b>{footer_message or ''}"
    )
