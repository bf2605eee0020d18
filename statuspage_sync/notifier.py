"""
Console Notifier — structured console output for the sync process.

Every line is timestamped and tagged with the service it concerns, with
ANSI colors for readability. Debug-only lines are gated on the log level
passed in by the caller.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any

# ANSI color codes for terminal styling
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_MAGENTA = "\033[95m"
_CYAN = "\033[96m"
_WHITE = "\033[97m"
_GRAY = "\033[90m"

_TAG = "[STATUSPAGE]"


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _impact_color(impact: str) -> str:
    """Pick a color based on the incident impact label."""
    if impact == "critical":
        return _RED
    elif impact == "major":
        return _YELLOW
    elif impact == "minor":
        return _CYAN
    elif impact == "resolved":
        return _GREEN
    else:
        return _MAGENTA


def print_banner() -> None:
    """Print the startup banner."""
    banner = f"""
{_BOLD}{_CYAN}+------------------------------------------------------------------+
|          Statuspage Sync -- Health Reports to Incidents          |
|          Event-driven * Async * One incident per service         |
+------------------------------------------------------------------+{_RESET}
"""
    print(banner)


def print_notice(message: str) -> None:
    print(f"  {_YELLOW}!{_RESET} {message}")


def print_loaded(count: int) -> None:
    """Print how many active incidents were restored from the store."""
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_BOLD}{_BLUE}{_TAG}{_RESET} "
        f"restored {_WHITE}{count}{_RESET} active incident(s)"
    )


def print_record_skipped(service_name: str, reason: str) -> None:
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_YELLOW}SKIPPED{_RESET} "
        f"{_BOLD}{service_name}:{_RESET} {_DIM}{reason}{_RESET}"
    )


def print_decision(service_name: str, action: str, severity: int, reason: str) -> None:
    """Print the engine decision for a report (debug level)."""
    print(
        f"  {_DIM}[{_now()}] {service_name}: severity={severity} "
        f"action={action} ({reason}){_RESET}"
    )


def print_incident_created(service_name: str, incident_id: Any, impact: str) -> None:
    color = _impact_color(impact)
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_BOLD}{_BLUE}{_TAG}{_RESET} "
        f"{service_name} incident created "
        f"{_DIM}(id={incident_id}){_RESET} {color}{impact}{_RESET}"
    )


def print_incident_updated(service_name: str, incident_id: Any, status: str) -> None:
    color = _GREEN if status == "completed" else _CYAN
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_BOLD}{_BLUE}{_TAG}{_RESET} "
        f"{service_name} incident updated "
        f"{_DIM}(id={incident_id}){_RESET} {color}{status}{_RESET}"
    )


def print_sync_failed(service_name: str, action: str, error: Exception) -> None:
    """Print a failed create/update along with the response body."""
    verb = "creation" if action == "create" else "update"
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_RED}ERROR{_RESET} "
        f"{_BOLD}{_TAG} {service_name} incident {verb} failed:{_RESET} {error}",
        file=sys.stderr,
    )
    body = getattr(error, "body", None)
    if body:
        print(f"    {_DIM}{body}{_RESET}", file=sys.stderr)


def print_persist_failed(service_name: str, error: Exception) -> None:
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_RED}ERROR{_RESET} "
        f"{_BOLD}{service_name}:{_RESET} could not store incident: {error}",
        file=sys.stderr,
    )


def print_concurrent_dispatch(service_name: str, in_flight: int) -> None:
    """Warn that a service already has a dispatch awaiting its response."""
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_YELLOW}WARNING{_RESET} "
        f"{_BOLD}{service_name}:{_RESET} {in_flight} request(s) still in flight"
    )


def print_ready(port: int) -> None:
    print(
        f"\n  {_BOLD}{_GREEN}Accepting health reports on port {port}...{_RESET}"
        f"  {_DIM}(Press Ctrl+C to stop){_RESET}\n"
    )


def print_shutdown() -> None:
    """Print shutdown message."""
    print(f"\n{_BOLD}{_CYAN}Statuspage sync stopped. Goodbye!{_RESET}\n")
