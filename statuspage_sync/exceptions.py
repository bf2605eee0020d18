"""Exception types raised by the sync layer."""

from __future__ import annotations

from typing import Any, Optional


class StatusPageSyncError(Exception):
    """Base class for all statuspage_sync errors."""


class ConfigError(StatusPageSyncError):
    """The configuration file could not be used."""


class IncidentDecodeError(StatusPageSyncError):
    """A persisted incident record could not be decoded."""


class StatusPageAPIError(StatusPageSyncError):
    """
    The remote incident API rejected a request or could not be reached.

    Attributes:
        status: HTTP status code, or None for transport failures.
        body: Decoded response body (JSON or text) when one was received.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            base = f"{base} (HTTP {self.status})"
        return base
