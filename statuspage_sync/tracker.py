"""
Incident State Tracker.

Holds the one current incident per service. It is the only source the
transition engine consults to know whether a service has an incident.
Resolved incidents are kept (tagged RESOLVED), never evicted.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from statuspage_sync import notifier
from statuspage_sync.exceptions import IncidentDecodeError
from statuspage_sync.models import Incident


class IncidentTracker:
    """In-memory mapping of service name to its current incident."""

    def __init__(self) -> None:
        self._incidents: Dict[str, Incident] = {}

    def get(self, service_name: str) -> Optional[Incident]:
        return self._incidents.get(service_name)

    def put(self, service_name: str, incident: Incident) -> None:
        self._incidents[service_name] = incident

    def load_active(self, records: Iterable[Mapping[str, Any]]) -> int:
        """
        Insert persisted incidents, keyed by service name.

        Each record is a mapping with `name` (service name) and `data`
        (the serialized incident). Records that fail to decode are
        skipped and reported.

        Returns:
            Number of incidents loaded.
        """
        loaded = 0
        for record in records:
            name = record.get("name") or "<unnamed>"
            try:
                incident = Incident.from_json(record.get("data"), service_name=record.get("name"))
            except IncidentDecodeError as exc:
                notifier.print_record_skipped(str(name), str(exc))
                continue
            self._incidents[incident.service_name] = incident
            loaded += 1
        return loaded

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """JSON-ready view of every tracked incident."""
        return {name: incident.to_dict() for name, incident in self._incidents.items()}

    def __contains__(self, service_name: object) -> bool:
        return service_name in self._incidents

    def __len__(self) -> int:
        return len(self._incidents)

    def __iter__(self) -> Iterator[str]:
        return iter(self._incidents)
