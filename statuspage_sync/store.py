"""
Local incident mirror backed by SQLite (aiosqlite).

One row per service holding the serialized tracked incident and the raw
record the status page returned for it. Only rows that are still active
are handed back at startup.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import aiosqlite

from statuspage_sync.models import Incident

_SCHEMA = """
CREATE TABLE IF NOT EXISTS incidents (
    name TEXT PRIMARY KEY,
    incident_id TEXT,
    active INTEGER NOT NULL DEFAULT 1,
    data TEXT NOT NULL,
    record TEXT,
    updated_at TEXT NOT NULL
)
"""


class IncidentStore:
    """
    Persists the current incident of each service.

    Attributes:
        path: SQLite database file, or ":memory:".
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        self._conn: Optional[aiosqlite.Connection] = None

    async def init(self) -> None:
        """Open the database and create the schema if needed."""
        if self._conn is not None:
            return
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self.path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute(_SCHEMA)
        await self._conn.commit()

    async def get_active_incidents(self) -> List[Dict[str, Any]]:
        """Return `{"name", "data"}` for every incident not yet resolved."""
        conn = self._require()
        async with conn.execute(
            "SELECT name, data FROM incidents WHERE active = 1 ORDER BY name"
        ) as cursor:
            rows = await cursor.fetchall()
        return [{"name": row["name"], "data": row["data"]} for row in rows]

    async def add_incident(
        self,
        service_name: str,
        incident: Incident,
        server_record: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Insert or replace the stored incident of a service."""
        conn = self._require()
        await conn.execute(
            """
            INSERT INTO incidents (name, incident_id, active, data, record, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                incident_id = excluded.incident_id,
                active = excluded.active,
                data = excluded.data,
                record = excluded.record,
                updated_at = excluded.updated_at
            """,
            (
                service_name,
                incident.id,
                0 if incident.is_resolved else 1,
                incident.to_json(),
                json.dumps(dict(server_record), default=str) if server_record is not None else None,
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        await conn.commit()

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    def _require(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("IncidentStore.init() must be awaited first")
        return self._conn
