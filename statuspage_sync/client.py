"""
Status page API client.

Thin aiohttp wrapper around the two incident endpoints:

  POST {url}/pages/{page_id}/incidents
  PUT  {url}/pages/{page_id}/incidents/{incident_id}

Every failure (transport error, timeout, non-2xx status, response
without an `id`) is raised as StatusPageAPIError. There is no retry.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

import aiohttp

from statuspage_sync.exceptions import StatusPageAPIError
from statuspage_sync.models import IncidentPayload, StatusPageConfig


class StatusPageClient:
    """Sends incident payloads to the status page."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: StatusPageConfig,
        timeout: float = 15.0,
    ) -> None:
        self.session = session
        self.config = config
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def incidents_url(self) -> str:
        return f"{self.config.url.rstrip('/')}/pages/{self.config.page_id}/incidents"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"OAuth {self.config.api_key}",
            "Accept": "application/json",
        }

    async def create_incident(self, payload: IncidentPayload) -> Dict[str, Any]:
        """Open a new incident. Returns the server record."""
        return await self._send("POST", self.incidents_url, payload)

    async def update_incident(self, incident_id: str, payload: IncidentPayload) -> Dict[str, Any]:
        """Update an existing incident. Returns the server record."""
        if not incident_id:
            raise StatusPageAPIError("cannot update an incident without id")
        return await self._send("PUT", f"{self.incidents_url}/{incident_id}", payload)

    async def _send(self, method: str, url: str, payload: IncidentPayload) -> Dict[str, Any]:
        try:
            async with self.session.request(
                method,
                url,
                json=payload.to_request_body(),
                headers=self.headers,
                timeout=self._timeout,
            ) as resp:
                body = await self._read_body(resp)
                if resp.status >= 400:
                    raise StatusPageAPIError(
                        f"{method} {url} failed",
                        status=resp.status,
                        body=body,
                    )
        except aiohttp.ClientError as exc:
            raise StatusPageAPIError(f"{method} {url} failed: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise StatusPageAPIError(f"{method} {url} timed out") from exc

        if not isinstance(body, dict) or not body.get("id"):
            raise StatusPageAPIError(
                f"{method} {url} returned no incident id",
                status=resp.status,
                body=body,
            )
        return body

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        # Proxies may answer with non-UTF-8 bodies; undecodable bytes are replaced
        raw = await resp.read()
        text = raw.decode("utf-8", errors="replace").strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text
