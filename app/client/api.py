"""Async HTTP wrapper around the FastTrack timer and history endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..services.fastcalc import parse_iso, to_utc_iso

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"
_UNSET: Any = object()


class TimerApiError(Exception):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass
class RemoteTimer:
    start_time: datetime
    is_paused: bool
    paused_at: Optional[datetime]
    notes: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RemoteTimer":
        return cls(
            start_time=parse_iso(data["startTime"]),
            is_paused=bool(data.get("isPaused")),
            paused_at=parse_iso(data.get("pausedAt")),
            notes=data.get("notes") or "",
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body)
    return str(body)


class TimerApiClient:
    """Thin async client. One instance per user session.

    Pass ``token`` for a user JWT or ``api_key`` for the service key.
    ``transport`` lets tests route requests straight into an ASGI app.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        token: str | None = None,
        api_key: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if api_key:
            headers["X-API-Key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TimerApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def set_token(self, token: str) -> None:
        self._client.headers["Authorization"] = f"Bearer {token}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, url)
        response = await self._client.request(method, url, **kwargs)
        if response.status_code >= 400:
            raise TimerApiError(response.status_code, _error_message(response))
        if not response.content:
            return None
        return response.json()

    # ---- auth
    async def login(self, username: str, password: str) -> Dict[str, Any]:
        data = await self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        self.set_token(data["access_token"])
        return data

    async def register(self, username: str, password: str) -> Dict[str, Any]:
        data = await self._request("POST", "/api/auth/register", json={"username": username, "password": password})
        self.set_token(data["access_token"])
        return data

    async def me(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/auth/me")

    # ---- timer
    async def get_timer(self, user_id: str) -> Optional[RemoteTimer]:
        data = await self._request("GET", f"/api/timer/{user_id}")
        return RemoteTimer.from_json(data) if data else None

    async def start_timer(self, user_id: str, start_time: datetime, notes: str = "") -> RemoteTimer:
        payload = {"startTime": to_utc_iso(start_time), "notes": notes}
        return RemoteTimer.from_json(await self._request("POST", f"/api/timer/{user_id}", json=payload))

    async def update_timer(
        self,
        user_id: str,
        *,
        is_paused: Optional[bool] = None,
        paused_at: Any = _UNSET,
        notes: Optional[str] = None,
    ) -> RemoteTimer:
        """PATCH only the given fields. ``paused_at=None`` is sent as null."""

        payload: Dict[str, Any] = {}
        if is_paused is not None:
            payload["isPaused"] = is_paused
        if paused_at is not _UNSET:
            payload["pausedAt"] = to_utc_iso(paused_at) if paused_at is not None else None
        if notes is not None:
            payload["notes"] = notes
        return RemoteTimer.from_json(await self._request("PATCH", f"/api/timer/{user_id}", json=payload))

    async def delete_timer(self, user_id: str) -> None:
        await self._request("DELETE", f"/api/timer/{user_id}")

    # ---- history
    async def add_fast(self, user_id: str, start_time: datetime, end_time: datetime, notes: str | None = None) -> Dict[str, Any]:
        payload = {"startTime": to_utc_iso(start_time), "endTime": to_utc_iso(end_time), "notes": notes or None}
        return await self._request("POST", f"/api/fasts/{user_id}", json=payload)

    async def list_fasts(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/fasts/{user_id}", params={"limit": limit})

    async def fast_stats(self, user_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/api/fasts/{user_id}/stats")
