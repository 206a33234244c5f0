"""HTTP client for the remote event-management API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from ..config import Settings
from ..errors import NetworkError

logger = logging.getLogger(__name__)

Identifier = Union[int, str]


@dataclass
class ApiResponse:
    status_code: int
    payload: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CheckinApiClient:
    """Thin wrapper around the check-in REST API.

    Every call returns an ``ApiResponse`` whatever the status code; status
    interpretation belongs to the controllers. Transport failures raise
    ``NetworkError``. A body that is not JSON yields a ``None`` payload.
    """

    def __init__(self, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.http_timeout_seconds,
            transport=transport,
        )

    async def authenticate(self, email: str, password: str) -> ApiResponse:
        logger.info("api.authenticate: signing in %s", email)
        return await self._send("POST", "/auth", json={"email": email, "password": password})

    async def list_events(self, token: str, event_id: Optional[Identifier] = None) -> ApiResponse:
        params = {"event_id": "" if event_id is None else str(event_id)}
        return await self._send("GET", "/checkin/event-list", token=token, params=params)

    async def validate_registration(self, token: str, event_id: Identifier, registration: str) -> ApiResponse:
        params = {
            "event": str(event_id),
            "registration": registration,
            "event_id": str(event_id),
        }
        return await self._send("GET", "/checkin/validation", token=token, params=params)

    async def search_registrations(
        self, token: str, event_id: Identifier, value: str, parameter: str
    ) -> ApiResponse:
        body = {"value": value, "parameter": parameter, "event": event_id}
        return await self._send("POST", "/checkin/search/", token=token, json=body)

    async def confirm_checkin(self, token: str, event_id: Identifier, registration_id: Identifier) -> ApiResponse:
        body = {"registration": registration_id, "event_id": event_id}
        return await self._send("POST", "/checkin/confirm", token=token, json=body)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        **kwargs: Any,
    ) -> ApiResponse:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("api %s %s: request timeout", method, path)
            raise NetworkError(log_message=f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            logger.error("api %s %s: network error - %s", method, path, e)
            raise NetworkError(log_message=f"{method} {path} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None
        logger.debug("api %s %s -> %d", method, path, response.status_code)
        return ApiResponse(status_code=response.status_code, payload=payload)

    async def aclose(self) -> None:
        try:
            await self._client.aclose()
        except Exception as e:
            logger.warning("Error closing HTTP client: %s", e)


__all__ = ["ApiResponse", "CheckinApiClient"]
