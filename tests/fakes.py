"""In-process stand-in for the event-management API."""
from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

API_BASE_URL = "http://api.test/api/v1"
API_PREFIX = "/api/v1"

VALIDATION = "/checkin/validation"
SEARCH = "/checkin/search/"
CONFIRM = "/checkin/confirm"
EVENT_LIST = "/checkin/event-list"
AUTH = "/auth"

USER = {"id": 42, "name": "Marta Reis", "email": "marta@example.com"}
TOKEN = "tok-1234567890"


def respond(status_code: int, body: Any = None) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    return handler


def registration_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": "reg-1",
        "athlete": {
            "id": "ath-1",
            "firstname": "Ana",
            "lastname": "Silva",
            "identification_number": "12345678",
            "avatar": None,
        },
        "event": {"id": 7, "name": "Serra Trail 2026"},
        "course": {"id": "c-1", "name": "Ultra", "distance": "42km"},
        "category": {"id": "cat-1", "name": "Senior", "code": "SEN"},
        "team": {"name": "Runners Club"},
        "extras": [{"type": "t-shirt", "value": "M"}],
        "status": "paid",
        "check_in": False,
        "bib_number": 101,
        "allow_check_in": True,
        "created_at": "2026-05-01T10:00:00Z",
    }
    payload.update(overrides)
    return payload


class FakeEventApi:
    """Records every request and answers from handlers registered per route."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], Any]] = {}

    def on(self, method: str, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        self.routes[(method.upper(), API_PREFIX + path)] = handler

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == API_PREFIX + path]

    def last(self, path: str) -> Optional[httpx.Request]:
        matching = self.calls(path)
        return matching[-1] if matching else None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "no such route"})
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
