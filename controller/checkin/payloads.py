"""Normalization of the response envelopes the event API is known to send.

Each list endpoint has an ordered tuple of accepted envelope fields. The first
field holding a non-empty list wins; a bare JSON array is accepted last.
Anything else normalizes to an empty list. When two fields are both populated
the earlier one in the tuple is used and the rest are ignored.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

REGISTRATION_LIST_FIELDS: Tuple[str, ...] = ("registrations", "data", "results")
EVENT_LIST_FIELDS: Tuple[str, ...] = ("data", "events")


def extract_list(payload: Any, fields: Tuple[str, ...]) -> List[Any]:
    if isinstance(payload, dict):
        for name in fields:
            value = payload.get(name)
            if isinstance(value, list) and value:
                return value
        return []
    if isinstance(payload, list):
        return payload
    return []


def extract_registration(payload: Any) -> Optional[Dict[str, Any]]:
    """Single registration from a validation response (`data` envelope optional)."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if data is None:
        data = payload
    if not isinstance(data, dict) or not data:
        return None
    nested = data.get("registration")
    if isinstance(nested, dict):
        return nested or None
    return data


def extract_auth(payload: Any) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
    """Token and user from a login response."""
    if not isinstance(payload, dict):
        return None, None
    data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
    token = payload.get("token") or payload.get("access_token") or data.get("token")
    user = payload.get("user") or data.get("user")
    if not isinstance(token, str):
        token = None
    if not isinstance(user, dict):
        user = None
    return token, user


def extract_message(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    for name in ("message", "error"):
        value = payload.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


__all__ = [
    "EVENT_LIST_FIELDS",
    "REGISTRATION_LIST_FIELDS",
    "extract_auth",
    "extract_list",
    "extract_message",
    "extract_registration",
]
