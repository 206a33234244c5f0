"""Shared controller state definitions for the check-in companion."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import CheckinError


class ScanPhase(str, enum.Enum):
    """
    Scanner phases:

    IDLE        - Accepting decoded codes
    PROCESSING  - One validation request in flight
    COOLDOWN    - Ignoring input until the re-arm timer fires
    INACTIVE    - Scan screen not focused, input ignored
    """
    IDLE = "idle"
    PROCESSING = "processing"
    COOLDOWN = "cooldown"
    INACTIVE = "inactive"


class OutcomeStatus(str, enum.Enum):
    OK = "ok"
    IGNORED = "ignored"
    REDIRECTED = "redirected"
    FAILED = "failed"
    AUTH_EXPIRED = "auth_expired"
    INVALID = "invalid"


@dataclass
class Outcome:
    """Result of a controller action, safe to hand to the UI layer."""

    status: OutcomeStatus
    error: Optional[CheckinError] = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status.value}
        if self.error is not None:
            payload["error"] = self.error.user_message
            payload["category"] = self.error.category
        if self.data is not None:
            payload["data"] = self.data
        return payload


@dataclass
class ControllerEvent:
    """Event payload distributed to UI clients over the local WebSocket."""

    type: str
    data: Dict[str, Any]
    phase: Optional[ScanPhase] = None
    error: Optional[str] = None


__all__ = ["ScanPhase", "OutcomeStatus", "Outcome", "ControllerEvent"]
