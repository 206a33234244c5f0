"""Selected event, display profile and usage stats."""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Dict, List, Optional, Union

from ..models import AppEvent, AppProfile
from .session import SessionStore

logger = logging.getLogger(__name__)

EventListener = Callable[[Optional[AppEvent]], None]

DEFAULT_PROFILE_NAME = "Team Member"


def normalize_profile(user: Optional[Dict[str, Any]]) -> Optional[AppProfile]:
    """Display projection of a raw user record.

    Uses ``name``, falling back to ``firstname lastname``. Returns ``None``
    when both name and email are blank.
    """
    if not user:
        return None
    name = user.get("name")
    name_value = name.strip() if isinstance(name, str) else ""
    if not name_value:
        parts = [user.get("firstname"), user.get("lastname")]
        name_value = " ".join(p.strip() for p in parts if isinstance(p, str) and p.strip())
    email = user.get("email")
    email_value = email.strip() if isinstance(email, str) else ""

    if not name_value and not email_value:
        return None
    return AppProfile(name=name_value or DEFAULT_PROFILE_NAME, email=email_value)


class AppStateStore:
    """Cleared whenever the session loses its token."""

    def __init__(self, session: SessionStore) -> None:
        self.profile: Optional[AppProfile] = None
        self.event: Optional[AppEvent] = None
        self.stats: Optional[Dict[str, Any]] = None
        self._event_listeners: List[EventListener] = []
        session.subscribe(self._on_session_changed)

    def on_event_changed(self, listener: EventListener) -> Callable[[], None]:
        self._event_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._event_listeners:
                self._event_listeners.remove(listener)

        return unsubscribe

    def set_event(self, event: Union[AppEvent, Dict[str, Any], None]) -> None:
        if isinstance(event, dict):
            event = AppEvent.model_validate(event)
        previous_id = self.event.id if self.event else None
        self.event = event
        next_id = event.id if event else None
        if previous_id != next_id:
            logger.info("Active event changed: %s -> %s", previous_id, next_id)
            for listener in list(self._event_listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception("Event listener failed")

    def set_profile_from_user(self, user: Optional[Dict[str, Any]]) -> None:
        self.profile = normalize_profile(user)

    def set_stats(self, stats: Optional[Dict[str, Any]]) -> None:
        self.stats = stats

    def apply_stats_from_response(self, payload: Any) -> None:
        """Take ``stats`` from any response body; last write wins."""
        try:
            if not isinstance(payload, dict) or "stats" not in payload:
                return
            stats = payload["stats"]
            self.stats = dict(stats) if isinstance(stats, dict) else None
        except Exception as e:  # pragma: no cover - best effort
            logger.debug("Ignoring malformed stats payload: %s", e)

    def clear_app_state(self) -> None:
        self.profile = None
        self.stats = None
        self.set_event(None)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.model_dump() if self.profile else None,
            "event": self.event.model_dump() if self.event else None,
            "stats": self.stats,
        }

    def _on_session_changed(self, session: SessionStore) -> None:
        if not session.token:
            self.clear_app_state()
            return
        self.set_profile_from_user(session.user)


__all__ = ["AppStateStore", "normalize_profile", "DEFAULT_PROFILE_NAME"]
