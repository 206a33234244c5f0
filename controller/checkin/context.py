"""Store bundle handed to every controller."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .models import AppEvent
from .stores import AppStateStore, RegistrationStore, SessionStore

logger = logging.getLogger(__name__)


@dataclass
class CheckinContext:
    session: SessionStore
    app_state: AppStateStore
    registration: RegistrationStore

    @property
    def token(self) -> Optional[str]:
        return self.session.token

    @property
    def event(self) -> Optional[AppEvent]:
        return self.app_state.event

    async def teardown_session(self, *, reason: str) -> None:
        """Drop registration and session in the same loop step, then purge storage."""
        logger.warning("Tearing down session: %s", reason)
        self.registration.clear()
        await self.session.clear_session()


__all__ = ["CheckinContext"]
