"""Wiring of stores, API client and screen controllers."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .backend.http_client import CheckinApiClient
from .config import Settings, get_settings
from .context import CheckinContext
from .controllers import (
    AuthController,
    ConfirmationController,
    EventSelectionController,
    ScanController,
    SearchController,
)
from .hub import EventHub
from .navigation import Navigator, Route
from .state import ScanPhase
from .storage import FileSecureStore
from .stores import AppStateStore, RegistrationStore, SessionStore
from .stores.session import SecureStore

logger = logging.getLogger(__name__)


class CheckinCompanion:
    """Owns every long-lived object of one check-in station."""

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        storage: Optional[SecureStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.hub = EventHub(queue_size=self.settings.performance.ui_event_queue_size)
        self.navigator = Navigator(self.hub)

        self.session = SessionStore(storage or FileSecureStore(self.settings.storage.path))
        self.app_state = AppStateStore(self.session)
        self.registration = RegistrationStore()
        self.context = CheckinContext(
            session=self.session,
            app_state=self.app_state,
            registration=self.registration,
        )
        self.api = CheckinApiClient(self.settings, transport=transport)

        deps: Dict[str, Any] = {
            "context": self.context,
            "api": self.api,
            "navigator": self.navigator,
            "hub": self.hub,
        }
        self.auth = AuthController(**deps)
        self.events = EventSelectionController(**deps)
        self.scan = ScanController(cooldown_ms=self.settings.scan.cooldown_ms, **deps)
        self.search = SearchController(**deps)
        self.confirmation = ConfirmationController(**deps)

    @property
    def phase(self) -> ScanPhase:
        return self.scan.phase

    async def start(self) -> None:
        logger.info("Starting check-in companion (api=%s)", self.settings.api_base_url)
        await self.session.restore()
        self.navigator.navigate(Route.SCAN if self.session.token else Route.LOGIN, replace=True)

    async def stop(self) -> None:
        logger.info("Stopping check-in companion")
        try:
            await self.scan.shutdown()
        except Exception as e:
            logger.warning("Error stopping scanner: %s", e)
        await self.api.aclose()
        logger.info("Check-in companion stopped")

    def snapshot(self) -> Dict[str, Any]:
        registration = self.registration.current
        return {
            "route": self.navigator.current.value,
            "session": {
                "authenticated": self.session.is_authenticated,
                "remember_me": self.session.remember_me,
                "restoring": self.session.is_restoring,
            },
            "app": self.app_state.snapshot(),
            "registration": registration.summary() if registration else None,
            "events": self.events.snapshot(),
            "scan": self.scan.snapshot(),
            "search": self.search.snapshot(),
            "confirmation": self.confirmation.view(),
        }


__all__ = ["CheckinCompanion"]
