"""Final check-in confirmation for the held registration."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..errors import AuthExpiredError, CheckinError, ServerError
from ..models import RegistrationResource
from ..navigation import Route
from ..state import ControllerEvent, Outcome, OutcomeStatus
from .base import BaseController

logger = logging.getLogger(__name__)


class ConfirmationController(BaseController):
    screen = "confirmation"

    @property
    def registration(self) -> Optional[RegistrationResource]:
        return self.context.registration.current

    @property
    def can_confirm(self) -> bool:
        registration = self.registration
        return registration is not None and registration.allow_check_in

    def on_enter(self) -> None:
        self.error = None
        self._redirect_if_event_missing(replace=True)

    def view(self) -> Dict[str, Any]:
        if not self.can_confirm:
            return {"screen": self.screen, "invalid": True}
        return {
            "screen": self.screen,
            "invalid": False,
            "registration": self.registration.summary(),
            "loading": self.loading,
            "error": self.error,
        }

    async def confirm(self) -> Outcome:
        registration = self.registration
        if registration is None or not registration.allow_check_in:
            return Outcome(OutcomeStatus.INVALID)
        token = self.context.token
        if not token or self.loading:
            return Outcome(OutcomeStatus.IGNORED)
        event = self.context.event
        if not event:
            self.navigator.navigate(Route.EVENT_SELECTION, replace=True)
            return Outcome(OutcomeStatus.REDIRECTED)

        self.loading = True
        self.error = None
        self._publish()
        try:
            response = await self._exchange(self.api.confirm_checkin(token, event.id, registration.id))
            if not response.ok:
                raise ServerError("Unable to confirm check-in.", status_code=response.status_code)
        except AuthExpiredError as exc:
            return Outcome(OutcomeStatus.AUTH_EXPIRED, error=exc)
        except CheckinError as exc:
            logger.warning("Check-in confirmation failed for %s: %s", registration.id, exc)
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)
        finally:
            self.loading = False
            self._publish()

        logger.info("Registration %s checked in", registration.id)
        self.context.registration.clear()
        self.navigator.navigate(Route.SCAN, replace=True)
        return Outcome(OutcomeStatus.OK, data={"registration": registration.id})

    def back_to_scan(self) -> None:
        self.error = None
        self.navigator.navigate(Route.SCAN, replace=True)

    def _publish(self) -> None:
        self.hub.publish(ControllerEvent(type="state", data=self.view(), error=self.error))


__all__ = ["ConfirmationController"]
