"""Sign-in and sign-out."""
from __future__ import annotations

import logging
from typing import Any

from ..errors import CheckinError, ServerError, ValidationInputError
from ..navigation import Route
from ..payloads import extract_auth, extract_message
from ..state import Outcome, OutcomeStatus
from .base import BaseController

logger = logging.getLogger(__name__)


class AuthController(BaseController):
    screen = "login"

    def set_remember_me(self, value: bool) -> None:
        self.context.session.set_remember_me(value)

    async def login(self, email: str, password: str, *, remember_me: Any = None) -> Outcome:
        if self.loading:
            return Outcome(OutcomeStatus.IGNORED)
        self.error = None
        email = (email or "").strip()
        if not email or not password:
            exc = ValidationInputError("Please enter your email and password.")
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)
        if remember_me is not None:
            self.set_remember_me(bool(remember_me))

        self.loading = True
        try:
            response = await self.api.authenticate(email, password)
            self.context.app_state.apply_stats_from_response(response.payload)
            if not response.ok:
                message = extract_message(response.payload) or f"Login failed ({response.status_code})"
                raise ServerError(message, status_code=response.status_code)
            token, user = extract_auth(response.payload)
            if not token or not user:
                raise ServerError("Unexpected login response. Missing user or token.", status_code=response.status_code)
            await self.context.session.set_session(user, token)
        except CheckinError as exc:
            logger.warning("Login failed for %s: %s", email, exc)
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)
        finally:
            self.loading = False

        logger.info("Signed in as %s (token %s...)", email, token[:8])
        self.navigator.navigate(Route.SCAN, replace=True)
        return Outcome(OutcomeStatus.OK, data={"profile": self.context.app_state.snapshot()["profile"]})

    async def logout(self) -> Outcome:
        await self.context.teardown_session(reason="logout")
        self.navigator.navigate(Route.LOGIN, replace=True)
        return Outcome(OutcomeStatus.OK)


__all__ = ["AuthController"]
