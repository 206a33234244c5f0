"""QR scan to registration validation state machine.

Phases (see ``ScanPhase``)::

    IDLE --code--> PROCESSING --ok--> IDLE (+ navigate to confirmation)
                              --fail--> COOLDOWN --timer--> IDLE
    any --focus lost--> INACTIVE --focus gained--> IDLE

At most one validation request is in flight; codes read meanwhile are
dropped, never queued. A request that outlives the screen's focus still
completes (stats, registration) but leaves the scanner INACTIVE.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..errors import AuthExpiredError, CheckinError, NetworkError, NotFoundError, ServerError
from ..models import RegistrationResource
from ..navigation import Route
from ..payloads import extract_registration
from ..state import ControllerEvent, Outcome, OutcomeStatus, ScanPhase
from .base import BaseController

logger = logging.getLogger(__name__)


@dataclass
class ScanAttempt:
    value: Optional[str] = None
    at: float = 0.0


class ScanController(BaseController):
    screen = "scan"

    def __init__(
        self,
        *,
        cooldown_ms: int = 1500,
        clock: Callable[[], float] = time.monotonic,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.cooldown_seconds = max(int(cooldown_ms), 0) / 1000
        self._clock = clock
        self._phase = ScanPhase.INACTIVE
        self._focused = False
        self._scan_allowed = False
        self._in_flight = False
        self._last_scan = ScanAttempt()
        self._rearm_task: Optional[asyncio.Task[None]] = None

    @property
    def phase(self) -> ScanPhase:
        return self._phase

    @property
    def focused(self) -> bool:
        return self._focused

    @property
    def scan_enabled(self) -> bool:
        return self._scan_allowed and not self._in_flight and not self.loading

    def on_focus_gained(self) -> None:
        self._focused = True
        self._redirect_if_event_missing()
        self._cancel_rearm()
        self.error = None
        self._last_scan = ScanAttempt()
        if not self._in_flight:
            self.loading = False
            self._scan_allowed = True
            self._set_phase(ScanPhase.IDLE)

    def on_focus_lost(self) -> None:
        self._focused = False
        self._cancel_rearm()
        self._scan_allowed = False
        self._set_phase(ScanPhase.INACTIVE)

    async def handle_scan(self, value: str) -> Outcome:
        """Entry point for every decoded code the camera reports."""
        if not value or not self._scan_allowed or self._in_flight:
            logger.debug("Scan dropped (phase=%s)", self._phase.value)
            return Outcome(OutcomeStatus.IGNORED)

        started_at = self._clock()
        last = self._last_scan
        if last.value == value and started_at - last.at < self.cooldown_seconds:
            logger.debug("Duplicate scan within cooldown ignored")
            return Outcome(OutcomeStatus.IGNORED)

        self._last_scan = ScanAttempt(value=value, at=started_at)
        self._scan_allowed = False

        try:
            outcome = await self._validate(value)
        except Exception:
            self._schedule_rearm(started_at)
            raise
        if outcome.status in (OutcomeStatus.OK, OutcomeStatus.AUTH_EXPIRED):
            return outcome
        self._schedule_rearm(started_at)
        return outcome

    async def _validate(self, value: str) -> Outcome:
        event = self.context.event
        if not event:
            self.navigator.navigate(Route.EVENT_SELECTION)
            return Outcome(OutcomeStatus.REDIRECTED)
        token = self.context.token
        if not token:
            exc = AuthExpiredError()
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)

        self._in_flight = True
        self.loading = True
        self.error = None
        self._set_phase(ScanPhase.PROCESSING)
        try:
            response = await self._exchange(self.api.validate_registration(token, event.id, value))
            if response.status_code == 404:
                raise NotFoundError(log_message="validation returned 404")
            if not response.ok:
                raise ServerError("Unable to validate the registration.", status_code=response.status_code)
            data = extract_registration(response.payload)
            if data is None:
                raise NotFoundError(log_message="validation returned an empty payload")
            try:
                registration = RegistrationResource.model_validate(data)
            except ValidationError as e:
                raise NetworkError(log_message=f"unreadable registration payload: {e}") from e
        except AuthExpiredError as exc:
            self.error = exc.user_message
            self._set_phase(ScanPhase.INACTIVE)
            return Outcome(OutcomeStatus.AUTH_EXPIRED, error=exc)
        except CheckinError as exc:
            logger.warning("Scan validation failed: %s", exc)
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)
        finally:
            self.loading = False
            self._in_flight = False

        self.context.registration.set(registration)
        if self._focused:
            self._scan_allowed = True
            self._set_phase(ScanPhase.IDLE)
            self.navigator.navigate(Route.CONFIRMATION)
        else:
            self._set_phase(ScanPhase.INACTIVE)
        return Outcome(OutcomeStatus.OK, data=registration.summary())

    def _schedule_rearm(self, started_at: float) -> None:
        self._cancel_rearm()
        if not self._focused:
            self._set_phase(ScanPhase.INACTIVE)
            return
        delay = max(0.0, self.cooldown_seconds - (self._clock() - started_at))
        self._set_phase(ScanPhase.COOLDOWN)
        self._rearm_task = asyncio.create_task(self._rearm_after(delay), name="scan-rearm")

    async def _rearm_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._rearm_task = None
        if self._focused:
            self._scan_allowed = True
            self._last_scan = ScanAttempt()
            self._set_phase(ScanPhase.IDLE)
        else:
            self._set_phase(ScanPhase.INACTIVE)

    def _cancel_rearm(self) -> None:
        if self._rearm_task and not self._rearm_task.done():
            self._rearm_task.cancel()
        self._rearm_task = None

    async def shutdown(self) -> None:
        task = self._rearm_task
        self._cancel_rearm()
        if task:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def snapshot(self) -> Dict[str, Any]:
        return {
            "phase": self._phase.value,
            "focused": self._focused,
            "scan_enabled": self.scan_enabled,
            "loading": self.loading,
            "error": self.error,
        }

    def _set_phase(self, phase: ScanPhase) -> None:
        if phase is not self._phase:
            logger.debug("scan phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        self.hub.publish(
            ControllerEvent(type="state", data={"screen": self.screen, **self.snapshot()}, phase=phase, error=self.error)
        )


__all__ = ["ScanAttempt", "ScanController"]
