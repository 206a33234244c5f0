"""Event list and active event selection."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from ..errors import AuthExpiredError, CheckinError, ServerError, ValidationInputError
from ..models import AppEvent
from ..navigation import Route
from ..payloads import EVENT_LIST_FIELDS, extract_list
from ..state import Outcome, OutcomeStatus
from .base import BaseController

logger = logging.getLogger(__name__)


class EventSelectionController(BaseController):
    screen = "event_selection"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.events: List[AppEvent] = []

    async def load_events(self) -> Outcome:
        if self.loading:
            return Outcome(OutcomeStatus.IGNORED)
        token = self.context.token
        if not token:
            exc = AuthExpiredError()
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)

        current = self.context.event
        self.loading = True
        self.error = None
        try:
            response = await self._exchange(self.api.list_events(token, current.id if current else None))
            if not response.ok:
                raise ServerError("Unable to load events.", status_code=response.status_code)
        except AuthExpiredError as exc:
            return Outcome(OutcomeStatus.AUTH_EXPIRED, error=exc)
        except CheckinError as exc:
            logger.warning("Event list failed: %s", exc)
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)
        finally:
            self.loading = False

        events: List[AppEvent] = []
        for item in extract_list(response.payload, EVENT_LIST_FIELDS):
            try:
                events.append(AppEvent.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed event entry: %r", item)
        self.events = events
        return Outcome(OutcomeStatus.OK, data=[e.model_dump() for e in events])

    def select_event(self, event_id: Any) -> Outcome:
        for event in self.events:
            if str(event.id) == str(event_id):
                self.context.app_state.set_event(event)
                self.navigator.navigate(Route.SCAN, replace=True)
                return Outcome(OutcomeStatus.OK, data=event.model_dump())
        exc = ValidationInputError("Unknown event.")
        self.error = exc.user_message
        return Outcome(OutcomeStatus.INVALID, error=exc)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "events": [e.model_dump() for e in self.events],
            "selected": self.context.event.model_dump() if self.context.event else None,
            "loading": self.loading,
            "error": self.error,
        }


__all__ = ["EventSelectionController"]
