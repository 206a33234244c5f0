"""Registration search by bib number, identification number or code."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..errors import AuthExpiredError, CheckinError, ServerError, ValidationInputError
from ..models import AppEvent, RegistrationResource, SearchParameter
from ..navigation import Route
from ..payloads import REGISTRATION_LIST_FIELDS, extract_list, extract_message
from ..state import ControllerEvent, Outcome, OutcomeStatus
from .base import BaseController

logger = logging.getLogger(__name__)


def parse_registrations(items: List[Any]) -> List[RegistrationResource]:
    results: List[RegistrationResource] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            results.append(RegistrationResource.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping unreadable search result: %s", e)
    return results


class SearchController(BaseController):
    screen = "search"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.query = ""
        self.parameter = SearchParameter.BIB_NUMBER
        self.results: List[RegistrationResource] = []
        self.searched = False
        self.context.app_state.on_event_changed(self._on_event_changed)

    def on_focus_gained(self) -> None:
        self._redirect_if_event_missing()

    def set_parameter(self, parameter: Union[SearchParameter, str]) -> None:
        self.parameter = SearchParameter(parameter)

    async def search(self, query: str, parameter: Union[SearchParameter, str, None] = None) -> Outcome:
        if self.loading:
            return Outcome(OutcomeStatus.IGNORED)
        self.query = query or ""
        if parameter is not None:
            try:
                self.set_parameter(parameter)
            except ValueError:
                exc = ValidationInputError(f"Unknown search parameter: {parameter}")
                self.error = exc.user_message
                return Outcome(OutcomeStatus.FAILED, error=exc)

        token = self.context.token
        if not token:
            exc = AuthExpiredError()
            self.error = exc.user_message
            return Outcome(OutcomeStatus.FAILED, error=exc)
        event = self.context.event
        if not event:
            self.navigator.navigate(Route.EVENT_SELECTION)
            return Outcome(OutcomeStatus.REDIRECTED)

        trimmed = self.query.strip()
        if not trimmed:
            exc = ValidationInputError("Enter a value to search.")
            self.error = exc.user_message
            self.results = []
            self.searched = False
            self._publish()
            return Outcome(OutcomeStatus.FAILED, error=exc)

        self.loading = True
        self.error = None
        self.searched = False
        self.results = []
        self._publish()
        try:
            response = await self._exchange(
                self.api.search_registrations(token, event.id, trimmed, self.parameter.value)
            )
            if not response.ok:
                message = extract_message(response.payload) or f"Search failed ({response.status_code})."
                raise ServerError(message, status_code=response.status_code)
            self.results = parse_registrations(extract_list(response.payload, REGISTRATION_LIST_FIELDS))
            self.searched = True
            logger.info("Search %s=%r returned %d result(s)", self.parameter.value, trimmed, len(self.results))
            return Outcome(OutcomeStatus.OK, data=[r.summary() for r in self.results])
        except AuthExpiredError as exc:
            self.error = exc.user_message
            return Outcome(OutcomeStatus.AUTH_EXPIRED, error=exc)
        except CheckinError as exc:
            logger.warning("Search failed: %s", exc)
            self.error = exc.user_message
            self.searched = True
            return Outcome(OutcomeStatus.FAILED, error=exc)
        finally:
            self.loading = False
            self._publish()

    def select(self, index: int) -> Outcome:
        """Promote one result to the registration store and open confirmation."""
        if index < 0 or index >= len(self.results):
            return Outcome(OutcomeStatus.INVALID, error=ValidationInputError("Unknown search result."))
        registration = self.results[index]
        self.context.registration.set(registration)
        self.navigator.navigate(Route.CONFIRMATION)
        return Outcome(OutcomeStatus.OK, data=registration.summary())

    def reset(self) -> None:
        self.results = []
        self.searched = False
        self.error = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "parameter": self.parameter.value,
            "parameters": [{"key": p.value, "label": p.label} for p in SearchParameter],
            "results": [r.summary() for r in self.results],
            "searched": self.searched,
            "loading": self.loading,
            "error": self.error,
        }

    def _on_event_changed(self, event: Optional[AppEvent]) -> None:
        self.reset()
        self._publish()

    def _publish(self) -> None:
        self.hub.publish(ControllerEvent(type="state", data={"screen": self.screen, **self.snapshot()}, error=self.error))


__all__ = ["SearchController", "parse_registrations"]
