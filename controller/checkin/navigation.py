"""Route requests issued by controllers; the UI performs the actual navigation."""
from __future__ import annotations

import enum
import logging
from collections import deque
from typing import Deque, Tuple

from .hub import EventHub
from .state import ControllerEvent

logger = logging.getLogger(__name__)


class Route(str, enum.Enum):
    LOGIN = "login"
    SCAN = "scan"
    SEARCH = "search"
    CONFIRMATION = "confirmation"
    EVENT_SELECTION = "event_selection"


class Navigator:
    def __init__(self, hub: EventHub) -> None:
        self._hub = hub
        self.current: Route = Route.LOGIN
        self.history: Deque[Tuple[Route, bool]] = deque(maxlen=50)

    def navigate(self, route: Route, *, replace: bool = False) -> None:
        logger.info("navigate -> %s%s", route.value, " (replace)" if replace else "")
        self.current = route
        self.history.append((route, replace))
        self._hub.publish(
            ControllerEvent(type="navigate", data={"route": route.value, "replace": replace})
        )


__all__ = ["Route", "Navigator"]
