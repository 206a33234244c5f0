"""Fan-out of controller events to UI WebSocket subscribers."""
from __future__ import annotations

import asyncio
from asyncio import QueueEmpty
import logging
from typing import List

from .state import ControllerEvent

logger = logging.getLogger(__name__)


class EventHub:
    def __init__(self, queue_size: int = 16) -> None:
        self._queue_size = queue_size
        self._ui_subscribers: List[asyncio.Queue[ControllerEvent]] = []

    def register_ui(self) -> asyncio.Queue[ControllerEvent]:
        queue: asyncio.Queue[ControllerEvent] = asyncio.Queue(maxsize=self._queue_size)
        self._ui_subscribers.append(queue)
        return queue

    def unregister_ui(self, queue: asyncio.Queue[ControllerEvent]) -> None:
        if queue in self._ui_subscribers:
            self._ui_subscribers.remove(queue)

    def publish(self, event: ControllerEvent) -> None:
        """Deliver to every subscriber; a full queue drops its oldest event."""
        for queue in list(self._ui_subscribers):
            try:
                if queue.full():
                    try:
                        queue.get_nowait()
                    except QueueEmpty:
                        pass
                queue.put_nowait(event)
            except Exception as e:
                logger.warning("Failed to broadcast event to subscriber: %s", e)


__all__ = ["EventHub"]
