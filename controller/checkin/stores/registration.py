"""Holder for the one registration being checked in."""
from __future__ import annotations

import logging
from typing import Optional

from ..models import RegistrationResource

logger = logging.getLogger(__name__)


class RegistrationStore:
    def __init__(self) -> None:
        self._current: Optional[RegistrationResource] = None

    @property
    def current(self) -> Optional[RegistrationResource]:
        return self._current

    def set(self, registration: Optional[RegistrationResource]) -> None:
        self._current = registration
        if registration is not None:
            logger.info("Registration %s selected (allow_check_in=%s)", registration.id, registration.allow_check_in)

    def clear(self) -> None:
        self._current = None


__all__ = ["RegistrationStore"]
