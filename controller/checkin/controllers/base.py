"""Plumbing shared by the screen controllers."""
from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Optional

from ..backend.http_client import ApiResponse, CheckinApiClient
from ..context import CheckinContext
from ..errors import AuthExpiredError
from ..hub import EventHub
from ..navigation import Navigator, Route

logger = logging.getLogger(__name__)


class BaseController:
    screen: str = "base"

    def __init__(
        self,
        *,
        context: CheckinContext,
        api: CheckinApiClient,
        navigator: Navigator,
        hub: EventHub,
    ) -> None:
        self.context = context
        self.api = api
        self.navigator = navigator
        self.hub = hub
        self.loading = False
        self.error: Optional[str] = None

    def _redirect_if_event_missing(self, *, replace: bool = False) -> bool:
        """Signed in but no event selected: send the operator to pick one."""
        if self.context.token and not self.context.event:
            self.navigator.navigate(Route.EVENT_SELECTION, replace=replace)
            return True
        return False

    async def _exchange(self, request: Awaitable[ApiResponse]) -> ApiResponse:
        """Await an API call, forward stats, and turn 403 into a global teardown."""
        response = await request
        self.context.app_state.apply_stats_from_response(response.payload)
        if response.status_code == 403:
            await self.context.teardown_session(reason=f"403 from {self.screen}")
            self.navigator.navigate(Route.LOGIN, replace=True)
            raise AuthExpiredError(log_message=f"{self.screen}: authorization rejected")
        return response


__all__ = ["BaseController"]
