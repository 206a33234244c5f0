"""FastAPI entry-point for the check-in controller."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from .companion import CheckinCompanion
from .config import Settings, get_settings
from .logging_config import configure_logging
from .models import SearchParameter
from .state import Outcome, OutcomeStatus

logger = logging.getLogger(__name__)

_FAILURE_STATUS = {
    "validation": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "not_found": status.HTTP_404_NOT_FOUND,
    "auth_expired": status.HTTP_401_UNAUTHORIZED,
    "network": status.HTTP_502_BAD_GATEWAY,
    "server": status.HTTP_502_BAD_GATEWAY,
}


class LoginRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


class EventSelectRequest(BaseModel):
    event_id: Union[int, str]


class FocusRequest(BaseModel):
    focused: bool = True


class ScanRequest(BaseModel):
    value: str


class SearchRequest(BaseModel):
    query: str = ""
    parameter: SearchParameter = SearchParameter.BIB_NUMBER


class SelectResultRequest(BaseModel):
    index: int


async def _wait_for_disconnect(ws: WebSocket) -> None:
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return


def outcome_response(outcome: Outcome) -> JSONResponse:
    status_code = status.HTTP_200_OK
    if outcome.status is OutcomeStatus.AUTH_EXPIRED:
        status_code = status.HTTP_401_UNAUTHORIZED
    elif outcome.status is OutcomeStatus.INVALID:
        status_code = status.HTTP_409_CONFLICT
    elif outcome.status is OutcomeStatus.FAILED and outcome.error is not None:
        status_code = _FAILURE_STATUS.get(outcome.error.category, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(outcome.to_dict(), status_code=status_code)


def create_app(companion: Optional[CheckinCompanion] = None, settings: Optional[Settings] = None) -> FastAPI:
    manager = companion or CheckinCompanion(settings=settings)
    app = FastAPI(title="checkin-controller", version="0.1.0")
    app.state.companion = manager

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
        """Catch-all exception handler to prevent application crashes."""
        logger.exception(f"Unhandled exception in {request.url.path}: {exc}")
        return PlainTextResponse(
            f"Internal server error: {str(exc)}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle request validation errors gracefully."""
        logger.warning(f"Validation error in {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)}
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        try:
            await manager.start()
            logger.info("Application started successfully")
        except Exception as e:
            logger.exception(f"Failed to start services: {e}")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        try:
            await manager.stop()
            logger.info("Application shutdown complete")
        except Exception as e:
            logger.exception(f"Error during shutdown: {e}")

    @app.get("/healthz")
    async def healthcheck() -> JSONResponse:
        return JSONResponse({"status": "ok", "phase": manager.phase.value})

    @app.get("/state")
    async def state() -> JSONResponse:
        return JSONResponse(manager.snapshot())

    # ---- auth -------------------------------------------------------------

    @app.post("/auth/login")
    async def login(payload: LoginRequest) -> JSONResponse:
        outcome = await manager.auth.login(payload.email, payload.password, remember_me=payload.remember_me)
        return outcome_response(outcome)

    @app.post("/auth/logout")
    async def logout() -> JSONResponse:
        return outcome_response(await manager.auth.logout())

    # ---- events -----------------------------------------------------------

    @app.get("/events")
    async def list_events() -> JSONResponse:
        return outcome_response(await manager.events.load_events())

    @app.post("/events/select")
    async def select_event(payload: EventSelectRequest) -> JSONResponse:
        return outcome_response(manager.events.select_event(payload.event_id))

    # ---- scan -------------------------------------------------------------

    @app.post("/scan/focus")
    async def scan_focus(payload: FocusRequest) -> JSONResponse:
        if payload.focused:
            manager.scan.on_focus_gained()
        else:
            manager.scan.on_focus_lost()
        return JSONResponse(manager.scan.snapshot())

    @app.post("/scan/code")
    async def scan_code(payload: ScanRequest) -> JSONResponse:
        outcome = await manager.scan.handle_scan(payload.value)
        logger.info(f"Scan outcome: {outcome.status.value} (phase={manager.scan.phase.value})")
        return outcome_response(outcome)

    # ---- search -----------------------------------------------------------

    @app.post("/search/focus")
    async def search_focus() -> JSONResponse:
        manager.search.on_focus_gained()
        return JSONResponse(manager.search.snapshot())

    @app.post("/search")
    async def search(payload: SearchRequest) -> JSONResponse:
        return outcome_response(await manager.search.search(payload.query, payload.parameter))

    @app.post("/search/select")
    async def search_select(payload: SelectResultRequest) -> JSONResponse:
        return outcome_response(manager.search.select(payload.index))

    # ---- confirmation -----------------------------------------------------

    @app.get("/confirmation")
    async def confirmation_view() -> JSONResponse:
        manager.confirmation.on_enter()
        return JSONResponse(manager.confirmation.view())

    @app.post("/confirmation/confirm")
    async def confirmation_confirm() -> JSONResponse:
        return outcome_response(await manager.confirmation.confirm())

    @app.post("/confirmation/back")
    async def confirmation_back() -> JSONResponse:
        manager.confirmation.back_to_scan()
        return JSONResponse({"status": "ok"})

    @app.websocket("/ws/ui")
    async def ui_socket(ws: WebSocket) -> None:
        queue = manager.hub.register_ui()
        watcher: Optional[asyncio.Task] = None
        try:
            await ws.accept()
            watcher = asyncio.create_task(_wait_for_disconnect(ws))
            while True:
                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait({getter, watcher}, return_when=asyncio.FIRST_COMPLETED)
                if getter not in done:
                    getter.cancel()
                    break  # Client went away
                event = getter.result()

                payload = {"type": event.type, "data": event.data}
                if event.phase is not None:
                    payload["phase"] = event.phase.value
                if event.error:
                    payload["error"] = event.error

                try:
                    await ws.send_json(payload)
                except Exception as e:
                    # WebSocket closed, break out of loop
                    logger.debug(f"WebSocket send failed (client disconnected): {e}")
                    break
        except WebSocketDisconnect:
            pass
        except asyncio.CancelledError:
            pass  # Clean shutdown
        except Exception as e:
            logger.error(f"Unexpected error in UI websocket: {e}")
        finally:
            manager.hub.unregister_ui(queue)
            if watcher is not None and not watcher.done():
                watcher.cancel()
            try:
                await ws.close()
            except Exception:
                pass

    return app


settings: Settings = get_settings()
configure_logging(settings.log_level, settings.log_directory, settings.log_retention_days)
app = create_app(settings=settings)
