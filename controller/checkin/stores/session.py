"""Authentication session store with optional "remember me" persistence."""
from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

REMEMBER_KEY = "checkin.rememberMe"
TOKEN_KEY = "checkin.authToken"
USER_KEY = "checkin.user"

SessionListener = Callable[["SessionStore"], None]


class SecureStore(Protocol):
    async def get_item(self, key: str) -> Optional[str]: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def delete_item(self, key: str) -> None: ...


class SessionStore:
    """Holds the token and the raw user record; both or neither are set."""

    def __init__(self, storage: SecureStore) -> None:
        self._storage = storage
        self._token: Optional[str] = None
        self._user: Optional[Dict[str, Any]] = None
        self.remember_me = False
        self.is_restoring = True
        self._listeners: List[SessionListener] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_remember_me(self, value: bool) -> None:
        self.remember_me = bool(value)

    async def restore(self) -> None:
        """Load a remembered session. Never raises; failures leave the app signed out."""
        try:
            remembered = await self._storage.get_item(REMEMBER_KEY)
            if remembered == "true":
                token = await self._storage.get_item(TOKEN_KEY)
                raw_user = await self._storage.get_item(USER_KEY)
                if token and raw_user:
                    user = json.loads(raw_user)
                    if isinstance(user, dict):
                        self.remember_me = True
                        self._apply(user, token)
                        logger.info("Session restored for %s", user.get("email") or user.get("id"))
        except Exception as e:
            logger.warning("Session restore failed, continuing signed out: %s", e)
        finally:
            self.is_restoring = False

    async def set_session(self, user: Dict[str, Any], token: str) -> None:
        if not token or not isinstance(user, dict):
            raise ValueError("A session needs both a token and a user")
        self._apply(user, token)
        if not self.remember_me:
            await self._purge()
            return
        try:
            await self._storage.set_item(TOKEN_KEY, token)
            await self._storage.set_item(USER_KEY, json.dumps(user))
            # Flag last: restore() only trusts a fully written session.
            await self._storage.set_item(REMEMBER_KEY, "true")
        except Exception as e:
            logger.warning("Could not persist session, keeping it in memory only: %s", e)
            await self._purge()

    async def clear_session(self) -> None:
        # In-memory state goes first so no listener ever sees a stale token.
        self._apply(None, None)
        await self._purge()

    async def _purge(self) -> None:
        """Delete every persisted key; one failing key does not stop the others."""
        for key in (REMEMBER_KEY, TOKEN_KEY, USER_KEY):
            try:
                await self._storage.delete_item(key)
            except Exception as e:
                logger.warning("Could not delete %s from session storage: %s", key, e)

    def _apply(self, user: Optional[Dict[str, Any]], token: Optional[str]) -> None:
        self._user = user
        self._token = token
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener failed")


__all__ = ["SessionStore", "SecureStore", "REMEMBER_KEY", "TOKEN_KEY", "USER_KEY"]
