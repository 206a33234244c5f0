from __future__ import annotations

import asyncio
import json
import os
import stat

import pytest

from checkin.models import AppEvent, AppProfile
from checkin.storage import FileSecureStore, MemorySecureStore
from checkin.stores import AppStateStore, SessionStore, normalize_profile
from checkin.stores.session import REMEMBER_KEY, TOKEN_KEY, USER_KEY

from fakes import TOKEN, USER


class BrokenStore:
    async def get_item(self, key):
        raise OSError("keychain locked")

    async def set_item(self, key, value):
        raise OSError("keychain locked")

    async def delete_item(self, key):
        raise OSError("keychain locked")


class ReadOnlyStore(MemorySecureStore):
    async def set_item(self, key, value):
        raise OSError("read-only filesystem")


class StickyTokenStore(MemorySecureStore):
    async def delete_item(self, key):
        if key == TOKEN_KEY:
            raise OSError("disk unavailable")
        await super().delete_item(key)


def _restore(storage) -> SessionStore:
    session = SessionStore(storage)
    asyncio.run(session.restore())
    return session


class TestSessionPersistence:
    def test_remembered_session_survives_restart(self):
        storage = MemorySecureStore()
        first = SessionStore(storage)
        first.set_remember_me(True)
        asyncio.run(first.set_session(dict(USER), TOKEN))

        restored = _restore(storage)

        assert restored.token == TOKEN
        assert restored.user == USER
        assert restored.remember_me is True
        assert restored.is_restoring is False

    def test_unremembered_session_is_not_restored(self):
        storage = MemorySecureStore()
        first = SessionStore(storage)
        asyncio.run(first.set_session(dict(USER), TOKEN))

        restored = _restore(storage)

        assert restored.token is None
        assert restored.user is None
        assert restored.is_restoring is False

    def test_signing_in_without_remember_purges_stale_copy(self):
        storage = MemorySecureStore({REMEMBER_KEY: "true", TOKEN_KEY: "old", USER_KEY: '{"id": 1}'})
        session = SessionStore(storage)
        asyncio.run(session.set_session(dict(USER), TOKEN))

        assert storage._items == {}
        assert _restore(storage).token is None

    def test_partial_persisted_session_is_ignored(self):
        storage = MemorySecureStore({REMEMBER_KEY: "true", TOKEN_KEY: "orphan"})

        restored = _restore(storage)

        assert restored.token is None
        assert restored.user is None

    def test_corrupted_user_is_ignored(self):
        storage = MemorySecureStore({REMEMBER_KEY: "true", TOKEN_KEY: "t", USER_KEY: "{not json"})

        restored = _restore(storage)

        assert restored.token is None
        assert restored.is_restoring is False

    def test_storage_failure_leaves_app_usable(self):
        restored = _restore(BrokenStore())

        assert restored.token is None
        assert restored.is_restoring is False

    def test_clear_session_purges_everything(self):
        storage = MemorySecureStore()
        session = SessionStore(storage)
        session.set_remember_me(True)
        seen = []
        session.subscribe(lambda s: seen.append(s.token))

        async def scenario():
            await session.set_session(dict(USER), TOKEN)
            await session.clear_session()

        asyncio.run(scenario())

        assert seen == [TOKEN, None]
        assert session.token is None and session.user is None
        assert storage._items == {}

    def test_unwritable_storage_keeps_session_in_memory(self):
        storage = ReadOnlyStore()
        session = SessionStore(storage)
        session.set_remember_me(True)

        asyncio.run(session.set_session(dict(USER), TOKEN))

        assert session.token == TOKEN
        assert storage._items == {}
        assert _restore(storage).token is None

    def test_failed_token_delete_still_forgets_session(self):
        storage = StickyTokenStore()
        session = SessionStore(storage)
        session.set_remember_me(True)

        async def scenario():
            await session.set_session(dict(USER), TOKEN)
            await session.clear_session()

        asyncio.run(scenario())

        assert session.token is None
        assert REMEMBER_KEY not in storage._items
        assert USER_KEY not in storage._items
        assert _restore(storage).token is None

    def test_clear_session_with_broken_storage_does_not_raise(self):
        session = SessionStore(BrokenStore())
        seen = []
        session.subscribe(lambda s: seen.append(s.token))

        asyncio.run(session.clear_session())

        assert seen == [None]
        assert session.token is None

    def test_session_requires_token_and_user(self):
        session = SessionStore(MemorySecureStore())

        with pytest.raises(ValueError):
            asyncio.run(session.set_session(dict(USER), ""))
        assert session.token is None

    def test_file_store_round_trip(self, tmp_path):
        path = tmp_path / "state" / "session.json"
        first = SessionStore(FileSecureStore(path))
        first.set_remember_me(True)
        asyncio.run(first.set_session(dict(USER), TOKEN))

        restored = _restore(FileSecureStore(path))

        assert restored.token == TOKEN
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_file_store_serializes_concurrent_writes(self, tmp_path):
        path = tmp_path / "session.json"
        store = FileSecureStore(path)

        async def scenario():
            await asyncio.gather(*(store.set_item(f"k{i}", str(i)) for i in range(40)))
            await asyncio.gather(*(store.delete_item(f"k{i}") for i in range(0, 40, 2)))
            return await asyncio.gather(*(store.get_item(f"k{i}") for i in range(40)))

        values = asyncio.run(scenario())

        assert values == [None if i % 2 == 0 else str(i) for i in range(40)]
        assert json.loads(path.read_text(encoding="utf-8")) == {f"k{i}": str(i) for i in range(1, 40, 2)}
        assert [p.name for p in tmp_path.iterdir()] == ["session.json"]

    def test_file_store_missing_file_reads_empty(self, tmp_path):
        store = FileSecureStore(tmp_path / "absent.json")

        assert asyncio.run(store.get_item(TOKEN_KEY)) is None
        asyncio.run(store.delete_item(TOKEN_KEY))
        assert not (tmp_path / "absent.json").exists()


class TestProfile:
    @pytest.mark.parametrize(
        "user, expected",
        [
            ({"name": "  Marta Reis ", "email": "m@x.pt"}, AppProfile(name="Marta Reis", email="m@x.pt")),
            ({"firstname": "Rui", "lastname": "Costa", "email": ""}, AppProfile(name="Rui Costa", email="")),
            ({"name": "", "firstname": "Rui"}, AppProfile(name="Rui", email="")),
            ({"name": " ", "email": "staff@x.pt"}, AppProfile(name="Team Member", email="staff@x.pt")),
            ({"name": " ", "email": "  "}, None),
            ({"id": 3}, None),
            (None, None),
        ],
    )
    def test_normalize_profile(self, user, expected):
        assert normalize_profile(user) == expected


class TestAppState:
    def _stores(self):
        session = SessionStore(MemorySecureStore())
        return session, AppStateStore(session)

    def test_profile_follows_session(self):
        session, app_state = self._stores()

        asyncio.run(session.set_session(dict(USER), TOKEN))

        assert app_state.profile == AppProfile(name="Marta Reis", email="marta@example.com")

    def test_session_clear_resets_app_state(self):
        session, app_state = self._stores()

        async def scenario():
            await session.set_session(dict(USER), TOKEN)
            app_state.set_event(AppEvent(id=7, name="Serra Trail 2026"))
            app_state.apply_stats_from_response({"stats": {"checked_in": 1}})
            await session.clear_session()

        asyncio.run(scenario())

        assert app_state.snapshot() == {"profile": None, "event": None, "stats": None}

    def test_clear_is_idempotent(self):
        _, app_state = self._stores()
        app_state.set_event({"id": 7, "name": "Serra Trail 2026"})
        app_state.set_stats({"checked_in": 2})

        app_state.clear_app_state()
        once = app_state.snapshot()
        app_state.clear_app_state()

        assert app_state.snapshot() == once

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"stats": {"checked_in": 5}}, {"checked_in": 5}),
            ({"stats": None}, None),
            ({"stats": "broken"}, None),
        ],
    )
    def test_stats_last_write_wins(self, payload, expected):
        _, app_state = self._stores()
        app_state.set_stats({"checked_in": 1})

        app_state.apply_stats_from_response(payload)

        assert app_state.stats == expected

    @pytest.mark.parametrize("payload", [None, [], "text", 12, {"data": []}])
    def test_payload_without_stats_is_ignored(self, payload):
        _, app_state = self._stores()
        app_state.set_stats({"checked_in": 1})

        app_state.apply_stats_from_response(payload)

        assert app_state.stats == {"checked_in": 1}

    def test_event_listeners_fire_on_id_change_only(self):
        _, app_state = self._stores()
        seen = []
        app_state.on_event_changed(lambda event: seen.append(event.id if event else None))

        app_state.set_event(AppEvent(id=7, name="A"))
        app_state.set_event(AppEvent(id=7, name="A renamed"))
        app_state.set_event(AppEvent(id=8, name="B"))
        app_state.clear_app_state()

        assert seen == [7, 8, None]
        assert app_state.event is None
