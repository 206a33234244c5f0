from __future__ import annotations

import pytest

from checkin.companion import CheckinCompanion
from checkin.config import ScanSettings, Settings, StorageSettings
from checkin.models import AppEvent
from checkin.storage import MemorySecureStore

from fakes import API_BASE_URL, TOKEN, USER, FakeEventApi


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        api_base_url=API_BASE_URL,
        log_directory=tmp_path / "logs",
        scan=ScanSettings(cooldown_ms=200),
        storage=StorageSettings(directory=tmp_path),
    )


@pytest.fixture
def api() -> FakeEventApi:
    return FakeEventApi()


@pytest.fixture
def storage() -> MemorySecureStore:
    return MemorySecureStore()


@pytest.fixture
def make_companion(settings, api, storage):
    def factory(*, cooldown_ms: int | None = None) -> CheckinCompanion:
        active = settings
        if cooldown_ms is not None:
            active = settings.model_copy(update={"scan": ScanSettings(cooldown_ms=cooldown_ms)})
        return CheckinCompanion(settings=active, storage=storage, transport=api.transport)

    return factory


async def sign_in(companion: CheckinCompanion, *, with_event: bool = True, remember_me: bool = False) -> None:
    companion.session.set_remember_me(remember_me)
    await companion.session.set_session(dict(USER), TOKEN)
    if with_event:
        companion.app_state.set_event(AppEvent(id=7, name="Serra Trail 2026"))


@pytest.fixture
def signed_in():
    return sign_in
