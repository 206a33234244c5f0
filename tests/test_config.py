from __future__ import annotations

import logging

import checkin.__main__ as launcher
from checkin.config import Settings
from checkin.logging_config import BearerTokenFilter, configure_logging


def _record(msg, *args, level=logging.INFO):
    return logging.LogRecord("checkin.test", level, __file__, 1, msg, args, None)


class TestSettings:
    def test_base_url_trailing_slash_is_dropped(self):
        settings = Settings(_env_file=None, api_base_url=" https://events.example.com/api/v1/ ")

        assert settings.api_base_url == "https://events.example.com/api/v1"

    def test_nested_values_from_environment(self, monkeypatch):
        monkeypatch.setenv("SCAN__COOLDOWN_MS", "900")
        monkeypatch.setenv("CONTROLLER_PORT", "5055")

        settings = Settings(_env_file=None)

        assert settings.scan.cooldown_ms == 900
        assert settings.controller_port == 5055

    def test_launcher_serves_on_configured_interface(self, monkeypatch, settings):
        calls = []
        configured = settings.model_copy(update={"controller_host": "127.0.0.1", "controller_port": 5055})
        monkeypatch.setattr(launcher, "get_settings", lambda: configured)
        monkeypatch.setattr(launcher.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        launcher.main()

        assert calls == [("checkin.main:app", {"host": "127.0.0.1", "port": 5055, "log_config": None})]


class TestLogging:
    def test_bearer_tokens_are_masked(self):
        record = _record("sending %s", "Authorization: Bearer tok-1234567890")

        assert BearerTokenFilter().filter(record) is True
        assert record.getMessage() == "sending Authorization: Bearer tok-…"

    def test_other_messages_are_untouched(self):
        record = _record("scan %s ok", "REG-1")

        BearerTokenFilter().filter(record)

        assert record.getMessage() == "scan REG-1 ok"

    def test_warnings_also_land_in_incident_log(self, tmp_path):
        root = logging.getLogger()
        previous = (root.level, list(root.handlers))
        try:
            log_dir = configure_logging("info", tmp_path / "logs", retention_days=3)
            log = logging.getLogger("checkin.test")
            log.info("scan accepted")
            log.warning("validation failed with Bearer abcdefghijk")
            for handler in root.handlers:
                handler.flush()

            runtime = (log_dir / "checkin-runtime.log").read_text(encoding="utf-8")
            incidents = (log_dir / "checkin-incidents.log").read_text(encoding="utf-8")
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
            root.setLevel(previous[0])
            for handler in previous[1]:
                root.addHandler(handler)

        assert "scan accepted" in runtime
        assert "scan accepted" not in incidents
        assert "Bearer abcd…" in incidents
        assert "abcdefghijk" not in runtime
