"""``python -m checkin``: serve the controller API on the configured interface."""
from __future__ import annotations

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "checkin.main:app",
        host=settings.controller_host,
        port=settings.controller_port,
        log_config=None,  # checkin.main installs its own handlers
    )


if __name__ == "__main__":
    main()
