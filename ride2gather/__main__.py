"""Run the API with ``python -m ride2gather``."""

from __future__ import annotations

from uvicorn import Config, Server

from .core.config import settings


def main() -> None:
    config = Config(
        app="ride2gather.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )
    Server(config).run()


if __name__ == "__main__":
    main()
