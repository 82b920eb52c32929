"""Entrypoint: `domino-server` (or `python -m src.main`)."""

import uvicorn

from src.api.server import create_app
from src.core.config import Settings
from src.core.logging import configure_logging


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
