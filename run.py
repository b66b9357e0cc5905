"""Entry point for the lesson import service."""

import logging

import uvicorn

from lesson_import.api.app import create_app
from lesson_import.config import load_config


def main() -> None:
    """Load configuration and serve the HTTP API."""
    config = load_config()

    logging.basicConfig(
        level=config.app.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
    )


if __name__ == "__main__":
    main()
