"""Command-line entry point: load settings, configure logging, serve the session API."""

import sys

import structlog

from persistent_session.app import App
from persistent_session.config import Config
from persistent_session.errors import ConfigurationError
from persistent_session.logging import setup_logging
from persistent_session.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    try:
        app = App(config)
    except ConfigurationError as exc:
        logger.error("invalid_configuration", error=str(exc))
        sys.exit(1)
    run_server(app, config)


if __name__ == "__main__":
    main()
