"""Uvicorn server runner sharing the application's structlog setup."""

import structlog
import uvicorn

from persistent_session.app import App
from persistent_session.config import Config
from persistent_session.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def run_server(app: App, config: Config) -> None:
    """Serve the session API. Uvicorn keeps the logging configured by setup_logging()."""
    fastapi_app = create_fastapi_app(app, config)

    logger.info(
        "server_starting",
        host=config.host,
        port=config.port,
        collection=config.collection,
        cookie_key=config.cookie_key,
    )
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=None,
        log_level="debug" if config.debug else "info",
        access_log=config.debug,
        server_header=False,
    )
