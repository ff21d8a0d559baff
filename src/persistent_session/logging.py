import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from persistent_session.utils import mask_token

# Uvicorn loggers are handed to the root handler so server and session events share one format
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def mask_session_tokens(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Shorten every ``token`` / ``*_token`` value so full session tokens never reach the log output."""
    for key, value in event_dict.items():
        if (key == "token" or key.endswith("_token")) and isinstance(value, str):
            event_dict[key] = mask_token(value)
    return event_dict


def setup_logging(debug: bool) -> None:
    log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
    )

    # Suppress verbose MongoDB logs
    for name in ("pymongo", "pymongo.topology", "pymongo.connection", "pymongo.serverSelection", "pymongo.command"):
        logging.getLogger(name).setLevel(logging.WARNING)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        mask_session_tokens,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
