from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from bson.errors import BSONError
from pymongo.errors import PyMongoError

from persistent_session.errors import StorageError

logger = structlog.get_logger(__name__)

PRIMARY_KEY = "_id"


def record_fields(record: dict[str, Any]) -> dict[str, Any]:
    """Return the user fields of a session record, without the primary key."""
    return {key: value for key, value in record.items() if key != PRIMARY_KEY}


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise any driver or BSON encoding failure inside the block as StorageError."""
    try:
        yield
    except (PyMongoError, BSONError) as exc:
        logger.warning("storage_operation_failed", operation=operation, error=str(exc))
        raise StorageError(f"Session storage failed during {operation}: {exc}") from exc
