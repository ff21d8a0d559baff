from typing import Any

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from persistent_session.config import Config
from persistent_session.core.core import Service
from persistent_session.core.db import PRIMARY_KEY, record_fields, storage_errors
from persistent_session.core.modules.identity.models import SessionContext, SessionToken
from persistent_session.core.modules.record.validators import validate_field_name
from persistent_session.utils import mask_token

logger = structlog.get_logger(__name__)


class RecordService(Service):
    """Reads and writes the single document keyed by a session token.

    Every public operation opens the session first, so a token always exists before the database is touched.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]], config: Config) -> None:
        super().__init__(database, config)
        self._collection = database.get_collection(config.collection)

    def _open(self, ctx: SessionContext) -> SessionToken:
        return self.core.services.identity.open(ctx).token

    async def get(self, ctx: SessionContext, key: str, default: Any = None) -> Any:
        """Get a session value, or default when the record or key is absent."""
        token = self._open(ctx)
        record = await self.fetch_record(token)
        if record is None or key == PRIMARY_KEY:
            return default
        return record.get(key, default)

    async def has(self, ctx: SessionContext, key: str) -> bool:
        token = self._open(ctx)
        record = await self.fetch_record(token)
        return record is not None and key in record and key != PRIMARY_KEY

    async def count(self, ctx: SessionContext) -> int:
        """Number of session values, the primary key excluded."""
        token = self._open(ctx)
        record = await self.fetch_record(token)
        if record is None:
            return 0
        return len(record) - 1

    async def items(self, ctx: SessionContext) -> dict[str, Any]:
        token = self._open(ctx)
        record = await self.fetch_record(token)
        if record is None:
            return {}
        return record_fields(record)

    async def set(self, ctx: SessionContext, key: str, value: Any) -> None:
        """Set a session value, creating the record if it does not exist yet."""
        validate_field_name(key)
        token = self._open(ctx)
        if self.config.atomic_upsert:
            await self.upsert_record(token, {key: value})
            return

        # Check-then-insert: two first writes racing on one token make the later insert fail
        if await self.fetch_record(token) is None:
            await self.insert_record(token, {key: value})
        else:
            await self.update_record(token, {key: value})

    async def remove(self, ctx: SessionContext, key: str) -> Any:
        """Remove a session value and return it, None if it was not set."""
        validate_field_name(key)
        token = self._open(ctx)
        previous = await self.unset_record_field(token, key)
        if previous is None:
            return None
        return previous.get(key)

    async def remove_all(self, ctx: SessionContext) -> None:
        """Drop every session value, keeping an empty record for the token."""
        token = self._open(ctx)
        if self.config.atomic_upsert:
            with storage_errors("remove_all"):
                await self._collection.replace_one({PRIMARY_KEY: token}, {PRIMARY_KEY: token}, upsert=True)
            return

        await self.delete_record(token)
        await self.insert_record(token)

    async def destroy(self, ctx: SessionContext) -> bool:
        """Delete the whole record for the session. Returns whether a record was deleted.

        With destroy_requires_active disabled, a context without a token is left alone and no cookie is issued.
        """
        if self.config.destroy_requires_active:
            token = self._open(ctx)
        else:
            found = self.core.services.identity.get_id(ctx)
            if found is None:
                return False
            token = found

        deleted = await self.delete_record(token)
        logger.info("session_record_destroyed", token=mask_token(token), deleted=deleted)
        return deleted

    async def move_record(self, old_token: SessionToken, new_token: SessionToken) -> None:
        """Re-key a record from one token to another."""
        record = await self.fetch_record(old_token)
        if record is None:
            return
        await self.insert_record(new_token, record_fields(record))
        await self.delete_record(old_token)

    async def fetch_record(self, token: SessionToken) -> dict[str, Any] | None:
        with storage_errors("fetch"):
            return await self._collection.find_one({PRIMARY_KEY: token})

    async def insert_record(self, token: SessionToken, fields: dict[str, Any] | None = None) -> None:
        with storage_errors("insert"):
            await self._collection.insert_one({PRIMARY_KEY: token, **(fields or {})})
        logger.debug("session_record_created", token=mask_token(token))

    async def update_record(self, token: SessionToken, fields: dict[str, Any]) -> None:
        """Merge fields into an existing record. A missing record is left missing."""
        with storage_errors("update"):
            await self._collection.update_one({PRIMARY_KEY: token}, {"$set": fields})

    async def unset_record_field(self, token: SessionToken, key: str) -> dict[str, Any] | None:
        """Drop one field from the record and return the record as it was before, None if absent."""
        with storage_errors("unset"):
            return await self._collection.find_one_and_update(
                {PRIMARY_KEY: token},
                {"$unset": {key: ""}},
                return_document=ReturnDocument.BEFORE,
            )

    async def upsert_record(self, token: SessionToken, fields: dict[str, Any]) -> None:
        """Merge fields into the record, creating it in the same write when absent."""
        with storage_errors("upsert"):
            await self._collection.update_one({PRIMARY_KEY: token}, {"$set": fields}, upsert=True)

    async def delete_record(self, token: SessionToken) -> bool:
        with storage_errors("delete"):
            result = await self._collection.delete_one({PRIMARY_KEY: token})
        return result.deleted_count > 0
