from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from persistent_session.config import Config
from persistent_session.core.core import Core
from persistent_session.core.modules.identity.models import SessionContext, SessionState, SessionToken
from persistent_session.core.modules.identity.transport import CookieTransport
from persistent_session.errors import NotFoundError

_MISSING = object()


class App:
    """Facade for all session operations, delegates to Core services."""

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    def create_context(self, transport: CookieTransport | None = None, token: SessionToken | None = None) -> SessionContext:
        """Create a request-scoped session context."""
        return SessionContext(transport=transport, token=token)

    def get_state(self, ctx: SessionContext) -> SessionState:
        """Report whether the client has a session, without creating one."""
        return self._core.services.identity.state(ctx)

    async def get_items(self, ctx: SessionContext) -> dict[str, Any]:
        """Get all values of an existing session; an inactive client gets an empty mapping."""
        if not self._core.services.identity.is_active(ctx):
            return {}
        return await self._core.services.record.items(ctx)

    async def get_value(self, ctx: SessionContext, key: str) -> Any:
        """Get a session value. Raises NotFoundError if the key is not set.

        A client without a session is answered without issuing one, since the error response would drop the cookie.
        """
        if not self._core.services.identity.is_active(ctx):
            raise NotFoundError(f"Session key '{key}' not found")
        value = await self._core.services.record.get(ctx, key, _MISSING)
        if value is _MISSING:
            raise NotFoundError(f"Session key '{key}' not found")
        return value

    async def set_value(self, ctx: SessionContext, key: str, value: Any) -> None:
        await self._core.services.record.set(ctx, key, value)

    async def remove_value(self, ctx: SessionContext, key: str) -> Any:
        """Remove a session value, returning the removed value or None."""
        return await self._core.services.record.remove(ctx, key)

    async def clear(self, ctx: SessionContext) -> None:
        await self._core.services.record.remove_all(ctx)

    async def destroy(self, ctx: SessionContext) -> bool:
        return await self._core.services.record.destroy(ctx)

    async def regenerate(self, ctx: SessionContext) -> SessionToken:
        return await self._core.services.identity.regenerate_id(ctx)
