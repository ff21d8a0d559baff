import secrets
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from persistent_session.config import Config
from persistent_session.core.core import Service
from persistent_session.core.modules.identity.models import (
    ActiveSession,
    CookieParams,
    NoSession,
    OutboundCookie,
    SessionContext,
    SessionState,
    SessionToken,
)
from persistent_session.utils import mask_token, now

logger = structlog.get_logger(__name__)

DEFAULT_COOKIE_LIFETIME = timedelta(days=365 * 5)


class IdentityService(Service):
    """Owns the session token: detects, issues and delivers it via cookie."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], config: Config) -> None:
        super().__init__(database, config)
        self._cookie_key = config.cookie_key
        self._cookie_params = CookieParams().merge(config.cookie_params)

    def set_cookie_params(self, params: CookieParams | Mapping[str, Any]) -> None:
        """Merge overrides into the current cookie parameters."""
        self._cookie_params = self._cookie_params.merge(params)

    def is_active(self, ctx: SessionContext) -> bool:
        """Check whether a token is cached or sent by the client. Never creates anything."""
        if ctx.token:
            return True
        return bool(ctx.require_transport().read_cookie(self._cookie_key))

    def get_id(self, ctx: SessionContext) -> SessionToken | None:
        """Get the token from the context cache or the inbound cookie, without issuing one."""
        if not ctx.token:
            value = ctx.require_transport().read_cookie(self._cookie_key)
            if value:
                ctx.token = SessionToken(value)
        return ctx.token or None

    def set_id(self, ctx: SessionContext, token: SessionToken) -> None:
        """Adopt a token for this context. The transport is not touched."""
        ctx.token = token

    def state(self, ctx: SessionContext) -> SessionState:
        token = self.get_id(ctx)
        if token is None:
            return NoSession()
        return ActiveSession(token=token)

    def open(self, ctx: SessionContext) -> ActiveSession:
        """Ensure the context has a session token, issuing a new one with its cookie if needed.

        Idempotent: an active context is returned unchanged and no cookie is written.
        """
        token = self.get_id(ctx)
        if token is not None:
            return ActiveSession(token=token)

        transport = ctx.require_transport()
        token = self.generate_token()
        transport.write_cookie(self.build_cookie(token))
        ctx.token = token
        logger.debug("session_opened", token=mask_token(token))
        return ActiveSession(token=token, is_new=True)

    async def regenerate_id(self, ctx: SessionContext) -> SessionToken:
        """Issue a fresh token for the context and move the existing record under it."""
        transport = ctx.require_transport()
        old_token = self.get_id(ctx)
        new_token = self.generate_token()
        if old_token is not None:
            await self.core.services.record.move_record(old_token, new_token)
        transport.write_cookie(self.build_cookie(new_token))
        ctx.token = new_token
        logger.info(
            "session_regenerated",
            old_token=mask_token(old_token) if old_token else None,
            new_token=mask_token(new_token),
        )
        return new_token

    def generate_token(self) -> SessionToken:
        return SessionToken(self.config.id_prefix + secrets.token_urlsafe(32))

    def build_cookie(self, token: SessionToken) -> OutboundCookie:
        """Assemble the outbound cookie for a token from the merged cookie parameters."""
        params = self._cookie_params
        expires = params.expires
        if params.lifetime is None and expires is None:
            expires = now() + DEFAULT_COOKIE_LIFETIME
        return OutboundCookie(
            name=self._cookie_key,
            value=token,
            max_age=params.lifetime,
            expires=expires,
            path=params.path,
            domain=params.domain,
            secure=params.secure,
            httponly=params.httponly,
            samesite=params.samesite,
        )
