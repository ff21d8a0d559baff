"""Session identity models."""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal, NewType, Self

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from persistent_session.core.modules.identity.transport import CookieTransport
from persistent_session.errors import TransportUnavailableError

SessionToken = NewType("SessionToken", str)


def as_utc(value: datetime | None) -> datetime | None:
    """Read naive datetimes as UTC and convert aware ones to UTC, as cookie expiry dates require."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class CookieParams(BaseModel):
    """Attributes of the session cookie.

    Neither lifetime nor expires set means the cookie expires five years after it is issued.
    """

    lifetime: int | None = Field(default=None, ge=0, description="Max-Age in seconds")
    expires: datetime | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = True
    httponly: bool = Field(default=True, validation_alias=AliasChoices("httponly", "httpOnly", "http_only"))
    samesite: Literal["lax", "strict", "none"] | None = "lax"

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("expires")
    @classmethod
    def expires_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    def merge(self, overrides: "CookieParams | Mapping[str, Any]") -> Self:
        """Return new params with overrides applied over the current values, key by key."""
        if not isinstance(overrides, CookieParams):
            overrides = CookieParams.model_validate(dict(overrides))
        return self.model_validate(self.model_dump() | overrides.model_dump(exclude_unset=True))


class OutboundCookie(BaseModel):
    """Fully resolved cookie handed to the transport for delivery to the client."""

    name: str
    value: str
    max_age: int | None = None
    expires: datetime | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = True
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] | None = "lax"

    @field_validator("expires")
    @classmethod
    def expires_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class NoSession(BaseModel):
    """The client has no session token yet."""

    model_config = ConfigDict(frozen=True)

    @property
    def is_active(self) -> bool:
        return False


class ActiveSession(BaseModel):
    """The client is bound to a session token.

    ``is_new`` is true when the token was issued during the current request.
    """

    token: SessionToken
    is_new: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def is_active(self) -> bool:
        return True


SessionState = NoSession | ActiveSession


class SessionContext:
    """Request-scoped session identity: the cached token and the cookie transport.

    A new context is created for every request, so tokens never leak between clients.
    """

    def __init__(self, transport: CookieTransport | None = None, token: SessionToken | None = None) -> None:
        self.transport = transport
        self.token = token

    def require_transport(self) -> CookieTransport:
        """Get the bound transport or raise TransportUnavailableError."""
        if self.transport is None:
            raise TransportUnavailableError
        return self.transport
