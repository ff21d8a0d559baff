from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from persistent_session.core.modules.identity.models import OutboundCookie


class CookieTransport(Protocol):
    """Reads inbound cookies and queues outbound ones for the current request."""

    def read_cookie(self, name: str) -> str | None:
        """Return the inbound cookie value, None when the client did not send it."""
        ...

    def write_cookie(self, cookie: OutboundCookie) -> None:
        """Queue a Set-Cookie for the response."""
        ...


class MemoryCookieTransport:
    """Cookie transport backed by plain dicts, for callers outside an HTTP request."""

    def __init__(self, inbound: dict[str, str] | None = None) -> None:
        self.inbound: dict[str, str] = dict(inbound or {})
        self.outbound: list[OutboundCookie] = []

    def read_cookie(self, name: str) -> str | None:
        return self.inbound.get(name)

    def write_cookie(self, cookie: OutboundCookie) -> None:
        self.outbound.append(cookie)
