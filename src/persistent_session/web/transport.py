from fastapi import Request, Response

from persistent_session.core.modules.identity.models import OutboundCookie


class StarletteCookieTransport:
    """Cookie transport bound to one request and the response being built for it."""

    def __init__(self, request: Request, response: Response) -> None:
        self._request = request
        self._response = response

    def read_cookie(self, name: str) -> str | None:
        return self._request.cookies.get(name)

    def write_cookie(self, cookie: OutboundCookie) -> None:
        self._response.set_cookie(
            key=cookie.name,
            value=cookie.value,
            max_age=cookie.max_age,
            expires=cookie.expires,
            path=cookie.path,
            domain=cookie.domain,
            secure=cookie.secure,
            httponly=cookie.httponly,
            samesite=cookie.samesite,
        )
