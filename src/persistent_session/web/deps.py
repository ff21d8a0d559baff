from typing import Annotated, cast

from fastapi import Depends, Request, Response

from persistent_session.app import App
from persistent_session.core.modules.identity.models import SessionContext
from persistent_session.web.transport import StarletteCookieTransport


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_session_context(app: Annotated[App, Depends(get_app)], request: Request, response: Response) -> SessionContext:
    """Create a fresh session context per request, bound to its cookies."""
    return app.create_context(StarletteCookieTransport(request, response))


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
SessionDep = Annotated[SessionContext, Depends(get_session_context)]
