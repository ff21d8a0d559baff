from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from persistent_session.web.deps import AppDep, SessionDep
from persistent_session.web.openapi import ErrorResponse

router = APIRouter(tags=["session"])


class SessionView(BaseModel):
    """Current session contents (API representation)."""

    active: bool = Field(..., description="Whether the client already has a session")
    count: int = Field(..., description="Number of stored values", ge=0)
    items: dict[str, Any] = Field(default_factory=dict, description="Stored values by key")


class SessionValue(BaseModel):
    """A single session value."""

    key: str = Field(..., description="Session key")
    value: Any = Field(None, description="Stored value")


class SetValueRequest(BaseModel):
    """Request to store a session value."""

    value: Any = Field(..., description="Value to store, any JSON value")


@router.get(
    "/session",
    summary="Get session contents",
    description="Get every value of the current session. Does not create a session.",
    operation_id="getSession",
    responses={200: {"description": "Session contents"}},
)
async def get_session(app: AppDep, ctx: SessionDep) -> SessionView:
    state = app.get_state(ctx)
    items = await app.get_items(ctx)
    return SessionView(active=state.is_active, count=len(items), items=items)


@router.get(
    "/session/{key}",
    summary="Get session value",
    description="Get a single value from the current session.",
    operation_id="getSessionValue",
    responses={
        200: {"description": "Stored value"},
        404: {"model": ErrorResponse, "description": "Key not set"},
    },
)
async def get_session_value(key: str, app: AppDep, ctx: SessionDep) -> SessionValue:
    value = await app.get_value(ctx, key)
    return SessionValue(key=key, value=value)


@router.put(
    "/session/{key}",
    summary="Set session value",
    description="Store a value in the current session, issuing a session cookie if the client has none.",
    operation_id="setSessionValue",
    status_code=204,
    responses={
        204: {"description": "Value stored"},
        400: {"model": ErrorResponse, "description": "Invalid key"},
    },
)
async def set_session_value(key: str, request: SetValueRequest, app: AppDep, ctx: SessionDep) -> None:
    await app.set_value(ctx, key, request.value)


@router.delete(
    "/session/{key}",
    summary="Remove session value",
    description="Remove a value from the current session and return what was stored.",
    operation_id="removeSessionValue",
    responses={
        200: {"description": "Removed value, null if the key was not set"},
        400: {"model": ErrorResponse, "description": "Invalid key"},
    },
)
async def remove_session_value(key: str, app: AppDep, ctx: SessionDep) -> SessionValue:
    previous = await app.remove_value(ctx, key)
    return SessionValue(key=key, value=previous)


@router.delete(
    "/session",
    summary="Clear session",
    description="Remove every value while keeping the session itself.",
    operation_id="clearSession",
    status_code=204,
    responses={204: {"description": "Session cleared"}},
)
async def clear_session(app: AppDep, ctx: SessionDep) -> None:
    await app.clear(ctx)


@router.post(
    "/session/destroy",
    summary="Destroy session",
    description="Delete the session record entirely.",
    operation_id="destroySession",
    status_code=204,
    responses={204: {"description": "Session destroyed"}},
)
async def destroy_session(app: AppDep, ctx: SessionDep) -> None:
    await app.destroy(ctx)


@router.post(
    "/session/regenerate",
    summary="Regenerate session token",
    description="Issue a new session cookie and move the stored values to it.",
    operation_id="regenerateSession",
    status_code=204,
    responses={204: {"description": "Session token replaced"}},
)
async def regenerate_session(app: AppDep, ctx: SessionDep) -> None:
    await app.regenerate(ctx)
