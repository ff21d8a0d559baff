from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI, cookie_key: str) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Persistent Session API",
            version="0.1.0",
            summary="Cookie-identified sessions persisted in MongoDB",
            routes=app.routes,
        )

        # The session cookie is optional: requests without it get a new session on first write
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": cookie_key,
                "description": "Session token, issued automatically when absent",
            },
        }
        openapi_schema["security"] = [{"SessionCookie": []}, {}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Session key 'theme' not found", "type": "not_found"},
                {"message": "Session key '$where' must not start with '$'", "type": "validation_error"},
            ]
        }
    }
