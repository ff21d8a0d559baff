from persistent_session.web.routers.session import router as session_router

__all__ = [
    "session_router",
]
