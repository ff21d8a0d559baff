from pydantic_settings import BaseSettings

from persistent_session.core.modules.identity.models import CookieParams


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # e.g. mongodb://localhost:27017/app, database name taken from the path
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = []
    collection: str = "persistent_session"  # Collection holding one document per session
    cookie_key: str = "session-id"  # Name of the cookie carrying the session token
    cookie_params: CookieParams = CookieParams()  # Overrides merged over CookieParams defaults
    id_prefix: str = ""  # Prepended to every generated session token
    atomic_upsert: bool = True  # False restores the check-then-insert write path for set()
    destroy_requires_active: bool = True  # False makes destroy() a no-op for clients without a session

    model_config = {
        "env_file": [".env"],
        "env_prefix": "PERSISTENT_SESSION_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }
