from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def mask_token(token: str, visible: int = 6) -> str:
    """Shorten a session token for log output."""
    if len(token) <= visible:
        return "***"
    return f"{token[:visible]}..."
