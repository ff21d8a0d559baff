from persistent_session.core.db import PRIMARY_KEY
from persistent_session.errors import ValidationError


def validate_field_name(key: str) -> None:
    """Reject names MongoDB would read as the primary key, an operator or a dotted path, or cannot encode."""
    if not key:
        raise ValidationError("Session key must not be empty")
    if key == PRIMARY_KEY:
        raise ValidationError(f"Session key '{PRIMARY_KEY}' is reserved")
    if key.startswith("$"):
        raise ValidationError(f"Session key '{key}' must not start with '$'")
    if "." in key:
        raise ValidationError(f"Session key '{key}' must not contain '.'")
    if "\x00" in key:
        raise ValidationError("Session key must not contain a NUL byte")
