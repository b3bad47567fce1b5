from tripjournal.errors import ValidationError


def require_text(value: str | None, message: str) -> str:
    """Return `value` stripped, or raise ValidationError(message) when it is missing or blank."""
    if value is None or not value.strip():
        raise ValidationError(message)
    return value.strip()
