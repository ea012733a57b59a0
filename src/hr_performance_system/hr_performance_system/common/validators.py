from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def require_rating(value, field_name: str):
    """Ratings are optional but must sit on the 0-5 scale when present."""
    if value is None:
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if rating < 0 or rating > 5:
        raise ValidationError(f"{field_name} must be between 0 and 5")
    return rating
