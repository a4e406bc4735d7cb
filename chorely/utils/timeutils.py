"""UTC time helpers.

Timestamps are stored as naive UTC in plain ``DateTime`` columns, so every
instant entering the system is normalized here first.
"""

from datetime import datetime, timezone

from chorely.errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive input is assumed UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def from_epoch_ms(ms: int) -> datetime:
    """Epoch milliseconds to naive UTC. Out-of-range instants are a ValidationError."""
    try:
        return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError, OSError):
        raise ValidationError(f"Timestamp out of range: {ms}")


def to_epoch_ms(dt: datetime) -> int:
    return int(to_naive_utc(dt).replace(tzinfo=timezone.utc).timestamp() * 1000)
