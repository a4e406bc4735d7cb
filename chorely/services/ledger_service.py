"""Activity ledger: append-only chore logs scoped to one family.

Rows are only ever inserted.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlmodel import Session, col, select

from chorely.errors import Forbidden, ValidationError
from chorely.models.activity import ActivityLog
from chorely.models.user import User
from chorely.utils.timeutils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 1440
MAX_NOTE_LENGTH = 200
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def log_activity(
    session: Session,
    family_id: str,
    user_id: str,
    category_id: int,
    category_name: str,
    category_icon: str,
    category_color: str,
    duration_minutes: int,
    note: Optional[str] = None,
    logged_at: Optional[datetime] = None,
) -> int:
    """Append one activity log and return its id.

    The category name/icon/color are stored as given so later catalog
    edits never rewrite history.
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValidationError("durationMinutes must be an integer")
    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise ValidationError(
            f"durationMinutes must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES}"
        )
    if note is not None and len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"Note must be at most {MAX_NOTE_LENGTH} characters")

    user = session.get(User, user_id)
    if not user or user.family_id != family_id:
        raise Forbidden("You must join or create a family first.")

    entry = ActivityLog(
        user_id=user_id,
        family_id=family_id,
        category_id=category_id,
        category_name=category_name,
        category_icon=category_icon,
        category_color=category_color,
        duration_minutes=duration_minutes,
        custom_note=note,
        logged_at=to_naive_utc(logged_at) if logged_at else utcnow(),
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.debug("Logged %d min of %s for %s", duration_minutes, category_name, user_id)
    return entry.id


def query_logs(
    session: Session,
    family_id: str,
    user_id: Optional[str] = None,
    from_: Optional[datetime] = None,
    to: Optional[datetime] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[ActivityLog]:
    """Logs of one family, newest first. ``from_``/``to`` are inclusive."""
    if offset < 0:
        raise ValidationError("offset must be >= 0")
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    query = select(ActivityLog).where(ActivityLog.family_id == family_id)
    if user_id is not None:
        query = query.where(ActivityLog.user_id == user_id)
    if from_ is not None:
        query = query.where(ActivityLog.logged_at >= to_naive_utc(from_))
    if to is not None:
        query = query.where(ActivityLog.logged_at <= to_naive_utc(to))

    query = query.order_by(col(ActivityLog.logged_at).desc(), col(ActivityLog.id).desc())
    try:
        return list(session.exec(query.offset(offset).limit(limit)).all())
    except OperationalError:
        logger.exception("Storage unavailable while querying logs of %s", family_id)
        return []
