"""Aggregation engine: time windows and per-user/per-category rollups.

All windows are computed in UTC. Rollups group on the category snapshot
stored on each log, never on the live catalog.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlmodel import Session, func, select

from chorely.errors import ValidationError
from chorely.models.activity import ActivityLog
from chorely.utils.timeutils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

MAX_STATS_DAYS = 365

_EPSILON = timedelta(microseconds=1)


class Period(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(dt: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing ``dt``."""
    return start_of_day(dt) - timedelta(days=dt.weekday())


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt).replace(day=1)


def _next_month(dt: datetime) -> datetime:
    if dt.month == 12:
        return dt.replace(year=dt.year + 1, month=1)
    return dt.replace(month=dt.month + 1)


def resolve_window(period, reference: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Return the inclusive ``(from, to)`` bounds of the period containing ``reference``.

    ``to`` is the last microsecond of the window.
    """
    try:
        period = Period(period)
    except ValueError:
        raise ValidationError(f"Unknown period: {period!r}")

    ref = to_naive_utc(reference) if reference else utcnow()

    try:
        if period is Period.DAILY:
            start = start_of_day(ref)
            end = start + timedelta(days=1)
        elif period is Period.WEEKLY:
            start = start_of_week(ref)
            end = start + timedelta(days=7)
        else:
            start = start_of_month(ref)
            end = _next_month(start)
    except (ValueError, OverflowError):
        raise ValidationError(f"No {period.value} window around {ref.isoformat()}")

    return start, end - _EPSILON


def _in_window(query, family_id: str, from_: datetime, to: datetime):
    return query.where(
        ActivityLog.family_id == family_id,
        ActivityLog.logged_at >= to_naive_utc(from_),
        ActivityLog.logged_at <= to_naive_utc(to),
    )


def rollup_by_user_and_category(
    session: Session, family_id: str, from_: datetime, to: datetime
) -> list[dict]:
    query = _in_window(
        select(
            ActivityLog.user_id,
            ActivityLog.category_name,
            ActivityLog.category_icon,
            ActivityLog.category_color,
            func.sum(ActivityLog.duration_minutes),
            func.count(ActivityLog.id),
        ),
        family_id,
        from_,
        to,
    ).group_by(
        ActivityLog.user_id,
        ActivityLog.category_name,
        ActivityLog.category_icon,
        ActivityLog.category_color,
    )

    try:
        rows = session.exec(query).all()
    except OperationalError:
        logger.exception("Storage unavailable while aggregating family %s", family_id)
        return []

    return [
        {
            "user_id": user_id,
            "category_name": name,
            "category_icon": icon,
            "category_color": color,
            "total_minutes": int(total or 0),
            "count": count,
        }
        for user_id, name, icon, color, total, count in rows
    ]


def rollup_by_user(
    session: Session, family_id: str, from_: datetime, to: datetime
) -> list[dict]:
    query = _in_window(
        select(
            ActivityLog.user_id,
            func.sum(ActivityLog.duration_minutes),
            func.count(ActivityLog.id),
        ),
        family_id,
        from_,
        to,
    ).group_by(ActivityLog.user_id)

    try:
        rows = session.exec(query).all()
    except OperationalError:
        logger.exception("Storage unavailable while totalling family %s", family_id)
        return []

    return [
        {"user_id": user_id, "total_minutes": int(total or 0), "count": count}
        for user_id, total, count in rows
    ]


def stats_over_days(
    session: Session, family_id: str, days: int, now: Optional[datetime] = None
) -> dict:
    """Both rollups over the trailing ``days`` ending at ``now``."""
    if not 1 <= days <= MAX_STATS_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_STATS_DAYS}")

    to = to_naive_utc(now) if now else utcnow()
    from_ = to - timedelta(days=days)
    return {
        "aggregates": rollup_by_user_and_category(session, family_id, from_, to),
        "totals": rollup_by_user(session, family_id, from_, to),
        "from": from_,
        "to": to,
    }


# --- Ranking ---
# Ties on total_minutes are broken by user id (or category name) ascending.

def rank_members(totals: list[dict]) -> list[dict]:
    ranked = sorted(totals, key=lambda t: (-t["total_minutes"], t["user_id"]))
    return [dict(t, rank=i) for i, t in enumerate(ranked, start=1)]


def top_categories(aggregates: list[dict], limit: Optional[int] = None) -> list[dict]:
    """Collapse per-user rollups to per-category totals, largest first."""
    merged: dict[tuple, dict] = {}
    for row in aggregates:
        key = (row["category_name"], row["category_icon"], row["category_color"])
        entry = merged.setdefault(
            key,
            {
                "category_name": key[0],
                "category_icon": key[1],
                "category_color": key[2],
                "total_minutes": 0,
                "count": 0,
            },
        )
        entry["total_minutes"] += row["total_minutes"]
        entry["count"] += row["count"]

    ranked = sorted(merged.values(), key=lambda c: (-c["total_minutes"], c["category_name"]))
    return ranked[:limit] if limit else ranked
