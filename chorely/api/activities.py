"""Activity catalog, ledger and dashboard API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from chorely.api.deps import require_family_member
from chorely.database import get_session
from chorely.models.user import User
from chorely.schemas.activity import (
    ActivityLogCreated,
    ActivityLogRequest,
    ActivityLogResponse,
    CategoryResponse,
    DashboardResponse,
    StatsResponse,
)
from chorely.services import aggregation_service, catalog_service, ledger_service
from chorely.services.aggregation_service import Period
from chorely.services.membership_service import list_members
from chorely.utils.timeutils import from_epoch_ms, to_epoch_ms

router = APIRouter(prefix="/activities", tags=["activities"])


def _summary(session: Session, family_id: str, aggregates: list[dict], totals: list[dict]) -> dict:
    return {
        "aggregates": aggregates,
        "totals": totals,
        "leaderboard": aggregation_service.rank_members(totals),
        "top_categories": aggregation_service.top_categories(aggregates),
        "members": list_members(session, family_id),
    }


@router.get("/categories", response_model=list[CategoryResponse])
def get_categories(session: Session = Depends(get_session)):
    return catalog_service.list_categories(session)


@router.post("", response_model=ActivityLogCreated)
def log_activity(
    request: ActivityLogRequest,
    user: User = Depends(require_family_member),
    session: Session = Depends(get_session),
):
    """Log a completed chore. ``logged_at`` may backdate it."""
    log_id = ledger_service.log_activity(
        session,
        family_id=user.family_id,
        user_id=user.id,
        category_id=request.category_id,
        category_name=request.category_name,
        category_icon=request.category_icon,
        category_color=request.category_color,
        duration_minutes=request.duration_minutes,
        note=request.custom_note,
        logged_at=from_epoch_ms(request.logged_at) if request.logged_at is not None else None,
    )
    return ActivityLogCreated(id=log_id)


@router.get("/history", response_model=list[ActivityLogResponse])
def get_history(
    user_id: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    from_: Optional[int] = Query(default=None, alias="from"),
    to: Optional[int] = Query(default=None),
    user: User = Depends(require_family_member),
    session: Session = Depends(get_session),
):
    """Family activity log, newest first."""
    return ledger_service.query_logs(
        session,
        family_id=user.family_id,
        user_id=user_id,
        from_=from_epoch_ms(from_) if from_ is not None else None,
        to=from_epoch_ms(to) if to is not None else None,
        limit=limit,
        offset=offset,
    )


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    period: Period = Query(...),
    reference_date: Optional[int] = Query(default=None),
    user: User = Depends(require_family_member),
    session: Session = Depends(get_session),
):
    """Rollups for the day, ISO week or month containing ``reference_date``."""
    reference = from_epoch_ms(reference_date) if reference_date is not None else None
    start, end = aggregation_service.resolve_window(period, reference)

    aggregates = aggregation_service.rollup_by_user_and_category(session, user.family_id, start, end)
    totals = aggregation_service.rollup_by_user(session, user.family_id, start, end)
    return DashboardResponse(
        period=period.value,
        from_=to_epoch_ms(start),
        to=to_epoch_ms(end),
        **_summary(session, user.family_id, aggregates, totals),
    )


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    days: int = Query(default=30, ge=1, le=365),
    user: User = Depends(require_family_member),
    session: Session = Depends(get_session),
):
    """Rollups over the trailing ``days`` days."""
    stats = aggregation_service.stats_over_days(session, user.family_id, days)
    return StatsResponse(
        **_summary(session, user.family_id, stats["aggregates"], stats["totals"])
    )
