"""Activity catalog, ledger and dashboard schemas.

Instants sent by clients (``logged_at``, ``from``, ``to``, ``reference_date``)
are epoch milliseconds.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from chorely.schemas.family import FamilyMemberResponse


class CategoryResponse(BaseModel):
    id: int
    name: str
    icon: str
    default_duration: int
    color: str


class ActivityLogRequest(BaseModel):
    category_id: int = Field(gt=0)
    category_name: str = Field(min_length=1, max_length=100)
    category_icon: str = Field(max_length=16)
    category_color: str = Field(max_length=16)
    duration_minutes: int = Field(ge=1, le=1440)
    custom_note: Optional[str] = Field(default=None, max_length=200)
    logged_at: Optional[int] = None


class ActivityLogCreated(BaseModel):
    id: int
    success: bool = True


class ActivityLogResponse(BaseModel):
    id: int
    user_id: str
    family_id: str
    category_id: int
    category_name: str
    category_icon: str
    category_color: str
    duration_minutes: int
    custom_note: Optional[str]
    logged_at: datetime
    created_at: datetime


class AggregateRow(BaseModel):
    user_id: str
    category_name: str
    category_icon: str
    category_color: str
    total_minutes: int
    count: int


class TotalRow(BaseModel):
    user_id: str
    total_minutes: int
    count: int


class LeaderboardRow(TotalRow):
    rank: int


class CategoryTotal(BaseModel):
    category_name: str
    category_icon: str
    category_color: str
    total_minutes: int
    count: int


class StatsResponse(BaseModel):
    aggregates: list[AggregateRow]
    totals: list[TotalRow]
    leaderboard: list[LeaderboardRow]
    top_categories: list[CategoryTotal]
    members: list[FamilyMemberResponse]


class DashboardResponse(StatsResponse):
    model_config = ConfigDict(populate_by_name=True)

    period: str
    from_: int = Field(alias="from")
    to: int
