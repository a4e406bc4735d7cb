"""Activity category and activity log models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from chorely.utils.timeutils import utcnow


class ActivityCategory(SQLModel, table=True):
    __tablename__ = "activity_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    icon: str
    default_duration: int  # minutes
    color: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class ActivityLog(SQLModel, table=True):
    """One logged chore. Rows are never updated or deleted."""

    __tablename__ = "activity_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    category_id: int
    # Snapshot of the category at logging time
    category_name: str
    category_icon: str
    category_color: str
    custom_note: Optional[str] = None
    duration_minutes: int
    logged_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
