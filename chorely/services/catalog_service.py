"""Activity category catalog: seeded once, then read-only reference data."""

import logging

from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from chorely.models.activity import ActivityCategory

logger = logging.getLogger(__name__)

# (name, icon, default duration in minutes, color)
DEFAULT_CATEGORIES = [
    ("Cooking", "🍳", 45, "#F97316"),
    ("Cleaning", "🧹", 60, "#8B5CF6"),
    ("Laundry", "👕", 30, "#3B82F6"),
    ("Grocery Shopping", "🛒", 60, "#10B981"),
    ("Dishes", "🍽️", 20, "#F59E0B"),
    ("Vacuuming", "🌀", 30, "#EC4899"),
    ("Taking Out Trash", "🗑️", 10, "#6B7280"),
    ("Yard Work", "🌿", 60, "#22C55E"),
    ("Home Repairs", "🔧", 90, "#EF4444"),
    ("Childcare", "👶", 120, "#A855F7"),
    ("Pet Care", "🐾", 30, "#D97706"),
    ("Errands", "🚗", 45, "#0EA5E9"),
    ("Organizing", "📦", 45, "#84CC16"),
    ("Bathroom Cleaning", "🚿", 25, "#06B6D4"),
    ("Meal Prep", "🥗", 30, "#FB923C"),
]


def seed_default_categories(session: Session) -> int:
    """Insert the default catalog if the table is empty. Returns rows added."""
    existing = session.exec(select(ActivityCategory.id).limit(1)).first()
    if existing is not None:
        return 0

    for name, icon, duration, color in DEFAULT_CATEGORIES:
        session.add(
            ActivityCategory(name=name, icon=icon, default_duration=duration, color=color)
        )
    session.commit()
    logger.info("Seeded %d activity categories", len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)


def list_categories(session: Session) -> list[ActivityCategory]:
    try:
        return list(session.exec(select(ActivityCategory).order_by(ActivityCategory.name)).all())
    except OperationalError:
        logger.exception("Storage unavailable while listing categories")
        return []
