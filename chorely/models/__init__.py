"""Chorely Database Models."""

from chorely.models.user import AccountKind, Authenticated, Family, FamilyRole, Guest, User
from chorely.models.activity import ActivityCategory, ActivityLog

__all__ = [
    "AccountKind",
    "Authenticated",
    "Family",
    "FamilyRole",
    "Guest",
    "User",
    "ActivityCategory",
    "ActivityLog",
]
