"""User and Family models."""

import secrets
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from chorely.utils.timeutils import utcnow


class FamilyRole(str, Enum):
    FATHER = "father"
    MOTHER = "mother"
    KID = "kid"


class AccountKind(str, Enum):
    AUTHENTICATED = "authenticated"
    GUEST = "guest"


@dataclass(frozen=True)
class Authenticated:
    external_id: str


@dataclass(frozen=True)
class Guest:
    pass


class Family(SQLModel, table=True):
    __tablename__ = "families"

    id: str = Field(default_factory=lambda: f"fam_{secrets.token_hex(4)}", primary_key=True)
    name: str
    invite_code: str = Field(unique=True, index=True)
    created_by: str = Field(index=True)  # users.id, not a FK: users.family_id already points here
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: f"usr_{secrets.token_hex(4)}", primary_key=True)
    open_id: Optional[str] = Field(default=None, unique=True, index=True)  # null for guests
    name: Optional[str] = None
    display_name: Optional[str] = None
    family_role: Optional[str] = None  # 'father' | 'mother' | 'kid'
    family_id: Optional[str] = Field(default=None, foreign_key="families.id", index=True)
    account_kind: str = Field(default=AccountKind.AUTHENTICATED.value)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    last_signed_in: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    @property
    def account(self) -> Union[Authenticated, Guest]:
        if self.account_kind == AccountKind.GUEST.value:
            return Guest()
        return Authenticated(external_id=self.open_id or "")
