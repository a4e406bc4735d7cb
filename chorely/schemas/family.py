"""Family, profile and guest schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from chorely.models.user import FamilyRole


class FamilyMemberResponse(BaseModel):
    id: str
    display_name: Optional[str]
    family_role: Optional[str]
    name: Optional[str]
    account_kind: str


class FamilyResponse(BaseModel):
    id: str
    name: str
    invite_code: str
    created_by: str
    created_at: datetime
    members: list[FamilyMemberResponse] = []


class FamilyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)


class FamilyJoinRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=16)


class ProfileRequest(BaseModel):
    family_role: FamilyRole
    display_name: str = Field(min_length=1, max_length=64)


class InviteCodeResponse(BaseModel):
    invite_code: str


class GuestJoinRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=16)
    display_name: str = Field(min_length=1, max_length=64)
    family_role: FamilyRole


class GuestJoinResponse(BaseModel):
    success: bool = True
    family_name: str
    display_name: str


class SuccessResponse(BaseModel):
    success: bool = True
