"""Family, invite and profile API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from chorely.api.deps import get_current_user, require_family_member
from chorely.config import settings
from chorely.database import get_session
from chorely.models.user import Family, User
from chorely.schemas.family import (
    FamilyCreateRequest,
    FamilyJoinRequest,
    FamilyMemberResponse,
    FamilyResponse,
    GuestJoinRequest,
    GuestJoinResponse,
    InviteCodeResponse,
    ProfileRequest,
    SuccessResponse,
)
from chorely.services import membership_service

router = APIRouter(tags=["family"])


def _family_response(session: Session, family: Family) -> FamilyResponse:
    members = membership_service.list_members(session, family.id)
    return FamilyResponse(
        id=family.id,
        name=family.name,
        invite_code=family.invite_code,
        created_by=family.created_by,
        created_at=family.created_at,
        members=[FamilyMemberResponse(**m) for m in members],
    )


@router.get("/family", response_model=Optional[FamilyResponse])
def get_my_family(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Family info with all members, or null when not attached."""
    if not user.family_id:
        return None
    family = membership_service.get_family(session, user.family_id)
    if not family:
        return None
    return _family_response(session, family)


@router.post("/family", response_model=FamilyResponse)
def create_family(
    request: FamilyCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a family; the caller becomes its creator and first member."""
    family = membership_service.create_family(session, request.name, user.id)
    return _family_response(session, family)


@router.post("/family/join", response_model=FamilyResponse)
def join_family(
    request: FamilyJoinRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    family = membership_service.join_family_by_code(session, request.invite_code, user.id)
    return _family_response(session, family)


@router.put("/family/profile", response_model=SuccessResponse)
def set_profile(
    request: ProfileRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    membership_service.set_profile(
        session, user.id, request.family_role.value, request.display_name
    )
    return SuccessResponse()


@router.post("/family/invite-code", response_model=InviteCodeResponse)
def regenerate_invite_code(
    user: User = Depends(require_family_member),
    session: Session = Depends(get_session),
):
    """Rotate the invite code. Creator only; the old code stops working immediately."""
    code = membership_service.regenerate_invite_code(session, user.family_id, user.id)
    return InviteCodeResponse(invite_code=code)


@router.post("/family/guest-join", response_model=GuestJoinResponse)
def guest_join(
    request: GuestJoinRequest,
    response: Response,
    session: Session = Depends(get_session),
):
    """Join as a guest with only an invite code. No auth required."""
    guest, token = membership_service.guest_join(
        session, request.invite_code, request.display_name, request.family_role.value
    )
    family = membership_service.get_family(session, guest.family_id)

    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return GuestJoinResponse(family_name=family.name, display_name=guest.display_name)
