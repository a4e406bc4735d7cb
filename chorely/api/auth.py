"""Identity API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Response

from chorely.api.deps import get_optional_user
from chorely.config import settings
from chorely.models.user import User
from chorely.schemas.auth import UserResponse
from chorely.schemas.family import SuccessResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=Optional[UserResponse])
def me(user: Optional[User] = Depends(get_optional_user)):
    """Current identity, or null when nobody is signed in."""
    if user is None:
        return None
    return UserResponse(
        id=user.id,
        name=user.name,
        display_name=user.display_name,
        family_role=user.family_role,
        family_id=user.family_id,
        account_kind=user.account_kind,
    )


@router.post("/logout", response_model=SuccessResponse)
def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    return SuccessResponse()
