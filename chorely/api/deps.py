"""Common API dependencies: identity resolution and family membership checks."""

import logging
from typing import Optional

import jwt
from fastapi import Depends, Request
from sqlmodel import Session, select

from chorely.config import settings
from chorely.database import get_session
from chorely.errors import Forbidden, Unauthenticated
from chorely.models.user import User
from chorely.services.membership_service import sign_in
from chorely.utils.security import decode_token

logger = logging.getLogger(__name__)


def _user_from_session_cookie(request: Request, session: Session) -> Optional[User]:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        logger.debug("Ignoring invalid session cookie")
        return None
    if payload.get("type") != "session":
        return None
    return session.get(User, payload.get("sub"))


def _user_from_identity_header(request: Request, session: Session) -> Optional[User]:
    external_id = (request.headers.get(settings.identity_header) or "").strip()
    if not external_id:
        return None
    name = request.headers.get(settings.identity_name_header)

    user = session.exec(select(User).where(User.open_id == external_id)).first()
    if user is None or (name is not None and user.name != name):
        user = sign_in(session, external_id, name)
    return user


def get_optional_user(
    request: Request,
    session: Session = Depends(get_session),
) -> Optional[User]:
    """Session cookie first (guests and authenticated users), then proxy header.

    The identity header is not verified here; it must only ever be set by the
    trusted authentication proxy in front of the server.
    """
    return _user_from_session_cookie(request, session) or _user_from_identity_header(
        request, session
    )


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise Unauthenticated("Please sign in")
    return user


def require_family_member(user: User = Depends(get_current_user)) -> User:
    """Require the current user to be attached to a family."""
    if not user.family_id:
        raise Forbidden("You must join or create a family first.")
    return user
