"""Membership business logic: families, invite codes, profiles, guests.

A user belongs to at most one family. Every attach is a conditional
update on ``users.family_id IS NULL`` so two concurrent create/join calls
for the same user cannot both succeed.
"""

import logging
import random
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from chorely.config import settings
from chorely.errors import Conflict, Forbidden, NotFound, ValidationError
from chorely.models.user import AccountKind, Family, FamilyRole, User
from chorely.services.invite_codes import normalize_invite_code, with_unique_invite_code
from chorely.utils.security import create_session_token
from chorely.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 64


def _get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _validate_role(role: str) -> str:
    try:
        return FamilyRole(role).value
    except ValueError:
        raise ValidationError(f"Invalid family role: {role!r}")


def _validate_name(value: str, field: str) -> str:
    value = (value or "").strip()
    if not 1 <= len(value) <= MAX_NAME_LENGTH:
        raise ValidationError(f"{field} must be 1-{MAX_NAME_LENGTH} characters")
    return value


def _attach(session: Session, user_id: str, family_id: str) -> None:
    """Stage the user -> family assignment; Conflict if already attached."""
    result = session.execute(
        update(User)
        .where(User.id == user_id, User.family_id.is_(None))
        .values(family_id=family_id, updated_at=utcnow())
    )
    if result.rowcount != 1:
        raise Conflict("You already belong to a family")


def _find_by_code(session: Session, code: str) -> Optional[Family]:
    code = normalize_invite_code(code)
    if not code:
        return None
    return session.exec(select(Family).where(Family.invite_code == code)).first()


# --- Identity ---

def sign_in(session: Session, external_id: str, name: Optional[str] = None) -> User:
    """Create the authenticated user on first sight, otherwise refresh it."""
    user = session.exec(select(User).where(User.open_id == external_id)).first()
    now = utcnow()
    if user is None:
        user = User(
            open_id=external_id,
            name=name,
            account_kind=AccountKind.AUTHENTICATED.value,
            last_signed_in=now,
        )
        session.add(user)
        logger.info("New user signed in: %s", external_id)
    else:
        if name is not None:
            user.name = name
        user.last_signed_in = now
        user.updated_at = now
        session.add(user)
    session.commit()
    session.refresh(user)
    return user


# --- Families ---

def get_family(session: Session, family_id: str) -> Optional[Family]:
    return session.get(Family, family_id)


def create_family(
    session: Session,
    name: str,
    creator_id: str,
    rng: Optional[random.Random] = None,
) -> Family:
    """Create a family and attach its creator in the same transaction."""
    name = _validate_name(name, "Family name")
    creator = _get_user(session, creator_id)
    if creator.family_id:
        raise Conflict("You already belong to a family")

    staged: dict[str, Family] = {}

    def write(code: str) -> None:
        family = Family(name=name, invite_code=code, created_by=creator_id)
        session.add(family)
        session.flush()
        _attach(session, creator_id, family.id)
        staged["family"] = family

    with_unique_invite_code(
        session,
        write,
        rng=rng,
        length=settings.invite_code_length,
        max_attempts=settings.invite_code_max_attempts,
    )
    family = staged["family"]
    session.refresh(family)
    logger.info("Family %s (%s) created by %s", family.id, family.name, creator_id)
    return family


def join_family_by_code(session: Session, code: str, user_id: str) -> Family:
    user = _get_user(session, user_id)
    if user.family_id:
        raise Conflict("You already belong to a family")

    family = _find_by_code(session, code)
    if not family:
        raise NotFound("Invalid invite code")

    try:
        _attach(session, user_id, family.id)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("User %s joined family %s", user_id, family.id)
    return family


def regenerate_invite_code(
    session: Session,
    family_id: str,
    requester_id: str,
    rng: Optional[random.Random] = None,
) -> str:
    """Replace the family's invite code. The old code stops resolving at once."""
    family = session.get(Family, family_id)
    if not family:
        raise NotFound("Family not found")
    if family.created_by != requester_id:
        raise Forbidden("Only the family creator can regenerate the invite code")

    def write(code: str) -> None:
        session.execute(
            update(Family).where(Family.id == family_id).values(invite_code=code)
        )

    code = with_unique_invite_code(
        session,
        write,
        rng=rng,
        length=settings.invite_code_length,
        max_attempts=settings.invite_code_max_attempts,
    )
    logger.info("Invite code rotated for family %s", family_id)
    return code


def guest_join(
    session: Session,
    code: str,
    display_name: str,
    role: str,
) -> tuple[User, str]:
    """Create a guest user attached to the family behind ``code``.

    Returns the user and a session credential scoped to it. Guests have no
    external identity, so the sign-in path can never resolve to them.
    """
    role = _validate_role(role)
    display_name = _validate_name(display_name, "Display name")

    family = _find_by_code(session, code)
    if not family:
        raise NotFound("Invalid invite code")

    user = User(
        open_id=None,
        name=display_name,
        display_name=display_name,
        family_role=role,
        family_id=family.id,
        account_kind=AccountKind.GUEST.value,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    token = create_session_token(user.id, user.account_kind)
    logger.info("Guest %s joined family %s", user.id, family.id)
    return user, token


# --- Profiles & members ---

def set_profile(session: Session, user_id: str, role: str, display_name: str) -> User:
    role = _validate_role(role)
    display_name = _validate_name(display_name, "Display name")

    user = _get_user(session, user_id)
    user.family_role = role
    user.display_name = display_name
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def member_info(user: User) -> dict:
    return {
        "id": user.id,
        "display_name": user.display_name,
        "family_role": user.family_role,
        "name": user.name,
        "account_kind": user.account_kind,
    }


def list_members(session: Session, family_id: str) -> list[dict]:
    """Members of a family in store order. Empty if storage is unavailable."""
    try:
        users = session.exec(select(User).where(User.family_id == family_id)).all()
    except OperationalError:
        logger.exception("Storage unavailable while listing members of %s", family_id)
        return []
    return [member_info(u) for u in users]
