"""Invite code generation with bounded retry on uniqueness conflicts.

Codes are never pre-checked for uniqueness: the write is attempted and a
violation of the ``invite_code`` unique constraint triggers a fresh draw.
This closes the race between check and insert when two families are
created (or rotated) at the same time.
"""

import logging
import random
import secrets
import string
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from chorely.errors import Unavailable

logger = logging.getLogger(__name__)

INVITE_ALPHABET = string.ascii_uppercase + string.digits

_system_rng = secrets.SystemRandom()


def generate_invite_code(rng: Optional[random.Random] = None, length: int = 8) -> str:
    rng = rng or _system_rng
    return "".join(rng.choice(INVITE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: str) -> str:
    return code.strip().upper()


def _is_invite_code_conflict(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: families.invite_code"
    # PostgreSQL/MySQL carry the index or column name in the message
    return "invite_code" in str(exc.orig).lower()


def with_unique_invite_code(
    session: Session,
    write: Callable[[str], None],
    rng: Optional[random.Random] = None,
    length: int = 8,
    max_attempts: int = 5,
) -> str:
    """Run ``write(code)`` and commit, redrawing the code on a collision.

    ``write`` stages the insert or update on ``session``; it is called once
    per attempt. Returns the code that was committed. Raises ``Unavailable``
    once ``max_attempts`` draws have all collided.
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_invite_code(rng, length)
        try:
            write(code)
            session.commit()
            return code
        except IntegrityError as e:
            session.rollback()
            if not _is_invite_code_conflict(e):
                raise
            logger.warning("Invite code collision (attempt %d/%d)", attempt, max_attempts)
        except Exception:
            session.rollback()
            raise

    logger.error("Could not allocate a unique invite code after %d attempts", max_attempts)
    raise Unavailable("Could not allocate a unique invite code, try again later")
