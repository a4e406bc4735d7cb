"""Invite code generation and the bounded retry loop."""

import random

import pytest
from sqlmodel import select

from chorely.errors import Unavailable
from chorely.models.user import Family
from chorely.services import membership_service
from chorely.services.invite_codes import (
    INVITE_ALPHABET,
    generate_invite_code,
    normalize_invite_code,
    with_unique_invite_code,
)


class ConstantRandom:
    """Always draws the first symbol, so every code is identical."""

    def choice(self, seq):
        return seq[0]


def test_generated_code_shape():
    code = generate_invite_code(random.Random(7), length=8)
    assert len(code) == 8
    assert all(c in INVITE_ALPHABET for c in code)


def test_seeded_generator_is_deterministic():
    assert generate_invite_code(random.Random(42)) == generate_invite_code(random.Random(42))


def test_normalize():
    assert normalize_invite_code("  ab12cd34 ") == "AB12CD34"


def test_collision_is_retried_with_a_new_code(session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    first = membership_service.create_family(session, "Smiths", alice.id, rng=random.Random(1))
    # Same seed: the first draw collides, the second one does not
    second = membership_service.create_family(session, "Joneses", bob.id, rng=random.Random(1))

    assert first.invite_code != second.invite_code
    assert len(session.exec(select(Family)).all()) == 2


def test_retry_ceiling_raises_unavailable(session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    membership_service.create_family(session, "Smiths", alice.id, rng=ConstantRandom())

    with pytest.raises(Unavailable):
        membership_service.create_family(session, "Joneses", bob.id, rng=ConstantRandom())

    # Nothing from the failed attempts was persisted
    assert len(session.exec(select(Family)).all()) == 1
    session.refresh(bob)
    assert bob.family_id is None


def test_write_called_once_per_attempt(session, make_user):
    alice = make_user("alice")
    taken = membership_service.create_family(session, "Smiths", alice.id, rng=ConstantRandom())
    calls = []

    def write(code):
        calls.append(code)
        session.add(Family(name="Clash", invite_code=code, created_by="usr_x"))
        session.flush()

    with pytest.raises(Unavailable):
        with_unique_invite_code(session, write, rng=ConstantRandom(), max_attempts=3)

    assert calls == [taken.invite_code] * 3
