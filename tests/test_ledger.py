"""Activity ledger: bounds, ordering, pagination, tenant isolation, snapshots."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import DateTime

from chorely.errors import Forbidden, ValidationError
from chorely.models.activity import ActivityCategory, ActivityLog
from chorely.models.user import Family, User
from chorely.services import ledger_service, membership_service
from chorely.utils.timeutils import utcnow
from tests.conftest import UnavailableSession

COOKING = dict(category_id=1, category_name="Cooking", category_icon="🍳", category_color="#F97316")
BASE = datetime(2026, 3, 11, 10, 0, 0)


@pytest.fixture
def family(session, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    fam = membership_service.create_family(session, "Smiths", alice.id)
    membership_service.join_family_by_code(session, fam.invite_code, bob.id)
    return fam, alice, bob


def _log(session, family_id, user_id, minutes=30, at=None, **snapshot):
    fields = dict(COOKING, **snapshot)
    return ledger_service.log_activity(
        session, family_id, user_id, duration_minutes=minutes, logged_at=at, **fields
    )


@pytest.mark.parametrize("minutes", [0, 1441, -5])
def test_out_of_range_duration_rejected(session, family, minutes):
    fam, alice, _ = family
    with pytest.raises(ValidationError):
        _log(session, fam.id, alice.id, minutes=minutes)


@pytest.mark.parametrize("minutes", [1, 1440])
def test_boundary_durations_accepted(session, family, minutes):
    fam, alice, _ = family
    log_id = _log(session, fam.id, alice.id, minutes=minutes)
    assert isinstance(log_id, int)


def test_long_note_rejected(session, family):
    fam, alice, _ = family
    with pytest.raises(ValidationError):
        ledger_service.log_activity(
            session, fam.id, alice.id, duration_minutes=10, note="x" * 201, **COOKING
        )


def test_log_requires_membership_of_that_family(session, family, make_user):
    fam, _, _ = family
    outsider = make_user("mallory")
    with pytest.raises(Forbidden):
        _log(session, fam.id, outsider.id)


def test_logged_at_defaults_to_now(session, family):
    fam, alice, _ = family
    _log(session, fam.id, alice.id)
    [entry] = ledger_service.query_logs(session, fam.id)
    assert abs(utcnow() - entry.logged_at) < timedelta(minutes=1)


def test_query_newest_first_and_backdating(session, family):
    fam, alice, bob = family
    _log(session, fam.id, alice.id, at=BASE)
    _log(session, fam.id, bob.id, at=BASE - timedelta(days=2))
    _log(session, fam.id, alice.id, at=BASE + timedelta(hours=1))

    logs = ledger_service.query_logs(session, fam.id)
    assert [log.logged_at for log in logs] == [
        BASE + timedelta(hours=1),
        BASE,
        BASE - timedelta(days=2),
    ]


def test_query_filters(session, family):
    fam, alice, bob = family
    _log(session, fam.id, alice.id, at=BASE)
    _log(session, fam.id, bob.id, at=BASE + timedelta(hours=1))
    _log(session, fam.id, alice.id, at=BASE + timedelta(hours=2))

    only_alice = ledger_service.query_logs(session, fam.id, user_id=alice.id)
    assert {log.user_id for log in only_alice} == {alice.id}
    assert len(only_alice) == 2

    # Bounds are inclusive
    window = ledger_service.query_logs(
        session, fam.id, from_=BASE, to=BASE + timedelta(hours=1)
    )
    assert len(window) == 2


def test_query_is_scoped_to_family(session, family, make_user):
    fam, alice, _ = family
    carol = make_user("carol")
    other = membership_service.create_family(session, "Joneses", carol.id)
    _log(session, fam.id, alice.id)
    _log(session, other.id, carol.id)

    assert {log.family_id for log in ledger_service.query_logs(session, fam.id)} == {fam.id}
    assert {log.user_id for log in ledger_service.query_logs(session, other.id)} == {carol.id}


def test_query_no_results_is_empty(session, family):
    fam, _, _ = family
    assert ledger_service.query_logs(session, fam.id) == []


def test_pagination_and_limit_cap(session, family):
    fam, alice, _ = family
    for i in range(105):
        _log(session, fam.id, alice.id, minutes=1 + i, at=BASE + timedelta(minutes=i))

    assert len(ledger_service.query_logs(session, fam.id, limit=500)) == 100

    page1 = ledger_service.query_logs(session, fam.id, limit=10)
    page2 = ledger_service.query_logs(session, fam.id, limit=10, offset=10)
    assert page1[-1].logged_at > page2[0].logged_at
    assert not {log.id for log in page1} & {log.id for log in page2}

    with pytest.raises(ValidationError):
        ledger_service.query_logs(session, fam.id, offset=-1)


def test_snapshot_survives_catalog_edits(session, family):
    fam, alice, _ = family
    category = ActivityCategory(name="Cooking", icon="🍳", default_duration=45, color="#F97316")
    session.add(category)
    session.commit()
    session.refresh(category)

    _log(session, fam.id, alice.id, category_id=category.id)

    category.name = "Kitchen Duty"
    category.icon = "🔥"
    category.color = "#000000"
    session.add(category)
    session.commit()

    [entry] = ledger_service.query_logs(session, fam.id)
    assert entry.category_id == category.id
    assert (entry.category_name, entry.category_icon, entry.category_color) == (
        "Cooking",
        "🍳",
        "#F97316",
    )


def test_query_degrades_to_empty_when_storage_fails():
    assert ledger_service.query_logs(UnavailableSession(), "fam_x") == []


def test_timestamp_columns_are_plain_datetime(session, family):
    columns = [
        ActivityLog.__table__.c.logged_at,
        ActivityLog.__table__.c.created_at,
        ActivityCategory.__table__.c.created_at,
        User.__table__.c.created_at,
        User.__table__.c.updated_at,
        User.__table__.c.last_signed_in,
        Family.__table__.c.created_at,
    ]
    for column in columns:
        assert type(column.type) is DateTime, column

    # Naive UTC values are written and filtered on without complaint
    fam, alice, _ = family
    _log(session, fam.id, alice.id, at=BASE)
    assert len(ledger_service.query_logs(session, fam.id, from_=BASE, to=BASE)) == 1
