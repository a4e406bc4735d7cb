"""Shared fixtures. The environment must be prepared before chorely is imported."""

import os
import tempfile

os.environ["CHORELY_DATA_DIR"] = tempfile.mkdtemp()
os.environ.setdefault("CHORELY_JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def db(tmp_path):
    from chorely.database import Database

    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    database.init()
    yield database
    database.close()


@pytest.fixture
def session(db):
    with db.session() as s:
        yield s


@pytest.fixture
def make_user(session):
    from chorely.services.membership_service import sign_in

    def _make(external_id: str, name: str | None = None):
        return sign_in(session, external_id, name or external_id.title())

    return _make


@pytest.fixture
def app(tmp_path):
    from chorely.main import create_app

    return create_app(f"sqlite:///{tmp_path / 'app.db'}")


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def identity(external_id: str, name: str | None = None) -> dict:
    headers = {"X-Authenticated-User": external_id}
    if name:
        headers["X-Authenticated-Name"] = name
    return headers


class UnavailableSession:
    """Session stand-in whose every query fails as if the database were locked."""

    def exec(self, *args, **kwargs):
        from sqlalchemy.exc import OperationalError

        raise OperationalError("SELECT", {}, Exception("database is locked"))

    def rollback(self):
        pass
