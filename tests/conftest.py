"""
Test configuration and fixtures.
"""
import os
import tempfile
from datetime import timedelta

import pytest

# Point the storage singleton at a throwaway SQLite file before importing the app
_DB_DIR = tempfile.mkdtemp(prefix="session-auth-tests-")
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

from api import create_app  # noqa: E402
from models import storage  # noqa: E402
from models.account import Account  # noqa: E402
from models.base_model import utcnow  # noqa: E402
from services import build_services  # noqa: E402
from services.settings import AuthSettings  # noqa: E402
from tests.helpers import FrozenClock, make_account  # noqa: E402


@pytest.fixture(autouse=True)
def db():
    """Fresh schema for every test."""
    storage.drop_all()
    storage.reload()
    yield storage
    storage.close()


@pytest.fixture
def app():
    app = create_app("test")
    yield app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def clock():
    # Start slightly in the past so tokens signed "now" are never issued in the future
    return FrozenClock(utcnow() - timedelta(seconds=5))


@pytest.fixture
def settings(app):
    return AuthSettings.from_config(app.config)


@pytest.fixture
def services(settings, clock):
    return build_services(storage, settings, clock)


@pytest.fixture
def account(app) -> Account:
    return make_account("alice@example.com")


@pytest.fixture
def admin_account(app) -> Account:
    return make_account("root@example.com", is_admin=True)
