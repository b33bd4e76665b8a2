import pytest
import structlog

from src.portal.session import SessionContext
from src.portal.storage import FileDocumentStore


@pytest.fixture(autouse=True)
def _clear_log_context():
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def store(tmp_path):
    return FileDocumentStore(tmp_path / "db.json")


@pytest.fixture
def session(tmp_path):
    return SessionContext(state_dir=str(tmp_path / "state"))


@pytest.fixture
def admin_session(session):
    session.start({"username": "admin", "name": "Admin", "role": "admin"})
    return session
