# tests/conftest.py
import os
import tempfile
from datetime import date
from types import SimpleNamespace

# Point the app at throwaway storage before any app module reads settings.
_TMP_DIR = tempfile.mkdtemp(prefix="sitelog-tests-")
os.environ["DB_URL"] = os.environ.get(
    "TEST_DB_URL", f"sqlite+aiosqlite:///{_TMP_DIR}/sitelog_test.db"
)
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ.pop("NOTIFICATION_WEBHOOK_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.api.dependencies.services import get_notifier  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.db.session import _build_sync_db_url, reset_schema_sync  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.employee import Employee  # noqa: E402
from app.models.project import Project  # noqa: E402
from app.models.user import User  # noqa: E402


class RecordingNotifier:
    """
    Stand-in notifier that records calls instead of scheduling deliveries.
    """

    def __init__(self) -> None:
        self.duplicate_attempts: list[tuple[int, date, int]] = []
        self.approved: list[int] = []

    def notify_duplicate_attempt(self, user_id: int, log_date: date, project_id: int) -> None:
        self.duplicate_attempts.append((user_id, log_date, project_id))

    def notify_log_approved(self, log_id: int) -> None:
        self.approved.append(log_id)


@pytest.fixture(autouse=True)
def _reset_db():
    """
    Every test starts from an empty schema.
    """
    reset_schema_sync()
    yield


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def seeded() -> SimpleNamespace:
    """
    Two team leaders, one manager, two projects and three employees.
    """
    engine = create_engine(_build_sync_db_url(get_settings().DB_URL), future=True)
    with Session(engine) as session:
        leader = User(full_name="Jane Murphy", email="jane@example.com", role="team_leader")
        other_leader = User(full_name="Liam Walsh", email="liam@example.com", role="team_leader")
        manager = User(full_name="Aoife Kelly", email="aoife@example.com", role="manager")
        project = Project(name="Riverside Apartments", address="12 Quay Street, Dublin")
        other_project = Project(name="Harbour Offices")
        employees = [
            Employee(full_name="Tom Byrne"),
            Employee(full_name="Sean Ryan"),
            Employee(full_name="Mary Doyle"),
        ]
        session.add_all([leader, other_leader, manager, project, other_project, *employees])
        session.commit()

        ids = SimpleNamespace(
            leader=leader.id,
            other_leader=other_leader.id,
            manager=manager.id,
            project=project.id,
            other_project=other_project.id,
            employees=[e.id for e in employees],
        )
    engine.dispose()
    return ids


@pytest.fixture
def client(notifier):
    """
    TestClient over a fresh app whose notifier records instead of delivering.
    """
    app = create_app()
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def as_user():
    """
    Build identity headers: `client.get(url, headers=as_user(7, "manager"))`.
    """

    def _headers(user_id: int, role: str = "team_leader") -> dict[str, str]:
        return {"X-User-Id": str(user_id), "X-User-Role": role}

    return _headers
