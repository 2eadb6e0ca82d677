"""
FILE: tests/conftest.py
Shared fixtures for project workflow tests.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_backend,
    get_clock,
    get_current_time,
    get_upload_poller,
    reset_project_dependencies_for_tests,
)
from src.api.main import app
from src.core.projects import UploadStatusPoller
from tests.factories import FIXED_NOW, FIXED_TODAY, FakeProjectBackend


def _has_marker(item: pytest.Item, name: str) -> bool:
    return item.get_closest_marker(name) is not None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if _has_marker(item, "unit") or _has_marker(item, "integration"):
            continue

        path = Path(str(item.fspath)).as_posix().lower()
        if "/tests/integration/" in path or "_integration.py" in path:
            item.add_marker(pytest.mark.integration)
            continue
        item.add_marker(pytest.mark.unit)


@pytest.fixture
def fake_backend():
    return FakeProjectBackend()


@pytest.fixture
def client(fake_backend):
    reset_project_dependencies_for_tests()
    app.dependency_overrides[get_backend] = lambda: fake_backend
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_TODAY)
    app.dependency_overrides[get_current_time] = lambda: FIXED_NOW
    app.dependency_overrides[get_upload_poller] = lambda: UploadStatusPoller(
        lambda upload_id: fake_backend.get_upload_status(upload_id=upload_id, access_token=None),
        max_attempts=3,
        interval_seconds=0,
        sleep=lambda _seconds: None,
    )
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_project_dependencies_for_tests()
