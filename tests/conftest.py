import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite database and upload directory"""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'submissions.db'}",
        storage_backend="sql",
        upload_dir=str(tmp_path / "uploads"),
        strict_startup=False,
        debug=False,
    )


@pytest.fixture
def client(settings):
    """TestClient with the lifespan running, so storage is initialized"""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
