import pytest
from starlette.testclient import TestClient

from app.api.deps import get_broadcast_hub, get_chat_service
from app.main import app


@pytest.fixture
def client(chat_service, hub):
    """TestClient wired to the in-memory chat service."""
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    app.dependency_overrides[get_broadcast_hub] = lambda: hub
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
