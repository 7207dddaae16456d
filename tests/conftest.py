"""Test configuration helpers."""

import os

import pytest

# Settings are read at import time, give them a database URL before ``app`` is imported.
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "chat_test")

from app.services.broadcast import BroadcastHub  # noqa: E402
from app.services.chat import ChatService  # noqa: E402
from app.services.typing_registry import TypingRegistry  # noqa: E402
from tests.helpers.stores import (  # noqa: E402
    InMemoryBlobStore,
    InMemoryMessageStore,
    InMemoryUserDirectory,
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def users() -> InMemoryUserDirectory:
    return InMemoryUserDirectory({"u1", "u2", "u3"})


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub(queue_size=10)


@pytest.fixture
def typing_registry() -> TypingRegistry:
    return TypingRegistry()


@pytest.fixture
def chat_service(store, users, hub, typing_registry, blobs) -> ChatService:
    return ChatService(store, users, hub, typing_registry, blobs=blobs)
