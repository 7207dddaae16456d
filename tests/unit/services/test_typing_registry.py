"""Tests for the typing registry."""

import asyncio

import pytest

from app.services.typing_registry import TypingRegistry

pytestmark = pytest.mark.anyio


async def test_set_typing_is_idempotent():
    registry = TypingRegistry()

    await registry.set_typing("u1_u2", "u1")
    typing_users = await registry.set_typing("u1_u2", "u1")

    assert typing_users == ["u1"]


async def test_set_typing_returns_full_set():
    registry = TypingRegistry()

    await registry.set_typing("u1_u2", "u2")
    typing_users = await registry.set_typing("u1_u2", "u1")

    assert typing_users == ["u1", "u2"]


async def test_clearing_last_typist_drops_room():
    registry = TypingRegistry()
    await registry.set_typing("u1_u2", "u1")

    typing_users = await registry.clear_typing("u1_u2", "u1")

    assert typing_users == []
    assert "u1_u2" not in registry
    assert len(registry) == 0
    assert await registry.get_typing("u1_u2") == []


async def test_clear_keeps_other_typists():
    registry = TypingRegistry()
    await registry.set_typing("u1_u2", "u1")
    await registry.set_typing("u1_u2", "u2")

    assert await registry.clear_typing("u1_u2", "u1") == ["u2"]
    assert "u1_u2" in registry


async def test_clear_on_unknown_room_is_empty():
    registry = TypingRegistry()

    assert await registry.clear_typing("nobody_here", "u1") == []
    assert len(registry) == 0


async def test_rooms_are_independent():
    registry = TypingRegistry()
    await registry.set_typing("u1_u2", "u1")
    await registry.set_typing("u1_u3", "u3")

    assert await registry.get_typing("u1_u2") == ["u1"]
    assert await registry.get_typing("u1_u3") == ["u3"]


async def test_concurrent_updates_converge():
    registry = TypingRegistry()
    users = [f"user{i}" for i in range(20)]

    await asyncio.gather(*(registry.set_typing("room", user) for user in users))
    assert len(await registry.get_typing("room")) == 20

    await asyncio.gather(*(registry.clear_typing("room", user) for user in users))
    assert "room" not in registry
