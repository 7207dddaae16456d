"""Tests for the broadcast hub."""

import asyncio

import pytest

from app.models.chat import ChatEvent
from app.services.broadcast import BroadcastHub

pytestmark = pytest.mark.anyio


async def test_publish_reaches_every_subscriber():
    hub = BroadcastHub()
    first = hub.subscribe()
    second = hub.subscribe()

    delivered = hub.publish(ChatEvent.MESSAGE_DELETED, "abc")

    assert delivered == 2
    expected = {"event": "messageDeleted", "data": "abc"}
    assert await asyncio.wait_for(first.receive(), timeout=1.0) == expected
    assert await asyncio.wait_for(second.receive(), timeout=1.0) == expected


async def test_unsubscribed_handle_receives_nothing():
    hub = BroadcastHub()
    kept = hub.subscribe()
    gone = hub.subscribe()
    hub.unsubscribe(gone)

    assert hub.publish(ChatEvent.MESSAGE_DELETED, "abc") == 1
    assert kept.queue.qsize() == 1
    assert gone.queue.empty()


async def test_unsubscribe_is_idempotent():
    hub = BroadcastHub()
    subscription = hub.subscribe()

    hub.unsubscribe(subscription)
    hub.unsubscribe(subscription)

    assert hub.subscriber_count == 0


async def test_events_keep_publish_order():
    hub = BroadcastHub()
    subscription = hub.subscribe()

    hub.publish(ChatEvent.NEW_MESSAGE, {"id": "1"})
    hub.publish(ChatEvent.MESSAGE_UPDATED, ["1", "deleted"])
    hub.publish(ChatEvent.MESSAGE_DELETED, "1")

    events = [(await subscription.receive())["event"] for _ in range(3)]
    assert events == ["newMessage", "messageUpdated", "messageDeleted"]


async def test_full_subscriber_does_not_block_others():
    hub = BroadcastHub(queue_size=1)
    slow = hub.subscribe()
    fast = hub.subscribe()

    hub.publish(ChatEvent.MESSAGE_DELETED, "1")
    await fast.receive()
    delivered = hub.publish(ChatEvent.MESSAGE_DELETED, "2")

    assert delivered == 1
    assert slow.dropped == 1
    assert (await fast.receive())["data"] == "2"
    assert (await slow.receive())["data"] == "1"


async def test_room_scoped_subscription_filters_events():
    hub = BroadcastHub()
    scoped = hub.subscribe(rooms=["u1_u2"])
    everything = hub.subscribe()

    hub.publish(ChatEvent.USER_TYPING, {"room_key": "u1_u3"}, room_key="u1_u3")
    hub.publish(ChatEvent.USER_TYPING, {"room_key": "u1_u2"}, room_key="u1_u2")

    assert scoped.queue.qsize() == 1
    assert (await scoped.receive())["data"] == {"room_key": "u1_u2"}
    assert everything.queue.qsize() == 2


async def test_subscription_is_async_iterable():
    hub = BroadcastHub()
    subscription = hub.subscribe()
    hub.publish(ChatEvent.MESSAGE_DELETED, "1")

    async for envelope in subscription:
        assert envelope["data"] == "1"
        break
