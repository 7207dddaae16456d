"""
WebSocket event stream.

Clients connect to ``/ws`` (optionally ``/ws?rooms=a_b,c_d`` to receive only
those rooms' events) and receive ``{"event": ..., "data": ...}`` frames.
They may send ``{"event": "typing" | "stopTyping", "room_key": ..., "user_id": ...}``
frames to update typing state.
"""

import asyncio
import json
from typing import Optional
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from app.api.deps import get_broadcast_hub, get_chat_service
from app.services.broadcast import BroadcastHub, Subscription
from app.services.chat import ChatService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])


async def _send(websocket: WebSocket, send_lock: asyncio.Lock, payload) -> None:
    # The forwarder task and the receive loop share one socket
    async with send_lock:
        await websocket.send_json(payload)


async def _forward_events(websocket: WebSocket, subscription: Subscription, send_lock: asyncio.Lock):
    async for envelope in subscription:
        try:
            await _send(websocket, send_lock, envelope)
        except Exception as e:
            # Disconnects are handled by the receive loop
            logger.warning(f"Failed to deliver event to subscriber {subscription.id}: {e}")
            return


async def _handle_client_event(frame, chat_service: ChatService, websocket: WebSocket, send_lock: asyncio.Lock):
    if not isinstance(frame, dict):
        await _send(websocket, send_lock, {"event": "error", "data": "Expected a JSON object"})
        return

    event = frame.get("event")
    room_key = frame.get("room_key")
    user_id = frame.get("user_id")
    if event not in ("typing", "stopTyping"):
        await _send(websocket, send_lock, {"event": "error", "data": f"Unknown event: {event}"})
        return
    if not isinstance(room_key, str) or not isinstance(user_id, str) or not room_key or not user_id:
        await _send(websocket, send_lock, {"event": "error", "data": "room_key and user_id must be non-empty strings"})
        return

    if event == "typing":
        await chat_service.set_typing(room_key, user_id)
    else:
        await chat_service.clear_typing(room_key, user_id)


@router.websocket("/ws")
async def event_stream(
    websocket: WebSocket,
    rooms: Optional[str] = None,
    hub: BroadcastHub = Depends(get_broadcast_hub),
    chat_service: ChatService = Depends(get_chat_service)
):
    room_keys = [room.strip() for room in rooms.split(",") if room.strip()] if rooms else None
    subscription = hub.subscribe(room_keys)
    send_lock = asyncio.Lock()
    forwarder = None

    try:
        await websocket.accept()
        forwarder = asyncio.create_task(_forward_events(websocket, subscription, send_lock))
        logger.info("User connected")

        while True:
            text = await websocket.receive_text()
            try:
                frame = json.loads(text)
            except ValueError:
                await _send(websocket, send_lock, {"event": "error", "data": "Invalid JSON"})
                continue
            await _handle_client_event(frame, chat_service, websocket, send_lock)
    except WebSocketDisconnect:
        logger.info("User disconnected")
    finally:
        hub.unsubscribe(subscription)
        if forwarder is not None:
            forwarder.cancel()
