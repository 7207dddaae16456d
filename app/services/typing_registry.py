import asyncio
from typing import Dict, List, Set
import logging

logger = logging.getLogger(__name__)


class TypingRegistry:
    """
    Volatile record of which users are typing in which room.

    Entries live only in process memory. A room whose typing set empties is
    dropped from the registry, so memory is bounded by the rooms with an
    active typist.
    """

    def __init__(self):
        self._rooms: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def set_typing(self, room_key: str, user_id: str) -> List[str]:
        """Mark ``user_id`` as typing and return the room's typing users"""
        async with self._lock:
            typing_users = self._rooms.setdefault(room_key, set())
            typing_users.add(user_id)
            return sorted(typing_users)

    async def clear_typing(self, room_key: str, user_id: str) -> List[str]:
        """Remove ``user_id`` from the room's typing users and return the rest"""
        async with self._lock:
            typing_users = self._rooms.get(room_key)
            if typing_users is None:
                return []
            typing_users.discard(user_id)
            if not typing_users:
                del self._rooms[room_key]
                logger.debug(f"Typing set for room {room_key} emptied")
                return []
            return sorted(typing_users)

    async def get_typing(self, room_key: str) -> List[str]:
        async with self._lock:
            return sorted(self._rooms.get(room_key, ()))

    def __contains__(self, room_key: str) -> bool:
        return room_key in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
