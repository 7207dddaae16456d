"""
Storage collaborators used by the chat engine.

The engine only talks to these interfaces. Documents are plain dicts with the
identifier exposed as ``id``; implementations raise StorageError on I/O
failure and return None/False for missing entities.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class UserDirectory(ABC):
    @abstractmethod
    async def exists(self, user_id: str) -> bool:
        ...


class MessageStore(ABC):
    """Durable storage for messages, chat rooms and acceptation records"""

    @abstractmethod
    async def upsert_room(self, key: str, participants: List[str]) -> Dict[str, Any]:
        """Atomically find or create the room stored under ``key``"""

    @abstractmethod
    async def append_message_ref(self, room_key: str, message_id: str) -> None:
        ...

    @abstractmethod
    async def remove_message_ref(self, room_key: str, message_id: str) -> None:
        ...

    @abstractmethod
    async def create_message(self, message: Dict[str, Any]) -> str:
        """Persist a new message document and return its id"""

    @abstractmethod
    async def get_message(self, message_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def update_message(self, message_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply ``fields`` and return the updated document, None if absent"""

    @abstractmethod
    async def delete_message(self, message_id: str) -> bool:
        ...

    @abstractmethod
    async def list_messages(self, room_key: str) -> Optional[List[Dict[str, Any]]]:
        """Messages of a room in reference order, None if the room is absent"""

    @abstractmethod
    async def get_acceptation(self, acceptation_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def upsert_acceptation(self, acceptation_id: str, count, user_id: str) -> Dict[str, Any]:
        """Set ``count`` and mark ``user_id`` accepted, creating the record if needed"""


class BlobStore(ABC):
    @abstractmethod
    async def upload(self, data: bytes, filename: str = "image") -> str:
        ...

    @abstractmethod
    async def download(self, blob_id: str) -> Optional[bytes]:
        ...

    @abstractmethod
    async def delete(self, blob_id: str) -> None:
        ...
