"""
MongoDB (Motor) implementations of the chat storage collaborators.

Collections:
- users: looked up by ``_id`` only
- chat_rooms: ``_id`` is the room key, ``users`` the participants and
  ``messages`` the ordered message ids
- messages: one document per message
- acceptations: ``count`` plus an ``accepted_users`` map
"""

from typing import Any, Dict, List, Optional
from functools import wraps
from bson import ObjectId
from bson.errors import InvalidId
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from app.core.exceptions import StorageError
from app.services.storage import BlobStore, MessageStore, UserDirectory
import logging

logger = logging.getLogger(__name__)


def _storage_call(operation: str):
    """Translate driver failures into StorageError"""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except PyMongoError as e:
                logger.error(f"MongoDB error during {operation}: {e}")
                raise StorageError(f"Storage failure during {operation}")
        return wrapper
    return decorator


def _object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _user_key(user_id: str):
    # Users created by other services are keyed by ObjectId, seeded ones may use plain strings
    return ObjectId(user_id) if ObjectId.is_valid(user_id) else user_id


def _to_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoUserDirectory(UserDirectory):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    @_storage_call("user lookup")
    async def exists(self, user_id: str) -> bool:
        user = await self.db.users.find_one({"_id": _user_key(user_id)}, {"_id": 1})
        return user is not None


class MongoMessageStore(MessageStore):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    @_storage_call("room upsert")
    async def upsert_room(self, key: str, participants: List[str]) -> Dict[str, Any]:
        try:
            room = await self.db.chat_rooms.find_one_and_update(
                {"_id": key},
                {"$setOnInsert": {"users": participants, "messages": []}},
                upsert=True,
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            # A concurrent sender inserted the room first
            room = await self.db.chat_rooms.find_one({"_id": key})
        return _to_document(room)

    @_storage_call("message reference append")
    async def append_message_ref(self, room_key: str, message_id: str) -> None:
        await self.db.chat_rooms.update_one(
            {"_id": room_key},
            {"$push": {"messages": message_id}}
        )

    @_storage_call("message reference removal")
    async def remove_message_ref(self, room_key: str, message_id: str) -> None:
        await self.db.chat_rooms.update_one(
            {"_id": room_key},
            {"$pull": {"messages": message_id}}
        )

    @_storage_call("message insert")
    async def create_message(self, message: Dict[str, Any]) -> str:
        document = dict(message)
        result = await self.db.messages.insert_one(document)
        return str(result.inserted_id)

    @_storage_call("message lookup")
    async def get_message(self, message_id: str) -> Optional[Dict[str, Any]]:
        oid = _object_id(message_id)
        if oid is None:
            return None
        return _to_document(await self.db.messages.find_one({"_id": oid}))

    @_storage_call("message update")
    async def update_message(self, message_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = _object_id(message_id)
        if oid is None:
            return None
        message = await self.db.messages.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
        return _to_document(message)

    @_storage_call("message delete")
    async def delete_message(self, message_id: str) -> bool:
        oid = _object_id(message_id)
        if oid is None:
            return False
        result = await self.db.messages.delete_one({"_id": oid})
        return result.deleted_count > 0

    @_storage_call("message listing")
    async def list_messages(self, room_key: str) -> Optional[List[Dict[str, Any]]]:
        room = await self.db.chat_rooms.find_one({"_id": room_key})
        if room is None:
            return None

        refs = [oid for oid in (_object_id(ref) for ref in room.get("messages", [])) if oid]
        by_id = {}
        async for message in self.db.messages.find({"_id": {"$in": refs}}):
            message = _to_document(message)
            by_id[message["id"]] = message

        # Room order is authoritative, references without a body are skipped
        return [by_id[str(ref)] for ref in refs if str(ref) in by_id]

    @_storage_call("acceptation lookup")
    async def get_acceptation(self, acceptation_id: str) -> Optional[Dict[str, Any]]:
        return _to_document(await self.db.acceptations.find_one({"_id": acceptation_id}))

    @_storage_call("acceptation upsert")
    async def upsert_acceptation(self, acceptation_id: str, count, user_id: str) -> Dict[str, Any]:
        record = await self.db.acceptations.find_one_and_update(
            {"_id": acceptation_id},
            {"$set": {"count": count, f"accepted_users.{user_id}": True}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return _to_document(record)


class GridFSBlobStore(BlobStore):
    """Blob storage on a GridFS bucket of the chat database"""

    def __init__(self, db: AsyncIOMotorDatabase, bucket_name: str = "images"):
        self.bucket = AsyncIOMotorGridFSBucket(db, bucket_name=bucket_name)

    @_storage_call("blob upload")
    async def upload(self, data: bytes, filename: str = "image") -> str:
        blob_id = await self.bucket.upload_from_stream(filename, data)
        return str(blob_id)

    @_storage_call("blob download")
    async def download(self, blob_id: str) -> Optional[bytes]:
        oid = _object_id(blob_id)
        if oid is None:
            return None
        try:
            stream = await self.bucket.open_download_stream(oid)
        except NoFile:
            return None
        return await stream.read()

    @_storage_call("blob delete")
    async def delete(self, blob_id: str) -> None:
        oid = _object_id(blob_id)
        if oid is None:
            return
        try:
            await self.bucket.delete(oid)
        except NoFile:
            pass
