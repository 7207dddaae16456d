import base64
import binascii
from datetime import datetime, timezone
from numbers import Real
from typing import List, Optional
from app.core.exceptions import NotFoundError, StorageError, ValidationError
from app.core.room_identity import room_key, validate_identifier
from app.models.chat import Acceptation, ChatEvent, ChatRoom, ImageRef, InlineImage, Message
from app.services.broadcast import BroadcastHub
from app.services.storage import BlobStore, MessageStore, UserDirectory
from app.services.typing_registry import TypingRegistry
import logging

logger = logging.getLogger(__name__)


class ChatService:
    """
    Message delivery between pairs of users.

    Every mutation is persisted before its event is published, so a client
    that receives an event will also find the change in the room history.
    """

    def __init__(
        self,
        store: MessageStore,
        users: UserDirectory,
        hub: BroadcastHub,
        typing: TypingRegistry,
        blobs: Optional[BlobStore] = None,
        deleted_text: str = "deleted",
        max_inline_image_bytes: int = 5 * 1024 * 1024
    ):
        self.store = store
        self.users = users
        self.hub = hub
        self.typing = typing
        self.blobs = blobs
        self.deleted_text = deleted_text
        self.max_inline_image_bytes = max_inline_image_bytes

    async def send_message(
        self,
        sender_id: str,
        receiver_id: str,
        body: Optional[str] = None,
        image: Optional[ImageRef] = None,
        image_data: Optional[str] = None
    ) -> Message:
        """
        Persist a message between two users and announce it.

        Args:
            sender_id: Sending user
            receiver_id: Receiving user
            body: Text of the message
            image: External or already uploaded image reference
            image_data: Base64 encoded image to upload to blob storage

        Returns:
            The stored message
        """
        if not sender_id or not receiver_id or not (body or image or image_data):
            raise ValidationError()
        validate_identifier(sender_id, "sender_id")
        validate_identifier(receiver_id, "receiver_id")
        if sender_id == receiver_id:
            raise ValidationError("Sender and receiver must be different users")

        raw_image = self._decode_image(image_data) if image_data else None

        if not await self.users.exists(sender_id) or not await self.users.exists(receiver_id):
            raise NotFoundError("User not found")

        blob_id = None
        if raw_image is not None:
            blob_id = await self.blobs.upload(raw_image)
            image = InlineImage(blob_id=blob_id)

        try:
            message = await self._store_message(sender_id, receiver_id, body, image)
        except StorageError:
            if blob_id is not None:
                await self.blobs.delete(blob_id)
            raise

        logger.info(f"Message {message.id} stored in room {message.room_id}")
        self.hub.publish(ChatEvent.NEW_MESSAGE, message.model_dump(mode="json"), room_key=message.room_id)
        return message

    async def _store_message(
        self,
        sender_id: str,
        receiver_id: str,
        body: Optional[str],
        image: Optional[ImageRef]
    ) -> Message:
        room = ChatRoom(**await self.store.upsert_room(
            room_key(sender_id, receiver_id),
            [sender_id, receiver_id]
        ))

        document = {
            "room_id": room.id,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "message": body,
            "image": image.model_dump() if image else None,
            "created_at": datetime.now(timezone.utc)
        }
        message_id = await self.store.create_message(document)
        try:
            await self.store.append_message_ref(room.id, message_id)
        except StorageError:
            # Leave no message outside its room
            await self.store.delete_message(message_id)
            raise

        return Message(id=message_id, **document)

    def _decode_image(self, image_data: str) -> bytes:
        if self.blobs is None:
            raise ValidationError("Inline images are not supported")
        try:
            raw = base64.b64decode(image_data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Inline image is not valid base64")
        if len(raw) > self.max_inline_image_bytes:
            raise ValidationError("Inline image is too large")
        return raw

    async def get_messages(self, key: str) -> List[Message]:
        """Messages of a room in the order they were sent"""
        messages = await self.store.list_messages(key)
        if messages is None:
            raise NotFoundError("Chat room not found")
        return [Message(**message) for message in messages]

    async def get_message(self, message_id: str) -> Message:
        message = await self.store.get_message(message_id)
        if message is None:
            raise NotFoundError("Message not found")
        return Message(**message)

    async def edit_message(self, message_id: str) -> Message:
        """Redact a message in place: the body becomes the deleted marker and the image is dropped"""
        updated = await self.store.update_message(
            message_id,
            {"message": self.deleted_text, "image": None}
        )
        if updated is None:
            raise NotFoundError("Message not found")

        message = Message(**updated)
        logger.info(f"Message {message_id} redacted")
        self.hub.publish(
            ChatEvent.MESSAGE_UPDATED,
            [message_id, self.deleted_text],
            room_key=message.room_id
        )
        return message

    async def delete_message(self, message_id: str) -> None:
        """Remove a message and its reference in the room history"""
        message = await self.get_message(message_id)
        await self.store.remove_message_ref(message.room_id, message_id)
        if not await self.store.delete_message(message_id):
            raise NotFoundError("Message not found")

        logger.info(f"Message {message_id} deleted from room {message.room_id}")
        self.hub.publish(ChatEvent.MESSAGE_DELETED, message_id, room_key=message.room_id)

    async def set_typing(self, key: str, user_id: str) -> List[str]:
        typing_users = await self.typing.set_typing(key, user_id)
        self._publish_typing(key, typing_users)
        return typing_users

    async def clear_typing(self, key: str, user_id: str) -> List[str]:
        typing_users = await self.typing.clear_typing(key, user_id)
        self._publish_typing(key, typing_users)
        return typing_users

    async def get_typing(self, key: str) -> List[str]:
        return await self.typing.get_typing(key)

    def _publish_typing(self, key: str, typing_users: List[str]) -> None:
        self.hub.publish(
            ChatEvent.USER_TYPING,
            {"room_key": key, "typing_users": typing_users},
            room_key=key
        )

    async def update_acceptation(self, acceptation_id: str, count, user_id: str) -> Acceptation:
        """Record ``user_id`` as accepted and overwrite the target count"""
        if not acceptation_id:
            raise ValidationError("Acceptation id is required")
        if isinstance(count, bool) or not isinstance(count, Real):
            raise ValidationError("Count must be a number")
        validate_identifier(user_id, "user_id")

        record = await self.store.upsert_acceptation(acceptation_id, count, user_id)
        return Acceptation(**record)

    async def get_acceptation(self, acceptation_id: str) -> Acceptation:
        record = await self.store.get_acceptation(acceptation_id)
        if record is None:
            raise NotFoundError("Acceptation not found")
        return Acceptation(**record)

    async def check_user_accepted(self, acceptation_id: str, user_id: str) -> bool:
        record = await self.get_acceptation(acceptation_id)
        if user_id not in record.accepted_users:
            raise NotFoundError("User has not accepted")
        return record.accepted_users[user_id] is True

    async def get_image(self, blob_id: str) -> bytes:
        data = await self.blobs.download(blob_id) if self.blobs else None
        if data is None:
            raise NotFoundError("Image not found")
        return data
