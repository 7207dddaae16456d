from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Literal, Optional, Union
from datetime import datetime, timezone
from enum import Enum

class ChatEvent(str, Enum):
    NEW_MESSAGE = "newMessage"
    MESSAGE_DELETED = "messageDeleted"
    MESSAGE_UPDATED = "messageUpdated"
    USER_TYPING = "userTyping"

class UrlImage(BaseModel):
    """Image hosted elsewhere, referenced by URL"""
    kind: Literal["url"] = "url"
    url: str

class InlineImage(BaseModel):
    """Image uploaded with the message and kept in blob storage"""
    kind: Literal["inline"] = "inline"
    blob_id: str

ImageRef = Annotated[Union[UrlImage, InlineImage], Field(discriminator="kind")]

class Message(BaseModel):
    id: str
    room_id: str
    sender_id: str
    receiver_id: str
    message: Optional[str] = None
    image: Optional[ImageRef] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class ChatRoom(BaseModel):
    id: str
    users: List[str]
    messages: List[str] = Field(default_factory=list)

class Acceptation(BaseModel):
    id: str
    count: Union[int, float]
    accepted_users: Dict[str, bool] = Field(default_factory=dict)
