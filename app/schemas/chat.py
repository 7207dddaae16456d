from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime
from app.models.chat import ImageRef

class MessageCreate(BaseModel):
    sender_id: str
    receiver_id: str
    message: Optional[str] = None
    img_url: Optional[str] = Field(None, description="External image URL")
    image_base64: Optional[str] = Field(None, description="Inline image, base64 encoded")

class MessageResponse(BaseModel):
    id: str
    room_id: str
    sender_id: str
    receiver_id: str
    message: Optional[str] = None
    image: Optional[ImageRef] = None
    created_at: datetime

class DeleteResponse(BaseModel):
    message: str = "Message deleted successfully"

class TypingRequest(BaseModel):
    room_key: str
    user_id: str

class TypingResponse(BaseModel):
    room_key: str
    typing_users: List[str] = Field(default_factory=list)

class AcceptationUpdate(BaseModel):
    count: Union[int, float]
    user_id: str

class AcceptationResponse(BaseModel):
    id: str
    count: Union[int, float]
    accepted_users: dict[str, bool] = Field(default_factory=dict)

class AcceptationCount(BaseModel):
    id: str
    count: Union[int, float]

class UserAcceptedResponse(BaseModel):
    id: str
    user_id: str
    accepted: bool
