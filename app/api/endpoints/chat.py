from fastapi import APIRouter, Depends, Response
from typing import List
from app.api.deps import get_chat_service
from app.models.chat import UrlImage
from app.schemas.chat import (
    MessageCreate,
    MessageResponse,
    DeleteResponse,
    TypingRequest,
    TypingResponse,
    AcceptationUpdate,
    AcceptationResponse,
    AcceptationCount,
    UserAcceptedResponse
)
from app.services.chat import ChatService

router = APIRouter(tags=["Chat"])

@router.post("/send-message",
    response_model=MessageResponse,
    status_code=201,
    description="Send a message to another user",
    responses={
        201: {"description": "Message stored and broadcast"},
        400: {"description": "Missing or invalid fields"},
        404: {"description": "Sender or receiver not found"},
        500: {"description": "Storage failure"}
    })
async def send_message(
    message_data: MessageCreate,
    chat_service: ChatService = Depends(get_chat_service)
) -> MessageResponse:
    """
    Send a text and/or image message.

    The chat room between the two users is created on the first message.
    An image is either an external `img_url` or an inline `image_base64`
    payload, which is uploaded to blob storage.
    """
    message = await chat_service.send_message(
        message_data.sender_id,
        message_data.receiver_id,
        body=message_data.message,
        image=UrlImage(url=message_data.img_url) if message_data.img_url else None,
        image_data=message_data.image_base64
    )
    return MessageResponse(**message.model_dump())

@router.get("/message/{room_key}",
    response_model=List[MessageResponse],
    description="List the messages of a chat room",
    responses={
        200: {"description": "Messages in the order they were sent"},
        404: {"description": "Chat room not found"}
    })
async def get_messages(
    room_key: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> List[MessageResponse]:
    messages = await chat_service.get_messages(room_key)
    return [MessageResponse(**message.model_dump()) for message in messages]

@router.delete("/delete-message/{message_id}",
    response_model=DeleteResponse,
    description="Delete a message",
    responses={
        200: {"description": "Message deleted"},
        404: {"description": "Message not found"}
    })
async def delete_message(
    message_id: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> DeleteResponse:
    await chat_service.delete_message(message_id)
    return DeleteResponse()

@router.put("/edit-message/{message_id}",
    response_model=MessageResponse,
    description="Redact a message",
    responses={
        200: {"description": "Message redacted"},
        404: {"description": "Message not found"}
    })
async def edit_message(
    message_id: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> MessageResponse:
    """
    Replace the message text with the deleted marker and drop its image.
    The message keeps its place in the room history.
    """
    message = await chat_service.edit_message(message_id)
    return MessageResponse(**message.model_dump())

@router.get("/images/{blob_id}",
    description="Download an inline image",
    responses={
        200: {"description": "Image bytes"},
        404: {"description": "Image not found"}
    })
async def get_image(
    blob_id: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> Response:
    data = await chat_service.get_image(blob_id)
    return Response(content=data, media_type="application/octet-stream")

@router.post("/typing", response_model=TypingResponse, description="Mark a user as typing")
async def set_typing(
    typing_data: TypingRequest,
    chat_service: ChatService = Depends(get_chat_service)
) -> TypingResponse:
    typing_users = await chat_service.set_typing(typing_data.room_key, typing_data.user_id)
    return TypingResponse(room_key=typing_data.room_key, typing_users=typing_users)

@router.post("/typing/stop", response_model=TypingResponse, description="Mark a user as no longer typing")
async def clear_typing(
    typing_data: TypingRequest,
    chat_service: ChatService = Depends(get_chat_service)
) -> TypingResponse:
    typing_users = await chat_service.clear_typing(typing_data.room_key, typing_data.user_id)
    return TypingResponse(room_key=typing_data.room_key, typing_users=typing_users)

@router.get("/typing/{room_key}", response_model=TypingResponse, description="Users typing in a room")
async def get_typing(
    room_key: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> TypingResponse:
    typing_users = await chat_service.get_typing(room_key)
    return TypingResponse(room_key=room_key, typing_users=typing_users)

@router.put("/acceptation/{acceptation_id}",
    response_model=AcceptationResponse,
    description="Record a user's acceptance and set the target count",
    responses={
        200: {"description": "Updated acceptation record"},
        400: {"description": "Invalid count or user id"}
    })
async def update_acceptation(
    acceptation_id: str,
    acceptation_data: AcceptationUpdate,
    chat_service: ChatService = Depends(get_chat_service)
) -> AcceptationResponse:
    """
    Create the acceptation record if needed, mark the user as accepted
    and overwrite the count with the supplied value.
    """
    record = await chat_service.update_acceptation(
        acceptation_id,
        acceptation_data.count,
        acceptation_data.user_id
    )
    return AcceptationResponse(**record.model_dump())

@router.get("/acceptation/{acceptation_id}",
    response_model=AcceptationCount,
    description="Get the target count of an acceptation",
    responses={404: {"description": "Acceptation not found"}})
async def get_acceptation(
    acceptation_id: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> AcceptationCount:
    record = await chat_service.get_acceptation(acceptation_id)
    return AcceptationCount(id=record.id, count=record.count)

@router.get("/acceptation/{acceptation_id}/users/{user_id}",
    response_model=UserAcceptedResponse,
    description="Check whether a user has accepted",
    responses={404: {"description": "Acceptation or user entry not found"}})
async def check_user_accepted(
    acceptation_id: str,
    user_id: str,
    chat_service: ChatService = Depends(get_chat_service)
) -> UserAcceptedResponse:
    accepted = await chat_service.check_user_accepted(acceptation_id, user_id)
    return UserAcceptedResponse(id=acceptation_id, user_id=user_id, accepted=accepted)
