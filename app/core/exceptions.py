from fastapi import HTTPException, status

class ChatError(HTTPException):
    """Base class for every failure the chat engine reports"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Chat error"

    def __init__(self, detail: str = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail
        )

class ValidationError(ChatError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Message, image URL, or inline image is required"

class InvalidIdentifier(ValidationError):
    default_detail = "Invalid identifier"

class NotFoundError(ChatError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"

class StorageError(ChatError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Storage failure"
