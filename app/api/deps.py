from app.services.broadcast import BroadcastHub
from app.services.chat import ChatService

def get_chat_service() -> ChatService:
    from app.main import app  # Local import to avoid circular dependency
    return app.chat_service

def get_broadcast_hub() -> BroadcastHub:
    from app.main import app  # Local import to avoid circular dependency
    return app.broadcast_hub
