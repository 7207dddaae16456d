from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from app.core.config import settings
from app.api.endpoints import chat, events
from app.services.broadcast import BroadcastHub
from app.services.chat import ChatService
from app.services.mongo import GridFSBlobStore, MongoMessageStore, MongoUserDirectory
from app.services.typing_registry import TypingRegistry
import logging

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="FastAPI MongoDB Chat")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS_LIST,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(chat.router, prefix="/chat")
app.include_router(events.router)

# In-process engine state, shared by every request and connection
app.broadcast_hub = BroadcastHub(queue_size=settings.SUBSCRIBER_QUEUE_SIZE)
app.typing_registry = TypingRegistry()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as 400, like other validation failures"""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/")
async def root():
    return {"message": "Chat server is running"}

@app.on_event("startup")
async def startup_db_client():
    app.mongodb_client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
    app.mongodb = app.mongodb_client[settings.DATABASE_NAME]

    app.chat_service = ChatService(
        store=MongoMessageStore(app.mongodb),
        users=MongoUserDirectory(app.mongodb),
        hub=app.broadcast_hub,
        typing=app.typing_registry,
        blobs=GridFSBlobStore(app.mongodb),
        deleted_text=settings.DELETED_MESSAGE_TEXT,
        max_inline_image_bytes=settings.MAX_INLINE_IMAGE_BYTES
    )
    logger.info(f"Connected to MongoDB database {settings.DATABASE_NAME}")

@app.on_event("shutdown")
async def shutdown_db_client():
    # Close database connection
    app.mongodb_client.close()
