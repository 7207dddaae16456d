"""
Database indexes for the chat collections.

Run this module once after setting up the database to create indexes.
You can run it with: python -m app.core.database_indexes
"""

from motor.motor_asyncio import AsyncIOMotorClient
from app.core.config import settings
import asyncio
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def create_indexes():
    """Create all necessary database indexes"""
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.DATABASE_NAME]

    logger.info("Creating database indexes...")

    # Chat rooms are keyed by the room key itself, participants are looked up by user
    await db.chat_rooms.create_index("users")
    logger.info("✓ Created indexes for 'chat_rooms' collection")

    await db.messages.create_index([("room_id", 1), ("created_at", 1)])
    await db.messages.create_index("sender_id")
    await db.messages.create_index("receiver_id")
    logger.info("✓ Created indexes for 'messages' collection")

    logger.info("All indexes created successfully!")

    client.close()


if __name__ == "__main__":
    asyncio.run(create_indexes())
