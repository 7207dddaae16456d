from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # MongoDB Settings
    MONGODB_URL: str
    DATABASE_NAME: str = "chat"

    # CORS Settings
    CORS_ORIGINS: str = "*"

    # Chat Settings
    DELETED_MESSAGE_TEXT: str = "deleted"  # Body written over a redacted message
    SUBSCRIBER_QUEUE_SIZE: int = 100  # Events buffered per connected client
    MAX_INLINE_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def CORS_ORIGINS_LIST(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings():
    return Settings()

settings = get_settings()
