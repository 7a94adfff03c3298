from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Social API (Users, Posts, Likes, Comments, Follows, Notifications)"

    # Database
    DATABASE_URL: str = "sqlite:///./socialnet.db"
    DB_ECHO: bool = False

    # Firebase Authentication
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None
    FIREBASE_PROJECT_ID: Optional[str] = None

    # Logging
    LOG_PATH: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Who-to-follow panel
    SUGGESTED_USERS_LIMIT: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()
