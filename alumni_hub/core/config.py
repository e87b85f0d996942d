import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from typing import Optional

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Alumni Hub API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development") # "production" switches logs to JSON
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    BACKEND_CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        'http://127.0.0.1:8000',
    ]

    # Database Settings
    # Any SQLAlchemy URL works; the default keeps local development self-contained.
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./alumni_hub.db")
    SQL_ECHO: bool = False

    #JWT Settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "secret_key")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7 # 7 days

    # Roles allowed to moderate forum content and reconcile counters
    MODERATOR_ROLES: list[str] = ["admin", "moderator"]
    # New forum topics and posts wait in the moderation queue until approved
    FORUM_REQUIRES_APPROVAL: bool = True

    # Optional override for the instance id reported in logs
    INSTANCE_ID: Optional[str] = os.getenv("K_REVISION", "local")

    class Config:
        case_sensitive = True


settings = Settings()
