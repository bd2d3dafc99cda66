import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator


# settings field -> environment variable
ENV_VARS = {
    "mongodb_uri": "MONGODB_URI",
    "mongodb_db": "MONGODB_DB",
    "jwt_secret": "JWT_SECRET",
    "jwt_algorithm": "JWT_ALGORITHM",
    "jwt_expires_days": "JWT_EXPIRES_DAYS",
    "bcrypt_rounds": "BCRYPT_ROUNDS",
    "openai_api_key": "OPENAI_API_KEY",
    "openai_model": "OPENAI_MODEL",
    "openai_max_tokens": "OPENAI_MAX_TOKENS",
    "stripe_secret_key": "STRIPE_SECRET_KEY",
    "stripe_webhook_secret": "STRIPE_WEBHOOK_SECRET",
    "stripe_price_id_paid": "STRIPE_PRICE_ID_PAID",
    "client_url": "CLIENT_URL",
    "notion_client_id": "NOTION_CLIENT_ID",
    "notion_client_secret": "NOTION_CLIENT_SECRET",
    "notion_authorization_url": "NOTION_AUTHORIZATION_URL",
    "notion_redirect_uri": "NOTION_REDIRECT_URI",
    "notion_success_url": "NOTION_SUCCESS_URL",
    "cors_origins": "CORS_ORIGINS",
    "rate_limit_max": "RATE_LIMIT_MAX",
    "rate_limit_window_minutes": "RATE_LIMIT_WINDOW_MINUTES",
    "rate_limit_enabled": "RATE_LIMIT_ENABLED",
    "max_upload_bytes": "MAX_UPLOAD_BYTES",
    "free_flashcard_session_limit": "FREE_FLASHCARD_SESSION_LIMIT",
    "upload_dir": "UPLOAD_DIR",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    mongodb_uri: str = "mongodb://localhost:27017/"
    mongodb_db: str = "studybuddy"

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    bcrypt_rounds: int = 10

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_max_tokens: int = 15000

    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: str = ""
    stripe_price_id_paid: Optional[str] = None
    client_url: str = "http://localhost:5173"

    notion_client_id: Optional[str] = None
    notion_client_secret: Optional[str] = None
    notion_authorization_url: Optional[str] = None
    notion_redirect_uri: Optional[str] = None
    notion_success_url: str = "http://localhost:5173/notion-success"

    cors_origins: List[str] = ["http://localhost:5173"]
    rate_limit_max: int = 100
    rate_limit_window_minutes: int = 15
    rate_limit_enabled: bool = True

    max_upload_bytes: int = 20 * 1024 * 1024
    free_flashcard_session_limit: int = 2
    upload_dir: str = os.path.join(os.path.dirname(__file__), "uploads")
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def rate_limit(self) -> str:
        return f"{self.rate_limit_max}/{self.rate_limit_window_minutes} minutes"

    @property
    def price_ids(self) -> dict:
        return {"paid": self.stripe_price_id_paid}


@lru_cache
def get_settings() -> Settings:
    load_dotenv()  # Load environment variables from .env file
    values = {field: os.environ[env] for field, env in ENV_VARS.items() if env in os.environ}
    return Settings(**values)
