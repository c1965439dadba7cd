import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, model_validator
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite:///./eventchat.db"
DEFAULT_TEST_DATABASE_URL = "sqlite://"

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

# Project root (parent of eventchat/) - used so .env is found regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Explicitly load .env into os.environ so it works in tests and subprocesses
load_dotenv(_PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    app_name: str = "eventchat-gateway"
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT"),
    )
    log_level: str = Field(default="INFO", json_schema_extra={"env": "LOG_LEVEL"})
    port: int = Field(default=8080, json_schema_extra={"env": "PORT"})
    database_url: Optional[str] = None  # Will be set dynamically

    # Stream Chat
    stream_key: Optional[str] = Field(
        default=None, json_schema_extra={"env": "STREAM_KEY"}
    )
    stream_secret: Optional[str] = Field(
        default=None, json_schema_extra={"env": "STREAM_SECRET"}
    )
    stream_webhook_verify_signature: bool = Field(
        default=False, json_schema_extra={"env": "STREAM_WEBHOOK_VERIFY_SIGNATURE"}
    )

    # HTTP hardening
    allowed_origins: str = Field(
        default="", json_schema_extra={"env": "ALLOWED_ORIGINS"}
    )
    token_server_secret: Optional[str] = Field(
        default=None, json_schema_extra={"env": "TOKEN_SERVER_SECRET"}
    )
    rate_limit_per_minute: Optional[int] = Field(
        default=None, json_schema_extra={"env": "RATE_LIMIT_PER_MINUTE"}
    )
    redis_host: str = Field(
        default="localhost", json_schema_extra={"env": "REDIS_HOST"}
    )
    redis_port: int = Field(default=6379, json_schema_extra={"env": "REDIS_PORT"})

    # Firebase identity verification
    firebase_service_account_json_base64: Optional[str] = Field(
        default=None,
        json_schema_extra={"env": "FIREBASE_SERVICE_ACCOUNT_JSON_BASE64"},
    )
    firebase_project_id: Optional[str] = Field(
        default=None, json_schema_extra={"env": "FIREBASE_PROJECT_ID"}
    )
    google_application_credentials: Optional[str] = Field(
        default=None, json_schema_extra={"env": "GOOGLE_APPLICATION_CREDENTIALS"}
    )

    # Events
    event_channel_type: str = Field(
        default="messaging", json_schema_extra={"env": "EVENT_CHANNEL_TYPE"}
    )
    event_link_scheme: str = Field(
        default="temp", json_schema_extra={"env": "EVENT_LINK_SCHEME"}
    )

    # Chat bot / LiteLLM
    llm_model: str = Field(
        default="gemini/gemini-1.5-flash", json_schema_extra={"env": "LLM_MODEL"}
    )
    litellm_api_key: Optional[str] = Field(
        default=None, json_schema_extra={"env": "LITELLM_API_KEY"}
    )
    litellm_api_base: Optional[str] = Field(
        default=None, json_schema_extra={"env": "LITELLM_API_BASE"}
    )
    bot_user_id: str = Field(
        default="ai-assistant", json_schema_extra={"env": "BOT_USER_ID"}
    )
    bot_user_name: str = Field(
        default="AI Assistant", json_schema_extra={"env": "BOT_USER_NAME"}
    )

    # Conversation memory
    history_store: str = Field(
        default="database", json_schema_extra={"env": "HISTORY_STORE"}
    )
    history_namespace: str = Field(
        default="chatbot_memory", json_schema_extra={"env": "HISTORY_NAMESPACE"}
    )

    @model_validator(mode="before")
    def set_database_url(cls, values):
        """Set the database_url dynamically based on the environment field."""
        environment = (
            values.get("environment")
            or values.get("ENV")
            or values.get("ENVIRONMENT")
            or os.getenv("ENV", os.getenv("ENVIRONMENT", "development"))
        )
        if environment.lower() == "test":
            values["database_url"] = os.getenv(
                "TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL
            )
        elif not values.get("database_url"):
            values["database_url"] = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

        return values

    @property
    def is_production(self) -> bool:
        """Check if the current environment is production."""
        return self.environment.lower() == "production"

    @property
    def is_test(self) -> bool:
        """Check if the current environment is test."""
        return self.environment.lower() == "test"

    @property
    def bot_enabled(self) -> bool:
        """The chat bot only runs when a language backend key is configured."""
        return bool(self.litellm_api_key)

    @property
    def cors_origins(self) -> list[str]:
        extra = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return DEFAULT_ALLOWED_ORIGINS + extra

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Get application settings with required environment variables."""
    return Settings()
