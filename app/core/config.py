from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Push Relay"
    MONGODB_URL: str
    DATABASE_NAME: str = "push_relay"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ADMIN_ROLE: str = "admin"
    WEBHOOK_SECRET: str
    REDIS_URL: str | None = None
    EXPO_PUSH_API_URL: str = "https://exp.host/--/api/v2/push/send"
    EXPO_ACCESS_TOKEN: str | None = None
    EXPO_BATCH_SIZE: int = 100
    EXPO_TIMEOUT_SECONDS: float = 10.0
    TOKEN_PAGE_SIZE: int = 1000
    WEBHOOK_DEDUPE_SECONDS: int = 300
    LOG_LEVEL: str = "INFO"

    @field_validator("WEBHOOK_SECRET")
    @classmethod
    def require_webhook_secret(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("WEBHOOK_SECRET must not be empty")
        return value

    class Config:
        env_file = ".env"


settings = Settings()
