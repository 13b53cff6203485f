from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):
    ENV: str = "dev"
    SERVICE_PORT: int = 8080
    LOG_JSON: bool = True
    # Security material; never logged
    MASTER_PASSWORD: str = ""
    JWT_SECRET: str = ""
    ENCRYPTION_KEY: str = ""
    SESSION_DURATION: int = Field(default=1800, ge=1)  # seconds
    MAX_BODY_SIZE: int = 65536
    # Record store selection: "memory" or "redis"
    RECORD_STORE: Literal["memory", "redis"] = "memory"
    REDIS_URL: AnyUrl | None = None
    CORS_ORIGINS: str = "*"  # Comma-separated list of allowed origins

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
