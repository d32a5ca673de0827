from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30

    REDIS_URL: str = "redis://localhost:6379/0"

    PUSH_BACKEND: Literal["log", "redis"] = "log"
    PUSH_STREAM: str = "presence.push"

    SEEN_TIME_FORMAT: str = "%H:%M"

    @property
    def uses_redis(self) -> bool:
        return self.PUSH_BACKEND == "redis"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
