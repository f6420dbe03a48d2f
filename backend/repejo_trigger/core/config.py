from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    webhook_secret: SecretStr = SecretStr("")
    validate_signature: bool = True
    events: str = ""  # Comma-separated event types, empty = all
    max_age_seconds: int = 300
    max_body_bytes: int = 1_048_576  # 1 MiB

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def subscribed_events(self) -> list[str]:
        return [e.strip() for e in self.events.split(",") if e.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
