from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Хранилище вложений
    upload_dir: str = "uploads"

    # Транспорт pub/sub для realtime-канала
    pubsub_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    activity_feed_limit: int = 10
    cors_origins: List[str] = ["*"]
    auto_create_tables: bool = False
    debug: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
