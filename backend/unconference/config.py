from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage Backend ("memory" keeps documents in-process, "mongodb" uses MONGODB_URL)
    storage_backend: Literal["memory", "mongodb"] = Field(default="memory", alias="STORAGE_BACKEND")

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URL")
    mongodb_db_name: str = Field(default="unconference", alias="MONGODB_DB_NAME")
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000, alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS"
    )

    # Application Settings
    app_name: str = Field(default="Unconference Planner", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")

    # CORS Configuration
    allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000", alias="ALLOWED_ORIGINS"
    )

    # Assignment Algorithm
    assignment_topic_strategy: Literal["demand", "popularity"] = Field(
        default="demand", alias="ASSIGNMENT_TOPIC_STRATEGY"
    )
    assignment_repeat_pool_threshold: float = Field(
        default=0.8, ge=0.0, le=1.0, alias="ASSIGNMENT_REPEAT_POOL_THRESHOLD"
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
