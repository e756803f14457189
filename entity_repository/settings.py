from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True, env_prefix="ENTITY_REPO_"
    )

    # Paging
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)

    # Ordering applied when a query names no sort field
    STABLE_DEFAULT_ORDER: bool = False
    DEFAULT_ORDER_FIELD: str = "id"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["text", "json"] = "text"
    LOG_FILE_PATH: str | None = None
    ENVIRONMENT: str = "development"


app_settings = Settings()
