# helpdesk/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite:///./helpdesk.db")
    APP_NAME: str = "Helpdesk API"
    APP_DESC: str = "Location hierarchy and ticket lifecycle service"
    APP_VERSION: str = "1.0.0"

    # CORS origins, comma separated; "*" when unset
    CORS_ORIGINS: str | None = None

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Field limits
    TICKET_TITLE_MAX_LENGTH: int = 1000
    TICKET_DESCRIPTION_MAX_LENGTH: int = 5000
    LOCATION_CODE_MAX_LENGTH: int = 2

    # Resolved tickets older than this are closed by /tickets/auto-close-old
    AUTO_CLOSE_DAYS: int = 30

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
