"""
Centralised settings for the Azlok client, storefront and CLI.
"""
import logging
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler


class Settings(BaseSettings):
    """Application settings, read from the environment and `.env`"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # Backend REST API. NEXT_PUBLIC_API_URL is accepted so existing deployments keep working.
    API_URL: str = Field(
        "http://localhost:8000",
        validation_alias=AliasChoices("AZLOK_API_URL", "NEXT_PUBLIC_API_URL"),
    )
    SITE_URL: str = Field("https://www.azlok.com", validation_alias="AZLOK_SITE_URL")
    STORAGE_PATH: str = Field("~/.azlok/storage.json", validation_alias="AZLOK_STORAGE_PATH")
    REQUEST_TIMEOUT: float = Field(10.0, validation_alias="AZLOK_REQUEST_TIMEOUT")
    DEFAULT_CURRENCY: str = Field("INR", validation_alias="AZLOK_DEFAULT_CURRENCY")
    LOG_LEVEL: str = Field("INFO", validation_alias="AZLOK_LOG_LEVEL")


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Route stdlib logging through rich so it matches the console UI"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )
