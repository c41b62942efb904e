"""Settings and configuration management."""

import logging
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Storage
    database_path: str = Field(
        ".data/curation_desk.db", description="SQLite database file"
    )

    # Newsletter Platform
    esp_provider: str = Field("mailchimp", description="Email service provider")
    mailchimp_api_key: Optional[str] = Field(None, description="Mailchimp key")
    mailchimp_server_prefix: Optional[str] = Field(
        None, description="Mailchimp data center, e.g. us7"
    )
    mailchimp_list_id: Optional[str] = Field(None, description="Audience ID")
    mailchimp_from_name: str = Field(
        "Executive Algorithm", description="Campaign sender name"
    )
    mailchimp_reply_to: str = Field(
        "hello@example.com", description="Campaign reply-to address"
    )

    # Application Settings
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Log level")

    # API Timeout Settings (in seconds)
    mailchimp_timeout: float = Field(
        15.0, ge=5.0, le=60.0, description="Mailchimp API request timeout in seconds"
    )

    # Scheduling
    mailchimp_min_schedule_minutes: int = Field(
        15,
        ge=0,
        le=1440,
        description="Minimum lead time Mailchimp accepts for a scheduled send",
    )

    @model_validator(mode="after")
    def derive_mailchimp_server_prefix(self) -> "Settings":
        """Mailchimp keys end in the data center (``xxxx-us7``); use it if unset."""
        if self.mailchimp_server_prefix or not self.mailchimp_api_key:
            return self

        _, sep, suffix = self.mailchimp_api_key.rpartition("-")
        if sep and suffix:
            self.mailchimp_server_prefix = suffix
            logger.debug(f"Derived Mailchimp server prefix '{suffix}' from API key")
        return self
