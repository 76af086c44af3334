"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # System of record (accounts API backed by the spreadsheet)
    api_base_url: str = "http://localhost:8080/api"
    request_timeout: float = 30.0
    max_retries: int = 3

    # Background sync status polling
    sync_poll_interval: float = 2.0

    # Only codes with this prefix go to the external price lookup ("" disables)
    lookup_code_prefix: str = "KRX:"

    # Sheet tabs holding raw data, hidden when registering accounts
    raw_sheet_prefix: str = "[RAWDATA]"

    # Application
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


settings = Settings()
