"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "CourtDesk"
    debug: bool = True
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://courtdesk:courtdesk@db:5432/courtdesk"
    database_echo: bool = False
    create_tables: bool = True

    # Auth
    access_token_expire_minutes: int = 600
    refresh_token_expire_days: int = 30
    jwt_algorithm: str = "HS256"

    # Business calendar: all slots are wall-clock times at this fixed offset
    utc_offset_hours: int = -6

    # Identical (user, action) audit entries inside this window are dropped
    audit_dedup_seconds: float = 1.0

    model_config = {"env_prefix": "CD_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
