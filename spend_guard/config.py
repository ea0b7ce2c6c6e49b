"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./spend_guard.db"

    # Service
    service_name: str = "spend-guard"
    log_level: str = "INFO"

    # Kill-switch integration
    kill_switch_fail_open: bool = True  # Allow the transaction if the engine itself fails

    # Onboarding / listing defaults
    default_emergency_buffer_percent: float = 15.0
    transaction_history_limit: int = 50


settings = Settings()
