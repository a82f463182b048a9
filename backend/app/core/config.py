"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Encounter Compliance Risk Engine"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Risk engine
    documentation_delay_days: int = 30  # Open encounters older than this are delayed
    history_window_months: int = 6  # Window for over-utilization check
    portfolio_window_days: int = 30  # Trend window for the portfolio report
    max_transcript_chars: int = 100_000  # Upper bound on text fed to rule matching


settings = Settings()
