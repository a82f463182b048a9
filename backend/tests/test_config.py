"""Tests for application settings."""

from app.core.config import Settings


class TestSettings:
    """Test settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("DOCUMENTATION_DELAY_DAYS", raising=False)
        monkeypatch.delenv("MAX_TRANSCRIPT_CHARS", raising=False)

        settings = Settings(_env_file=None)

        assert settings.documentation_delay_days == 30
        assert settings.history_window_months == 6
        assert settings.portfolio_window_days == 30
        assert settings.max_transcript_chars == 100_000
        assert settings.api_prefix == ""

    def test_environment_override(self, monkeypatch) -> None:
        """Environment variables are matched case-insensitively."""
        monkeypatch.setenv("documentation_delay_days", "14")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.documentation_delay_days == 14
        assert settings.log_level == "debug"
