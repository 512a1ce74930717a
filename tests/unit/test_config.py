"""Unit tests for Settings configuration."""

import pytest
from pydantic import ValidationError

from resumehub.core.config import DOCX_CONTENT_TYPE, PDF_CONTENT_TYPE, Settings


@pytest.mark.unit
class TestSettings:
    def test_default_settings(self) -> None:
        """Check that default values are correct."""
        settings = Settings(
            _env_file=None,  # Prevent reading .env file during tests
        )
        assert settings.app_name == "Resume Parser"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.max_upload_size_mb == 5
        assert settings.upload_dir == "./uploads"
        assert settings.ai_provider == "gemini"
        assert settings.ai_timeout_seconds == 30
        assert settings.ai_temperature == 0.1
        assert settings.ai_max_output_tokens == 4000
        assert settings.ai_max_retries == 0

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Override env vars and verify settings pick them up."""
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "25")
        monkeypatch.setenv("AI_PROVIDER", "deepseek")
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-env")
        monkeypatch.setenv("AI_TIMEOUT_SECONDS", "10")

        settings = Settings(
            _env_file=None,  # Prevent reading .env file during tests
        )
        assert settings.debug is True
        assert settings.max_upload_size_mb == 25
        assert settings.ai_provider == "deepseek"
        assert settings.deepseek_api_key == "sk-env"
        assert settings.ai_timeout_seconds == 10

    def test_unknown_provider_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AI_PROVIDER", "openai")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_allowed_content_types(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.allowed_content_types == {PDF_CONTENT_TYPE, DOCX_CONTENT_TYPE}
