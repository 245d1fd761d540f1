"""
Unit tests for Settings and credential checks.
"""

import pytest
from pydantic import ValidationError

from medisys.config import Settings, check_api_key


class TestSettings:
    def test_defaults(self, monkeypatch):
        """Should default to single-shot calls and the original display timings."""
        for name in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.coordinator_model == "gemini-2.5-flash"
        assert settings.image_model == "gemini-2.5-flash-image"
        assert settings.coordinator_temperature == 0.1
        assert settings.image_aspect_ratio == "1:1"
        assert settings.llm_max_retries == 1
        assert settings.handover_delay == 0.8
        assert settings.idle_reset_delay == 3.0
        assert settings.max_display_sources == 3
        assert settings.google_api_key is None
        assert settings.has_api_key is False

    @pytest.mark.parametrize("env_name", ["GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY"])
    def test_api_key_from_environment(self, monkeypatch, env_name):
        """Should accept the credential under any supported variable name."""
        for name in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv(env_name, "env-key")

        settings = Settings(_env_file=None)

        assert settings.google_api_key == "env-key"
        assert check_api_key(settings) is True

    def test_blank_api_key_is_missing(self):
        settings = Settings(_env_file=None, google_api_key="   ")

        assert check_api_key(settings) is False

    def test_out_of_range_values_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, coordinator_temperature=1.5)

        with pytest.raises(ValidationError):
            Settings(_env_file=None, llm_max_retries=0)
