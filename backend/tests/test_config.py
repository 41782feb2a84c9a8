"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError


class TestSettingsDefaults:
    def test_code_defaults(self):
        from bookgen.config import Settings
        # _env_file=None tests code defaults without .env overrides
        s = Settings(_env_file=None)
        assert s.database_url == "sqlite+aiosqlite:///data/bookgen.db"
        assert s.default_model == "openai/gpt-4o-mini"
        assert s.generation_max_tokens == 4000
        assert s.dev_user_id is None

    def test_env_override(self, monkeypatch):
        from bookgen.config import Settings
        monkeypatch.setenv("DEFAULT_MODEL", "anthropic/claude-3-haiku")
        monkeypatch.setenv("APP_PORT", "9000")
        s = Settings(_env_file=None)
        assert s.default_model == "anthropic/claude-3-haiku"
        assert s.app_port == 9000


class TestSettingsValidation:
    def test_log_level_normalized(self):
        from bookgen.config import Settings
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_raises(self):
        from bookgen.config import Settings
        with pytest.raises(ValidationError, match="log level"):
            Settings(_env_file=None, log_level="chatty")

    def test_non_positive_timeout_raises(self):
        from bookgen.config import Settings
        with pytest.raises(ValidationError, match="generation_timeout_seconds"):
            Settings(_env_file=None, generation_timeout_seconds=0)
