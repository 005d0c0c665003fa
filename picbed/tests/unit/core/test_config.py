"""
Settings Unit Tests
"""

import pytest
from pydantic import ValidationError

from picbed.core.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("UPLOAD_PATH", raising=False)
        settings = Settings(_env_file=None)

        assert settings.upload_path == "images/{year}/{month}/{day}"
        assert settings.name_rule == "original"
        assert "image/png" in settings.allowed_types

    def test_allowed_types_parsed_from_env(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_TYPES", " image/png , video/mp4,, ")

        settings = Settings(_env_file=None)

        assert settings.allowed_types == frozenset({"image/png", "video/mp4"})

    @pytest.mark.parametrize(
        "env, value",
        [("NAME_RULE", "sequential"), ("MAX_FILE_SIZE", "0"), ("APP_ENV", "staging")],
    )
    def test_invalid_values_rejected(self, monkeypatch, env, value):
        monkeypatch.setenv(env, value)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
