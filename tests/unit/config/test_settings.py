"""
Unit tests for config/settings.py
"""

import pytest
from pydantic import ValidationError

from config.settings import Settings, split_csv


@pytest.fixture
def clean_env(monkeypatch):
    """Clear variables that would leak into Settings."""
    for name in (
        "PORT",
        "NODE_ENV",
        "LOG_LEVEL",
        "FRONTEND_URL",
        "RENDER_EXTERNAL_URL",
        "CORS_ORIGINS",
        "BODY_LIMIT_MB",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSplitCsv:
    """Tests for split_csv function."""

    def test_split(self):
        assert split_csv("a, b,c") == ("a", "b", "c")

    def test_blanks_dropped(self):
        assert split_csv(" , a,, ") == ("a",)

    def test_empty(self):
        assert split_csv("") == ()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.port == 5000
        assert settings.node_env == "development"
        assert settings.body_limit_bytes == 50 * 1024 * 1024
        assert settings.uploads_dir == "uploads"
        assert settings.allowed_origins == (
            "http://localhost:5173",
            "https://revalue-frontend.vercel.app",
        )

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("NODE_ENV", "Production")
        clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.is_production is True
        assert settings.allowed_origins == ("https://a.example", "https://b.example")

    def test_unknown_node_env_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, node_env="staging")

    def test_body_limit_must_be_positive(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, body_limit_mb=0)

    def test_frontend_url_joins_allow_list(self, clean_env):
        settings = Settings(_env_file=None, frontend_url="https://scravo.app/")
        assert settings.allowed_origins[-1] == "https://scravo.app"

    def test_frontend_url_not_duplicated(self, clean_env):
        settings = Settings(_env_file=None, frontend_url="http://localhost:5173")
        assert settings.allowed_origins.count("http://localhost:5173") == 1

    @pytest.mark.parametrize(
        "node_env, log_level, expected",
        [
            ("development", None, "DEBUG"),
            ("production", None, "INFO"),
            ("test", None, "INFO"),
            ("production", "warning", "WARNING"),
        ],
    )
    def test_effective_log_level(self, clean_env, node_env, log_level, expected):
        settings = Settings(_env_file=None, node_env=node_env, log_level=log_level)
        assert settings.effective_log_level == expected

    def test_public_url(self, clean_env):
        assert Settings(_env_file=None, port=7000).public_url == "http://localhost:7000"
        settings = Settings(_env_file=None, render_external_url="https://scravo.onrender.com/")
        assert settings.public_url == "https://scravo.onrender.com"

    def test_settings_are_frozen(self, clean_env):
        settings = Settings(_env_file=None)
        with pytest.raises(ValidationError):
            settings.port = 1
