"""
Tests for Settings loading from the environment
"""

import pytest

from blog_service.config import Settings

ENV_VARS = [
    "DATABASE_URL",
    "DB_POOL_NAME",
    "DB_POOL_MIN_SIZE",
    "DB_POOL_MAX_SIZE",
    "SERVER_HOST",
    "SERVER_PORT",
    "LOG_LEVEL",
    "CORS_ORIGINS",
    "SLUG_EXCLUDE_SELF",
    "SLUG_FALLBACK_PREFIX",
    "SLUG_CONFLICT_RETRIES",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings.from_env(dotenv=False)

        assert settings.server_port == 2022
        assert settings.db_pool_name == "default"
        assert settings.cors_origins == ["*"]
        assert settings.slug_exclude_self is False
        assert settings.slug_conflict_retries == 0

    def test_reads_environment(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://u:p@db:5432/blog")
        clean_env.setenv("SERVER_PORT", "8080")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
        clean_env.setenv("SLUG_EXCLUDE_SELF", "true")
        clean_env.setenv("SLUG_FALLBACK_PREFIX", "entry")
        clean_env.setenv("SLUG_CONFLICT_RETRIES", "2")

        settings = Settings.from_env(dotenv=False)

        assert settings.database_url == "postgresql://u:p@db:5432/blog"
        assert settings.server_port == 8080
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert settings.slug_conflict_retries == 2

        policy = settings.slug_policy
        assert policy.exclude_self_on_update is True
        assert policy.fallback_prefix == "entry"

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_false_like_flags(self, clean_env, value):
        clean_env.setenv("SLUG_EXCLUDE_SELF", value)
        assert Settings.from_env(dotenv=False).slug_exclude_self is False

    def test_negative_retries_are_rejected(self, clean_env):
        clean_env.setenv("SLUG_CONFLICT_RETRIES", "-1")
        with pytest.raises(ValueError):
            Settings.from_env(dotenv=False)

    @pytest.mark.parametrize("prefix", ["My Posts", "Post!"])
    def test_malformed_fallback_prefix_is_rejected(self, clean_env, prefix):
        clean_env.setenv("SLUG_FALLBACK_PREFIX", prefix)
        with pytest.raises(ValueError):
            Settings.from_env(dotenv=False)
