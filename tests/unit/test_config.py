"""Unit tests for configuration loading and validation."""

import logging

import pytest
import structlog

from kvcache.cache.service import CacheService
from kvcache.cache.store import RedisStore
from kvcache.config import (
    CacheConfig,
    LoggingConfig,
    RedisConfig,
    configure_logging,
    validate_config,
)


class TestFromEnv:
    """Test environment variable loading."""

    def test_redis_config_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        for name in (
            "REDIS_HOST",
            "REDIS_PORT",
            "REDIS_PASSWORD",
            "REDIS_DB",
            "REDIS_MAX_CONNECTIONS",
            "REDIS_HEALTH_CHECK_INTERVAL",
            "REDIS_SOCKET_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)

        config = RedisConfig.from_env()

        assert config == RedisConfig()
        assert config.password is None
        assert config.max_connections == 1000

    def test_redis_config_overrides(self, monkeypatch):
        """Test every Redis variable is honored."""
        monkeypatch.setenv("REDIS_HOST", "cache.internal")
        monkeypatch.setenv("REDIS_PORT", "6380")
        monkeypatch.setenv("REDIS_PASSWORD", "secret")
        monkeypatch.setenv("REDIS_DB", "3")
        monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "20")
        monkeypatch.setenv("REDIS_HEALTH_CHECK_INTERVAL", "15")
        monkeypatch.setenv("REDIS_SOCKET_TIMEOUT", "2.5")

        config = RedisConfig.from_env()

        assert config == RedisConfig(
            host="cache.internal",
            port=6380,
            password="secret",
            db=3,
            max_connections=20,
            health_check_interval=15,
            socket_timeout=2.5,
        )

    def test_empty_password_is_none(self, monkeypatch):
        """Test an empty password disables AUTH."""
        monkeypatch.setenv("REDIS_PASSWORD", "")

        assert RedisConfig.from_env().password is None

    def test_cache_config(self, monkeypatch):
        """Test cache variables."""
        monkeypatch.setenv("CACHE_DEFAULT_EXPIRATION", "300")
        monkeypatch.setenv("CACHE_KEY_PREFIX", "myapp")

        assert CacheConfig.from_env() == CacheConfig(
            default_expiration=300, key_prefix="myapp"
        )

    def test_logging_config(self, monkeypatch):
        """Test logging variables."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_JSON", "true")

        assert LoggingConfig.from_env() == LoggingConfig(log_level="DEBUG", json_logs=True)


class TestValidateConfig:
    """Test configuration validation."""

    def test_valid_defaults(self):
        """Test default settings are valid."""
        assert validate_config(RedisConfig(), CacheConfig()) == (True, [])

    def test_invalid_redis_settings(self):
        """Test each invalid Redis field is reported."""
        config = RedisConfig(
            host="",
            port=70000,
            db=-1,
            max_connections=0,
            health_check_interval=-1,
            socket_timeout=0,
        )

        is_valid, errors = validate_config(config)

        assert is_valid is False
        assert len(errors) == 6

    def test_invalid_cache_settings(self):
        """Test cache fields are validated."""
        is_valid, errors = validate_config(
            RedisConfig(), CacheConfig(default_expiration=-1, key_prefix="")
        )

        assert is_valid is False
        assert len(errors) == 2

    def test_store_from_invalid_config(self):
        """Test store construction rejects invalid settings."""
        with pytest.raises(ValueError):
            RedisStore.from_config(RedisConfig(port=0))

    def test_store_from_config(self):
        """Test store built from settings carries pool options."""
        store = RedisStore.from_config(
            RedisConfig(host="cache", port=6380, db=2, max_connections=10),
            CacheConfig(default_expiration=120),
        )

        pool = store.pool.connection_pool
        assert pool.connection_kwargs["host"] == "cache"
        assert pool.connection_kwargs["port"] == 6380
        assert pool.connection_kwargs["db"] == 2
        assert pool.max_connections == 10
        assert store.default_expiration == 120

    def test_service_from_config(self):
        """Test service built from settings uses the configured key prefix."""
        service = CacheService.from_config(
            RedisConfig(host="cache", db=2),
            CacheConfig(default_expiration=120, key_prefix="myapp"),
        )

        assert service.prefix == "myapp"
        assert service.cache_key("user") == "myapp:user"
        assert service.store.default_expiration == 120
        assert service.store.pool.connection_pool.connection_kwargs["db"] == 2

    def test_service_from_invalid_config(self):
        """Test service construction rejects an empty key prefix."""
        with pytest.raises(ValueError):
            CacheService.from_config(RedisConfig(), CacheConfig(key_prefix=""))


class TestConfigureLogging:
    """Test structlog setup."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        """Restore structlog defaults after each test."""
        yield
        structlog.reset_defaults()

    def test_sets_root_level(self):
        """Test configured level is applied to the root logger."""
        configure_logging(LoggingConfig(log_level="WARNING"))

        assert logging.getLogger().level == logging.WARNING

    def test_json_renderer(self):
        """Test JSON output can be selected."""
        configure_logging(LoggingConfig(json_logs=True))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
