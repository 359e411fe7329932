"""
Unit tests for server configuration.
"""

import pytest

from microhttp.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 4221
        assert config.directory is None
        assert config.buffer_size == 2048
        assert config.timeout is None
        assert config.gzip_level == 6
        assert config.handler_errors_as_500 is False
        assert config.log_level == "INFO"

    def test_defaults_are_valid(self):
        ServerConfig().validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"buffer_size": 0},
        {"buffer_size": 4096, "max_request_size": 1024},
        {"gzip_level": 0},
        {"gzip_level": 10},
        {"timeout": 0},
        {"timeout": -1.5},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ValueError, match="Directory does not exist"):
            ServerConfig(directory=str(tmp_path / "nope")).validate()

    def test_existing_directory(self, tmp_path):
        ServerConfig(directory=str(tmp_path)).validate()


class TestFromEnv:
    """Tests for ServerConfig.from_env()."""

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("HTTP_PORT", "8080")
        monkeypatch.setenv("HTTP_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.directory == str(tmp_path)
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_DIRECTORY", "HTTP_TIMEOUT", "HTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config == ServerConfig()
