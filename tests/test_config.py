"""Tests for configuration defaults, environment overrides and validation."""

from pathlib import Path

import pytest

from vault_aws_login.config import Config


class TestDefaults:
    def test_defaults(self):
        config = Config(vault_url="https://vault.example.io")

        assert config.mount_prefix == "aws/"
        assert config.vault_timeout == 10
        assert config.aws_api_timeout == 10
        assert config.federation_url == "https://signin.aws.amazon.com/federation"
        assert config.session_duration == 28800
        assert config.cache_safety_margin_seconds == 300
        assert config.token_cache_path == Path.home() / ".vault_token"
        assert config.credentials_path == Path.home() / ".aws" / "credentials"

    def test_trailing_slash_stripped(self):
        assert Config(vault_url="https://vault.example.io/").vault_url == "https://vault.example.io"

    def test_vault_endpoint(self):
        config = Config(vault_url="https://vault.example.io/")

        assert config.vault_endpoint("sys/mounts") == "https://vault.example.io/v1/sys/mounts"
        assert config.vault_endpoint("/aws/x/roles") == "https://vault.example.io/v1/aws/x/roles"


class TestFromEnv:
    def test_mount_prefix_override(self):
        assert Config.from_env("https://vault.example.io", "aws/aws-prefix-").mount_prefix == "aws/aws-prefix-"

    def test_empty_mount_prefix_keeps_default(self):
        assert Config.from_env("https://vault.example.io", "").mount_prefix == "aws/"

    def test_path_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VAULT_TOKEN_CACHE", str(tmp_path / "cache.json"))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))

        config = Config.from_env("https://vault.example.io")

        assert config.token_cache_path == tmp_path / "cache.json"
        assert config.credentials_path == tmp_path / "credentials"

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Config.from_env("https://vault.example.io").log_level == "DEBUG"

    def test_dotenv_file_loaded(self, monkeypatch, tmp_path):
        # registers LOG_LEVEL with monkeypatch so the value loaded from .env is removed afterwards
        monkeypatch.setenv("LOG_LEVEL", "placeholder")
        monkeypatch.delenv("LOG_LEVEL")
        (tmp_path / ".env").write_text("LOG_LEVEL=WARNING\n")

        assert Config.from_env("https://vault.example.io").log_level == "WARNING"


class TestValidate:
    @pytest.mark.parametrize("url", ["https://vault.example.io", "http://127.0.0.1:8200"])
    def test_valid(self, url):
        Config(vault_url=url).validate()

    @pytest.mark.parametrize("url", ["", "vault.example.io", "ftp://vault.example.io", "https://"])
    def test_invalid(self, url):
        with pytest.raises(ValueError):
            Config(vault_url=url).validate()
