"""Pytest configuration and fixtures for test isolation."""

import configparser
import json
from unittest.mock import MagicMock

import pytest
import requests
import structlog

from vault_aws_login.config import Config
from vault_aws_login.http_client import VaultHttpClient
from vault_aws_login.models import AuthToken, CloudCredential

NOW_MILLIS = 1_700_000_000_000


@pytest.fixture(scope="function", autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Automatically isolate each test from the host environment.

    Clears variables that would otherwise leak the developer's Vault login or
    redirect writes into their real home directory.
    """
    env_vars_to_clear = [
        "VAULT_USERNAME",
        "VAULT_PASSWORD",
        "VAULT_TOKEN_CACHE",
        "AWS_SHARED_CREDENTIALS_FILE",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    # keep a developer's .env out of Config.from_env
    monkeypatch.chdir(tmp_path)

    yield

    structlog.reset_defaults()


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at a fake Vault and temporary files."""
    return Config(
        vault_url="https://vault.example.io",
        mount_prefix="aws/aws-prefix-",
        token_cache_path=tmp_path / ".vault_token",
        credentials_path=tmp_path / ".aws" / "credentials",
    )


@pytest.fixture
def clock():
    return lambda: NOW_MILLIS


@pytest.fixture
def auth_token():
    return AuthToken(token="s.vault-token", expiration=NOW_MILLIS + 3_600_000, policies=["default", "aws-dev"])


@pytest.fixture
def cloud_credential():
    return CloudCredential(
        access_key="ASIAEXAMPLE",
        secret_key="secret/EXAMPLEKEY",
        session_token="FwoGZXIvYXdzEBMaDJ...",
        lease_duration_seconds=3600,
    )


def make_response(status_code: int = 200, body=None, text: str = None) -> MagicMock:
    """Build a fake ``requests.Response``."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if text is None:
        text = json.dumps(body) if body is not None else ""
    response.text = text
    if body is not None:
        response.json.return_value = body
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


@pytest.fixture
def mock_client():
    """VaultHttpClient whose session is a MagicMock."""
    session = MagicMock(spec=requests.Session)
    return VaultHttpClient(timeout=10, session=session)


def read_profiles(path) -> dict:
    """All sections of a credentials file as plain dictionaries."""
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    parser.read(path, encoding="utf-8")
    return {section: dict(parser.items(section)) for section in parser.sections()}
