import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

DEFAULT_MOUNT_PREFIX = "aws/"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_FEDERATION_URL = "https://signin.aws.amazon.com/federation"
DEFAULT_SESSION_DURATION = 28800
DEFAULT_CACHE_SAFETY_MARGIN_SECONDS = 5 * 60


def default_token_cache_path() -> Path:
    return Path.home() / ".vault_token"


def default_credentials_path() -> Path:
    return Path.home() / ".aws" / "credentials"


@dataclass
class Config:
    """Settings shared by every stage of the credential flow.

    Built once by the CLI and handed to each component, so tests can point
    a component at a fake Vault or a temporary home directory.

    Environment variables (read by ``from_env``):
        - VAULT_TOKEN_CACHE: Token cache file (default: ~/.vault_token)
        - AWS_SHARED_CREDENTIALS_FILE: Credentials store (default: ~/.aws/credentials)
        - LOG_LEVEL: Logging level (default: INFO)
    """

    vault_url: str = ""
    mount_prefix: str = DEFAULT_MOUNT_PREFIX
    vault_timeout: float = DEFAULT_TIMEOUT_SECONDS
    aws_api_timeout: float = DEFAULT_TIMEOUT_SECONDS
    token_cache_path: Path = field(default_factory=default_token_cache_path)
    credentials_path: Path = field(default_factory=default_credentials_path)
    federation_url: str = DEFAULT_FEDERATION_URL
    session_duration: int = DEFAULT_SESSION_DURATION
    cache_safety_margin_seconds: int = DEFAULT_CACHE_SAFETY_MARGIN_SECONDS
    log_level: str = "INFO"

    def __post_init__(self):
        # "https://vault.example.io/" and "https://vault.example.io" address the same API
        self.vault_url = (self.vault_url or "").rstrip("/")
        self.token_cache_path = Path(self.token_cache_path).expanduser()
        self.credentials_path = Path(self.credentials_path).expanduser()

    @classmethod
    def from_env(cls, vault_url: str, mount_prefix: Optional[str] = None) -> "Config":
        """Build configuration from CLI values plus environment overrides.

        A ``.env`` file in the working directory is loaded first; variables
        already present in the environment take precedence over it.
        """
        load_dotenv(find_dotenv(usecwd=True))

        kwargs = {"vault_url": vault_url, "log_level": os.getenv("LOG_LEVEL", "INFO").upper()}
        if mount_prefix:
            kwargs["mount_prefix"] = mount_prefix
        if token_cache := os.getenv("VAULT_TOKEN_CACHE"):
            kwargs["token_cache_path"] = Path(token_cache)
        if credentials_file := os.getenv("AWS_SHARED_CREDENTIALS_FILE"):
            kwargs["credentials_path"] = Path(credentials_file)

        return cls(**kwargs)

    def validate(self) -> None:
        """Raise ValueError if the Vault URL cannot be used."""
        if not self.vault_url:
            raise ValueError("vault url is required")

        parsed = urlparse(self.vault_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid vault url: {self.vault_url!r} (expected http(s)://host[:port])")

    def vault_endpoint(self, path: str) -> str:
        """Absolute URL of a Vault API path such as ``sys/mounts``."""
        return f"{self.vault_url}/v1/{path.lstrip('/')}"
