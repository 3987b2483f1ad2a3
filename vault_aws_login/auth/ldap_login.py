"""LDAP authentication against Vault.

Exchanges an operator's username/password for a time-limited Vault token,
reusing a cached token when one is still valid.

Usage:
    token = vault_login(config, no_pass_prompt=False)
    if token is None:
        sys.exit(2)
"""

import json
import os
from typing import Callable, Mapping, Optional, Tuple, Union
from urllib.parse import quote

import structlog
from pydantic import ValidationError

from .. import prompts
from ..config import Config
from ..http_client import HttpFetchError, VaultHttpClient
from ..models import AuthError, AuthErrorReason, AuthToken, VaultCredential
from ..schemas import LdapLoginResponse
from ..token_cache import TokenCache, now_millis

logger = structlog.get_logger(__name__)

USERNAME_ENV = "VAULT_USERNAME"
PASSWORD_ENV = "VAULT_PASSWORD"

CredentialPrompt = Callable[[Optional[str], Optional[str]], Tuple[str, str]]


def acquire_credentials(
    no_pass_prompt: bool,
    environ: Optional[Mapping[str, str]] = None,
    prompt: CredentialPrompt = prompts.ask_credentials,
) -> VaultCredential:
    """Decide where the LDAP credentials come from.

    With ``no_pass_prompt`` and both VAULT_USERNAME and VAULT_PASSWORD set,
    the environment is used as-is. Otherwise the operator is prompted, with
    any environment values offered as defaults.
    """
    env = os.environ if environ is None else environ
    username = env.get(USERNAME_ENV) or None
    password = env.get(PASSWORD_ENV) or None

    if no_pass_prompt:
        if username and password:
            return VaultCredential(username=username, password=password)
        logger.warning(f"Could not see both {USERNAME_ENV} and {PASSWORD_ENV} as environment variables")

    username, password = prompt(username, password)
    return VaultCredential(username=username, password=password)


class VaultAuthenticator:
    """Performs the LDAP login call against a single Vault server."""

    def __init__(self, config: Config, client: VaultHttpClient, clock: Callable[[], int] = now_millis):
        self.config = config
        self.client = client
        self.clock = clock

    def login(self, credentials: VaultCredential) -> Union[AuthToken, AuthError]:
        """POST the password to ``/v1/auth/ldap/login/{username}``.

        Returns:
            AuthToken on success, otherwise an AuthError whose reason is
            FetchError (no response), VaultPostNot200 (Vault rejected the
            login) or InvalidBody (unexpected response shape)
        """
        url = self.config.vault_endpoint(f"auth/ldap/login/{quote(credentials.username, safe='')}")
        logger.debug(
            "Attempting LDAP authentication",
            vault_url=self.config.vault_url,
            username=credentials.username,
        )

        try:
            response = self.client.post(url, json={"password": credentials.password})
        except HttpFetchError as e:
            return AuthError(reason=AuthErrorReason.FETCH_ERROR, details=e.serialize())

        if not response.ok:
            return AuthError(reason=AuthErrorReason.VAULT_POST_NOT_200, details=response.text)

        try:
            body = response.json()
        except ValueError:
            return AuthError(reason=AuthErrorReason.INVALID_BODY, details=response.text)

        try:
            login = LdapLoginResponse.model_validate(body)
        except ValidationError:
            return AuthError(reason=AuthErrorReason.INVALID_BODY, details=json.dumps(body))

        expiration = self.clock() + int(login.auth.lease_duration * 1000)
        return AuthToken(
            token=login.auth.client_token,
            expiration=expiration,
            policies=list(login.auth.policies),
        )


def vault_login(
    config: Config,
    no_pass_prompt: bool = False,
    client: Optional[VaultHttpClient] = None,
    cache: Optional[TokenCache] = None,
    environ: Optional[Mapping[str, str]] = None,
    prompt: CredentialPrompt = prompts.ask_credentials,
    clock: Callable[[], int] = now_millis,
) -> Optional[AuthToken]:
    """Return a usable Vault token, from the cache or a fresh LDAP login.

    A newly issued token is written back to the cache; a failed write only
    costs a login prompt on the next run.
    """
    cache = cache or TokenCache(config.token_cache_path, config.cache_safety_margin_seconds, clock)
    cached = cache.load()
    if cached is not None:
        return cached

    client = client or VaultHttpClient(config.vault_timeout)
    credentials = acquire_credentials(no_pass_prompt, environ=environ, prompt=prompt)
    result = VaultAuthenticator(config, client, clock).login(credentials)

    if isinstance(result, AuthError):
        logger.error(
            f"Could not authenticate to Vault: {result.reason.value}",
            reason=result.reason.value,
            details=result.details,
        )
        return None

    cache.save(result)
    duration_minutes = round((result.expiration - clock()) / 60_000)
    logger.info(
        f"Successfully authenticated with Vault; token expires in {duration_minutes} minutes",
        policies=result.policies,
    )
    return result
