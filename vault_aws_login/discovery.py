"""Discovery of the AWS accounts and IAM roles a Vault token may use.

Each AWS account is a separate AWS secrets engine mounted under a common
prefix (e.g. ``aws/aws-prefix-prod/``). Vault offers no capability check we
can rely on, so a mount counts as accessible when listing its roles succeeds.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

import structlog
from pydantic import ValidationError

from . import prompts
from .config import Config
from .http_client import HttpFetchError, VaultHttpClient
from .models import AuthToken
from .schemas import RoleListResponse

logger = structlog.get_logger(__name__)

MAX_PROBE_WORKERS = 8

Chooser = Callable[[str, Sequence[str]], Optional[str]]


def account_name_from_mount(mount: str) -> str:
    """``aws/aws-prefix-prod/`` -> ``aws-prefix-prod``"""
    return mount.rstrip("/").split("/")[-1]


def _mount_name_if_accessible(client: VaultHttpClient, config: Config, token: AuthToken, mount: str) -> Optional[str]:
    # TODO: switch to sys/capabilities-self once operators are granted it on their own tokens
    try:
        response = client.list(config.vault_endpoint(f"{mount}roles"), token=token.token)
    except HttpFetchError as e:
        logger.warning(f"Could not fetch role details for {mount}", mount=mount, error=str(e))
        return None

    if not response.ok:
        logger.debug("Mount not accessible", mount=mount, status_code=response.status_code)
        return None

    return account_name_from_mount(mount)


def list_accessible_accounts(config: Config, client: VaultHttpClient, token: AuthToken) -> Optional[List[str]]:
    """Return the sorted account names the token can list roles for.

    Returns None if the mount table itself cannot be read.
    """
    logger.debug(f"Fetching mounts on {config.vault_url}...")
    try:
        response = client.get(config.vault_endpoint("sys/mounts"), token=token.token)
    except HttpFetchError as e:
        logger.error("Could not fetch Vault mounts", error=str(e))
        return None

    if not response.ok:
        logger.error(
            "Could not fetch Vault mounts: returned non-200.",
            status_code=response.status_code,
            body=response.text,
        )
        return None

    try:
        mounts = response.json()
    except ValueError as e:
        logger.error("Invalid JSON received from Vault mounts endpoint", error=str(e))
        return None
    if not isinstance(mounts, dict):
        logger.error("Invalid JSON received from Vault mounts endpoint", error="Expected mountpoint object")
        return None

    candidates = [mount for mount in mounts if mount.startswith(config.mount_prefix)]
    logger.debug(f"Found {len(candidates)} AWS accounts")
    if not candidates:
        return []

    # map() keeps results aligned with candidates. Workers share the client's
    # Session only through session.request() with per-call headers; its
    # urllib3 pool is thread-safe, and no session state is mutated here.
    with ThreadPoolExecutor(max_workers=min(MAX_PROBE_WORKERS, len(candidates))) as pool:
        probed = list(pool.map(lambda mount: _mount_name_if_accessible(client, config, token, mount), candidates))

    accounts = sorted({name for name in probed if name is not None})
    logger.debug(f"Filtered to {len(accounts)} accounts your user can access")
    return accounts


def choose_account(
    config: Config,
    client: VaultHttpClient,
    token: AuthToken,
    chooser: Chooser = prompts.choose,
) -> Optional[str]:
    """Let the operator pick one of the accessible accounts."""
    accounts = list_accessible_accounts(config, client, token)
    if accounts is None:
        return None
    return chooser("Choose an AWS account:", accounts)


def list_roles(config: Config, client: VaultHttpClient, token: AuthToken, account: str) -> Optional[List[str]]:
    """Return the role names configured for ``account``, or None on any failure."""
    logger.debug(f"Fetching roles for account {account} on {config.vault_url}...")
    try:
        response = client.list(config.vault_endpoint(f"aws/{account}/roles"), token=token.token)
    except HttpFetchError as e:
        logger.error(f"Could not fetch role details for {account}", account=account, error=str(e))
        return None

    if not response.ok:
        logger.error(
            f"Non-200 response when fetching roles for {account}",
            account=account,
            status_code=response.status_code,
            body=response.text,
        )
        return None

    try:
        roles = RoleListResponse.model_validate_json(response.text)
    except ValidationError:
        logger.error(f"Malformed role list for account {account}", account=account, body=response.text)
        return None

    return list(roles.data.keys)


def choose_role(
    config: Config,
    client: VaultHttpClient,
    token: AuthToken,
    account: str,
    chooser: Chooser = prompts.choose,
) -> Optional[str]:
    """Pick the IAM role to assume in ``account``.

    A single available role is selected without prompting.
    """
    roles = list_roles(config, client, token, account)
    if roles is None:
        return None

    if len(roles) == 0:
        logger.error(f"No roles available for account {account}", account=account)
        return None
    if len(roles) == 1:
        logger.info(f"Selecting the only role: {roles[0]}", account=account)
        return roles[0]

    return chooser("Choose an IAM role:", sorted(roles))
