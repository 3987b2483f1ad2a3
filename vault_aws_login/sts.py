"""Temporary AWS credentials from Vault's AWS secrets engine, and console sign-in links.

Usage:
    result = assume_role(config, client, token, "aws-prefix-prod", "developer")
    signin_token = get_signin_token(config, client, result.credential)
    url = build_console_url(config, issuer, "eu-west-1", signin_token)
"""

import configparser
import json
from typing import Optional
from urllib.parse import urlencode

import click
import structlog
from pydantic import ValidationError

from .config import Config
from .credentials_store import AwsCredentialsFile
from .http_client import HttpFetchError, VaultHttpClient
from .models import AssumeRoleResult, AuthToken, CloudCredential
from .schemas import SigninTokenResponse, StsResponse

logger = structlog.get_logger(__name__)


def _request_credential(
    config: Config, client: VaultHttpClient, token: AuthToken, account: str, role: str
) -> Optional[CloudCredential]:
    logger.debug(f"Assuming role {role} on {account} at {config.vault_url}...")
    try:
        response = client.get(config.vault_endpoint(f"aws/{account}/sts/{role}"), token=token.token)
    except HttpFetchError as e:
        logger.error(f"Could not assume role {role} for {account}", account=account, role=role, error=str(e))
        return None

    if not response.ok:
        logger.error(
            f"Non-200 response when assuming role {role} for {account}",
            account=account,
            role=role,
            status_code=response.status_code,
            body=response.text,
        )
        return None

    try:
        body = response.json()
    except ValueError as e:
        logger.error(
            f"Could not decode sts token details when assuming role {role} for account {account}",
            account=account,
            role=role,
            error=str(e),
        )
        return None

    try:
        sts = StsResponse.model_validate(body)
    except ValidationError as e:
        # body holds secrets when only part of it is malformed; log the field paths only
        logger.error(
            f"Malformed sts response when assuming role {role} for account {account}",
            account=account,
            role=role,
            problems=[".".join(str(part) for part in err["loc"]) for err in e.errors()],
        )
        return None

    return CloudCredential(
        access_key=sts.data.access_key,
        secret_key=sts.data.secret_key,
        session_token=sts.data.security_token,
        lease_duration_seconds=int(sts.lease_duration),
    )


def assume_role(
    config: Config,
    client: VaultHttpClient,
    token: AuthToken,
    account: str,
    role: str,
    store: Optional[AwsCredentialsFile] = None,
) -> Optional[AssumeRoleResult]:
    """Fetch STS credentials for ``role`` in ``account`` and store them as profile ``account``.

    Returns:
        None if Vault did not hand out credentials. Otherwise an
        AssumeRoleResult; ``persisted`` is False when the credentials file
        could not be written, in which case the credentials were echoed
        to the console instead.
    """
    credential = _request_credential(config, client, token, account, role)
    if credential is None:
        return None

    logger.info(f"Successfully assumed role {role} in account {account}", account=account, role=role)

    store = store or AwsCredentialsFile(config.credentials_path)
    try:
        store.write_profile(account, role, credential)
    except (OSError, configparser.Error) as e:
        logger.error(
            f"Could not automatically update your {store.path} file",
            path=str(store.path),
            error=str(e),
        )
        fallback = {**credential.to_dict(), "profileName": account, "role": role}
        click.echo("The generated credentials are as follows:")
        click.echo(json.dumps(fallback, indent=2))
        return AssumeRoleResult(credential=credential, persisted=False, profile_name=None)

    return AssumeRoleResult(credential=credential, persisted=True, profile_name=account)


def get_signin_token(config: Config, client: VaultHttpClient, credential: CloudCredential) -> Optional[str]:
    """Exchange temporary credentials for a single-use federation sign-in token."""
    session = {
        "sessionId": credential.access_key,
        "sessionKey": credential.secret_key,
        "sessionToken": credential.session_token,
    }
    params = {
        "Action": "getSigninToken",
        "SessionDuration": config.session_duration,
        "SessionType": "json",
        "Session": json.dumps(session),
    }

    logger.debug("Calling AWS federation API to request signin url...")
    try:
        response = client.get(config.federation_url, params=params)
    except HttpFetchError as e:
        logger.error("Could not query AWS API for sign-in link", error=str(e))
        return None

    if not response.ok:
        logger.error(
            "Non-200 response when querying AWS API for sign-in link",
            status_code=response.status_code,
            body=response.text,
        )
        return None

    try:
        signin = SigninTokenResponse.model_validate_json(response.text)
    except ValidationError as e:
        logger.error("Malformed sts response when acquiring sign-in link", error_count=e.error_count())
        return None

    return signin.signin_token


def build_console_url(config: Config, issuer: str, region: str, signin_token: str) -> str:
    """Federated console login URL for a sign-in token."""
    query = urlencode(
        {
            "Action": "login",
            "Issuer": issuer,
            "Destination": f"https://{region}.console.aws.amazon.com/",
            "SigninToken": signin_token,
        }
    )
    return f"{config.federation_url}?{query}"
