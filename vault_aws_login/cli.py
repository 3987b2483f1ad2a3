#!/usr/bin/env python3
"""
Vault AWS login CLI

Authenticates to Vault with LDAP, lets the operator choose an AWS account
and IAM role, then either writes temporary keys to ~/.aws/credentials or
produces a federated AWS console sign-in link.

Commands:
    keys        Write temporary credentials as a profile named after the account
    console     Open (or print) an AWS console sign-in URL

Usage:
    vault-aws-login keys VAULT_URL [MOUNT_PREFIX]
    vault-aws-login console VAULT_URL MOUNT_PREFIX ISSUER REGION [ACCOUNT [ROLE]] [--url-only]

Exit codes:
    0  success
    1  unknown command or missing parameters
    2  Vault authentication failed
    3  no account chosen
    4  no role chosen
    5  role assumption failed (keys)
    6  role assumption failed (console)
    7  sign-in token could not be obtained

Module: cli
"""

import sys
from typing import Optional

import click
import structlog

from .auth import vault_login
from .config import Config
from .discovery import choose_account, choose_role
from .http_client import VaultHttpClient
from .logging_config import configure_logging
from .sts import assume_role, build_console_url, get_signin_token
from .version import __version__

logger = structlog.get_logger(__name__)

COMMANDS = ("keys", "console")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_AUTH_FAILED = 2
EXIT_NO_ACCOUNT = 3
EXIT_NO_ROLE = 4
EXIT_KEYS_FAILED = 5
EXIT_CONSOLE_ROLE_FAILED = 6
EXIT_SIGNIN_FAILED = 7
EXIT_ABORTED = 130

USAGE = """
Usage: vault-aws-login  keys|console  vault-url  [mount-filter  [sts-issuer  aws-region  [account  [role]]]]  [--no-pass-prompt] [--url-only]

  --no-pass-prompt     Disables prompting for passwords, and uses the VAULT_* environment variables
  --url-only           When invoking `console`, prints the sign-in url without also opening it

The environment variables VAULT_USERNAME and VAULT_PASSWORD are used as defaults for form entry.
"""


def usage_error(ctx: click.Context, message: str) -> None:
    """Print an error with the usage text and exit with code 1"""
    click.secho(f"\n{message}", fg="red", bold=True, err=True)
    click.echo(USAGE, err=True)
    ctx.exit(EXIT_USAGE)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("command", required=False)
@click.argument("vault_url", required=False)
@click.argument("mount_prefix", required=False)
@click.argument("issuer", required=False)
@click.argument("region", required=False)
@click.argument("account", required=False)
@click.argument("role", required=False)
@click.option("--no-pass-prompt", is_flag=True, help="Use VAULT_USERNAME/VAULT_PASSWORD without prompting")
@click.option("--url-only", is_flag=True, help="With `console`, print the sign-in URL without opening it")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.version_option(version=__version__, prog_name="vault-aws-login")
@click.pass_context
def cli(
    ctx: click.Context,
    command: Optional[str],
    vault_url: Optional[str],
    mount_prefix: Optional[str],
    issuer: Optional[str],
    region: Optional[str],
    account: Optional[str],
    role: Optional[str],
    no_pass_prompt: bool,
    url_only: bool,
    verbose: bool,
):
    """
    Get short-lived AWS credentials through Vault.

    Examples:
        vault-aws-login keys https://vault.example.io aws/aws-prefix-
        vault-aws-login console https://vault.example.io aws/aws-prefix- https://www.example.com/ eu-west-1
    """
    if command not in COMMANDS:
        usage_error(ctx, f"Unknown command: {command or ''}")

    if not vault_url:
        usage_error(ctx, "Missing parameters: vault url is required")

    config = Config.from_env(vault_url, mount_prefix)
    try:
        config.validate()
    except ValueError as e:
        usage_error(ctx, f"Invalid parameters: {e}")

    if command == "console" and (not issuer or not region):
        usage_error(ctx, "Missing parameters: issuer and region are required for generating console links")

    configure_logging(config.log_level, verbose)

    client = VaultHttpClient(config.vault_timeout)
    try:
        ctx.exit(run(config, client, command, issuer, region, account, role, no_pass_prompt, url_only))
    finally:
        client.close()


def run(
    config: Config,
    client: VaultHttpClient,
    command: str,
    issuer: Optional[str],
    region: Optional[str],
    account: Optional[str],
    role: Optional[str],
    no_pass_prompt: bool,
    url_only: bool,
) -> int:
    """Run the login pipeline and return the process exit code."""
    token = vault_login(config, no_pass_prompt=no_pass_prompt, client=client)
    if token is None:
        return EXIT_AUTH_FAILED

    if not account:
        account = choose_account(config, client, token)
        if not account:
            return EXIT_NO_ACCOUNT

    if not role:
        role = choose_role(config, client, token, account)
        if not role:
            return EXIT_NO_ROLE

    result = assume_role(config, client, token, account, role)

    if command == "keys":
        if result is None or not result.persisted:
            return EXIT_KEYS_FAILED
        click.secho(f"\nexport AWS_PROFILE={result.profile_name}\n", bold=True)
        return EXIT_OK

    if result is None:
        return EXIT_CONSOLE_ROLE_FAILED

    aws_client = VaultHttpClient(config.aws_api_timeout)
    try:
        signin_token = get_signin_token(config, aws_client, result.credential)
    finally:
        aws_client.close()
    if not signin_token:
        return EXIT_SIGNIN_FAILED

    url = build_console_url(config, issuer or "", region or "", signin_token)
    click.echo("\n\n Sign-in URL:\n")
    click.secho(f"{url}\n\n", bold=True)
    if not url_only:
        click.launch(url)
    return EXIT_OK


def main() -> None:
    """Console-script entry point; maps click's own errors onto this tool's exit codes."""
    try:
        code = cli.main(standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("\nAborted!", err=True)
        sys.exit(EXIT_ABORTED)
    except click.ClickException as e:
        e.show()
        click.echo(USAGE, err=True)
        sys.exit(EXIT_USAGE)
    sys.exit(code or EXIT_OK)


if __name__ == "__main__":
    main()
