"""Interactive prompts built on click."""

from typing import Optional, Sequence, Tuple

import click


def ask_credentials(
    default_username: Optional[str] = None, default_password: Optional[str] = None
) -> Tuple[str, str]:
    """Prompt for an LDAP username and password.

    Environment-sourced values are only offered as defaults; the password
    default is never echoed.
    """
    click.secho("\n\nEnter LDAP username and password to authenticate to vault:\n", bold=True, err=True)
    username = click.prompt("Vault Username", default=default_username or None, err=True)
    password = click.prompt(
        "Vault Password",
        default=default_password or None,
        hide_input=True,
        show_default=False,
        err=True,
    )
    click.echo(err=True)
    return username, password


def choose(message: str, choices: Sequence[str]) -> Optional[str]:
    """Let the operator pick one entry from ``choices``.

    Returns None without prompting when there is nothing to choose from.
    """
    if not choices:
        return None

    click.secho(message, bold=True, err=True)
    for index, choice in enumerate(choices, start=1):
        click.echo(f"  {index:>3}) {choice}", err=True)

    selected = click.prompt("Selection", type=click.IntRange(1, len(choices)), err=True)
    return choices[selected - 1]
