"""Vault authentication.

This package exchanges LDAP credentials for a Vault token.
"""

from .ldap_login import VaultAuthenticator, acquire_credentials, vault_login

__all__ = ["VaultAuthenticator", "acquire_credentials", "vault_login"]
