"""Short-lived AWS credentials brokered by HashiCorp Vault."""

from .version import __version__

__all__ = ["__version__"]
