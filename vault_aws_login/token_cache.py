"""On-disk cache for the Vault token.

The cache is a small JSON document ``{"token", "expiration", "policies"}``
in the operator's home directory. Loading never raises: a missing,
unreadable, malformed or nearly-expired cache is simply reported as absent
and the caller re-authenticates.
"""

import json
import time
from pathlib import Path
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from .models import AuthToken
from .schemas import CachedToken

logger = structlog.get_logger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


class TokenCache:
    """Load and save a previously issued Vault token.

    Attributes:
        path: Cache file location
        safety_margin_seconds: A token expiring sooner than this is treated as expired
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        path: Path,
        safety_margin_seconds: int = 5 * 60,
        clock: Callable[[], int] = now_millis,
    ):
        self.path = Path(path)
        self.safety_margin_seconds = safety_margin_seconds
        self.clock = clock

    def load(self) -> Optional[AuthToken]:
        """Return the cached token if it is well-formed and not about to expire."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("No usable token cache", path=str(self.path), error=str(e))
            return None

        try:
            cached = CachedToken.model_validate_json(raw)
        except ValidationError as e:
            logger.debug("Ignoring malformed token cache", path=str(self.path), error_count=e.error_count())
            return None

        if cached.expiration < self.clock() + self.safety_margin_seconds * 1000:
            logger.info("Vault token expired - renewing...")
            return None

        logger.info("Using cached vault token")
        return AuthToken(token=cached.token, expiration=cached.expiration, policies=list(cached.policies))

    def save(self, token: AuthToken) -> bool:
        """Write the token to disk; failure is logged and reported, never raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(token.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(
                "Could not cache vault token - check cache file is writable",
                path=str(self.path),
                error=str(e),
            )
            return False

        # the file holds a live credential
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not restrict token cache permissions", path=str(self.path))
        return True
