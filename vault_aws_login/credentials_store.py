"""Writer for the shared AWS credentials file (``~/.aws/credentials``).

Each account gets its own profile section. Writing a profile replaces the
whole section and rewrites the file; other profiles are preserved.
"""

import configparser
import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import structlog

from .models import CloudCredential

logger = structlog.get_logger(__name__)

EXPIRY_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def expiry_from_duration(duration_seconds: float, now: Optional[float] = None) -> str:
    """ISO-8601 UTC expiry ``duration_seconds`` from now, truncated to whole seconds.

    Args:
        duration_seconds: Lease duration granted by Vault
        now: Current epoch time in seconds (defaults to ``time.time()``)

    Returns:
        Timestamp such as ``2024-05-01T12:30:00Z``
    """
    current = time.time() if now is None else now
    expiry_seconds = int(current + duration_seconds)
    return datetime.fromtimestamp(expiry_seconds, tz=timezone.utc).strftime(EXPIRY_FORMAT)


class AwsCredentialsFile:
    """Read-modify-write access to an INI credentials file.

    Attributes:
        path: Credentials file location
        clock: Returns the current time in epoch seconds
    """

    def __init__(self, path: Path, clock: Callable[[], float] = time.time):
        self.path = Path(path)
        self.clock = clock

    def _read(self) -> configparser.ConfigParser:
        # hand-edited files sometimes repeat a section; later keys win, as with the AWS CLI
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        if self.path.exists():
            parser.read(self.path, encoding="utf-8")
        return parser

    def write_profile(self, profile: str, role: str, credential: CloudCredential) -> None:
        """Replace ``profile`` with the given credential.

        The file is written to a sibling temporary file and moved into place,
        so a failed write leaves the previous contents untouched.

        Raises:
            OSError: If the file or its directory cannot be written
            configparser.Error: If the existing file cannot be parsed
        """
        parser = self._read()
        parser.remove_section(profile)
        parser[profile] = {
            "aws_access_key_id": credential.access_key,
            "aws_secret_access_key": credential.secret_key,
            "aws_session_token": credential.session_token,
            "expiry": expiry_from_duration(credential.lease_duration_seconds, now=self.clock()),
            "role": role,
        }

        if not self.path.parent.exists():
            self.path.parent.mkdir(mode=0o755, parents=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                parser.write(f)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Successfully updated {self.path} with an '{profile}' profile", profile=profile)
