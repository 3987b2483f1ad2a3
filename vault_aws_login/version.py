"""Version lookup from installed metadata or pyproject.toml"""

from importlib import metadata
from pathlib import Path
import tomllib

DISTRIBUTION_NAME = "vault-aws-login"


def get_version() -> str:
    """
    Resolve the tool version.

    Priority:
    1. Metadata of the installed ``vault-aws-login`` distribution
    2. ``project.version`` from the pyproject.toml next to the package (source checkout)
    3. "unknown"
    """
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pass

    try:
        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
            return data.get("project", {}).get("version", "unknown")
    except Exception:
        return "unknown"


__version__ = get_version()
