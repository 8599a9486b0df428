"""Version information for hostguard.

The version comes from the VERSION file shipped with the package, falling
back to the latest git tag when running from a checkout without one.
"""

import os
import subprocess
from pathlib import Path

_PACKAGE_DIR = Path(__file__).parent


def _git(*args: str) -> str | None:
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=_PACKAGE_DIR,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def get_version() -> str:
    """Get the hostguard version (e.g. "0.1.0")."""
    version_file = _PACKAGE_DIR / "VERSION"
    if version_file.exists():
        version = version_file.read_text().strip()
        if version:
            return version

    tag = _git("describe", "--tags", "--abbrev=0")
    if tag:
        return tag[1:] if tag.startswith("v") else tag

    return "0.0.0"


__version__ = get_version()


def get_commit() -> str:
    """Get the commit SHA from HOSTGUARD_GIT_SHA or git, else "unknown"."""
    env_sha = os.getenv("HOSTGUARD_GIT_SHA", "").strip()
    if env_sha:
        return env_sha
    return _git("rev-parse", "HEAD") or "unknown"
