# src/maa_installer/utils.py
import importlib.metadata
from typing import Optional

from maa_installer.constants import APP_NAME, BYTES_PER_MEGABYTE

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE: Optional[str] = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `maa-installer/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def normalize_url(url: str) -> str:
    """Return `url` with exactly one trailing slash."""
    return url.rstrip("/") + "/"


def format_size(num_bytes: int) -> str:
    """Render a byte count the way download log lines show it."""
    megabytes = num_bytes / BYTES_PER_MEGABYTE
    if megabytes >= 1.0:
        return f"{megabytes:.1f} MB"
    return f"{num_bytes} bytes"
