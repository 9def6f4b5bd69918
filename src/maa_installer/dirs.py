"""
Directory layout for MaaCore installations.

The library, resource and cache locations default to platformdirs user
directories and can be pointed elsewhere by environment variables or explicit
arguments (tests and packagers do both).
"""

import os
import shutil
from pathlib import Path
from typing import Mapping, Optional, Union

import platformdirs

from maa_installer.constants import (
    APP_NAME,
    CACHE_DIR_ENV_VAR,
    LIBRARY_DIR_ENV_VAR,
    LIBRARY_DIR_NAME,
    RESOURCE_DIR_ENV_VAR,
    RESOURCE_DIR_NAME,
)
from maa_installer.exceptions import FileSystemError
from maa_installer.log_utils import logger

Pathish = Union[str, Path]


def ensure(path: Pathish) -> Path:
    """
    Create `path` (and its parents) if it does not exist yet.

    Returns:
        Path: The directory path.

    Raises:
        FileSystemError: If the directory cannot be created.
    """
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(
            f"Could not create directory {directory}", path=str(directory), details=str(e)
        ) from e
    return directory


def ensure_clean(path: Pathish) -> Path:
    """
    Remove whatever is at `path` and recreate it as an empty directory.

    Raises:
        FileSystemError: If removal or creation fails.
    """
    directory = Path(path)
    try:
        if directory.is_symlink() or directory.is_file():
            directory.unlink()
        elif directory.exists():
            shutil.rmtree(directory)
    except OSError as e:
        raise FileSystemError(
            f"Could not clean directory {directory}", path=str(directory), details=str(e)
        ) from e
    logger.debug(f"Cleaned directory {directory}")
    return ensure(directory)


class Dirs:
    """Resolved library, resource, cache and log directories."""

    def __init__(
        self,
        library: Optional[Pathish] = None,
        resource: Optional[Pathish] = None,
        cache: Optional[Pathish] = None,
        log: Optional[Pathish] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        env = os.environ if environ is None else environ
        data_dir = Path(platformdirs.user_data_dir(APP_NAME))

        self._library = Path(
            library or env.get(LIBRARY_DIR_ENV_VAR) or data_dir / LIBRARY_DIR_NAME
        )
        self._resource = Path(
            resource or env.get(RESOURCE_DIR_ENV_VAR) or data_dir / RESOURCE_DIR_NAME
        )
        self._cache = Path(
            cache or env.get(CACHE_DIR_ENV_VAR) or platformdirs.user_cache_dir(APP_NAME)
        )
        self._log = Path(log or platformdirs.user_log_dir(APP_NAME))

    def library(self) -> Path:
        return self._library

    def resource(self) -> Path:
        return self._resource

    def cache(self) -> Path:
        return self._cache

    def log(self) -> Path:
        return self._log

    def __repr__(self) -> str:
        return (
            f"Dirs(library={self._library!s}, resource={self._resource!s}, "
            f"cache={self._cache!s})"
        )
