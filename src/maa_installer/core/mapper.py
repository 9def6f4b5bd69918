"""
Routing of archive entries into the library and resource trees.

Only two kinds of entries survive extraction: files below a `resource/`
component (path preserved relative to the resource root) and native library
files (flattened into the library root). Everything else is dropped.
"""

from functools import partial
from pathlib import Path, PurePath, PurePosixPath
from typing import Optional, Union

from maa_installer.constants import RESOURCE_COMPONENT
from maa_installer.log_utils import logger

from .archive import EntryMapper
from .platforms import PlatformInfo


def is_dynamic_library(name: str, platform_info: Optional[PlatformInfo] = None) -> bool:
    """
    Whether `name` looks like a dynamic library on the given platform.

    The suffix may appear anywhere after the prefix, so versioned names such as
    "libMaaCore.so.1" qualify.
    """
    prefix, suffix = (platform_info or PlatformInfo.current()).dylib_convention()
    return name.startswith(prefix) and suffix in name


def map_entry(
    entry: Union[str, PurePath],
    library_dir: Path,
    resource_dir: Path,
    install_resources: bool,
    platform_info: Optional[PlatformInfo] = None,
) -> Optional[Path]:
    """
    Decide where an archive entry is written, if anywhere.

    Components are examined in order, ignoring empty, "." and ".." parts. The
    first component equal to "resource" (when resources are installed) sends
    the remainder of the path under `resource_dir`; the first component that
    looks like a dynamic library is placed directly in `library_dir`.

    Returns:
        Optional[Path]: The destination, or None when the entry is discarded.
    """
    host = platform_info or PlatformInfo.current()
    parts = [
        part
        for part in PurePosixPath(str(entry).replace("\\", "/")).parts
        if part not in ("", ".", "..", "/")
    ]

    for index, part in enumerate(parts):
        if install_resources and part == RESOURCE_COMPONENT:
            rest = parts[index + 1 :]
            if not rest:
                return None
            return resource_dir.joinpath(*rest)
        if is_dynamic_library(part, host):
            return library_dir / part

    return None


def make_mapper(
    library_dir: Path,
    resource_dir: Path,
    install_resources: bool,
    platform_info: Optional[PlatformInfo] = None,
) -> EntryMapper:
    """Bind everything but the entry path into a mapper for `archive.extract`."""
    host = platform_info or PlatformInfo.current()
    logger.debug(
        f"Mapping libraries to {library_dir}"
        + (f" and resources to {resource_dir}" if install_resources else "")
    )
    return partial(
        map_entry,
        library_dir=library_dir,
        resource_dir=resource_dir,
        install_resources=install_resources,
        platform_info=host,
    )
