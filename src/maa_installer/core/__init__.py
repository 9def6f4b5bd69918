"""
MaaCore acquisition and installation pipeline.

Core Components:
- manifest: version manifest model and retrieval
- platforms: host detection and per-platform naming rules
- fetcher: cache-aware downloads with mirror fallback
- archive: zip / tar.gz extraction through a per-entry mapper
- mapper: routing of entries into the library and resource trees
- version: semantic version parsing and installed version query
- maa_core: install and update orchestration
"""

from .archive import extract
from .fetcher import MirroredFetcher, download
from .maa_core import InstallResult, MaaCoreInstaller
from .manifest import Asset, VersionManifest, fetch_manifest
from .mapper import make_mapper, map_entry
from .platforms import PlatformInfo
from .version import (
    SemVer,
    parse_semver,
    parse_tagged_version,
    query_installed_version,
)

__all__ = [
    # Models
    "Asset",
    "VersionManifest",
    "PlatformInfo",
    "InstallResult",
    # Pipeline steps
    "fetch_manifest",
    "download",
    "MirroredFetcher",
    "extract",
    "map_entry",
    "make_mapper",
    # Versions
    "SemVer",
    "parse_semver",
    "parse_tagged_version",
    "query_installed_version",
    # Orchestration
    "MaaCoreInstaller",
]
