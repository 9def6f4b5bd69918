"""
Install and update MaaCore.

`install()` always installs the manifest's current version; `update()` first
compares it with what the installed MaaCore reports and does nothing when the
installation is already current. Directories are cleared only once the new
archive is safely in the cache, so an interrupted download never destroys a
working installation.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional


from maa_installer.config import Channel, InstallerConfig
from maa_installer.dirs import Dirs, ensure, ensure_clean
from maa_installer.exceptions import AlreadyInstalledError
from maa_installer.log_utils import logger

from . import archive, fetcher
from .manifest import Asset, VersionManifest, fetch_manifest
from .mapper import make_mapper
from .platforms import PlatformInfo
from .version import SemVer, VersionQuery, make_version_query

ACTION_INSTALL = "install"
ACTION_UPDATE = "update"

Downloader = Callable[[Asset, Path, int], Path]
ManifestFetcher = Callable[[InstallerConfig, Channel], VersionManifest]


@dataclass
class InstallResult:
    """Outcome of an install or update."""

    action: str
    """Either "install" or "update"."""

    version: str
    """Version tag installed, or the current one when nothing changed"""

    skipped: bool = False
    """True when update found the installation already current"""

    archive_path: Optional[Path] = None
    """Cached archive the files came from"""

    extracted_files: List[Path] = field(default_factory=list)
    """Files written during extraction"""


def _default_manifest_fetcher(
    config: InstallerConfig, channel: Channel
) -> VersionManifest:
    return fetch_manifest(config, channel)


class MaaCoreInstaller:
    """
    Orchestrates manifest lookup, download and extraction for MaaCore.

    The network and process collaborators are injectable so the pipeline can
    be exercised without a server or an installed MaaCore.
    """

    def __init__(
        self,
        config: InstallerConfig,
        dirs: Dirs,
        platform_info: Optional[PlatformInfo] = None,
        manifest_fetcher: Optional[ManifestFetcher] = None,
        downloader: Optional[Downloader] = None,
        version_query: Optional[VersionQuery] = None,
    ) -> None:
        self.config = config
        self.dirs = dirs
        self.platform_info = platform_info or PlatformInfo.current()
        self._fetch_manifest = manifest_fetcher or _default_manifest_fetcher
        self._download = downloader or fetcher.download
        self._query_version = version_query or make_version_query(config.runner)

    @property
    def channel(self) -> Channel:
        return self.config.channel

    def core_library_path(self) -> Path:
        return self.dirs.library() / self.platform_info.core_library_name()

    def installed_version(self) -> SemVer:
        return self._query_version(self.dirs)

    def install(
        self,
        force: bool = False,
        no_resource: bool = False,
        timeout: Optional[int] = None,
    ) -> InstallResult:
        """
        Install the manifest's current MaaCore version.

        Parameters:
            force (bool): Reinstall over an existing MaaCore.
            no_resource (bool): Skip resource files; only libraries are extracted.
            timeout (Optional[int]): Connect timeout in seconds for the download.

        Returns:
            InstallResult: What was installed and which files were written.

        Raises:
            AlreadyInstalledError: If MaaCore is present and `force` is False.
        """
        library_path = self.core_library_path()
        if library_path.exists() and not force:
            raise AlreadyInstalledError(str(library_path))

        logger.info(f"Installing package (channel: {self.channel})...")

        lib_dir = ensure(self.dirs.library())
        cache_dir = ensure(self.dirs.cache())
        resource_dir = ensure_clean(self.dirs.resource())

        manifest = self._fetch_manifest(self.config, self.channel)
        asset = manifest.asset(self.platform_info)
        archive_path = self._download(
            asset, cache_dir, timeout or self.config.connect_timeout
        )
        extracted = archive.extract(
            archive_path,
            make_mapper(lib_dir, resource_dir, not no_resource, self.platform_info),
        )

        logger.info(f"MaaCore {manifest.version_tag} installed.")
        return InstallResult(
            action=ACTION_INSTALL,
            version=manifest.version_tag,
            archive_path=archive_path,
            extracted_files=extracted,
        )

    def update(
        self, no_resource: bool = False, timeout: Optional[int] = None
    ) -> InstallResult:
        """
        Update MaaCore when the channel has a newer version than the installed one.

        Parameters:
            no_resource (bool): Skip resource files; only libraries are extracted.
            timeout (Optional[int]): Connect timeout in seconds for the download.

        Returns:
            InstallResult: `skipped` is True when MaaCore was already current.
        """
        manifest = self._fetch_manifest(self.config, self.channel)
        asset = manifest.asset(self.platform_info)
        current_version = self.installed_version()
        new_version = manifest.version()

        if current_version >= new_version:
            logger.info(f"MaaCore is already up to date: v{current_version}.")
            return InstallResult(
                action=ACTION_UPDATE, version=f"v{current_version}", skipped=True
            )

        logger.info(
            f"Found newer MaaCore version {manifest.version_tag} "
            f"current: v{current_version}, updating..."
        )

        cache_dir = ensure(self.dirs.cache())
        archive_path = self._download(
            asset, cache_dir, timeout or self.config.connect_timeout
        )

        lib_dir = ensure_clean(self.dirs.library())
        resource_dir = ensure_clean(self.dirs.resource())
        extracted = archive.extract(
            archive_path,
            make_mapper(lib_dir, resource_dir, not no_resource, self.platform_info),
        )

        logger.info(f"MaaCore updated to {manifest.version_tag}.")
        return InstallResult(
            action=ACTION_UPDATE,
            version=manifest.version_tag,
            archive_path=archive_path,
            extracted_files=extracted,
        )
