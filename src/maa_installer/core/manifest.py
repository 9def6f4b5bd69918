"""
Version manifest model and retrieval.

The manifest is a small JSON document served per channel:

    {"version": "v5.0.0",
     "details": {"assets": [{"name": ..., "size": ...,
                             "browser_download_url": ..., "mirrors": [...]}]}}
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from maa_installer.config import Channel, InstallerConfig
from maa_installer.constants import MANIFEST_REQUEST_TIMEOUT
from maa_installer.exceptions import (
    AssetNotFoundError,
    ManifestFetchError,
    ManifestParseError,
)
from maa_installer.log_utils import logger
from maa_installer.utils import get_user_agent

from .platforms import PlatformInfo
from .version import SemVer, parse_tagged_version


@dataclass(frozen=True)
class Asset:
    """One platform-specific downloadable archive."""

    name: str
    """The file name of the asset"""

    size: int
    """Expected size in bytes"""

    primary_url: str
    """URL tried first"""

    mirrors: List[str] = field(default_factory=list)
    """Alternate URLs tried in order after the primary one"""

    def sources(self) -> List[str]:
        """Primary URL followed by the mirrors, in the order they are tried."""
        return [self.primary_url, *self.mirrors]

    @classmethod
    def from_dict(cls, data: Any) -> "Asset":
        if not isinstance(data, dict):
            raise ManifestParseError("Asset entry is not an object")

        name = data.get("name")
        size = data.get("size")
        url = data.get("browser_download_url")
        mirrors = data.get("mirrors")

        if not isinstance(name, str) or not name:
            raise ManifestParseError("Asset entry has no name")
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise ManifestParseError(f"Asset {name} has an invalid size: {size!r}")
        if not isinstance(url, str) or not url:
            raise ManifestParseError(f"Asset {name} has no download URL")
        if not isinstance(mirrors, list) or not all(
            isinstance(m, str) for m in mirrors
        ):
            raise ManifestParseError(f"Asset {name} has an invalid mirror list")

        return cls(name=name, size=size, primary_url=url, mirrors=list(mirrors))


@dataclass(frozen=True)
class VersionManifest:
    """Latest version on a channel and the assets built for it."""

    version_tag: str
    assets: List[Asset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "VersionManifest":
        """
        Build a manifest from the decoded JSON document.

        Raises:
            ManifestParseError: If the document does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise ManifestParseError("Version manifest is not a JSON object")

        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise ManifestParseError("Version manifest has no version string")

        details = data.get("details")
        if not isinstance(details, dict):
            raise ManifestParseError("Version manifest has no details object")

        raw_assets = details.get("assets")
        if not isinstance(raw_assets, list):
            raise ManifestParseError("Version manifest has no asset list")

        return cls(
            version_tag=version,
            assets=[Asset.from_dict(item) for item in raw_assets],
        )

    def version(self) -> SemVer:
        """
        Parsed manifest version; the leading "v" is stripped.

        Raises:
            VersionParseError: If the manifest carries a malformed version.
        """
        return parse_tagged_version(self.version_tag)

    def asset_name(self, platform_info: Optional[PlatformInfo] = None) -> str:
        host = platform_info or PlatformInfo.current()
        return host.asset_name(str(self.version()))

    def asset(self, platform_info: Optional[PlatformInfo] = None) -> Asset:
        """
        Select the asset built for `platform_info` (the running host by default).

        The first asset whose name equals the expected name wins.

        Raises:
            PlatformUnsupportedError: If the host has no naming rule.
            AssetNotFoundError: If no asset carries the expected name.
        """
        expected = self.asset_name(platform_info)
        for asset in self.assets:
            if asset.name == expected:
                return asset
        raise AssetNotFoundError(expected, [a.name for a in self.assets])


def fetch_manifest(
    config: InstallerConfig,
    channel: Optional[Channel] = None,
    timeout: int = MANIFEST_REQUEST_TIMEOUT,
) -> VersionManifest:
    """
    Fetch and parse the version manifest for `channel`.

    Parameters:
        config (InstallerConfig): Supplies the API base URL and default channel.
        channel (Optional[Channel]): Channel to query instead of the configured one.
        timeout (int): Request timeout in seconds.

    Returns:
        VersionManifest: The parsed manifest.

    Raises:
        ManifestFetchError: If the HTTP request fails.
        ManifestParseError: If the body is not valid JSON of the expected shape.
    """
    selected = channel or config.channel
    url = config.core_api_url(selected)
    logger.debug(f"Fetching version manifest: {url}")

    try:
        response = requests.get(
            url, timeout=timeout, headers={"User-Agent": get_user_agent()}
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise ManifestFetchError(
            f"Failed to get version manifest (channel: {selected})",
            url=url,
            channel=str(selected),
            details=str(e),
        ) from e

    try:
        payload: Dict[str, Any] = response.json()
    except ValueError as e:
        raise ManifestParseError(
            f"Failed to parse version manifest (channel: {selected})",
            url=url,
            details=str(e),
        ) from e

    try:
        manifest = VersionManifest.from_dict(payload)
    except ManifestParseError as e:
        e.url = url
        raise

    logger.debug(
        f"Manifest for {selected}: {manifest.version_tag} with {len(manifest.assets)} assets"
    )
    return manifest
