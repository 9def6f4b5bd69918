"""
Custom exceptions for maa-installer.

Every failure the install pipeline can surface has its own class so callers
can tell a flaky mirror apart from a broken manifest or an unsupported host.
All of them carry enough context (asset name, channel, URLs, paths) to retry
the step by hand.
"""

from typing import Optional, Sequence


class MaaInstallerError(Exception):
    """
    Base exception for all maa-installer errors.

    Catching this class catches every application-specific failure.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MaaInstallerError):
    """
    Exception raised when configuration is invalid.

    This includes unreadable or malformed YAML, unknown channels and
    non-numeric timeouts.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


# =============================================================================
# Network Errors
# =============================================================================


class NetworkError(MaaInstallerError):
    """
    Base exception for network failures.

    Attributes:
        url: The URL that was being fetched when the error occurred.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class ManifestFetchError(NetworkError):
    """Exception raised when the version manifest cannot be retrieved."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        channel: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, url, details)
        self.channel = channel


class DownloadExhaustedError(NetworkError):
    """
    Exception raised when the primary URL and every mirror failed.

    Attributes:
        asset_name: File name of the asset that could not be downloaded.
        attempted_urls: Every URL that was tried, in order.
    """

    def __init__(
        self,
        asset_name: str,
        attempted_urls: Sequence[str],
        details: Optional[str] = None,
    ) -> None:
        self.asset_name = asset_name
        self.attempted_urls = list(attempted_urls)
        tried = ", ".join(self.attempted_urls) or "no sources"
        super().__init__(
            f"Failed to download {asset_name} from all sources (tried: {tried})",
            url=self.attempted_urls[0] if self.attempted_urls else None,
            details=details,
        )


# =============================================================================
# Parse Errors
# =============================================================================


class ParseError(MaaInstallerError):
    """Base exception for malformed documents and version strings."""

    pass


class ManifestParseError(ParseError):
    """Exception raised when the manifest body is not the expected JSON shape."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class VersionParseError(ParseError):
    """Exception raised when a version string is not a valid semantic version."""

    def __init__(self, value: str, details: Optional[str] = None) -> None:
        super().__init__(f"Invalid version: {value!r}", details)
        self.value = value


# =============================================================================
# Asset Resolution Errors
# =============================================================================


class PlatformUnsupportedError(MaaInstallerError):
    """Exception raised when no asset naming rule exists for this OS/architecture."""

    def __init__(self, system: str, machine: str) -> None:
        super().__init__(f"Unsupported platform: {system}/{machine}")
        self.system = system
        self.machine = machine


class AssetNotFoundError(MaaInstallerError):
    """Exception raised when the manifest lacks the asset expected for this host."""

    def __init__(self, asset_name: str, available: Sequence[str] = ()) -> None:
        details = f"available: {', '.join(available)}" if available else None
        super().__init__(f"Asset not found: {asset_name}", details)
        self.asset_name = asset_name
        self.available = list(available)


# =============================================================================
# Installation Errors
# =============================================================================


class AlreadyInstalledError(MaaInstallerError):
    """Exception raised by a non-forced install over an existing MaaCore."""

    def __init__(self, library_path: str) -> None:
        super().__init__(
            "MaaCore already exists, use `maa-installer update` to update it "
            "or `maa-installer install --force` to force reinstall",
            details=library_path,
        )
        self.library_path = library_path


class VersionQueryError(MaaInstallerError):
    """Exception raised when the installed MaaCore cannot report its version."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.command = list(command) if command else []


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(MaaInstallerError):
    """
    Exception raised when a managed directory cannot be created or cleaned.

    Attributes:
        path: The path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


# =============================================================================
# Archive Errors
# =============================================================================


class ExtractionError(MaaInstallerError):
    """
    Exception raised when an archive cannot be opened or an entry cannot be read.

    Attributes:
        archive_path: Path to the problematic archive.
        entry: The archive entry being processed, when known.
    """

    def __init__(
        self,
        message: str,
        archive_path: Optional[str] = None,
        entry: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.archive_path = archive_path
        self.entry = entry
