"""
Configuration for maa-installer.

Settings come from an optional YAML file plus a handful of environment
overrides. Both are read once by `load_config()` into an `InstallerConfig`
value that is passed explicitly to every network step, so nothing downstream
looks at `os.environ` again.
"""

import dataclasses
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import platformdirs
import yaml

from maa_installer.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CLI_API_URL,
    DEFAULT_CLI_DOWNLOAD_URL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAA_API_URL,
    DEFAULT_RUNNER,
    MAA_API_URL_ENV_VAR,
    MAA_CLI_API_ENV_VAR,
    MAA_CLI_DOWNLOAD_ENV_VAR,
)
from maa_installer.exceptions import ConfigurationError
from maa_installer.log_utils import logger
from maa_installer.utils import normalize_url


class Channel(Enum):
    """Release track selecting which manifest to fetch."""

    STABLE = "stable"
    BETA = "beta"
    ALPHA = "alpha"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union[str, "Channel"]) -> "Channel":
        """
        Convert a case-insensitive channel name into a Channel.

        Raises:
            ConfigurationError: If `value` names no known channel.
        """
        if isinstance(value, Channel):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(c.value for c in cls)
            raise ConfigurationError(
                f"Unknown channel: {value!r}", details=f"expected one of {choices}"
            ) from None


@dataclass(frozen=True)
class InstallerConfig:
    """Resolved settings for one invocation."""

    channel: Channel = Channel.STABLE
    api_url: str = DEFAULT_MAA_API_URL
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    runner: str = DEFAULT_RUNNER
    cli_api_url_base: str = DEFAULT_CLI_API_URL
    cli_download_url_base: str = DEFAULT_CLI_DOWNLOAD_URL
    source_path: Optional[Path] = field(default=None, compare=False)

    def core_api_url(self, channel: Optional[Channel] = None) -> str:
        """URL of the MaaCore version manifest for `channel` (defaults to the configured one)."""
        return f"{normalize_url(self.api_url)}{channel or self.channel}.json"

    def cli_api_url(self) -> str:
        """URL of the CLI version manifest for the configured channel."""
        return f"{normalize_url(self.cli_api_url_base)}{self.channel}.json"

    def cli_download_url(self, tag: str, name: str) -> str:
        """URL of a CLI release binary addressed by release tag and file name."""
        return f"{normalize_url(self.cli_download_url_base)}{tag}/{name}"

    def with_channel(self, channel: Union[str, Channel]) -> "InstallerConfig":
        return dataclasses.replace(self, channel=Channel.parse(channel))

    def with_connect_timeout(self, timeout: int) -> "InstallerConfig":
        return dataclasses.replace(self, connect_timeout=_parse_timeout(timeout))


def get_config_file_path() -> Path:
    """Default location of the YAML configuration file."""
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILE_NAME


def _parse_timeout(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid connect timeout: {value!r}")
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid connect timeout: {value!r}") from None
    if timeout <= 0:
        raise ConfigurationError(
            f"Invalid connect timeout: {value!r}", details="must be positive"
        )
    return timeout


def _read_config_file(path: Path) -> Dict[str, Any]:
    """
    Load the YAML mapping stored at `path`.

    A missing file yields an empty mapping. An empty file does too.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML, or
            its top level is not a mapping.
    """
    if not path.exists():
        logger.debug(f"No configuration file at {path}; using defaults")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Failed to parse configuration file", path=str(path), details=str(e)
        ) from e
    except OSError as e:
        raise ConfigurationError(
            "Failed to read configuration file", path=str(path), details=str(e)
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping", path=str(path)
        )
    return data


def _string_setting(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Invalid value for {key}: {value!r}")
    return value.strip()


def load_config(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> InstallerConfig:
    """
    Build the configuration for this invocation.

    Reads `path` (or the platformdirs default) when it exists and then applies
    the MAA_API_URL, MAA_CLI_API and MAA_CLI_DOWNLOAD environment overrides.
    Environment values win over file values.

    Parameters:
        path (Optional[Path]): Explicit YAML file to read.
        environ (Optional[Mapping[str, str]]): Environment to consult; defaults to `os.environ`.

    Returns:
        InstallerConfig: The resolved settings.

    Raises:
        ConfigurationError: If the file or any value in it is invalid.
    """
    config_path = Path(path) if path is not None else get_config_file_path()
    env = os.environ if environ is None else environ
    data = _read_config_file(config_path)

    cli_section = data.get("cli") or {}
    if not isinstance(cli_section, dict):
        raise ConfigurationError(
            "The cli section must be a mapping", path=str(config_path)
        )

    api_url = env.get(MAA_API_URL_ENV_VAR) or _string_setting(
        data, "api_url", DEFAULT_MAA_API_URL
    )
    cli_api_url = env.get(MAA_CLI_API_ENV_VAR) or _string_setting(
        cli_section, "api_url", DEFAULT_CLI_API_URL
    )
    cli_download_url = env.get(MAA_CLI_DOWNLOAD_ENV_VAR) or _string_setting(
        cli_section, "download_url", DEFAULT_CLI_DOWNLOAD_URL
    )

    config = InstallerConfig(
        channel=Channel.parse(data.get("channel", Channel.STABLE)),
        api_url=api_url,
        connect_timeout=_parse_timeout(
            data.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)
        ),
        runner=_string_setting(data, "runner", DEFAULT_RUNNER),
        cli_api_url_base=cli_api_url,
        cli_download_url_base=cli_download_url,
        source_path=config_path if config_path.exists() else None,
    )
    logger.debug(f"Using MaaCore API base {config.api_url} (channel: {config.channel})")
    return config
