import io
import tarfile
import zipfile
from pathlib import Path
from typing import Dict, Union

import platformdirs
import pytest
import requests

from maa_installer.constants import (
    CACHE_DIR_ENV_VAR,
    LIBRARY_DIR_ENV_VAR,
    MAA_API_URL_ENV_VAR,
    MAA_CLI_API_ENV_VAR,
    MAA_CLI_DOWNLOAD_ENV_VAR,
    RESOURCE_DIR_ENV_VAR,
)
from maa_installer.core.platforms import PlatformInfo

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def _async_block_network(*_args, **_kwargs):
    """
    Prevent aiohttp requests during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` suggesting to mock `aiohttp.ClientSession`.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the test suite.

    Parameters:
        config: pytest.Config
            The pytest configuration object.
    """
    config.addinivalue_line("markers", "unit: fast isolated unit test")
    config.addinivalue_line(
        "markers", "core_downloads: download, extraction and install pipeline tests"
    )


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point every platformdirs location and MAA_* override into a temporary tree.

    Creates temp directories for cache, config, data and logs, sets XDG_*
    environment variables, patches the platformdirs user_* functions to return
    them and removes any MAA_* URL or directory overrides inherited from the
    developer's shell.
    """
    base = tmp_path_factory.mktemp("maa-installer")
    cache_dir = base / "cache"
    config_dir = base / "config"
    data_dir = base / "data"
    log_dir = base / "state" / "log"

    for path in (cache_dir, config_dir, data_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))

    for var in (
        MAA_API_URL_ENV_VAR,
        MAA_CLI_API_ENV_VAR,
        MAA_CLI_DOWNLOAD_ENV_VAR,
        LIBRARY_DIR_ENV_VAR,
        RESOURCE_DIR_ENV_VAR,
        CACHE_DIR_ENV_VAR,
    ):
        monkeypatch.delenv(var, raising=False)

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_data_dir", lambda *_args, **_kwargs: str(data_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.

    Replaces the synchronous requests entry points and Session.request, and the
    aiohttp request helpers, with functions that raise a RuntimeError.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network

    import aiohttp

    aiohttp.request = _async_block_network
    aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]


# =============================================================================
# Platform and archive fixtures
# =============================================================================


@pytest.fixture
def linux_x86_64():
    return PlatformInfo.from_values("Linux", "x86_64")


@pytest.fixture
def windows_x64():
    return PlatformInfo.from_values("Windows", "AMD64")


@pytest.fixture
def macos_arm64():
    return PlatformInfo.from_values("Darwin", "arm64")


ArchiveContents = Dict[str, Union[bytes, str]]


def _as_bytes(data: Union[bytes, str]) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data


def write_zip(path: Path, contents: ArchiveContents) -> Path:
    """Create a zip archive at `path` holding `contents` (entry name -> data)."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in contents.items():
            zf.writestr(name, _as_bytes(data))
    return path


def write_tar_gz(path: Path, contents: ArchiveContents) -> Path:
    """Create a gzip-compressed tar archive at `path` holding `contents`."""
    with tarfile.open(path, "w:gz") as tf:
        for name, data in contents.items():
            payload = _as_bytes(data)
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            tf.addfile(info, io.BytesIO(payload))
    return path


@pytest.fixture
def make_zip(tmp_path):
    """Factory fixture: make_zip(name, contents) -> Path of a new zip in tmp_path."""

    def _make(name: str, contents: ArchiveContents) -> Path:
        return write_zip(tmp_path / name, contents)

    return _make


@pytest.fixture
def make_tar_gz(tmp_path):
    """Factory fixture: make_tar_gz(name, contents) -> Path of a new .tar.gz in tmp_path."""

    def _make(name: str, contents: ArchiveContents) -> Path:
        return write_tar_gz(tmp_path / name, contents)

    return _make
