"""
Mirrored, cache-aware asset downloads.

An asset is fetched into `cache_dir / asset.name`. A file already there with
exactly the declared size is reused without touching the network; otherwise
the primary URL is tried first and the mirrors after it, in listed order.
Bytes are written straight into the cache path as they arrive, so an
interrupted download leaves a short file that the next run's size check
rejects.

The download runs on an asyncio loop created for the call and closed after
it; callers use the blocking `download()` function.
"""

import asyncio
import time
from pathlib import Path
from typing import List, Optional, Tuple, Union

import aiofiles
import aiohttp

from maa_installer.constants import DEFAULT_CHUNK_SIZE, DEFAULT_CONNECT_TIMEOUT
from maa_installer.exceptions import DownloadExhaustedError
from maa_installer.log_utils import logger
from maa_installer.utils import format_size, get_user_agent

from .manifest import Asset

Pathish = Union[str, Path]


class SourceError(Exception):
    """A single download source failed; the next one should be tried."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


def cached_archive_valid(path: Path, expected_size: int) -> bool:
    """
    Whether `path` holds a completed download of `expected_size` bytes.

    Size is the only check. Unreadable metadata counts as a miss.
    """
    try:
        if not path.is_file():
            return False
        actual = path.stat().st_size
    except OSError as e:
        logger.debug(f"Could not stat cached archive {path}: {e}")
        return False
    return actual == expected_size


class MirroredFetcher:
    """
    Download an asset from its primary URL or, failing that, its mirrors.

    Each source gets one attempt; there is no retry loop beyond moving on to
    the next source.
    """

    def __init__(
        self,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.connect_timeout = connect_timeout
        self.chunk_size = chunk_size

    def download(self, asset: Asset, cache_dir: Pathish) -> Path:
        """
        Materialize `asset` in `cache_dir` and return the archive path.

        Raises:
            DownloadExhaustedError: If the primary URL and every mirror failed.
        """
        path = Path(cache_dir) / asset.name

        if cached_archive_valid(path, asset.size):
            logger.info(f"File {asset.name} already exists, skip download!")
            return path

        logger.info(f"Downloading {asset.name} ({format_size(asset.size)})")
        return asyncio.run(self._download_from_sources(asset, path))

    def _create_session(self) -> aiohttp.ClientSession:
        # Only connecting is bounded; a slow transfer may take as long as it needs
        timeout = aiohttp.ClientTimeout(
            total=None,
            connect=self.connect_timeout,
            sock_connect=self.connect_timeout,
        )
        return aiohttp.ClientSession(
            timeout=timeout, headers={"User-Agent": get_user_agent()}
        )

    async def _download_from_sources(self, asset: Asset, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        attempted: List[str] = []
        failures: List[Tuple[str, str]] = []

        async with self._create_session() as session:
            for url in asset.sources():
                attempted.append(url)
                try:
                    start_time = time.time()
                    downloaded = await self._fetch_url(session, url, path)
                except SourceError as e:
                    failures.append((url, e.message))
                    logger.warning(f"Download of {asset.name} from {url} failed: {e.message}")
                    continue

                if downloaded != asset.size:
                    message = f"expected {asset.size} bytes, got {downloaded}"
                    failures.append((url, message))
                    logger.warning(f"Download of {asset.name} from {url} failed: {message}")
                    continue

                elapsed = time.time() - start_time
                logger.debug(f"Downloaded {url} in {elapsed:.2f}s")
                logger.info(f"Downloaded: {asset.name} ({format_size(downloaded)})")
                return path

        details = "; ".join(f"{url}: {message}" for url, message in failures)
        raise DownloadExhaustedError(asset.name, attempted, details=details or None)

    async def _fetch_url(
        self, session: aiohttp.ClientSession, url: str, path: Path
    ) -> int:
        """
        Stream `url` into `path`, truncating what was there.

        Returns:
            int: Number of bytes written.

        Raises:
            SourceError: On any HTTP, network or local write failure.
        """
        downloaded = 0
        logger.debug(f"Attempting to download {url} to {path}")
        try:
            async with session.get(url) as response:
                response.raise_for_status()
                async with aiofiles.open(path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        await f.write(chunk)
                        downloaded += len(chunk)
        except aiohttp.ClientResponseError as e:
            raise SourceError(f"HTTP error {e.status}: {e.message}", url) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SourceError(f"Network error: {e!r}", url) from e
        except OSError as e:
            raise SourceError(f"Filesystem error: {e}", url) from e
        return downloaded


def download(
    asset: Asset,
    cache_dir: Pathish,
    connect_timeout: Optional[int] = None,
) -> Path:
    """
    Download `asset` into `cache_dir`, reusing a complete cached copy.

    Parameters:
        asset (Asset): The asset to materialize.
        cache_dir (Pathish): Directory holding downloaded archives.
        connect_timeout (Optional[int]): Connect timeout in seconds per source.

    Returns:
        Path: `cache_dir / asset.name`.

    Raises:
        DownloadExhaustedError: If every source failed.
    """
    fetcher = MirroredFetcher(connect_timeout=connect_timeout or DEFAULT_CONNECT_TIMEOUT)
    return fetcher.download(asset, cache_dir)
