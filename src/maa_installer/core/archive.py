"""
Archive extraction driven by a per-entry mapping function.

Zip and gzip-compressed tar archives are read through one small interface:
a context manager yielding `(entry path, opener)` pairs for file entries in
archive order. The caller decides, entry by entry, where each file goes.
"""

import shutil
import tarfile
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import IO, Callable, Iterator, List, Optional, Protocol, Tuple, Union

from maa_installer.constants import TAR_GZ_EXTENSIONS, ZIP_EXTENSION
from maa_installer.exceptions import ExtractionError
from maa_installer.log_utils import logger

Pathish = Union[str, Path]
EntryMapper = Callable[[PurePosixPath], Optional[Path]]
EntryOpener = Callable[[], IO[bytes]]


class ArchiveReader(Protocol):
    """Sequence of (entry path, opener) for the file entries of an archive."""

    def entries(self) -> Iterator[Tuple[PurePosixPath, EntryOpener]]: ...


class ZipReader:
    def __init__(self, archive: zipfile.ZipFile) -> None:
        self._archive = archive

    def entries(self) -> Iterator[Tuple[PurePosixPath, EntryOpener]]:
        for info in self._archive.infolist():
            if info.is_dir():
                continue
            yield PurePosixPath(info.filename), (
                lambda info=info: self._archive.open(info, "r")
            )


class TarGzReader:
    def __init__(self, archive: tarfile.TarFile) -> None:
        self._archive = archive

    def entries(self) -> Iterator[Tuple[PurePosixPath, EntryOpener]]:
        for member in self._archive:
            # Links are read through their target; devices carry no bytes
            if not (member.isfile() or member.issym() or member.islnk()):
                continue
            yield PurePosixPath(member.name), (
                lambda member=member: self._open_member(member)
            )

    def _open_member(self, member: tarfile.TarInfo) -> IO[bytes]:
        try:
            handle = self._archive.extractfile(member)
        except KeyError as e:
            raise tarfile.ExtractError(
                f"Link {member.name} points to missing {member.linkname}"
            ) from e
        if handle is None:
            raise tarfile.ExtractError(f"Cannot read {member.name}")
        return handle


def archive_format(path: Path) -> str:
    """Return "zip" or "tar.gz" for `path`, judged by its file name."""
    name = path.name.lower()
    if name.endswith(ZIP_EXTENSION):
        return "zip"
    if name.endswith(TAR_GZ_EXTENSIONS):
        return "tar.gz"
    raise ExtractionError(
        f"Unsupported archive format: {path.name}", archive_path=str(path)
    )


@contextmanager
def open_archive(path: Pathish) -> Iterator[ArchiveReader]:
    """
    Open `path` with the reader matching its extension.

    Raises:
        ExtractionError: If the format is unknown or the archive cannot be opened.
    """
    archive_path = Path(path)
    fmt = archive_format(archive_path)
    try:
        if fmt == "zip":
            handle = zipfile.ZipFile(archive_path, "r")
            reader: ArchiveReader = ZipReader(handle)
        else:
            handle = tarfile.open(archive_path, "r:gz")
            reader = TarGzReader(handle)
    except (zipfile.BadZipFile, tarfile.TarError, EOFError, OSError) as e:
        raise ExtractionError(
            f"Failed to open archive {archive_path.name}",
            archive_path=str(archive_path),
            details=str(e),
        ) from e

    with handle:
        yield reader


def extract(archive_path: Pathish, mapper: EntryMapper) -> List[Path]:
    """
    Extract the entries of `archive_path` to the destinations `mapper` picks.

    Entries for which `mapper` returns None are skipped. Destinations get their
    parent directories created and existing files are overwritten. The first
    entry that cannot be read aborts the whole extraction.

    Parameters:
        archive_path (Pathish): A .zip, .tar.gz or .tgz file.
        mapper (EntryMapper): Maps an entry path to a destination or None.

    Returns:
        List[Path]: Destinations written, in archive order.

    Raises:
        ExtractionError: If the archive cannot be opened or an entry cannot be read or written.
    """
    path = Path(archive_path)
    extracted: List[Path] = []
    logger.info(f"Extracting {path.name}...")

    with open_archive(path) as reader:
        entry_name = None
        try:
            for entry, opener in reader.entries():
                entry_name = str(entry)
                destination = mapper(entry)
                if destination is None:
                    logger.debug(f"Skipping {entry}")
                    continue

                destination.parent.mkdir(parents=True, exist_ok=True)
                with opener() as source, open(destination, "wb") as target:
                    shutil.copyfileobj(source, target)
                extracted.append(destination)
                logger.debug(f"Extracted {entry} to {destination}")
        except (zipfile.BadZipFile, tarfile.TarError, EOFError, zlib.error, OSError) as e:
            raise ExtractionError(
                f"Failed to extract {entry_name or path.name}",
                archive_path=str(path),
                entry=entry_name,
                details=str(e),
            ) from e

    logger.info(f"Extracted {len(extracted)} files from {path.name}")
    return extracted
