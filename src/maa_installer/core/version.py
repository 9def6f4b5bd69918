"""
Version handling for MaaCore.

MaaCore publishes semantic versions ("v5.0.0", "v5.1.0-beta.2"). They are
validated against the semver grammar and ordered by semver precedence: the
numeric triple first, then any pre-release before the release, then the
pre-release identifiers one by one (numeric below alphanumeric, a longer list
above its own prefix). Build metadata never affects ordering.
"""

import functools
import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from maa_installer.constants import (
    CORE_VERSION_PREFIX_LEN,
    DEFAULT_RUNNER,
    SEMVER_REGEX_PATTERN,
    VERSION_QUERY_ARG,
    VERSION_QUERY_TIMEOUT,
)
from maa_installer.dirs import Dirs
from maa_installer.exceptions import VersionParseError, VersionQueryError
from maa_installer.log_utils import logger

SEMVER_RX = re.compile(SEMVER_REGEX_PATTERN, re.ASCII)

Identifier = Union[int, str]


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed semantic version, compared by semver precedence."""

    major: int
    minor: int
    patch: int
    prerelease: Tuple[Identifier, ...] = ()
    """Dot-separated pre-release identifiers; numeric ones are ints"""

    build: Tuple[str, ...] = ()
    """Build metadata, kept for display only"""

    @classmethod
    def parse(cls, value: str) -> "SemVer":
        """
        Parse a semantic version string (without a leading "v").

        Raises:
            VersionParseError: If `value` is not a valid semantic version.
        """
        match = SEMVER_RX.match(value)
        if not match:
            raise VersionParseError(value)

        prerelease: Tuple[Identifier, ...] = ()
        if match["prerelease"]:
            prerelease = tuple(
                int(part) if part.isdigit() else part
                for part in match["prerelease"].split(".")
            )
        build = tuple(match["build"].split(".")) if match["build"] else ()

        return cls(
            major=int(match["major"]),
            minor=int(match["minor"]),
            patch=int(match["patch"]),
            prerelease=prerelease,
            build=build,
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _precedence_key(self) -> tuple:
        identifiers = tuple(
            (0, part, "") if isinstance(part, int) else (1, 0, part)
            for part in self.prerelease
        )
        # A release sorts above every pre-release of the same triple
        return (self.major, self.minor, self.patch, not self.prerelease, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(part) for part in self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


VersionQuery = Callable[[Dirs], SemVer]


def parse_semver(value: str) -> SemVer:
    """Parse a semantic version string; see `SemVer.parse`."""
    return SemVer.parse(value)


def parse_tagged_version(tag: str) -> SemVer:
    """
    Parse a version tag such as "v1.2.3" by dropping its first character.

    The first character is removed unconditionally, so "1.2.3" is rejected.
    """
    if not tag:
        raise VersionParseError(tag)
    return parse_semver(tag[1:])


def parse_core_version_output(output: bytes) -> SemVer:
    """
    Parse the stdout of `<runner> version`, i.e. b"MaaCore v5.0.0\\n".

    The fixed-width prefix and the final byte are sliced off without looking at
    their content.
    """
    if len(output) <= CORE_VERSION_PREFIX_LEN + 1:
        raise VersionParseError(
            output.decode("utf-8", errors="replace"), details="output too short"
        )
    try:
        version_str = output[CORE_VERSION_PREFIX_LEN:-1].decode("utf-8")
    except UnicodeDecodeError as e:
        raise VersionParseError(repr(output), details=str(e)) from e
    return parse_semver(version_str)


def _library_path_env(library_dir: Path) -> dict:
    """Copy of the environment with `library_dir` on the dynamic loader path."""
    env = dict(os.environ)
    if os.name == "nt":
        var = "PATH"
    elif sys.platform == "darwin":
        var = "DYLD_LIBRARY_PATH"
    else:
        var = "LD_LIBRARY_PATH"
    existing = env.get(var)
    env[var] = (
        f"{library_dir}{os.pathsep}{existing}" if existing else str(library_dir)
    )
    return env


def query_installed_version(dirs: Dirs, runner: str = DEFAULT_RUNNER) -> SemVer:
    """
    Ask the installed MaaCore for its version by running `<runner> version`.

    Parameters:
        dirs (Dirs): Directory layout; the library directory is put on the loader path.
        runner (str): Executable name or path of the MaaCore runner.

    Returns:
        SemVer: The version MaaCore reports.

    Raises:
        VersionQueryError: If the runner is missing, cannot be executed or exits non-zero.
        VersionParseError: If its output is not the expected format.
    """
    executable = shutil.which(runner) or runner
    command = [executable, VERSION_QUERY_ARG]
    logger.debug(f"Querying installed MaaCore version: {' '.join(command)}")
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            check=True,
            timeout=VERSION_QUERY_TIMEOUT,
            env=_library_path_env(dirs.library()),
        )
    except FileNotFoundError as e:
        raise VersionQueryError(
            f"Failed to run {runner} version; is MaaCore installed?",
            command=command,
            details=str(e),
        ) from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        raise VersionQueryError(
            f"{runner} version exited with status {e.returncode}",
            command=command,
            details=stderr or None,
        ) from e
    except (subprocess.TimeoutExpired, OSError) as e:
        raise VersionQueryError(
            f"Failed to run {runner} version", command=command, details=str(e)
        ) from e

    return parse_core_version_output(completed.stdout)


def make_version_query(runner: Optional[str] = None) -> VersionQuery:
    """Bind `runner` into a callable taking only the directory layout."""
    selected = runner or DEFAULT_RUNNER

    def _query(dirs: Dirs) -> SemVer:
        return query_installed_version(dirs, runner=selected)

    return _query
