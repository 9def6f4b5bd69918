"""
Host platform detection and per-platform naming rules.

Asset names and native library naming depend on the operating system and
CPU architecture. Both are looked up at runtime from small tables so every
platform's rules can be tested from any host.
"""

import platform
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from maa_installer.exceptions import PlatformUnsupportedError

MACOS = "macos"
LINUX = "linux"
WINDOWS = "windows"

X86_64 = "x86_64"
AARCH64 = "aarch64"

_SYSTEM_ALIASES = {
    "darwin": MACOS,
    "macos": MACOS,
    "linux": LINUX,
    "windows": WINDOWS,
    "win32": WINDOWS,
}

_MACHINE_ALIASES = {
    "x86_64": X86_64,
    "amd64": X86_64,
    "x64": X86_64,
    "aarch64": AARCH64,
    "arm64": AARCH64,
}

# None as architecture means "any architecture" (universal builds)
ASSET_NAME_TEMPLATES: Dict[Tuple[str, Optional[str]], str] = {
    (MACOS, None): "MAA-v{version}-macos-runtime-universal.zip",
    (LINUX, X86_64): "MAA-v{version}-linux-x86_64.tar.gz",
    (LINUX, AARCH64): "MAA-v{version}-linux-aarch64.tar.gz",
    (WINDOWS, X86_64): "MAA-v{version}-win-x64.zip",
    (WINDOWS, AARCH64): "MAA-v{version}-win-arm64.zip",
}

# (prefix, suffix) of dynamic libraries
DYLIB_CONVENTIONS: Dict[str, Tuple[str, str]] = {
    MACOS: ("lib", ".dylib"),
    LINUX: ("lib", ".so"),
    WINDOWS: ("", ".dll"),
}

CORE_LIBRARY_NAMES: Dict[str, str] = {
    MACOS: "libMaaCore.dylib",
    LINUX: "libMaaCore.so",
    WINDOWS: "MaaCore.dll",
}


@dataclass(frozen=True)
class PlatformInfo:
    """Normalized operating system and architecture of a host."""

    system: str
    machine: str

    @classmethod
    def from_values(cls, system: str, machine: str) -> "PlatformInfo":
        """Normalize raw `platform.system()` / `platform.machine()` style values."""
        raw_system = system.strip().lower()
        raw_machine = machine.strip().lower()
        return cls(
            system=_SYSTEM_ALIASES.get(raw_system, raw_system),
            machine=_MACHINE_ALIASES.get(raw_machine, raw_machine),
        )

    @classmethod
    def current(cls) -> "PlatformInfo":
        return cls.from_values(platform.system(), platform.machine())

    def asset_name(self, version: str) -> str:
        """
        Expected asset file name for this platform and `version`.

        Raises:
            PlatformUnsupportedError: If no naming rule covers this platform.
        """
        template = ASSET_NAME_TEMPLATES.get(
            (self.system, self.machine)
        ) or ASSET_NAME_TEMPLATES.get((self.system, None))
        if template is None:
            raise PlatformUnsupportedError(self.system, self.machine)
        return template.format(version=version)

    def dylib_convention(self) -> Tuple[str, str]:
        """Return the dynamic library (prefix, suffix) pair for this platform."""
        try:
            return DYLIB_CONVENTIONS[self.system]
        except KeyError:
            raise PlatformUnsupportedError(self.system, self.machine) from None

    def core_library_name(self) -> str:
        """File name of the MaaCore library on this platform."""
        try:
            return CORE_LIBRARY_NAMES[self.system]
        except KeyError:
            raise PlatformUnsupportedError(self.system, self.machine) from None
