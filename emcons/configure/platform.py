# SPDX-License-Identifier: MIT
"""Host platform detection.

The toolchain runs emcc on the build host; a few environment settings
depend on which OS that host is.
"""

from __future__ import annotations

import platform as _platform
import sys
from dataclasses import dataclass
from functools import lru_cache

_ARCH_ALIASES: dict[str, str] = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "arm64",
}


@dataclass(frozen=True)
class Platform:
    """Description of the build host.

    Attributes:
        os: Normalized OS name ('linux', 'darwin', 'windows', ...).
        arch: Normalized CPU architecture ('x86_64', 'arm64', ...).
        is_64bit: Whether the interpreter is 64-bit.
    """

    os: str
    arch: str
    is_64bit: bool = True

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def is_linux(self) -> bool:
        return self.os == "linux"

    @property
    def is_macos(self) -> bool:
        return self.os == "darwin"

    @property
    def is_posix(self) -> bool:
        return not self.is_windows


@lru_cache(maxsize=1)
def get_platform() -> Platform:
    """Detect the host platform (cached)."""
    if sys.platform.startswith("win"):
        os_name = "windows"
    elif sys.platform == "darwin":
        os_name = "darwin"
    elif sys.platform.startswith("linux"):
        os_name = "linux"
    else:
        os_name = sys.platform

    machine = _platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine)
    return Platform(os=os_name, arch=arch, is_64bit=sys.maxsize > 2**32)
