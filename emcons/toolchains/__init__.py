# SPDX-License-Identifier: MIT
"""Toolchain definitions (Emscripten)."""

from emcons.toolchains.emscripten import EmscriptenToolchain
from emcons.toolchains.emscripten_flags import EmscriptenFlags

__all__ = [
    "EmscriptenFlags",
    "EmscriptenToolchain",
]
