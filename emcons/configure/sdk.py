# SPDX-License-Identifier: MIT
"""Emscripten SDK detection.

Finds an installed Emscripten SDK and describes the files and
environment the toolchain needs from it. Nothing here installs the SDK
or modifies the running process's environment: toolchain_environment()
returns the overrides and the executor applies them to each command.

Usage:
    from emcons.configure.sdk import EmscriptenSdk

    sdk = EmscriptenSdk.locate()          # EMSDK / EMSCRIPTEN_ROOT
    sdk = EmscriptenSdk.locate("/opt/emsdk")
    print(sdk.version(), sdk.compiler())
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from emcons.configure.platform import Platform, get_platform
from emcons.core.errors import SdkNotInstalledError

logger = logging.getLogger(__name__)

# Environment variables that may point at an SDK, in search order.
SDK_ROOT_VARIABLES = ("EMSDK", "EMSCRIPTEN_ROOT")


class EmscriptenSdk:
    """An Emscripten SDK on disk.

    The root may be either an emsdk checkout (emcc.py lives under
    ``upstream/emscripten``) or an emscripten directory itself.

    Attributes:
        root: The SDK root directory.
    """

    COMPILER = "emcc.py"
    VERSION_FILE = "emscripten-version.txt"

    def __init__(self, root: Path | str, *, python: str | None = None) -> None:
        self.root = Path(root)
        self._python = python

    @classmethod
    def locate(
        cls,
        root: Path | str | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> EmscriptenSdk:
        """Find an installed SDK.

        An explicit root is the only candidate when given; otherwise
        each variable in SDK_ROOT_VARIABLES is tried in order.

        Args:
            root: Explicit SDK root.
            environ: Environment to read (default: os.environ).

        Returns:
            The first installed SDK found.

        Raises:
            SdkNotInstalledError: If no candidate holds an installed SDK.
        """
        if environ is None:
            environ = os.environ

        candidates: list[str] = []
        if root is not None:
            candidates.append(str(root))
        else:
            for var in SDK_ROOT_VARIABLES:
                value = environ.get(var)
                if value:
                    candidates.append(value)

        python = environ.get("EMSDK_PYTHON") or None
        for candidate in candidates:
            sdk = cls(candidate, python=python)
            if sdk.is_installed():
                logger.debug("Found Emscripten SDK at %s", sdk.root)
                return sdk
            logger.debug("No Emscripten SDK at %s", candidate)

        raise SdkNotInstalledError(candidates)

    @property
    def emscripten_root(self) -> Path:
        """Directory containing emcc.py."""
        if (self.root / self.COMPILER).is_file():
            return self.root
        return self.root / "upstream" / "emscripten"

    def is_installed(self) -> bool:
        return self.compiler().is_file()

    def compiler(self) -> Path:
        """Path to emcc.py."""
        return self.emscripten_root / self.COMPILER

    def python(self) -> str:
        """Interpreter used to run emcc.py."""
        return self._python or sys.executable

    def version(self) -> str:
        """The Emscripten version, or 'unknown' if it cannot be read."""
        version_file = self.emscripten_root / self.VERSION_FILE
        try:
            text = version_file.read_text(encoding="utf-8")
        except OSError:
            return "unknown"
        return text.strip().strip('"') or "unknown"

    @property
    def dot_emscripten(self) -> Path:
        """The SDK's generated .emscripten config file."""
        return self.root / ".emscripten"

    @property
    def cache_dir(self) -> Path:
        return self.emscripten_root / "cache"

    def third_party_lib_dir(self, multithreading: bool) -> str:
        """Name of the directory holding prebuilt third-party libraries.

        Libraries are built per Emscripten version and threading model.
        """
        name = f"lib-{self.version()}-up"
        if multithreading:
            name += "-mt"
        return name

    def toolchain_environment(
        self,
        intermediate_dir: Path | str,
        *,
        host: Platform | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Environment overrides every emcc invocation runs with.

        When EMSDK is already set the developer configured Emscripten
        themselves, so the SDK config, cache and temp locations are left
        alone.

        Args:
            intermediate_dir: Directory for Emscripten's temporary files.
            host: Build host (default: detected).
            environ: Environment to inspect (default: os.environ).

        Returns:
            Variable name -> value.
        """
        if environ is None:
            environ = os.environ
        if host is None:
            host = get_platform()
        intermediate_dir = Path(intermediate_dir)

        overrides: dict[str, str] = {}
        if environ.get("EMSDK") is None:
            overrides["EM_CONFIG"] = str(self.dot_emscripten)
            overrides["EM_CACHE"] = str(self.cache_dir)
            overrides["EMCC_TEMP_DIR"] = str(intermediate_dir / "EmscriptenTemp")

        overrides["EMCC_WASM_BACKEND"] = "1"
        overrides["EMCC_SKIP_SANITY_CHECK"] = "1"

        if host.is_linux:
            # keeps emcc from picking up a system clang configured in $HOME
            overrides["HOME"] = str(intermediate_dir)
        elif host.is_windows:
            overrides["HOME"] = ""

        return overrides

    def __repr__(self) -> str:
        return f"EmscriptenSdk({str(self.root)!r})"
