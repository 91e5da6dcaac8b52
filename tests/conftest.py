# SPDX-License-Identifier: MIT
"""Shared fixtures for emcons tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from emcons.configure.platform import Platform
from emcons.configure.sdk import EmscriptenSdk

LINUX = Platform(os="linux", arch="x86_64", is_64bit=True)
WINDOWS = Platform(os="windows", arch="x86_64", is_64bit=True)


def make_sdk_tree(root: Path, version: str = "3.1.51") -> Path:
    """Create a minimal emsdk checkout: upstream/emscripten with emcc.py."""
    emscripten = root / "upstream" / "emscripten"
    emscripten.mkdir(parents=True)
    (emscripten / "emcc.py").write_text("# emcc\n")
    (emscripten / "emscripten-version.txt").write_text(f'"{version}"\n')
    (root / ".emscripten").write_text("# config\n")
    return root


@pytest.fixture
def sdk_root(tmp_path: Path) -> Path:
    return make_sdk_tree(tmp_path / "emsdk")


@pytest.fixture
def sdk(sdk_root: Path) -> EmscriptenSdk:
    return EmscriptenSdk(sdk_root, python="python3")


@pytest.fixture
def linux_host() -> Platform:
    return LINUX


@pytest.fixture
def windows_host() -> Platform:
    return WINDOWS
