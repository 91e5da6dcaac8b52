# SPDX-License-Identifier: MIT
"""
emcons: Emscripten toolchain adapter for HTML5 builds.

emcons turns platform-independent compile and link jobs into emcc
command lines and an action graph that an external executor runs.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export commonly used classes for convenient imports
from emcons.configure.config import LayeredConfig  # noqa: E402
from emcons.configure.options import ToolchainOptions  # noqa: E402
from emcons.core.action import Action, ActionGraph  # noqa: E402
from emcons.core.build_context import (  # noqa: E402
    BuildConfiguration,
    CompileEnvironment,
    LinkEnvironment,
)
from emcons.core.errors import EmconsError  # noqa: E402
from emcons.toolchains.emscripten import EmscriptenToolchain  # noqa: E402

__all__ = [
    "Action",
    "ActionGraph",
    "BuildConfiguration",
    "CompileEnvironment",
    "EmconsError",
    "EmscriptenToolchain",
    "LayeredConfig",
    "LinkEnvironment",
    "ToolchainOptions",
    "__version__",
]
