# SPDX-License-Identifier: MIT
"""Resolved toolchain options.

ToolchainOptions is a snapshot of the build-wide toggles read from the
configuration store. It is built once per toolchain and passed
explicitly to everything that needs it; nothing reads these settings
from global state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from emcons.configure.config import ConfigStore

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "/Script/HTML5PlatformEditor.HTML5TargetSettings"
DEFAULT_PLATFORM = "HTML5"


class ProfilerMode(Enum):
    NONE = "none"
    CPU = "cpu"
    MEMORY = "memory"
    THREAD = "thread"

    @classmethod
    def parse(cls, value: str | None) -> ProfilerMode:
        """Match a profiler mode name case-insensitively.

        Anything unrecognized, including None, means no profiler.
        """
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.debug("Unknown profiler mode %r, using none", value)
            return cls.NONE


@dataclass(frozen=True)
class ToolchainOptions:
    """Build-wide toggles for one toolchain invocation.

    Attributes:
        multithreading: Build with pthreads support.
        offscreen_canvas: Under multithreading, render through an
            OffscreenCanvas rather than an offscreen framebuffer.
        tracing: Enable Emscripten tracing.
        profiler_mode: Runtime profiler to link in. THREAD only takes
            effect with multithreading.
        simd: Build with SIMD support.
        session_storage_key: Key used to pass a command line through
            browser session storage; enables map overrides in Shipping.
        llvm_wasm_backend: Reported only; the upstream backend is always used.
    """

    multithreading: bool = False
    offscreen_canvas: bool = False
    tracing: bool = False
    profiler_mode: ProfilerMode = ProfilerMode.NONE
    simd: bool = False
    session_storage_key: str | None = None
    llvm_wasm_backend: bool = True

    @property
    def use_offscreen_canvas(self) -> bool:
        """True when offscreen canvas rendering is actually in effect."""
        return self.multithreading and self.offscreen_canvas

    @property
    def thread_profiler(self) -> bool:
        """True when the thread profiler is actually in effect."""
        return self.profiler_mode is ProfilerMode.THREAD and self.multithreading


def resolve_toolchain_options(
    store: ConfigStore | None,
    platform: str = DEFAULT_PLATFORM,
) -> ToolchainOptions:
    """Read toolchain options from a configuration store.

    Missing keys fall back to the ToolchainOptions defaults; a missing
    store yields all defaults.

    Args:
        store: The configuration store, or None.
        platform: Target platform key for platform-specific layers.

    Returns:
        The resolved options.
    """
    if store is None:
        return ToolchainOptions()

    def get_bool(key: str, default: bool) -> bool:
        value = store.get_bool(SETTINGS_SECTION, key, platform=platform)
        return default if value is None else value

    session_key = store.get_string(
        SETTINGS_SECTION, "SessionStorageCommandLineKey", platform=platform
    )

    return ToolchainOptions(
        multithreading=get_bool("EnableMultithreading", False),
        offscreen_canvas=get_bool("OffscreenCanvas", False),
        tracing=get_bool("EnableTracing", False),
        profiler_mode=ProfilerMode.parse(
            store.get_string(
                SETTINGS_SECTION, "EmscriptenProfilerMode", platform=platform
            )
        ),
        session_storage_key=session_key or None,
    )
