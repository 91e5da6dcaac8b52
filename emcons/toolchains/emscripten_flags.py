# SPDX-License-Identifier: MIT
"""Emscripten compiler and linker flags.

EmscriptenFlags maps (build configuration, toolchain options, job kind)
to emcc flag tokens. It has no side effects and no hidden state: the
same inputs always give the same list, which build caches rely on.

Flags are returned as flat token lists. Settings passed with ``-s`` are
two tokens (``["-s", "ASSERTIONS=1"]``); SEPARATED_ARG_FLAGS lists every
flag whose argument is the following token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from emcons.configure.options import ProfilerMode
from emcons.core.build_context import BuildConfiguration, CppStandard
from emcons.core.errors import UnsupportedValueError
from emcons.core.flags import setting

if TYPE_CHECKING:
    from emcons.configure.options import ToolchainOptions
    from emcons.core.build_context import LinkEnvironment

SEPARATED_ARG_FLAGS: frozenset[str] = frozenset(
    [
        "-s",
        "-o",
        "-c",
        "-include",
        "-MF",
        "--js-library",
        "--pre-js",
        "--post-js",
    ]
)

DIAGNOSTIC_FLAGS: tuple[str, ...] = (
    "-fdiagnostics-format=msvc",
    "-fno-exceptions",
    "-Wdelete-non-virtual-dtor",
)

# Warnings the engine sources trip over; fixed for every configuration.
SUPPRESSED_WARNINGS: tuple[str, ...] = (
    "-Wno-switch",
    "-Wno-tautological-constant-out-of-range-compare",
    "-Wno-tautological-compare",
    "-Wno-tautological-undefined-compare",
    "-Wno-inconsistent-missing-override",
    "-Wno-undefined-var-template",
    "-Wno-invalid-offsetof",
    "-Wno-gnu-string-literal-operator-template",
    "-Wno-final-dtor-non-final-class",
    "-Wno-implicit-int-float-conversion",
    "-Wno-single-bit-bitfield-constant-conversion",
    "-Wno-invalid-unevaluated-string",
    "-Wno-deprecated-builtins",
    "-Wno-shadow",
    "-Wno-deprecated-literal-operator",
    "-Wno-nontrivial-memaccess",
)

CPP_STANDARD_FLAGS: dict[CppStandard, str] = {
    CppStandard.CPP14: "-std=c++14",
    CppStandard.CPP17: "-std=c++17",
    CppStandard.LATEST: "-std=c++17",
    CppStandard.DEFAULT: "-std=c++14",
}

PROFILER_FLAGS: dict[ProfilerMode, str] = {
    ProfilerMode.CPU: "--cpuprofiler",
    ProfilerMode.MEMORY: "--memoryprofiler",
    ProfilerMode.THREAD: "--threadprofiler",
}

# The module's external call surface. Changing these lists changes what
# the host page can call; version such changes deliberately.
EXPORTED_FUNCTIONS: tuple[str, ...] = (
    "_main",
    "_on_fatal",
    "_emscripten_webgl_get_current_context",
    "_emscripten_webgl_make_context_current",
    "_htons",
    "_ntohs",
    "_malloc",
    "_free",
    "_sendue",
)
EXTRA_EXPORTED_RUNTIME_METHODS: tuple[str, ...] = (
    "Pointer_stringify",
    "writeAsciiToMemory",
    "stackTrace",
    "ccall",
    "cwrap",
)
EXPORTED_RUNTIME_METHODS: tuple[str, ...] = ("stringToAscii",)

STACK_SIZE = "5MB"
THREADED_INITIAL_MEMORY = "600MB"
THREADED_POOL_SIZE = 4
SINGLE_THREADED_INITIAL_MEMORY = "32MB"

SHIPPING_MAP_OVERRIDE_DEFINE = "-DUE_ALLOW_MAP_OVERRIDE_IN_SHIPPING=1"
TRACING_DEFINE = "__EMSCRIPTEN_TRACING__"


def optimization_flag(
    configuration: BuildConfiguration, optimize_for_size: bool
) -> str:
    """The single optimization flag for a configuration.

    Debug always wins, then optimize_for_size, then the per-configuration
    default.
    """
    if configuration is BuildConfiguration.DEBUG:
        return "-O0"
    if optimize_for_size:
        return "-Oz"
    if configuration is BuildConfiguration.DEVELOPMENT:
        return "-O1"
    if configuration is BuildConfiguration.SHIPPING:
        return "-O3"
    raise UnsupportedValueError("build configuration", configuration)


def describe_optimization(
    configuration: BuildConfiguration, optimize_for_size: bool
) -> str:
    """Human-readable summary of optimization_flag()'s choice."""
    flag = optimization_flag(configuration, optimize_for_size)
    reason = {
        "-O0": "faster compile time",
        "-Oz": "favor size over speed",
        "-O1": "fast compile time",
        "-O3": "favor speed over size",
    }[flag]
    return f"{configuration.name.capitalize()} {flag} {reason}"


def _symbol_list(name: str, symbols: tuple[str, ...]) -> list[str]:
    quoted = ", ".join(f"'{s}'" for s in symbols)
    return setting(name, f"[{quoted}]")


@dataclass(frozen=True)
class EmscriptenFlags:
    """Flag composer for one set of toolchain options.

    Example:
        flags = EmscriptenFlags(ToolchainOptions(multithreading=True))
        flags.shared_flags(BuildConfiguration.SHIPPING, optimize_for_size=False)
        # -> [..., "-O3", "-s", "USE_PTHREADS=1", ...]
    """

    options: ToolchainOptions

    def shared_flags(
        self,
        configuration: BuildConfiguration,
        optimize_for_size: bool,
        *,
        use_inlining: bool = True,
        undefined_identifier_warnings: bool = False,
    ) -> list[str]:
        """Flags common to compiling and linking."""
        options = self.options
        result: list[str] = [*DIAGNOSTIC_FLAGS, *SUPPRESSED_WARNINGS]

        if undefined_identifier_warnings:
            result.append("-Wundef")

        result.append(optimization_flag(configuration, optimize_for_size))

        if not use_inlining:
            result.append("-fno-inline-functions")

        if options.simd:
            result.extend(setting("SIMD", 1))

        if options.multithreading:
            result.extend(setting("USE_PTHREADS", 1))
            rhi_thread = 0 if options.offscreen_canvas else 1
            result.append(f"-DEXPERIMENTAL_OPENGL_RHITHREAD={rhi_thread}")

        if configuration is BuildConfiguration.SHIPPING and options.session_storage_key:
            result.append(SHIPPING_MAP_OVERRIDE_DEFINE)

        return result

    def cpp_flags(self, standard: CppStandard) -> list[str]:
        """Flags for C++ translation units.

        Raises:
            UnsupportedValueError: If the standard has no mapping.
        """
        try:
            return [CPP_STANDARD_FLAGS[standard]]
        except (KeyError, TypeError):
            raise UnsupportedValueError("C++ standard", standard) from None

    def c_flags(self) -> list[str]:
        """Flags for plain C translation units (none)."""
        return []

    def compile_defines(self) -> list[str]:
        """Definitions (without -D) added to every compile after the user's own."""
        if self.options.tracing:
            return [TRACING_DEFINE]
        return []

    def link_flags(self, link_env: LinkEnvironment) -> list[str]:
        """Flags for linking a binary."""
        options = self.options
        configuration = link_env.configuration
        checked = configuration in (
            BuildConfiguration.DEBUG,
            BuildConfiguration.DEVELOPMENT,
        )

        result = self.shared_flags(
            configuration, link_env.optimize_for_size, use_inlining=False
        )

        # Function names are kept unless this is a Shipping build without
        # debug info.
        if checked or link_env.create_debug_info:
            result.append("--profiling-funcs")

        # .symbols map of minified function names (ignored on -g2 and up)
        result.append("--emit-symbol-map")

        if checked:
            result.extend(setting("ASSERTIONS", 1))
            result.extend(setting("GL_ASSERTIONS", 1))
            result.append("-g1")
            result.extend(self.profiler_flags())

        if options.tracing:
            result.append("--tracing")

        result.extend(self.memory_flags())
        result.extend(setting("STACK_SIZE", STACK_SIZE))
        result.extend(self.webgl_flags())
        result.extend(self.export_flags())

        result.extend(setting("CASE_INSENSITIVE_FS", 1))
        result.extend(setting("FORCE_FILESYSTEM", 1))
        return result

    def profiler_flags(self) -> list[str]:
        """Profiler flag for the configured mode, if any."""
        mode = self.options.profiler_mode
        if mode is ProfilerMode.THREAD and not self.options.thread_profiler:
            return []
        flag = PROFILER_FLAGS.get(mode)
        return [flag] if flag else []

    def memory_flags(self) -> list[str]:
        """One of the two fixed memory presets."""
        if self.options.multithreading:
            return [
                *setting("ALLOW_MEMORY_GROWTH", 0),
                *setting("INITIAL_MEMORY", THREADED_INITIAL_MEMORY),
                *setting("PTHREAD_POOL_SIZE", THREADED_POOL_SIZE),
            ]
        return [
            *setting("ALLOW_MEMORY_GROWTH", 1),
            *setting("INITIAL_MEMORY", SINGLE_THREADED_INITIAL_MEMORY),
        ]

    def webgl_flags(self) -> list[str]:
        """WebGL 2 rendering backend flags."""
        result = setting("USE_WEBGL2", 1)
        if self.options.multithreading:
            if self.options.offscreen_canvas:
                result.extend(setting("OFFSCREENCANVAS_SUPPORT", 1))
            else:
                result.extend(setting("OFFSCREEN_FRAMEBUFFER", 1))
            result.extend(setting("PROXY_TO_PTHREAD", 1))
        result.extend(setting("MIN_WEBGL_VERSION", 2))
        result.extend(setting("MAX_WEBGL_VERSION", 2))
        # the page template creates the WebGL context up front
        result.extend(setting("GL_PREINITIALIZED_CONTEXT", 1))
        return result

    def export_flags(self) -> list[str]:
        """Exported entry points, runtime helpers and symbol checking."""
        return [
            *_symbol_list("EXPORTED_FUNCTIONS", EXPORTED_FUNCTIONS),
            *_symbol_list(
                "EXTRA_EXPORTED_RUNTIME_METHODS", EXTRA_EXPORTED_RUNTIME_METHODS
            ),
            *_symbol_list("EXPORTED_RUNTIME_METHODS", EXPORTED_RUNTIME_METHODS),
            *setting("ERROR_ON_UNDEFINED_SYMBOLS", 1),
            *setting("NO_EXIT_RUNTIME", 1),
            *setting("LLD_REPORT_UNDEFINED"),
        ]
