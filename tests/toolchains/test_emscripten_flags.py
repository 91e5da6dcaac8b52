# SPDX-License-Identifier: MIT
"""Tests for emcons.toolchains.emscripten_flags."""

from __future__ import annotations

import itertools

import pytest

from emcons.configure.options import ProfilerMode, ToolchainOptions
from emcons.core.build_context import BuildConfiguration, CppStandard, LinkEnvironment
from emcons.core.errors import UnsupportedValueError
from emcons.toolchains.emscripten_flags import (
    EXPORTED_FUNCTIONS,
    EmscriptenFlags,
    describe_optimization,
    optimization_flag,
)

DEBUG = BuildConfiguration.DEBUG
DEVELOPMENT = BuildConfiguration.DEVELOPMENT
SHIPPING = BuildConfiguration.SHIPPING

OPT_FLAGS = {"-O0", "-O1", "-O2", "-O3", "-Os", "-Oz"}


def flags_for(**options: object) -> EmscriptenFlags:
    return EmscriptenFlags(ToolchainOptions(**options))  # type: ignore[arg-type]


def link(configuration: BuildConfiguration = DEVELOPMENT, **kw: object) -> LinkEnvironment:
    return LinkEnvironment(configuration=configuration, **kw)  # type: ignore[arg-type]


def settings(tokens: list[str]) -> list[str]:
    """The NAME=VALUE arguments of every -s flag."""
    return [b for a, b in itertools.pairwise(tokens) if a == "-s"]


class TestOptimization:
    @pytest.mark.parametrize(
        ("configuration", "size", "expected"),
        [
            (DEBUG, False, "-O0"),
            (DEBUG, True, "-O0"),
            (DEVELOPMENT, False, "-O1"),
            (DEVELOPMENT, True, "-Oz"),
            (SHIPPING, False, "-O3"),
            (SHIPPING, True, "-Oz"),
        ],
    )
    def test_precedence(
        self, configuration: BuildConfiguration, size: bool, expected: str
    ) -> None:
        assert optimization_flag(configuration, size) == expected

    @pytest.mark.parametrize("configuration", list(BuildConfiguration))
    @pytest.mark.parametrize("size", [False, True])
    def test_exactly_one_flag(
        self, configuration: BuildConfiguration, size: bool
    ) -> None:
        flags = flags_for(multithreading=True)
        shared = flags.shared_flags(configuration, size)
        linked = flags.link_flags(link(configuration, optimize_for_size=size))
        assert len([f for f in shared if f in OPT_FLAGS]) == 1
        assert len([f for f in linked if f in OPT_FLAGS]) == 1

    def test_describe(self) -> None:
        assert describe_optimization(SHIPPING, False) == (
            "Shipping -O3 favor speed over size"
        )
        assert describe_optimization(DEBUG, True) == "Debug -O0 faster compile time"
        assert describe_optimization(DEVELOPMENT, True) == (
            "Development -Oz favor size over speed"
        )


class TestSharedFlags:
    def test_fixed_prefix(self) -> None:
        shared = flags_for().shared_flags(DEVELOPMENT, False)
        assert shared[:3] == [
            "-fdiagnostics-format=msvc",
            "-fno-exceptions",
            "-Wdelete-non-virtual-dtor",
        ]
        assert "-Wno-switch" in shared

    def test_single_threaded(self) -> None:
        shared = flags_for().shared_flags(DEVELOPMENT, False)
        assert "USE_PTHREADS=1" not in settings(shared)
        assert not any(f.startswith("-DEXPERIMENTAL_OPENGL_RHITHREAD") for f in shared)

    @pytest.mark.parametrize(("offscreen", "value"), [(True, "0"), (False, "1")])
    def test_multithreaded(self, offscreen: bool, value: str) -> None:
        shared = flags_for(
            multithreading=True, offscreen_canvas=offscreen
        ).shared_flags(DEVELOPMENT, False)
        assert "USE_PTHREADS=1" in settings(shared)
        assert f"-DEXPERIMENTAL_OPENGL_RHITHREAD={value}" in shared

    def test_simd(self) -> None:
        assert "SIMD=1" not in settings(flags_for().shared_flags(DEBUG, False))
        assert "SIMD=1" in settings(flags_for(simd=True).shared_flags(DEBUG, False))

    def test_inlining_and_undef(self) -> None:
        flags = flags_for()
        default = flags.shared_flags(DEVELOPMENT, False)
        assert "-fno-inline-functions" not in default
        assert "-Wundef" not in default

        tuned = flags.shared_flags(
            DEVELOPMENT,
            False,
            use_inlining=False,
            undefined_identifier_warnings=True,
        )
        assert "-fno-inline-functions" in tuned
        assert "-Wundef" in tuned

    @pytest.mark.parametrize(
        ("configuration", "key", "expected"),
        [
            (SHIPPING, "ue4cmd", True),
            (SHIPPING, None, False),
            (SHIPPING, "", False),
            (DEVELOPMENT, "ue4cmd", False),
            (DEBUG, "ue4cmd", False),
        ],
    )
    def test_shipping_map_override(
        self, configuration: BuildConfiguration, key: str | None, expected: bool
    ) -> None:
        shared = flags_for(session_storage_key=key).shared_flags(configuration, False)
        assert ("-DUE_ALLOW_MAP_OVERRIDE_IN_SHIPPING=1" in shared) is expected


class TestLanguageFlags:
    @pytest.mark.parametrize(
        ("standard", "flag"),
        [
            (CppStandard.CPP14, "-std=c++14"),
            (CppStandard.CPP17, "-std=c++17"),
            (CppStandard.LATEST, "-std=c++17"),
            (CppStandard.DEFAULT, "-std=c++14"),
        ],
    )
    def test_cpp_flags(self, standard: CppStandard, flag: str) -> None:
        assert flags_for().cpp_flags(standard) == [flag]

    def test_unknown_standard_fails(self) -> None:
        with pytest.raises(UnsupportedValueError):
            flags_for().cpp_flags("c++98")  # type: ignore[arg-type]

    def test_c_flags_empty(self) -> None:
        assert flags_for().c_flags() == []

    def test_compile_defines(self) -> None:
        assert flags_for().compile_defines() == []
        assert flags_for(tracing=True).compile_defines() == ["__EMSCRIPTEN_TRACING__"]


class TestLinkFlags:
    def test_starts_with_shared_flags_without_inlining(self) -> None:
        flags = flags_for()
        shared = flags.shared_flags(DEVELOPMENT, False, use_inlining=False)
        linked = flags.link_flags(link(DEVELOPMENT))
        assert linked[: len(shared)] == shared
        assert "-fno-inline-functions" in linked

    @pytest.mark.parametrize(
        ("configuration", "debug_info", "expected"),
        [
            (DEBUG, False, True),
            (DEBUG, True, True),
            (DEVELOPMENT, False, True),
            (DEVELOPMENT, True, True),
            (SHIPPING, True, True),
            (SHIPPING, False, False),
        ],
    )
    def test_function_names(
        self, configuration: BuildConfiguration, debug_info: bool, expected: bool
    ) -> None:
        linked = flags_for().link_flags(
            link(configuration, create_debug_info=debug_info)
        )
        assert ("--profiling-funcs" in linked) is expected

    @pytest.mark.parametrize("configuration", list(BuildConfiguration))
    def test_symbol_map_always(self, configuration: BuildConfiguration) -> None:
        assert "--emit-symbol-map" in flags_for().link_flags(link(configuration))

    @pytest.mark.parametrize(
        ("configuration", "checked"),
        [(DEBUG, True), (DEVELOPMENT, True), (SHIPPING, False)],
    )
    def test_assertions(self, configuration: BuildConfiguration, checked: bool) -> None:
        linked = flags_for().link_flags(link(configuration))
        assert ("ASSERTIONS=1" in settings(linked)) is checked
        assert ("GL_ASSERTIONS=1" in settings(linked)) is checked
        assert ("-g1" in linked) is checked

    @pytest.mark.parametrize(
        ("mode", "flag"),
        [
            (ProfilerMode.CPU, "--cpuprofiler"),
            (ProfilerMode.MEMORY, "--memoryprofiler"),
        ],
    )
    def test_profiler(self, mode: ProfilerMode, flag: str) -> None:
        flags = flags_for(profiler_mode=mode)
        assert flag in flags.link_flags(link(DEBUG))
        assert flag not in flags.link_flags(link(SHIPPING))

    def test_thread_profiler_needs_multithreading(self) -> None:
        single = flags_for(profiler_mode=ProfilerMode.THREAD)
        assert "--threadprofiler" not in single.link_flags(link(DEBUG))
        assert single.profiler_flags() == []

        threaded = flags_for(profiler_mode=ProfilerMode.THREAD, multithreading=True)
        assert "--threadprofiler" in threaded.link_flags(link(DEBUG))
        assert threaded.profiler_flags() == ["--threadprofiler"]

    def test_no_profiler(self) -> None:
        linked = flags_for().link_flags(link(DEBUG))
        assert not any(f.endswith("profiler") for f in linked)

    def test_tracing(self) -> None:
        assert "--tracing" not in flags_for().link_flags(link())
        assert "--tracing" in flags_for(tracing=True).link_flags(link())

    def test_memory_single_threaded(self) -> None:
        s = settings(flags_for().link_flags(link()))
        assert "ALLOW_MEMORY_GROWTH=1" in s
        assert "INITIAL_MEMORY=32MB" in s
        assert "ALLOW_MEMORY_GROWTH=0" not in s
        assert "INITIAL_MEMORY=600MB" not in s
        assert not any(x.startswith("PTHREAD_POOL_SIZE") for x in s)

    def test_memory_multithreaded(self) -> None:
        s = settings(flags_for(multithreading=True).link_flags(link()))
        assert "ALLOW_MEMORY_GROWTH=0" in s
        assert "INITIAL_MEMORY=600MB" in s
        assert "PTHREAD_POOL_SIZE=4" in s
        assert "ALLOW_MEMORY_GROWTH=1" not in s
        assert "INITIAL_MEMORY=32MB" not in s

    def test_webgl_single_threaded(self) -> None:
        s = settings(flags_for().link_flags(link()))
        assert "USE_WEBGL2=1" in s
        assert "MIN_WEBGL_VERSION=2" in s
        assert "MAX_WEBGL_VERSION=2" in s
        assert "GL_PREINITIALIZED_CONTEXT=1" in s
        assert "PROXY_TO_PTHREAD=1" not in s
        assert "OFFSCREENCANVAS_SUPPORT=1" not in s
        assert "OFFSCREEN_FRAMEBUFFER=1" not in s

    @pytest.mark.parametrize(
        ("offscreen", "present", "absent"),
        [
            (True, "OFFSCREENCANVAS_SUPPORT=1", "OFFSCREEN_FRAMEBUFFER=1"),
            (False, "OFFSCREEN_FRAMEBUFFER=1", "OFFSCREENCANVAS_SUPPORT=1"),
        ],
    )
    def test_webgl_multithreaded(self, offscreen: bool, present: str, absent: str) -> None:
        s = settings(
            flags_for(multithreading=True, offscreen_canvas=offscreen).link_flags(link())
        )
        assert present in s
        assert absent not in s
        assert "PROXY_TO_PTHREAD=1" in s

    def test_fixed_settings(self) -> None:
        s = settings(flags_for().link_flags(link(SHIPPING)))
        for expected in (
            "STACK_SIZE=5MB",
            "ERROR_ON_UNDEFINED_SYMBOLS=1",
            "NO_EXIT_RUNTIME=1",
            "LLD_REPORT_UNDEFINED",
            "CASE_INSENSITIVE_FS=1",
            "FORCE_FILESYSTEM=1",
        ):
            assert expected in s

    def test_exported_symbols_verbatim(self) -> None:
        s = settings(flags_for().link_flags(link()))
        exported = next(x for x in s if x.startswith("EXPORTED_FUNCTIONS="))
        assert exported == (
            "EXPORTED_FUNCTIONS=['_main', '_on_fatal', "
            "'_emscripten_webgl_get_current_context', "
            "'_emscripten_webgl_make_context_current', "
            "'_htons', '_ntohs', '_malloc', '_free', '_sendue']"
        )
        for symbol in EXPORTED_FUNCTIONS:
            assert f"'{symbol}'" in exported
        assert (
            "EXTRA_EXPORTED_RUNTIME_METHODS=['Pointer_stringify', "
            "'writeAsciiToMemory', 'stackTrace', 'ccall', 'cwrap']" in s
        )
        assert "EXPORTED_RUNTIME_METHODS=['stringToAscii']" in s

    def test_every_setting_has_an_argument(self) -> None:
        """-s is never the last token or followed by another flag."""
        linked = flags_for(multithreading=True, tracing=True).link_flags(link(DEBUG))
        for i, token in enumerate(linked):
            if token == "-s":
                assert i + 1 < len(linked)
                assert not linked[i + 1].startswith("-")


class TestDeterminism:
    @pytest.mark.parametrize("configuration", list(BuildConfiguration))
    def test_same_inputs_same_flags(self, configuration: BuildConfiguration) -> None:
        options = ToolchainOptions(
            multithreading=True,
            offscreen_canvas=True,
            tracing=True,
            profiler_mode=ProfilerMode.CPU,
            session_storage_key="k",
        )
        env = link(configuration, create_debug_info=True)
        first = EmscriptenFlags(options)
        second = EmscriptenFlags(options)
        assert first.link_flags(env) == second.link_flags(env)
        assert first.link_flags(env) == first.link_flags(env)
        assert first.shared_flags(configuration, False) == second.shared_flags(
            configuration, False
        )
