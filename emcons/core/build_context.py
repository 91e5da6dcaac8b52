# SPDX-License-Identifier: MIT
"""Build context classes describing one compile or link job.

The orchestrator fills in a CompileEnvironment or LinkEnvironment per
target; the toolchain turns it into actions. These classes carry no
toolchain knowledge except the formatting of include and define tokens,
which CompileLinkContext does so that toolchains can change prefixes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class BuildConfiguration(Enum):
    """Build configuration selecting optimization and diagnostics."""

    DEBUG = "debug"
    DEVELOPMENT = "development"
    SHIPPING = "shipping"

    @classmethod
    def parse(cls, value: str | BuildConfiguration) -> BuildConfiguration:
        """Parse a configuration name (case-insensitive).

        Raises:
            ValueError: If the name is not a known configuration.
        """
        if isinstance(value, BuildConfiguration):
            return value
        try:
            return cls(value.lower())
        except ValueError:
            names = ", ".join(c.value for c in cls)
            raise ValueError(
                f"unknown build configuration {value!r} (expected one of: {names})"
            ) from None


class CppStandard(Enum):
    """C++ language standard requested by a compile environment."""

    CPP14 = "c++14"
    CPP17 = "c++17"
    LATEST = "latest"
    DEFAULT = "default"


class PrecompiledHeaderAction(Enum):
    """What a compile environment does with a precompiled header."""

    NONE = "none"
    INCLUDE = "include"
    CREATE = "create"


@dataclass
class CompileEnvironment:
    """Everything needed to compile a set of translation units.

    Attributes:
        configuration: Build configuration.
        optimize_for_size: Prefer size over speed (ignored for Debug).
        source_files: Source files, one Compile action each, in order.
        user_include_paths: Include directories (-I), in order.
        system_include_paths: System include directories, after user ones.
        definitions: Preprocessor definitions (NAME or NAME=VALUE), in order.
            Duplicates are kept; redefinition order matters to the compiler.
        force_include_files: Headers implicitly included in every unit.
        cpp_standard: C++ standard for non-C sources.
        generate_dependencies: Emit a .d dependency file per source.
        use_inlining: When False, inlining is disabled.
        undefined_identifier_warnings: Warn on undefined identifiers in #if.
        precompiled_header_action: Precompiled header handling.
        allow_remote_pch: Allow remote execution of PCH creation.
        additional_arguments: Extra tokens appended to every compile command.
    """

    configuration: BuildConfiguration = BuildConfiguration.DEVELOPMENT
    optimize_for_size: bool = False
    source_files: list[Path] = field(default_factory=list)
    user_include_paths: list[Path] = field(default_factory=list)
    system_include_paths: list[Path] = field(default_factory=list)
    definitions: list[str] = field(default_factory=list)
    force_include_files: list[Path] = field(default_factory=list)
    cpp_standard: CppStandard = CppStandard.DEFAULT
    generate_dependencies: bool = False
    use_inlining: bool = True
    undefined_identifier_warnings: bool = False
    precompiled_header_action: PrecompiledHeaderAction = PrecompiledHeaderAction.NONE
    allow_remote_pch: bool = False
    additional_arguments: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.source_files = [Path(p) for p in self.source_files]
        self.user_include_paths = [Path(p) for p in self.user_include_paths]
        self.system_include_paths = [Path(p) for p in self.system_include_paths]
        self.force_include_files = [Path(p) for p in self.force_include_files]

    @property
    def include_paths(self) -> list[Path]:
        """User include paths followed by system include paths."""
        return [*self.user_include_paths, *self.system_include_paths]


@dataclass
class LinkEnvironment:
    """Everything needed to link one binary.

    Attributes:
        output_path: The primary linked output (e.g. Game.js).
        object_files: Object files from prior Compile actions, in order.
        libraries: Libraries and script inputs, in registration order.
        configuration: Build configuration.
        optimize_for_size: Prefer size over speed (ignored for Debug).
        is_building_library: True when producing a static library.
        create_debug_info: Keep function names even in Shipping builds.
        intermediate_dir: Where the response file is written. Defaults to
            the output's directory.
    """

    output_path: Path | None = None
    object_files: list[Path] = field(default_factory=list)
    libraries: list[Path] = field(default_factory=list)
    configuration: BuildConfiguration = BuildConfiguration.DEVELOPMENT
    optimize_for_size: bool = False
    is_building_library: bool = False
    create_debug_info: bool = False
    intermediate_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.output_path is not None:
            self.output_path = Path(self.output_path)
        if self.intermediate_dir is not None:
            self.intermediate_dir = Path(self.intermediate_dir)
        self.object_files = [Path(p) for p in self.object_files]
        self.libraries = [Path(p) for p in self.libraries]

    @property
    def response_dir(self) -> Path:
        """Directory holding the link response file."""
        if self.intermediate_dir is not None:
            return self.intermediate_dir
        if self.output_path is None:
            return Path(".")
        return self.output_path.parent


@dataclass
class CompileLinkContext:
    """Formats include directories and definitions into flag tokens.

    The formatting (prefixes like -I, -D) is done here rather than in the
    toolchain's command assembly, so that prefixes stay in one place.

    Attributes:
        includes: Include directories (without -I prefix).
        defines: Preprocessor definitions (without -D prefix).
        force_includes: Forced include headers (without -include).
        include_prefix: Prefix for include directories (default: "-I").
        define_prefix: Prefix for preprocessor definitions (default: "-D").
        force_include_flag: Flag preceding each forced include.
    """

    includes: list[str] = field(default_factory=list)
    defines: list[str] = field(default_factory=list)
    force_includes: list[str] = field(default_factory=list)

    include_prefix: str = "-I"
    define_prefix: str = "-D"
    force_include_flag: str = "-include"

    def get_variables(self) -> dict[str, list[str]]:
        """Return formatted flag tokens keyed by kind.

        Keys:
        - includes: Include flags (e.g., ["-I/path1", "-I/path2"])
        - defines: Define flags (e.g., ["-DFOO", "-DBAR=1"])
        - force_includes: Forced include pairs (e.g., ["-include", "pch.h"])

        Values are lists of individual tokens; paths with spaces stay
        single tokens. Empty kinds are omitted.
        """
        result: dict[str, list[str]] = {}

        if self.includes:
            result["includes"] = [
                f"{self.include_prefix}{inc}" for inc in self.includes
            ]

        if self.defines:
            result["defines"] = [f"{self.define_prefix}{d}" for d in self.defines]

        if self.force_includes:
            tokens: list[str] = []
            for header in self.force_includes:
                tokens.extend([self.force_include_flag, header])
            result["force_includes"] = tokens

        return result

    def as_tokens(self) -> list[str]:
        """All formatted tokens: includes, then defines, then forced includes."""
        variables = self.get_variables()
        return [
            *variables.get("includes", []),
            *variables.get("defines", []),
            *variables.get("force_includes", []),
        ]
