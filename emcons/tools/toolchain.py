# SPDX-License-Identifier: MIT
"""Toolchain protocol and base implementation.

A Toolchain turns compile and link environments into actions in an
ActionGraph, and declares the extra build products its binaries carry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from emcons.core.action import ActionGraph
    from emcons.core.build_context import CompileEnvironment, LinkEnvironment
    from emcons.core.build_products import Binary, BuildProductType
    from emcons.core.node import FileNode


@dataclass(frozen=True)
class SourceHandler:
    """How a toolchain compiles one kind of source file.

    Attributes:
        language: Language name ('c', 'cxx').
        object_suffix: Suffix appended to the source file name.
        depfile_suffix: Suffix of the dependency file, if one is produced.
    """

    language: str
    object_suffix: str
    depfile_suffix: str | None = ".d"


@dataclass
class CompileOutput:
    """Result of compiling a set of source files."""

    object_files: list[FileNode] = field(default_factory=list)


@runtime_checkable
class Toolchain(Protocol):
    """Protocol for toolchains."""

    @property
    def name(self) -> str:
        """Toolchain name (e.g., 'emscripten')."""
        ...

    def compile_files(
        self, compile_env: CompileEnvironment, output_dir: Path, graph: ActionGraph
    ) -> CompileOutput:
        """Add one compile action per source file to the graph."""
        ...

    def link_files(self, link_env: LinkEnvironment, graph: ActionGraph) -> FileNode:
        """Add the link action to the graph and return the output node."""
        ...

    def modify_build_products(
        self, binary: Binary, build_products: dict[Path, BuildProductType]
    ) -> None:
        """Add toolchain-specific products for a binary."""
        ...


class BaseToolchain(ABC):
    """Abstract base class for toolchains.

    Subclasses provide source handling and action construction.
    """

    def __init__(self, name: str) -> None:
        """Initialize a toolchain.

        Args:
            name: Toolchain name.
        """
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    def get_source_handler(self, suffix: str) -> SourceHandler:
        """Return the handler for a source file suffix."""
        ...

    @abstractmethod
    def compile_files(
        self, compile_env: CompileEnvironment, output_dir: Path, graph: ActionGraph
    ) -> CompileOutput: ...

    @abstractmethod
    def link_files(
        self, link_env: LinkEnvironment, graph: ActionGraph
    ) -> FileNode: ...

    def modify_build_products(
        self, binary: Binary, build_products: dict[Path, BuildProductType]
    ) -> None:
        """Default: binaries have no extra products."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
