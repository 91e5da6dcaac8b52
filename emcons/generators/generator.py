# SPDX-License-Identifier: MIT
"""Generator protocol for files derived from an action graph.

Generators take a constructed ActionGraph and write auxiliary files
(e.g., a compilation database) to an output directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from emcons.core.action import ActionGraph


@runtime_checkable
class Generator(Protocol):
    """Protocol for graph generators."""

    @property
    def name(self) -> str:
        """Generator name (e.g., 'compile_commands')."""
        ...

    def generate(self, graph: ActionGraph, output_dir: Path) -> Path:
        """Write the generator's output for a graph.

        Args:
            graph: The constructed action graph.
            output_dir: Directory to write output files to.

        Returns:
            The path of the written file.
        """
        ...


class BaseGenerator:
    """Base class for generators with common functionality."""

    def __init__(self, name: str) -> None:
        """Initialize a generator.

        Args:
            name: Generator name.
        """
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def generate(self, graph: ActionGraph, output_dir: Path) -> Path:
        """Generate output. Subclasses must implement."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
