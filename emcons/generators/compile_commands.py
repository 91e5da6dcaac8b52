# SPDX-License-Identifier: MIT
"""compile_commands.json generator for IDE integration.

Generates a compile_commands.json file from the Compile actions of an
action graph, so that clangd and clang-tidy see the exact emcc flags.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from emcons.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from emcons.core.action import Action, ActionGraph

logger = logging.getLogger(__name__)


class CompileCommandsGenerator(BaseGenerator):
    """Generator for compile_commands.json.

    Format:
        [
            {
                "directory": "/path/to/Engine/Source",
                "file": "/path/to/Engine/Source/Runtime/Core/Private/Core.cpp",
                "arguments": ["python3", ".../emcc.py", "-O1", ...],
                "command": "python3 .../emcc.py -O1 ...",
                "output": "/path/to/Intermediate/Core/Core.cpp.o"
            },
            ...
        ]

    Example:
        generator = CompileCommandsGenerator(root_dir=Path("."))
        generator.generate(graph, Path("Intermediate/HTML5"))
        # Creates Intermediate/HTML5/compile_commands.json and a symlink
        # to it in the root directory.
    """

    FILENAME = "compile_commands.json"

    def __init__(self, root_dir: Path | None = None) -> None:
        super().__init__("compile_commands")
        self.root_dir = root_dir

    def generate(self, graph: ActionGraph, output_dir: Path) -> Path:
        """Write compile_commands.json.

        Args:
            graph: Graph whose Compile actions are listed.
            output_dir: Directory to write compile_commands.json to.

        Returns:
            Path of the written file.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / self.FILENAME

        commands = [self._make_entry(action) for action in graph.compile_actions]

        with open(output_file, "w") as f:
            json.dump(commands, f, indent=2)
            f.write("\n")
        logger.info("Wrote %d compile commands to %s", len(commands), output_file)

        if self.root_dir is not None:
            self._create_root_symlink(output_file, self.root_dir)
        return output_file

    def _make_entry(self, action: Action) -> dict[str, Any]:
        """Create a compile_commands.json entry for a Compile action."""
        # the translation unit is always the last prerequisite
        source = action.prerequisites[-1]
        directory = Path(action.working_directory).absolute()
        return {
            "directory": str(directory),
            "file": str(source.path),
            "arguments": action.command_line,
            "command": action.to_shell_command("bash"),
            "output": str(action.produced[0].path),
        }

    def _create_root_symlink(self, output_file: Path, root_dir: Path) -> None:
        """Create a symlink to compile_commands.json in the root directory.

        If the symlink cannot be created (e.g., on Windows without
        privileges), a warning is logged.
        """
        link_path = root_dir / self.FILENAME

        if output_file.resolve() == link_path.resolve():
            return

        try:
            target_path = os.path.relpath(output_file, root_dir)
        except ValueError:
            # On Windows, relpath fails across drive letters
            return

        if link_path.is_symlink():
            if Path(os.readlink(link_path)) == Path(target_path):
                return
            link_path.unlink()
        elif link_path.exists():
            logger.warning(
                "%s exists at %s as a regular file; not replacing with symlink",
                self.FILENAME,
                root_dir,
            )
            return

        try:
            link_path.symlink_to(target_path)
        except OSError as e:
            logger.warning("Could not create %s symlink: %s", self.FILENAME, e)
