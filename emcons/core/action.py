# SPDX-License-Identifier: MIT
"""Build actions and the graph that holds them.

An Action is one command the external executor runs: a compile of a
single translation unit or the link of a binary. Actions name the files
they read (prerequisites) and the files they write (produced items); the
executor derives scheduling and incremental rebuilds from those sets.

The ActionGraph interns file nodes by path, so the object file produced
by a compile action is the very node the link action lists as a
prerequisite. Registration is the only mutation: once an action is
added it is never revisited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePath
from typing import Any

from emcons.core.errors import GraphConstructionError
from emcons.core.node import FileNode
from emcons.core.quoting import to_shell_command

logger = logging.getLogger(__name__)


class ActionType(Enum):
    COMPILE = "compile"
    LINK = "link"


@dataclass(eq=False)
class Action:
    """A single command in the build graph.

    Attributes:
        kind: Compile or link.
        command_path: Program to run (the Python interpreter for emcc.py).
        arguments: Argument tokens passed to command_path.
        working_directory: Directory the command runs in.
        prerequisites: Files that must be up to date first (ordered, unique).
        produced: Files this action writes (ordered, unique).
        dependency_list_file: Compiler-written header dependency file, if any.
        command_description: Short verb shown by the executor.
        status_description: What the action works on (usually a file name).
        can_execute_remotely: Whether the executor may farm the action out.
        should_output_status_description: Whether the executor prints it.
        environment: Environment overrides the process must run with.
    """

    kind: ActionType
    command_path: str = ""
    arguments: list[str] = field(default_factory=list)
    working_directory: Path = field(default_factory=lambda: Path("."))
    prerequisites: list[FileNode] = field(default_factory=list)
    produced: list[FileNode] = field(default_factory=list)
    dependency_list_file: FileNode | None = None
    command_description: str = ""
    status_description: str = ""
    can_execute_remotely: bool = False
    should_output_status_description: bool = False
    environment: dict[str, str] = field(default_factory=dict)

    def add_prerequisite(self, node: FileNode) -> None:
        if node not in self.prerequisites:
            self.prerequisites.append(node)

    def add_produced(self, node: FileNode) -> None:
        if node not in self.produced:
            self.produced.append(node)

    @property
    def command_line(self) -> list[str]:
        """The full argv: command path followed by the arguments."""
        return [self.command_path, *self.arguments]

    def to_shell_command(self, shell: str = "auto") -> str:
        """The command line as a quoted shell string."""
        return to_shell_command(self.command_line, shell)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the action."""
        return {
            "kind": self.kind.value,
            "description": self.command_description,
            "status": self.status_description,
            "command": self.command_line,
            "directory": str(self.working_directory),
            "prerequisites": [str(n) for n in self.prerequisites],
            "produced": [str(n) for n in self.produced],
            "depfile": (
                str(self.dependency_list_file)
                if self.dependency_list_file is not None
                else None
            ),
            "remote": self.can_execute_remotely,
            "environment": dict(self.environment),
        }

    def __repr__(self) -> str:
        return (
            f"Action({self.kind.value}, {self.status_description!r}, "
            f"produced={[n.name for n in self.produced]})"
        )


class ActionGraph:
    """Actions and file nodes for one build invocation.

    Example:
        graph = ActionGraph()
        obj = graph.get_item("build/main.cpp.o")
        action = Action(ActionType.COMPILE)
        action.add_produced(obj)
        graph.add_actions([action])
        assert obj.producer is action
    """

    def __init__(self) -> None:
        self._items: dict[Path, FileNode] = {}
        self._actions: list[Action] = []
        self._intermediate_files: dict[Path, list[str]] = {}

    @property
    def actions(self) -> list[Action]:
        return list(self._actions)

    @property
    def compile_actions(self) -> list[Action]:
        return [a for a in self._actions if a.kind is ActionType.COMPILE]

    @property
    def link_actions(self) -> list[Action]:
        return [a for a in self._actions if a.kind is ActionType.LINK]

    @property
    def intermediate_files(self) -> dict[Path, list[str]]:
        """Text files declared during construction, keyed by path."""
        return dict(self._intermediate_files)

    def get_item(self, path: PurePath | str) -> FileNode:
        """Return the node for a path, creating it on first use."""
        key = Path(path)
        node = self._items.get(key)
        if node is None:
            node = FileNode(key)
            self._items[key] = node
        return node

    def add_actions(self, actions: list[Action]) -> None:
        """Register fully-built actions.

        Every produced item gets the action as its producer and depends on
        the action's prerequisites. Checks all actions before registering
        any, so a failure leaves the graph unchanged.

        Raises:
            GraphConstructionError: If an item would be produced twice.
        """
        claimed: dict[int, Action] = {}
        for action in actions:
            for node in action.produced:
                owner = node.producer or claimed.get(id(node))
                if owner is not None and owner is not action:
                    raise GraphConstructionError(
                        f"{node} is produced by more than one action",
                        context=action.status_description or None,
                    )
                claimed[id(node)] = action

        for action in actions:
            for node in action.produced:
                node.producer = action
                node.depends(action.prerequisites)
            self._actions.append(action)
            logger.debug("Registered %r", action)

    def create_intermediate_text_file(
        self, path: PurePath | str, lines: list[str]
    ) -> FileNode:
        """Declare a text file whose contents are known at construction time.

        The file is written by materialize(); the returned node can be
        used as a prerequisite right away.
        """
        node = self.get_item(path)
        self._intermediate_files[node.path] = list(lines)
        return node

    def materialize(self) -> list[Path]:
        """Write declared intermediate files, skipping unchanged ones.

        Unchanged files keep their timestamps so that actions depending
        on them are not rebuilt needlessly.

        Returns:
            Paths that were written.
        """
        written: list[Path] = []
        for path, lines in self._intermediate_files.items():
            content = "\n".join(lines) + "\n"
            if path.exists() and path.read_text(encoding="utf-8") == content:
                logger.debug("Unchanged: %s", path)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            logger.info("Wrote %s", path)
            written.append(path)
        return written

    def dependencies_of(self, action: Action) -> list[Action]:
        """Actions that produce one of this action's prerequisites."""
        result: list[Action] = []
        for node in action.prerequisites:
            producer = node.producer
            if producer is not None and producer not in result:
                result.append(producer)
        return result

    def __repr__(self) -> str:
        return (
            f"ActionGraph(actions={len(self._actions)}, "
            f"files={len(self._intermediate_files)})"
        )
