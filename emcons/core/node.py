# SPDX-License-Identifier: MIT

# Node base class for entries in the build graph: files that already exist
# (sources, forced includes, libraries) and files that actions produce.

from __future__ import annotations

from pathlib import Path, PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from emcons.core.action import Action


class Node:
    explicit_deps: list[Node]

    def __init__(self, dependencies: list[Node] | None = None) -> None:
        "Base class for a Node, an entry in the build dependency graph."
        self.explicit_deps = list(dependencies or [])

    def deps(self) -> list[Node]:
        """All direct dependencies of this node"""
        return list(self.explicit_deps)

    def depends(self, n: Node | list[Node]) -> None:
        """Add one or more dependencies for this node, i.e. node(s) which must be up to date
        before we can build this one."""
        if isinstance(n, Node):
            n = [n]
        for node in n:
            if node is not self and node not in self.explicit_deps:
                self.explicit_deps.append(node)


class FileNode(Node):
    """A file in the build graph.

    The node may or may not exist on disk: object files, link outputs
    and response files are declared before anything runs. Nodes are
    interned by ActionGraph.get_item(), so two references to the same
    path are the same object.
    """

    path: Path
    producer: Action | None

    def __init__(self, path: PurePath | str) -> None:
        super().__init__()
        self.path = Path(path)
        self.producer = None

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        return self.path.exists()

    def __fspath__(self) -> str:
        return str(self.path)

    def __str__(self) -> str:
        return str(self.path)

    def __repr__(self) -> str:
        return f"FileNode({str(self.path)!r})"
