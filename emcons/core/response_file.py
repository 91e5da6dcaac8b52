# SPDX-License-Identifier: MIT
"""Linker response files.

A link can have more arguments than the host's command-line limit, so
every link passes its arguments through a response file referenced as
``@path``. The file is plain text with one flag group, quoted path, or
directive per line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from emcons.core.flags import group_flags
from emcons.core.quoting import quote_response_path, quote_response_token

if TYPE_CHECKING:
    from collections.abc import Iterable

    from emcons.core.action import ActionGraph
    from emcons.core.node import FileNode

RESPONSE_SUFFIX = ".response"


def response_file_path(response_dir: PurePath, output_path: PurePath) -> Path:
    """Return where the response file for a link output lives."""
    return Path(response_dir) / f"{output_path.name}{RESPONSE_SUFFIX}"


@dataclass
class ResponseFile:
    """Ordered argument lines for one link action.

    Use for_link() to build one; the line order is flags, object files,
    library entries, then the output directive.
    """

    lines: list[str] = field(default_factory=list)

    @classmethod
    def for_link(
        cls,
        flags: Iterable[str],
        object_files: Iterable[PurePath | str],
        library_lines: Iterable[str],
        output_path: PurePath | str,
        separated_arg_flags: frozenset[str] | None = None,
    ) -> ResponseFile:
        """Build the response file for a link.

        Args:
            flags: Flat link flag tokens.
            object_files: Object files, in link order.
            library_lines: Already-formatted library lines, in link order.
            output_path: The primary link output.
            separated_arg_flags: Flags whose argument is the next token;
                such pairs share a line.
        """
        response = cls()
        for group in group_flags(flags, separated_arg_flags):
            response.lines.append(" ".join(quote_response_token(t) for t in group))
        for obj in object_files:
            response.lines.append(quote_response_path(obj))
        response.lines.extend(library_lines)
        response.lines.append(f"-o {quote_response_path(output_path)}")
        return response

    def register(self, graph: ActionGraph, path: PurePath | str) -> FileNode:
        """Declare the file in the graph and return its node."""
        return graph.create_intermediate_text_file(path, self.lines)

    def __len__(self) -> int:
        return len(self.lines)
