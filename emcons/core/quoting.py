# SPDX-License-Identifier: MIT
"""Quoting helpers for command lines and response files.

Actions keep their command lines as lists of argv tokens. These helpers
turn token lists into strings for a target consumer: a shell (for
display and for compile_commands.json) or an emcc response file.
"""

from __future__ import annotations

import platform
from collections.abc import Iterable, Sequence
from os import PathLike

_BASH_SPECIAL = " \t\n\"'\\$`!*?[](){}|&;<>"
_CMD_SPECIAL = ' \t"^&|<>()%!'
_RESPONSE_SPECIAL = " \t\n\"'\\"


def _flatten(items: Iterable[object]) -> list[str]:
    """Flatten nested lists to flat list of strings."""
    result: list[str] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            result.extend(_flatten(item))
        else:
            result.append(str(item))
    return result


def quote_for_shell(s: str, shell: str = "bash") -> str:
    """Quote string for target shell if needed.

    Args:
        s: String to quote
        shell: Target shell ("bash" or "cmd")
    """
    if not s:
        return '""' if shell == "cmd" else "''"

    if shell == "cmd":
        if not any(c in s for c in _CMD_SPECIAL):
            return s
        return f'"{s.replace(chr(34), chr(34) + chr(34))}"'

    if not any(c in s for c in _BASH_SPECIAL):
        return s
    if "'" not in s:
        return f"'{s}'"
    escaped = (
        s.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("`", "\\`")
    )
    return f'"{escaped}"'


def to_shell_command(tokens: Sequence[object], shell: str = "auto") -> str:
    """Convert a token list to a shell command string with proper quoting.

    Args:
        tokens: Command tokens; nested lists are flattened and path-like
                objects are converted with str().
        shell: "auto", "bash" or "cmd".
    """
    if shell == "auto":
        shell = "cmd" if platform.system() == "Windows" else "bash"
    return " ".join(quote_for_shell(t, shell) for t in _flatten(tokens))


def quote_response_token(token: str) -> str:
    """Quote a token for an emcc response file.

    emcc splits response files with POSIX shell rules, so tokens holding
    whitespace or quotes are wrapped in double quotes with backslash
    escapes. Plain tokens are written as-is.
    """
    if token and not any(c in token for c in _RESPONSE_SPECIAL):
        return token
    escaped = token.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def quote_response_path(path: str | PathLike[str]) -> str:
    """Quote a path for an emcc response file.

    Paths are always quoted and always use forward slashes.
    """
    posix = str(path).replace("\\", "/")
    escaped = posix.replace('"', '\\"')
    return f'"{escaped}"'
