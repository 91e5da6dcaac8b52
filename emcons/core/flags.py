# SPDX-License-Identifier: MIT
"""Flag handling utilities for emcons.

Flags are kept as flat lists of argv tokens. Some flags take their
argument as a separate token (e.g. ``-s USE_PTHREADS=1`` or
``--js-library lib.js``); those pairs must stay together when flags are
grouped onto response-file lines.

Note: The set of separated-argument flags is defined by the toolchain
(see emcons/toolchains/emscripten_flags.py). The functions in this
module accept the flag set as a parameter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


# Default separated arg flags (empty set).
# The actual flags are defined by the toolchain.
DEFAULT_SEPARATED_ARG_FLAGS: frozenset[str] = frozenset()


def is_separated_arg_flag(
    flag: str, separated_arg_flags: frozenset[str] | None = None
) -> bool:
    """Check if a flag takes its argument as a separate token.

    Args:
        flag: The flag to check.
        separated_arg_flags: Set of flags that take separate arguments.
                           If None, uses DEFAULT_SEPARATED_ARG_FLAGS (empty).

    Returns:
        True if this flag expects its argument in the next token.

    Examples:
        >>> em_flags = frozenset(["-s", "--pre-js"])
        >>> is_separated_arg_flag("-s", em_flags)
        True
        >>> is_separated_arg_flag("-O2", em_flags)
        False
    """
    if separated_arg_flags is None:
        separated_arg_flags = DEFAULT_SEPARATED_ARG_FLAGS
    return flag in separated_arg_flags


def group_flags(
    flags: Iterable[str], separated_arg_flags: frozenset[str] | None = None
) -> list[list[str]]:
    """Split a flat flag list into groups of one flag plus its argument.

    Simple flags and flags with attached arguments (-O2, -DFOO) form
    single-token groups. A separated-argument flag forms a two-token
    group with the token that follows it. Order is preserved and
    nothing is de-duplicated.

    Args:
        flags: Flat list of flag tokens.
        separated_arg_flags: Set of flags that take separate arguments.
                           If None, uses DEFAULT_SEPARATED_ARG_FLAGS (empty).

    Returns:
        List of token groups.

    Examples:
        >>> em_flags = frozenset(["-s"])
        >>> group_flags(["-O3", "-s", "ASSERTIONS=1", "-g1"], em_flags)
        [['-O3'], ['-s', 'ASSERTIONS=1'], ['-g1']]
    """
    if separated_arg_flags is None:
        separated_arg_flags = DEFAULT_SEPARATED_ARG_FLAGS

    tokens = list(flags)
    groups: list[list[str]] = []
    i = 0
    while i < len(tokens):
        flag = tokens[i]
        if is_separated_arg_flag(flag, separated_arg_flags) and i + 1 < len(tokens):
            groups.append([flag, tokens[i + 1]])
            i += 2
        else:
            groups.append([flag])
            i += 1
    return groups


def setting(name: str, value: object | None = None) -> list[str]:
    """Return the two tokens of an emcc ``-s`` setting.

    Examples:
        >>> setting("ASSERTIONS", 1)
        ['-s', 'ASSERTIONS=1']
        >>> setting("LLD_REPORT_UNDEFINED")
        ['-s', 'LLD_REPORT_UNDEFINED']
    """
    if value is None:
        return ["-s", name]
    return ["-s", f"{name}={value}"]