# SPDX-License-Identifier: MIT
"""Link input ordering and classification.

Two rules decide how libraries reach emcc:

1. Partition: third-party libraries are moved after all other libraries,
   keeping relative order within each group, so symbols from engine
   libraries resolve against third-party code.
2. Classification: the file suffix picks how an entry is passed. Script
   libraries and pre/post scripts become directives; the order of
   ``--pre-js``/``--post-js`` directives is the order the scripts are
   concatenated into the output, so it is preserved exactly.

The third-party rule is a substring match on the path. Any library whose
path happens to contain the marker is treated as third-party; pass an
explicit ``is_third_party`` callable to partition_libraries() to
classify libraries another way.

Windows import libraries are recognized by their ``.lib`` suffix only.
A path that merely contains ``.lib`` elsewhere, such as
``libfoo.library.a``, is linked normally.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath

from emcons.core.quoting import quote_response_path

THIRD_PARTY_MARKER = "ThirdParty"

# Windows import libraries sometimes leak in from shared module rules.
IGNORED_SUFFIXES: frozenset[str] = frozenset([".lib"])


class LinkInputKind(Enum):
    SCRIPT_LIBRARY = "js-library"
    PRE_SCRIPT = "pre-js"
    POST_SCRIPT = "post-js"
    INPUT = "input"


_SUFFIX_KINDS: dict[str, LinkInputKind] = {
    ".js": LinkInputKind.SCRIPT_LIBRARY,
    ".jspre": LinkInputKind.PRE_SCRIPT,
    ".jspost": LinkInputKind.POST_SCRIPT,
}

_DIRECTIVES: dict[LinkInputKind, str] = {
    LinkInputKind.SCRIPT_LIBRARY: "--js-library",
    LinkInputKind.PRE_SCRIPT: "--pre-js",
    LinkInputKind.POST_SCRIPT: "--post-js",
}


def is_third_party_library(path: PurePath | str) -> bool:
    """Default third-party rule: the marker appears anywhere in the path."""
    return THIRD_PARTY_MARKER in str(path)


def partition_libraries(
    libraries: Iterable[Path],
    is_third_party: Callable[[Path], bool] = is_third_party_library,
) -> list[Path]:
    """Reorder libraries so third-party ones come last.

    Examples:
        >>> libs = [Path("ThirdPartyA"), Path("B"), Path("ThirdPartyC"), Path("D")]
        >>> [p.name for p in partition_libraries(libs)]
        ['B', 'D', 'ThirdPartyA', 'ThirdPartyC']
    """
    ordinary: list[Path] = []
    third_party: list[Path] = []
    for library in libraries:
        if is_third_party(library):
            third_party.append(library)
        else:
            ordinary.append(library)
    return ordinary + third_party


def classify_link_input(path: PurePath | str) -> LinkInputKind:
    """Pick how a library entry is passed to emcc, by file suffix."""
    return _SUFFIX_KINDS.get(PurePath(path).suffix, LinkInputKind.INPUT)


def is_ignored_link_input(path: PurePath | str) -> bool:
    return PurePath(path).suffix.lower() in IGNORED_SUFFIXES


@dataclass(frozen=True)
class LinkInput:
    """A classified library entry."""

    path: Path
    kind: LinkInputKind

    @property
    def directive(self) -> str | None:
        return _DIRECTIVES.get(self.kind)

    def tokens(self) -> list[str]:
        """argv tokens for this entry."""
        if self.directive is None:
            return [str(self.path)]
        return [self.directive, str(self.path)]

    def response_line(self) -> str:
        """This entry as a response-file line."""
        quoted = quote_response_path(self.path)
        if self.directive is None:
            return quoted
        return f"{self.directive} {quoted}"


def prepare_link_inputs(
    libraries: Iterable[Path],
    is_third_party: Callable[[Path], bool] = is_third_party_library,
) -> list[LinkInput]:
    """Partition, filter and classify libraries for a link.

    Returns:
        LinkInputs in final link order.
    """
    return [
        LinkInput(Path(library), classify_link_input(library))
        for library in partition_libraries(libraries, is_third_party)
        if not is_ignored_link_input(library)
    ]
