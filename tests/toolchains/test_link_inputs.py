# SPDX-License-Identifier: MIT
"""Tests for link input ordering and classification."""

from __future__ import annotations

from pathlib import Path

import pytest

from emcons.toolchains.link_inputs import (
    LinkInput,
    LinkInputKind,
    classify_link_input,
    is_ignored_link_input,
    is_third_party_library,
    partition_libraries,
    prepare_link_inputs,
)


def paths(*names: str) -> list[Path]:
    return [Path(n) for n in names]


class TestPartition:
    def test_third_party_moved_last(self) -> None:
        libs = paths("ThirdPartyA", "B", "ThirdPartyC", "D")
        assert partition_libraries(libs) == paths("B", "D", "ThirdPartyA", "ThirdPartyC")

    def test_substring_anywhere_in_path(self) -> None:
        assert is_third_party_library(Path("Engine/Source/ThirdParty/zlib/libz.a"))
        assert not is_third_party_library(Path("Engine/Source/Runtime/libCore.a"))

    def test_marker_is_case_sensitive(self) -> None:
        assert not is_third_party_library("thirdparty/libz.a")

    def test_custom_rule(self) -> None:
        libs = paths("vendor/a.a", "b.a", "ThirdParty/c.a")
        result = partition_libraries(libs, lambda p: p.parts[0] == "vendor")
        assert result == paths("b.a", "ThirdParty/c.a", "vendor/a.a")

    def test_empty(self) -> None:
        assert partition_libraries([]) == []


class TestClassify:
    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("UE4.js", LinkInputKind.SCRIPT_LIBRARY),
            ("prefix.jspre", LinkInputKind.PRE_SCRIPT),
            ("suffix.jspost", LinkInputKind.POST_SCRIPT),
            ("libz.a", LinkInputKind.INPUT),
            ("Core.bc", LinkInputKind.INPUT),
        ],
    )
    def test_by_suffix(self, name: str, kind: LinkInputKind) -> None:
        assert classify_link_input(name) is kind

    def test_ignored(self) -> None:
        assert is_ignored_link_input("zlib.lib")
        assert is_ignored_link_input("ZLIB.LIB")
        assert not is_ignored_link_input("libz.a")
        assert not is_ignored_link_input("lib/libz.a")
        assert not is_ignored_link_input("libfoo.library.a")
        assert not is_ignored_link_input("Engine.lib/libz.a")


class TestLinkInput:
    def test_directive_tokens_and_line(self) -> None:
        entry = LinkInput(Path("Source/UE4.js"), LinkInputKind.SCRIPT_LIBRARY)
        assert entry.directive == "--js-library"
        assert entry.tokens() == ["--js-library", "Source/UE4.js"]
        assert entry.response_line() == '--js-library "Source/UE4.js"'

    def test_plain_input(self) -> None:
        entry = LinkInput(Path("lib dir/libz.a"), LinkInputKind.INPUT)
        assert entry.directive is None
        assert entry.tokens() == ["lib dir/libz.a"]
        assert entry.response_line() == '"lib dir/libz.a"'


class TestPrepareLinkInputs:
    def test_partition_filter_and_classify(self) -> None:
        libs = paths(
            "ThirdParty/pre.jspre",
            "Engine/UE4.js",
            "Engine/zlib.lib",
            "ThirdParty/libz.a",
            "Engine/post.jspost",
            "Engine/libCore.a",
        )
        result = prepare_link_inputs(libs)
        assert [(e.path.name, e.kind) for e in result] == [
            ("UE4.js", LinkInputKind.SCRIPT_LIBRARY),
            ("post.jspost", LinkInputKind.POST_SCRIPT),
            ("libCore.a", LinkInputKind.INPUT),
            ("pre.jspre", LinkInputKind.PRE_SCRIPT),
            ("libz.a", LinkInputKind.INPUT),
        ]

    def test_script_order_preserved(self) -> None:
        """--pre-js order is concatenation order; it must not change."""
        libs = paths("b.jspre", "a.jspre", "c.jspre")
        result = prepare_link_inputs(libs)
        assert [e.path.name for e in result] == ["b.jspre", "a.jspre", "c.jspre"]
