# SPDX-License-Identifier: MIT
"""Tests for emcons.core.errors."""

from __future__ import annotations

import pytest

from emcons.core.errors import (
    ConfigurationError,
    EmconsError,
    GraphConstructionError,
    JobError,
    SdkNotInstalledError,
    UnsupportedValueError,
)


class TestEmconsError:
    def test_message_only(self) -> None:
        err = EmconsError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"
        assert err.context is None

    def test_context_prefixes_message(self) -> None:
        err = EmconsError("no object files to link", context="Game.js")
        assert str(err) == "Game.js: no object files to link"

    @pytest.mark.parametrize(
        "cls", [ConfigurationError, GraphConstructionError, JobError]
    )
    def test_subclasses(self, cls: type[EmconsError]) -> None:
        assert issubclass(cls, EmconsError)


class TestSdkNotInstalledError:
    def test_is_configuration_error(self) -> None:
        assert isinstance(SdkNotInstalledError(), ConfigurationError)

    def test_lists_searched_locations(self) -> None:
        err = SdkNotInstalledError(["/opt/emsdk", "/home/me/emsdk"])
        assert "not installed" in str(err)
        assert "/opt/emsdk, /home/me/emsdk" in str(err)
        assert err.searched == ["/opt/emsdk", "/home/me/emsdk"]

    def test_without_locations(self) -> None:
        assert "searched" not in str(SdkNotInstalledError())


class TestUnsupportedValueError:
    def test_is_lookup_error(self) -> None:
        """Callers catching LookupError see unsupported values too."""
        with pytest.raises(LookupError):
            raise UnsupportedValueError("C++ standard", "c++98")

    def test_message(self) -> None:
        err = UnsupportedValueError("C++ standard", "c++98")
        assert str(err) == "unsupported C++ standard: 'c++98'"
        assert err.kind == "C++ standard"
        assert err.value == "c++98"
