# SPDX-License-Identifier: MIT
"""Tests for emcons.configure.platform."""

import sys

from emcons.configure.platform import Platform, get_platform


class TestPlatform:
    def test_linux(self):
        p = Platform(os="linux", arch="x86_64")
        assert p.is_linux
        assert p.is_posix
        assert not p.is_windows
        assert not p.is_macos

    def test_windows(self):
        p = Platform(os="windows", arch="x86_64")
        assert p.is_windows
        assert not p.is_posix

    def test_macos(self):
        assert Platform(os="darwin", arch="arm64").is_macos


class TestGetPlatform:
    def test_matches_interpreter(self):
        p = get_platform()
        if sys.platform.startswith("linux"):
            assert p.is_linux
        elif sys.platform == "darwin":
            assert p.is_macos
        elif sys.platform.startswith("win"):
            assert p.is_windows
        assert p.arch

    def test_cached(self):
        assert get_platform() is get_platform()
