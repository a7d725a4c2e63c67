"""Tests for platform detection."""

import sys

import pytest

from pydots.exceptions import DotsUnsupportedPlatformError
from pydots.platforms import Platform, current_platform


class TestCurrentPlatform:
    """Tests for current_platform."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("linux", Platform.LINUX),
            ("linux2", Platform.LINUX),
            ("win32", Platform.WINDOWS),
            ("cygwin", Platform.WINDOWS),
        ],
    )
    def test_supported(self, value, expected):
        assert current_platform(value) is expected

    @pytest.mark.parametrize("value", ["darwin", "freebsd13", "aix"])
    def test_unsupported(self, value):
        with pytest.raises(DotsUnsupportedPlatformError, match=value):
            current_platform(value)

    def test_defaults_to_sys_platform(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")

        assert current_platform() is Platform.WINDOWS

    def test_platform_values_match_config_tables(self):
        assert {p.value for p in Platform} == {"linux", "windows"}
