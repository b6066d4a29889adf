"""
Tests for appcastkit.model module.

Tests the appcast data model including:
- Release notes exclusivity on items
- Operating system helpers
- Appcast lookup, merging and sorting
"""

from __future__ import annotations

import pytest

from appcastkit.model import Appcast, AppcastItem
from appcastkit.versioning import SemVerLike

pytestmark = pytest.mark.unit


def _item(version: str, os_tag: str = "windows", **kwargs) -> AppcastItem:
    return AppcastItem(
        title=f"MyApp {version}",
        version=version,
        short_version=version,
        download_link=f"https://example.com/MyApp%20{version}.exe",
        operating_system=os_tag,
        **kwargs,
    )


class TestAppcastItem:
    """Tests for AppcastItem."""

    def test_notes_and_link_are_exclusive(self):
        """Test that inline notes and a notes link cannot both be set."""
        with pytest.raises(ValueError, match="both inline release notes"):
            _item("1.0", description="notes", release_notes_link="https://x/1.0.md")

    def test_semver_is_derived(self):
        """Test that the ordering key comes from the version text."""
        assert _item("v1.2.0").semver == SemVerLike.parse("1.2")

    @pytest.mark.parametrize(
        "os_tag, windows, mac, linux",
        [
            ("windows", True, False, False),
            ("Win", True, False, False),
            (" WINDOWS ", True, False, False),
            ("mac", False, True, False),
            ("macOS", False, True, False),
            ("osx", False, True, False),
            ("linux", False, False, True),
            ("Linux", False, False, True),
            ("", False, False, False),
            ("freebsd", False, False, False),
        ],
    )
    def test_operating_system_helpers(self, os_tag, windows, mac, linux):
        """Test the per-platform flags for common tags."""
        item = _item("1.0", os_tag)
        assert item.is_windows_update is windows
        assert item.is_mac_update is mac
        assert item.is_linux_update is linux


class TestAppcast:
    """Tests for Appcast merging and ordering."""

    def test_find(self):
        """Test lookup by equal version."""
        appcast = Appcast(items=[_item("1.0"), _item("1.1")])
        assert appcast.find(SemVerLike.parse("1.1.0")) == 1
        assert appcast.find(SemVerLike.parse("2.0")) is None

    def test_merge_new_version(self):
        """Test that a new version is appended."""
        appcast = Appcast()
        assert appcast.merge(_item("1.0"), overwrite=False)
        assert [i.version for i in appcast.items] == ["1.0"]

    def test_merge_duplicate_skipped(self):
        """Test that an equal version is dropped without overwrite."""
        appcast = Appcast(items=[_item("1.0", "windows")])
        assert not appcast.merge(_item("1.0.0", "linux"), overwrite=False)
        assert [i.operating_system for i in appcast.items] == ["windows"]

    def test_merge_duplicate_replaced(self):
        """Test that an equal version is replaced in place with overwrite."""
        appcast = Appcast(items=[_item("1.0", "windows"), _item("2.0")])
        assert appcast.merge(_item("1.0.0", "linux"), overwrite=True)
        assert [i.version for i in appcast.items] == ["1.0.0", "2.0"]
        assert appcast.items[0].operating_system == "linux"

    def test_sort_newest_first(self):
        """Test sorting by version, newest first."""
        appcast = Appcast(
            items=[_item("1.0"), _item("2.0-beta1"), _item("2.0"), _item("1.10")]
        )
        appcast.sort()
        assert [i.version for i in appcast.items] == ["2.0", "2.0-beta1", "1.10", "1.0"]
