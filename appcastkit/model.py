# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Appcast data model.

An appcast is an ordered list of release items (newest first) plus an
optional product name. Each `AppcastItem` describes one downloadable
artifact: where to get it, how big it is, its signature, and its release
notes (either inline text or a link, never both).

Items are plain mutable dataclasses because the build replaces them in
place while merging and stamps critical/channel flags at the end. The
version ordering key (`semver`) is derived from `version` on access and is
never serialized.

Example:
    ```python
    from appcastkit.model import AppcastItem

    item = AppcastItem(
        title="MyApp 1.2",
        version="1.2",
        short_version="1.2",
        download_link="https://example.com/MyApp-1.2.exe",
        operating_system="windows",
    )
    item.is_windows_update   # True
    str(item.semver)         # '1.2'
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from appcastkit.versioning.keys import SemVerLike

DEFAULT_MIME_TYPE = "application/octet-stream"

_WINDOWS_TAGS = frozenset({"win", "windows"})
_MAC_TAGS = frozenset({"mac", "macos", "osx"})
_LINUX_TAGS = frozenset({"linux"})


@dataclass
class AppcastItem:
    """One release entry of an appcast.

    Attributes:
        title: Display title, usually "{product} {version}".
        version: Full version string as written to the appcast.
        short_version: Numeric core only ("2.0" for "2.0-beta1").
        download_link: URL-escaped download URL of the artifact.
        operating_system: OS tag ("windows", "macos", "linux") or "".
        update_size: Artifact size in bytes.
        mime_type: MIME type of the artifact.
        download_signature: Signature of the artifact bytes, if signed.
        publication_date: Timezone-aware publication time.
        description: Inline release notes.
        release_notes_link: URL of external release notes.
        release_notes_signature: Signature of the release notes file.
        channel: Release channel label ("beta", "preview").
        is_critical_update: True when clients must install this update.

    Raises:
        ValueError: If both inline notes and a release notes link are set.
    """

    title: str
    version: str
    short_version: str = ""
    download_link: str = ""
    operating_system: str = ""
    update_size: int = 0
    mime_type: str = DEFAULT_MIME_TYPE
    download_signature: str | None = None
    publication_date: datetime | None = None
    description: str | None = None
    release_notes_link: str | None = None
    release_notes_signature: str | None = None
    channel: str | None = None
    is_critical_update: bool = False

    def __post_init__(self) -> None:
        if self.description and self.release_notes_link:
            raise ValueError(
                f"item {self.version!r} has both inline release notes "
                "and a release notes link"
            )

    @property
    def semver(self) -> SemVerLike:
        """Ordering and identity key parsed from `version`."""
        return SemVerLike.parse(self.version)

    @property
    def is_windows_update(self) -> bool:
        return (self.operating_system or "").strip().lower() in _WINDOWS_TAGS

    @property
    def is_mac_update(self) -> bool:
        return (self.operating_system or "").strip().lower() in _MAC_TAGS

    @property
    def is_linux_update(self) -> bool:
        return (self.operating_system or "").strip().lower() in _LINUX_TAGS


@dataclass
class Appcast:
    """Product name plus items, newest first after `sort()`.

    No two items share an equal version as long as items are added
    through `merge()`.
    """

    product_name: str | None = None
    items: list[AppcastItem] = field(default_factory=list)

    def find(self, version: SemVerLike) -> int | None:
        """Index of the item whose version equals `version`, or None."""
        for index, item in enumerate(self.items):
            if item.semver == version:
                return index
        return None

    def merge(self, item: AppcastItem, overwrite: bool) -> bool:
        """Insert `item` unless an equal version exists.

        An existing equal version is replaced in place when `overwrite` is
        True, otherwise `item` is dropped.

        Returns:
            True if `item` ended up in the appcast.
        """
        index = self.find(item.semver)
        if index is None:
            self.items.append(item)
            return True
        if overwrite:
            self.items[index] = item
            return True
        return False

    def sort(self) -> None:
        """Sort items newest first. Equal versions keep their relative order."""
        self.items.sort(key=lambda item: item.semver, reverse=True)
