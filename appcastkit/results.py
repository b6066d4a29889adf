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

"""Public API return types for appcastkit.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from appcastkit import AppcastOptions, generate_appcast

        result = generate_appcast(AppcastOptions(source_directory="dist"))
        print(result.appcast_path)
        for notice in result.notices:
            print(notice.kind, notice.message)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like AppcastItem) stay in appcastkit.model.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from appcastkit.model import AppcastItem

# Notice kinds for non-fatal build conditions.
VERSION_RESOLUTION_FAILED = "VersionResolutionFailed"
CHANGELOG_NOT_FOUND = "ChangelogNotFound"
DUPLICATE_VERSION_SKIPPED = "DuplicateVersionSkipped"
SIGNATURE_VERIFICATION_FAILED = "SignatureVerificationFailed"
UNSIGNED_APPCAST = "UnsignedAppcast"


@dataclass(frozen=True)
class BuildNotice:
    """A non-fatal condition met while building.

    Attributes:
        kind: One of the notice kind constants in this module.
        message: Human-readable description.
        path: File the notice refers to, if any.
    """

    kind: str
    message: str
    path: Path | None = None


@dataclass(frozen=True)
class BuildResult:
    """Result of the build/merge step, before anything is written.

    Attributes:
        product_name: Product name (existing appcast's name wins).
        items: Items, newest first.
        notices: Non-fatal conditions met along the way.
    """

    product_name: str | None
    items: tuple[AppcastItem, ...]
    notices: tuple[BuildNotice, ...]


@dataclass(frozen=True)
class GenerateResult:
    """Result of generating an appcast file.

    Attributes:
        appcast_path: Path of the written appcast.
        signature_path: Path of the signature side-file, or None when the
            appcast was left unsigned.
        product_name: Product name written to the appcast.
        items: Items written, newest first.
        notices: Non-fatal conditions met along the way.
    """

    appcast_path: Path
    signature_path: Path | None
    product_name: str | None
    items: tuple[AppcastItem, ...]
    notices: tuple[BuildNotice, ...]

    @property
    def is_signed(self) -> bool:
        return self.signature_path is not None
