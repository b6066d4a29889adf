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

"""Generator options.

`AppcastOptions` holds every setting the appcast build understands. It is
frozen; derive variants with `dataclasses.replace()`. Build it directly in
code, or from merged YAML/CLI values with `AppcastOptions.from_dict()`,
which validates keys and types.

Example:
    ```python
    from appcastkit.config import AppcastOptions

    opts = AppcastOptions.from_dict({
        "source_directory": "dist",
        "extensions": "exe, msi",
        "base_url": "https://example.com/downloads",
        "critical_versions": ["1.3"],
    })
    opts.extensions   # ('exe', 'msi')
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from appcastkit.exceptions import ConfigError

VALID_OPERATING_SYSTEMS = ("windows", "mac", "linux")

_PATH_FIELDS = frozenset(
    {"source_directory", "output_directory", "changelog_path", "key_directory"}
)
_BOOL_FIELDS = frozenset(
    {
        "search_subdirectories",
        "prefix_version",
        "file_extract_version",
        "overwrite_old_items",
        "reparse_existing",
        "human_readable",
        "use_ed_signature_attribute",
        "require_signature",
    }
)
_LIST_FIELDS = frozenset({"extensions", "critical_versions"})


def _split_list(value: Any, key: str) -> tuple[str, ...]:
    """Accept "a, b" strings or YAML lists; drop blanks and duplicates."""
    if value is None:
        return ()
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw = [str(v) for v in value]
    else:
        raise ConfigError(f"Option '{key}' must be a list or comma-separated string")
    out: list[str] = []
    for entry in raw:
        entry = entry.strip()
        if entry and entry not in out:
            out.append(entry)
    return tuple(out)


@dataclass(frozen=True)
class AppcastOptions:
    """All appcast generator settings.

    Attributes:
        source_directory: Directory searched for binaries.
        extensions: Binary extensions to pick up ("exe", "tar.gz").
        search_subdirectories: Search source_directory recursively.
        output_directory: Where the appcast is written. Defaults to
            source_directory.
        output_file_name: Appcast file name without extension.
        appcast_format: Serializer name ("xml" or "json").
        operating_system: OS tag for new items: windows, mac, linux, or "".
        base_url: Download base URL for new items.
        prefix_version: Insert "{version}/" between base_url and file name.
        changelog_path: Directory holding "{version}.md" release notes.
        changelog_url: Base URL of published release notes. When unset,
            notes are embedded inline.
        changelog_file_name_prefix: Extra release-notes name prefix
            ("change_log_" matches "change_log_1.0.md").
        product_name: Product name for the appcast and item titles.
        file_extract_version: Take versions from file names instead of
            binary metadata.
        file_version: Version for a single binary whose version cannot be
            determined.
        overwrite_old_items: Replace existing items with equal versions.
        reparse_existing: Start from the items of the existing appcast.
        critical_versions: Versions flagged as critical updates.
        channel: Channel label stamped on every item.
        signature_file_extension: Extension of the appcast signature file.
        key_directory: Directory holding the Ed25519 key files.
        human_readable: Indent the written appcast.
        use_ed_signature_attribute: Use sparkle:edSignature in XML.
        require_signature: Fail when the appcast cannot be signed and
            verified instead of writing it unsigned.
    """

    source_directory: Path = Path(".")
    extensions: tuple[str, ...] = ("exe",)
    search_subdirectories: bool = False
    output_directory: Path | None = None
    output_file_name: str = "appcast"
    appcast_format: str = "xml"
    operating_system: str = "windows"
    base_url: str = ""
    prefix_version: bool = False
    changelog_path: Path | None = None
    changelog_url: str | None = None
    changelog_file_name_prefix: str | None = None
    product_name: str | None = None
    file_extract_version: bool = False
    file_version: str | None = None
    overwrite_old_items: bool = False
    reparse_existing: bool = False
    critical_versions: tuple[str, ...] = ()
    channel: str | None = None
    signature_file_extension: str = "signature"
    key_directory: Path | None = None
    human_readable: bool = True
    use_ed_signature_attribute: bool = False
    require_signature: bool = False

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppcastOptions:
        """Build options from a flat mapping, validating keys and types.

        Keys set to None are treated as absent.

        Raises:
            ConfigError: On unknown keys or values of the wrong type.
        """
        known = set(cls.field_names())
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown option(s): {', '.join(unknown)}. "
                f"Valid options: {', '.join(sorted(known))}"
            )

        values: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            if key in _PATH_FIELDS:
                if not isinstance(value, (str, Path)) or not str(value).strip():
                    raise ConfigError(f"Option '{key}' must be a non-empty path")
                values[key] = Path(value)
            elif key in _BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise ConfigError(f"Option '{key}' must be true or false")
                values[key] = value
            elif key in _LIST_FIELDS:
                values[key] = _split_list(value, key)
            else:
                if not isinstance(value, (str, int, float)) or isinstance(value, bool):
                    raise ConfigError(f"Option '{key}' must be a string")
                values[key] = str(value)
        return cls(**values)

    # -- derived values -------------------------------------------------

    @property
    def effective_output_directory(self) -> Path:
        return self.output_directory or self.source_directory

    def validate(self) -> list[str]:
        """Return a list of problems; empty when the options are usable."""
        errors: list[str] = []
        if not self.extensions:
            errors.append("At least one binary extension is required")
        if not self.output_file_name.strip().strip("."):
            errors.append("output_file_name must not be empty")
        os_tag = self.operating_system.strip().lower()
        if os_tag and not any(name in os_tag for name in VALID_OPERATING_SYSTEMS):
            errors.append(
                f"Invalid operating system {self.operating_system!r}; "
                f"expected one of: {', '.join(VALID_OPERATING_SYSTEMS)}"
            )
        return errors
