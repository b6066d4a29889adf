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

"""Release notes (changelog) lookup for appcast items.

Release notes are Markdown files named after the version they describe.
For version "1.2" and product "MyApp" the lookup tries, in order:

1. `1.2.md`
2. `{prefix} 1.2.md` and `{prefix}1.2.md` (only with a file name prefix)
3. `MyApp 1.2.md` and `MyApp1.2.md` (only with a product name)

The first existing file wins.

Example:
    ```python
    from pathlib import Path
    from appcastkit.build.changelog import find_changelog

    find_changelog(Path("changelogs"), "1.2", prefix="change_log_")
    # PosixPath('changelogs/change_log_1.2.md')
    ```
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote


def changelog_candidates(
    version: str, prefix: str | None = None, product_name: str | None = None
) -> list[str]:
    """File names to try for a version, in lookup order (no duplicates)."""
    base = f"{version}.md"
    names = [base]
    if prefix and prefix.strip():
        names += [f"{prefix.strip()} {base}", f"{prefix.strip()}{base}"]
    if product_name and product_name.strip():
        names += [f"{product_name.strip()} {base}", f"{product_name.strip()}{base}"]
    out: list[str] = []
    for name in names:
        if name not in out:
            out.append(name)
    return out


def find_changelog(
    directory: Path,
    version: str,
    prefix: str | None = None,
    product_name: str | None = None,
) -> Path | None:
    """Return the release notes file for version, or None if there is none."""
    for name in changelog_candidates(version, prefix, product_name):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def read_changelog(path: Path) -> str:
    """Release notes text with surrounding whitespace removed."""
    return path.read_text(encoding="utf-8-sig").strip()


def join_url(base_url: str, file_name: str) -> str:
    """Join a base URL and a file name with exactly one "/" between them.

    The file name is percent-encoded, so "MyApp 1.2.md" becomes
    "MyApp%201.2.md".
    """
    base = base_url.strip().rstrip("/")
    name = quote(file_name.strip().lstrip("/"), safe="")
    return f"{base}/{name}" if base else name
