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

"""Heuristic version extraction from file names and paths.

Release artifacts rarely carry clean version metadata in their names. This
module finds the most plausible version token in strings such as
"MyApp_Setup-2.10.1.exe", "releases/1.0/myapp.zip" or
"hello 1.0bar7.8foo6.3.2.0.txt".

Search Order:

1. Strip a known binary directory prefix (optional).
2. Strip exactly one known file extension (compound ones like ".tar.gz"
   first, then caller-supplied extensions).
3. Normalize whitespace and turn underscores into spaces.
4. Walk path segments from the file name outward, at most four levels.
   In each segment the last space-separated word is tried first, then
   the first word.

A candidate is accepted when it is 2 to 4 dot-separated integers
("1.0", "6.3.2.0") or a full semantic version ("1.0.0-beta.1+build.7").
Longer numeric runs are cut down to their last four components.

The functions here are pure: no file access, no global state, and they
never raise for odd input. Anything unrecognizable yields None.

Example:
    ```python
    from appcastkit.versioning.from_name import version_from_name

    version_from_name("My Favorite App 4.3.2.1.0.zip")
    # '3.2.1.0'
    version_from_name("/builds/2.1/app/bin/app.exe")
    # '2.1'
    version_from_name("app.exe")
    # None
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
import os
import re

MAX_SEARCH_DEPTH = 4

# Most specific first: ".tar.gz" must win over ".gz".
KNOWN_EXTENSION_PATTERNS: tuple[str, ...] = (
    r"\.tar\.gz",
    r"\.tar",
    r"\.gz",
    r"\.zip",
    r"\.txt",
    r"\.exe",
    r"\.bin",
    r"\.msi",
    r"\.excel",
    r"\.mcdx",
    r"\.pdf",
    r"\.dll",
    r"\.ted",
)

_NUMERIC_VERSION_RE = re.compile(r"\d+(?:\.\d+){1,3}")
_SEMVER_RE = re.compile(
    r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)
_DIGITS_ONLY_RE = re.compile(r"[\d.]+")
_LEFT_ALPHA_RE = re.compile(r"(?<![+-])[a-zA-Z]+(?=\d)")
_RIGHT_ALPHA_RE = re.compile(r"(?<![a-zA-Z+-])[a-zA-Z]+(?=\d)")
_MIXED_PREFIX_RE = re.compile(r"[^+-]*[a-zA-Z][+-]?")


def is_valid_version(text: str) -> bool:
    """Return True for 2-4 part numeric versions or strict semantic versions."""
    return bool(_NUMERIC_VERSION_RE.fullmatch(text) or _SEMVER_RE.fullmatch(text))


def normalize_extension(extension: str) -> str:
    """Return the extension with exactly one leading dot ("exe" -> ".exe")."""
    ext = extension.strip()
    return ext if ext.startswith(".") else f".{ext}"


def _strip_extension(name: str, extensions: Iterable[str] | None) -> str:
    patterns = list(KNOWN_EXTENSION_PATTERNS)
    for ext in extensions or ():
        if ext and ext.strip():
            patterns.append(re.escape(normalize_extension(ext)))
    for pattern in patterns:
        m = re.search(pattern + r"$", name)
        if m:
            return name[: m.start()].strip()
    return name


def _split_path(text: str) -> list[str]:
    separators = [os.sep]
    if os.altsep:
        separators.append(os.altsep)
    pattern = "|".join(re.escape(s) for s in separators)
    return [seg for seg in re.split(pattern, text) if seg]


def _trim_left(text: str) -> str:
    """Cut text starting at the first letter run that precedes a digit."""
    if not any(c.isdigit() for c in text):
        return ""
    if "+" in text or "-" in text:
        m = _LEFT_ALPHA_RE.search(text)
        return text[: m.start()] if m else text
    m = re.search(r"[a-zA-Z]", text)
    return text[: m.start()] if m else text


def _trim_right(text: str) -> str:
    """Drop everything up to and including a letter run that precedes a digit."""
    m = _RIGHT_ALPHA_RE.search(text)
    return text[m.end() :] if m else text


def _split_on_periods(text: str) -> str | None:
    """Accumulate dot-separated segments right to left, keeping the last valid tail."""
    result: str | None = None
    tail = ""
    last = False
    for segment in reversed(text.split(".")):
        has_alpha = any(c.isalpha() for c in segment)
        has_digit = any(c.isdigit() for c in segment)
        if has_alpha and has_digit:
            m = _MIXED_PREFIX_RE.search(segment)
            if m:
                segment = segment[m.end() :]
            last = True
        tail = segment if not tail.strip() else f"{segment}.{tail}"
        tail = tail.strip(".")
        if is_valid_version(tail):
            result = tail
        if last:
            break
    return result


def _find(text: str, from_left: bool) -> str | None:
    if not text or not text.strip():
        return None
    text = _trim_left(text) if from_left else _trim_right(text)
    if not any(c.isdigit() for c in text):
        return None
    if _DIGITS_ONLY_RE.fullmatch(text) and is_valid_version(text):
        return text
    if is_valid_version(text):
        return text
    return _split_on_periods(text)


def version_from_name(
    path: str,
    binary_directory: str = "",
    extensions: Iterable[str] | None = None,
) -> str | None:
    """Find a version in a file name or path.

    Args:
        path: File name or full/relative path of a release artifact.
        binary_directory: Known directory prefix to remove before searching,
            so version-like folder names above the binaries are ignored.
        extensions: Extra extensions to strip ("exe", ".dmg"). Built-in
            archive, installer and document extensions are always tried.

    Returns:
        The version text, or None when nothing version-like is found.

    Example:
        ```python
        version_from_name("hello a2.3.txt")           # '2.3'
        version_from_name("appsetup-2.10.1.exe")      # '2.10.1'
        version_from_name("hello 1 .0.txt")           # None
        ```

    Note:
        Only the four innermost path segments are examined. A version folder
        five or more levels above the file is deliberately ignored.

    """
    if not path or not path.strip() or path.endswith("."):
        return None

    text = path
    if binary_directory and binary_directory.strip():
        text = text.replace(binary_directory, "", 1).strip()

    text = _strip_extension(text, extensions)
    text = re.sub(r"\s+", " ", text).replace("_", " ")

    segments = _split_path(text)
    for index in range(len(segments) - 1, max(-1, len(segments) - 1 - MAX_SEARCH_DEPTH), -1):
        words = segments[index].split(" ")
        left = words[0]
        right = words[-1]
        found_right = _find(right, from_left=False)
        if found_right:
            return found_right
        found_left = _find(left, from_left=True)
        if found_left:
            return found_left
    return None


def get_extensions_from_string(text: str | None) -> list[str]:
    """Split a comma-separated extension list, dropping blanks and duplicates.

    Example:
        ```python
        get_extensions_from_string("exe, msi,msi")   # ['exe', 'msi']
        ```
    """
    out: list[str] = []
    for raw in (text or "").split(","):
        ext = raw.strip()
        if ext and ext not in out:
            out.append(ext)
    return out


def get_search_patterns(extensions: Iterable[str]) -> list[str]:
    """Turn extensions into glob patterns ("exe" -> "*.exe", ".tar.gz" -> "*.tar.gz")."""
    return [f"*{normalize_extension(ext)}" for ext in extensions if ext and ext.strip()]
