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

"""Core version parsing and ordering for appcastkit.

This module is format-agnostic: it does NOT read files. It parses version
strings (file-derived or taken from binary metadata) into a permissive,
semver-like value that can be sorted, compared and used as a dict key.

Ordering rules (ascending, i.e. "older first"):

1. Numeric cores compare component-by-component, missing trailing
   components count as 0 ("1.2" == "1.2.0" for ordering). Numeric
   components past the fourth extend the core ("1.2.3.4.5" > "1.2.3.4").
2. For equal cores, a version without any suffix is newest, then a version
   carrying only build metadata ("+meta"), then prereleases.
3. Prereleases compare by semantic-versioning precedence: dot-separated
   identifiers pairwise, numeric identifiers numerically and below any
   alphanumeric identifier, alphanumeric ones in ASCII order, and a shorter
   identifier list ranks lower when all shared identifiers are equal.
4. Build metadata never affects ordering.

Equality (used for deduplication) is stricter than ordering: equal numeric
core AND identical suffix text. "1.0+a" and "1.0+b" therefore sort as
equals but are distinct appcast entries.

Strings without a numeric core ("latest", "") still parse. They are
invalid and sort below every valid version, ordered among themselves by
their raw text.

Example:
    ```python
    from appcastkit.versioning import SemVerLike

    versions = [SemVerLike.parse(v) for v in ["2.0-alpha.1", "2.0", "2.0-beta1"]]
    [str(v) for v in sorted(versions, reverse=True)]
    # ['2.0', '2.0-beta1', '2.0-alpha.1']
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
import re

MAX_CORE_COMPONENTS = 4

_CORE_RE = re.compile(r"^[vV]?(?P<core>\d+(?:\.\d+){0,3})(?P<suffix>.*)$", re.DOTALL)
_EXTRA_CORE_RE = re.compile(r"(?:\.\d+)+")
_SUFFIX_SEP = " ._"

# ----------------------------
# Value types
# ----------------------------


@dataclass(frozen=True)
class VersionToken:
    """Parsed numeric core plus the raw suffix that followed it.

    Attributes:
        core: 1 to 4 non-negative integers (e.g. (1, 2, 3)).
        suffix: Prerelease and/or build text exactly as found, including
            its leading "-" or "+" (e.g. "-beta.1+build.5"), or "".

    Raises:
        ValueError: If core is empty or longer than four components.
    """

    core: tuple[int, ...]
    suffix: str = ""

    def __post_init__(self) -> None:
        if not self.core:
            raise ValueError("version core must have at least one component")
        if len(self.core) > MAX_CORE_COMPONENTS:
            raise ValueError(
                f"version core has {len(self.core)} components, "
                f"at most {MAX_CORE_COMPONENTS} allowed"
            )
        if any(n < 0 for n in self.core):
            raise ValueError(f"negative version component in {self.core!r}")

    @property
    def core_text(self) -> str:
        """Dotted numeric core (e.g. "1.2.3")."""
        return ".".join(str(n) for n in self.core)

    def __str__(self) -> str:
        return self.core_text + self.suffix


def _split_extra_core(suffix: str) -> tuple[tuple[int, ...], str]:
    """Split numeric components past the fourth off the front of a suffix.

    ".5.6-rc1" -> ((5, 6), "-rc1"); "-rc1" -> ((), "-rc1").
    """
    m = _EXTRA_CORE_RE.match(suffix)
    if not m:
        return (), suffix
    extra = tuple(int(p) for p in m.group(0).split(".")[1:])
    return extra, suffix[m.end():]


def _split_suffix(suffix: str) -> tuple[str, str]:
    """Split a raw suffix into (prerelease, build) without their markers.

    "-rc.1+build.5" -> ("rc.1", "build.5"); "+meta" -> ("", "meta").
    Suffixes that do not start with "-" or "+" ("beta2", " RC") are treated
    as prerelease text after dropping leading separators.
    """
    pre, _, build = suffix.partition("+")
    if pre.startswith("-"):
        pre = pre[1:]
    else:
        pre = pre.lstrip(_SUFFIX_SEP)
    return pre, build


def _prerelease_key(pre: str) -> tuple[tuple[int, int | str], ...]:
    """Encode prerelease identifiers for semver precedence comparison.

    Numeric identifiers become (0, int) and sort before alphanumeric
    identifiers, which become (1, str) and compare in ASCII order.
    """
    out: list[tuple[int, int | str]] = []
    for ident in pre.split("."):
        if ident.isascii() and ident.isdigit():
            out.append((0, int(ident)))
        else:
            out.append((1, ident))
    return tuple(out)


def _pad_equal(
    a: tuple[int, ...], b: tuple[int, ...]
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


def _strip_trailing_zeros(nums: tuple[int, ...]) -> tuple[int, ...]:
    end = len(nums)
    while end > 1 and nums[end - 1] == 0:
        end -= 1
    return nums[:end]


# ----------------------------
# SemVerLike
# ----------------------------


class SemVerLike:
    """Permissive semantic-version-like value.

    Instances are immutable and hashable; build them with
    `SemVerLike.parse()`.

    Attributes:
        raw: The input string, trimmed.
        token: Parsed core/suffix, or None when no numeric core was found.
    """

    __slots__ = ("raw", "token", "_extra", "_rest", "_pre", "_build")

    def __init__(self, raw: str, token: VersionToken | None) -> None:
        self.raw = raw
        self.token = token
        extra, rest = _split_extra_core(token.suffix) if token else ((), "")
        pre, build = _split_suffix(rest)
        self._extra = extra
        self._rest = rest
        self._pre = pre
        self._build = build

    @classmethod
    def parse(cls, raw: str | None) -> SemVerLike:
        """Parse any string into a SemVerLike. Never raises.

        A leading "v" is accepted ("v1.2" parses like "1.2"). Components
        after the fourth stay in the suffix text but still order and compare
        as part of the numeric core ("1.2.3.4.5" > "1.2.3.4").
        """
        text = (raw or "").strip()
        m = _CORE_RE.match(text)
        if not m:
            return cls(text, None)
        core = tuple(int(p) for p in m.group("core").split("."))
        return cls(text, VersionToken(core=core, suffix=m.group("suffix")))

    # -- accessors ------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        """True when a numeric core was found."""
        return self.token is not None

    @property
    def version(self) -> str:
        """Dotted numeric core ("2.0" for "2.0-beta1"); "" when invalid."""
        return self.token.core_text if self.token else ""

    @property
    def all_suffixes(self) -> str:
        """Prerelease + build text with markers ("-beta1+meta")."""
        return self.token.suffix if self.token else ""

    @property
    def prerelease(self) -> str:
        return self._pre

    @property
    def build_metadata(self) -> str:
        return self._build

    @property
    def core(self) -> tuple[int, ...]:
        return self.token.core if self.token else ()

    # -- ordering -------------------------------------------------------

    def compare(self, other: SemVerLike) -> int:
        """Compare precedence. Returns -1, 0 or 1 (1 means self is newer)."""
        if self.token is None or other.token is None:
            if self.token is not None:
                return 1
            if other.token is not None:
                return -1
            return (self.raw > other.raw) - (self.raw < other.raw)

        a, b = _pad_equal(self._full_core(), other._full_core())
        if a != b:
            return 1 if a > b else -1

        ra, rb = self._suffix_rank(), other._suffix_rank()
        if ra != rb:
            return 1 if ra > rb else -1
        if ra == 0:
            ka, kb = _prerelease_key(self._pre), _prerelease_key(other._pre)
            return (ka > kb) - (ka < kb)
        return 0

    def _full_core(self) -> tuple[int, ...]:
        """Numeric core including components past the fourth."""
        return self.token.core + self._extra if self.token else ()

    def _suffix_rank(self) -> int:
        """2 = plain release, 1 = build metadata only, 0 = prerelease."""
        if self._pre:
            return 0
        if self._build or self._rest:
            return 1
        return 2

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVerLike):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SemVerLike):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SemVerLike):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SemVerLike):
            return NotImplemented
        return self.compare(other) >= 0

    # -- identity -------------------------------------------------------

    def _identity(self) -> tuple:
        if self.token is None:
            return ("text", self.raw)
        return ("semver", _strip_trailing_zeros(self._full_core()), self._rest)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVerLike):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        return str(self.token) if self.token else self.raw

    def __repr__(self) -> str:
        return f"SemVerLike({str(self)!r})"
