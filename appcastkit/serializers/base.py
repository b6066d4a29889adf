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

"""Appcast serializer protocol and registry.

Each appcast file format is a serializer: an object that knows its file
extension and can write and read a list of `AppcastItem`. The build never
looks at file formats itself, it receives a serializer at construction.

Design Philosophy:
    - Serializers are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (serializers self-register)
    - Registry is a simple dict mapping format names to classes

Example:
    Adding a custom format:
        ```python
        from appcastkit.serializers.base import register_serializer

        class YamlAppcastSerializer:
            extension = "yaml"

            def write(self, items, product_name, output_path):
                ...

            def read(self, path, overwrite_duplicates=False):
                ...

        register_serializer("yaml", YamlAppcastSerializer)
        ```

"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from appcastkit.exceptions import ConfigError
from appcastkit.model import Appcast, AppcastItem

# -------------------------------
# Serializer Protocol
# -------------------------------


class AppcastSerializer(Protocol):
    """Protocol for appcast file formats."""

    extension: str

    def write(
        self,
        items: list[AppcastItem],
        product_name: str | None,
        output_path: str | Path,
    ) -> None:
        """Write items (already sorted newest first) to output_path.

        Raises:
            SerializationError: If the file cannot be written.
        """
        ...

    def read(
        self, path: str | Path, overwrite_duplicates: bool = False
    ) -> tuple[list[AppcastItem], str | None]:
        """Read items and product name from an existing appcast.

        Duplicate versions collapse to one item: the later entry wins when
        overwrite_duplicates is True, otherwise the first one is kept.
        A missing or empty file yields ([], None).

        Raises:
            SerializationError: If the file exists but cannot be parsed.
        """
        ...


def collapse_duplicates(
    items: Iterable[AppcastItem], overwrite_duplicates: bool
) -> list[AppcastItem]:
    """Drop repeated versions and sort newest first (shared by readers)."""
    appcast = Appcast()
    for item in items:
        appcast.merge(item, overwrite_duplicates)
    appcast.sort()
    return appcast.items


def is_blank_file(path: Path) -> bool:
    """True if path is missing or holds only whitespace."""
    if not path.is_file():
        return True
    return not path.read_text(encoding="utf-8-sig").strip()


# -------------------------------
# Serializer Registry
# -------------------------------

_SERIALIZER_REGISTRY: dict[str, type[AppcastSerializer]] = {}


def register_serializer(name: str, serializer_class: type[AppcastSerializer]) -> None:
    """Register a serializer class under a format name.

    Registering the same name twice overwrites the previous registration
    (allows monkey-patching for tests).
    """
    _SERIALIZER_REGISTRY[name.lower()] = serializer_class


def get_serializer(name: str, **kwargs: Any) -> AppcastSerializer:
    """Create a serializer instance by format name.

    Args:
        name: Format name ("xml", "json"). Case-insensitive.
        **kwargs: Passed to the serializer constructor.

    Raises:
        ConfigError: If the format name is not registered. The message
            lists the available formats.

    """
    cls = _SERIALIZER_REGISTRY.get((name or "").strip().lower())
    if cls is None:
        available = ", ".join(sorted(_SERIALIZER_REGISTRY)) or "(none registered)"
        raise ConfigError(
            f"Unknown appcast format: {name!r}. Available formats: {available}"
        )
    return cls(**kwargs)


def available_formats() -> list[str]:
    return sorted(_SERIALIZER_REGISTRY)
