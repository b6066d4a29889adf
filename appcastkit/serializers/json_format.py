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

"""JSON appcast format ("json").

Document shape:

    {
      "title": "MyApp",
      "language": "en",
      "description": "Most recent changes with links to updates.",
      "items": [
        {
          "title": "MyApp 1.2",
          "release_notes_link": "https://.../1.2.md",
          "release_notes_signature": "...",
          "publication_date": "2016-10-28T10:30:00+00:00",
          "url": "https://example.com/MyApp%201.2.exe",
          "version": "1.2",
          "short_version": "1.2",
          "os": "windows",
          "size": 12288,
          "type": "application/octet-stream",
          "signature": "...",
          "is_critical": true,
          "channel": "preview"
        }
      ]
    }

Optional keys are omitted when empty. Publication dates without an
offset are read as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from appcastkit.exceptions import SerializationError
from appcastkit.logging import Logger
from appcastkit.model import DEFAULT_MIME_TYPE, AppcastItem

from .base import collapse_duplicates, is_blank_file, register_serializer

DEFAULT_DESCRIPTION = "Most recent changes with links to updates."
DEFAULT_LANGUAGE = "en"


def _parse_date(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


class JsonAppcastSerializer:
    """Reads and writes JSON appcasts.

    Args:
        human_readable: Indent the output.
        use_ed_signature_attribute: Accepted so all formats share one
            constructor; JSON always uses the "signature" key.
        logger: Logger for read diagnostics. Defaults to the global logger.

    """

    extension = "json"

    def __init__(
        self,
        human_readable: bool = True,
        use_ed_signature_attribute: bool = False,
        logger: Logger | None = None,
    ) -> None:
        if logger is None:
            from appcastkit.logging import get_global_logger

            logger = get_global_logger()
        self.human_readable = human_readable
        self.use_ed_signature_attribute = use_ed_signature_attribute
        self.logger = logger

    @staticmethod
    def item_to_dict(item: AppcastItem) -> dict[str, Any]:
        data: dict[str, Any] = {"title": item.title}
        if item.release_notes_link:
            data["release_notes_link"] = item.release_notes_link
            if item.release_notes_signature:
                data["release_notes_signature"] = item.release_notes_signature
        elif item.description:
            data["description"] = item.description
        if item.publication_date is not None:
            data["publication_date"] = _format_date(item.publication_date)
        data["url"] = item.download_link
        data["version"] = item.version
        if item.short_version:
            data["short_version"] = item.short_version
        if item.operating_system:
            data["os"] = item.operating_system
        data["size"] = item.update_size
        data["type"] = item.mime_type or DEFAULT_MIME_TYPE
        if item.download_signature:
            data["signature"] = item.download_signature
        if item.is_critical_update:
            data["is_critical"] = True
        if item.channel:
            data["channel"] = item.channel
        return data

    @staticmethod
    def item_from_dict(data: dict[str, Any]) -> AppcastItem | None:
        version = _as_str(data.get("version"))
        if version is None:
            return None
        notes_link = _as_str(data.get("release_notes_link"))
        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        return AppcastItem(
            title=_as_str(data.get("title")) or "",
            version=version,
            short_version=_as_str(data.get("short_version")) or "",
            download_link=_as_str(data.get("url")) or "",
            operating_system=_as_str(data.get("os")) or "",
            update_size=size,
            mime_type=_as_str(data.get("type")) or DEFAULT_MIME_TYPE,
            download_signature=_as_str(data.get("signature")),
            publication_date=_parse_date(data.get("publication_date")),
            description=None if notes_link else _as_str(data.get("description")),
            release_notes_link=notes_link,
            release_notes_signature=_as_str(data.get("release_notes_signature")),
            channel=_as_str(data.get("channel")),
            is_critical_update=_as_bool(data.get("is_critical")),
        )

    def write(
        self,
        items: list[AppcastItem],
        product_name: str | None,
        output_path: str | Path,
    ) -> None:
        document = {
            "title": product_name or "",
            "language": DEFAULT_LANGUAGE,
            "description": DEFAULT_DESCRIPTION,
            "items": [self.item_to_dict(item) for item in items],
        }
        text = json.dumps(
            document, indent=2 if self.human_readable else None, ensure_ascii=False
        )
        try:
            Path(output_path).write_text(text + "\n", encoding="utf-8")
        except OSError as err:
            raise SerializationError(f"Failed to write appcast {output_path}: {err}") from err

    def read(
        self, path: str | Path, overwrite_duplicates: bool = False
    ) -> tuple[list[AppcastItem], str | None]:
        p = Path(path)
        if is_blank_file(p):
            return [], None

        try:
            document = json.loads(p.read_text(encoding="utf-8-sig"))
        except json.JSONDecodeError as err:
            raise SerializationError(f"Malformed JSON appcast {p}: {err}") from err
        if not isinstance(document, dict):
            raise SerializationError(f"JSON appcast {p} must be an object at top level")

        raw_items = document.get("items") or []
        if not isinstance(raw_items, list):
            raise SerializationError(f"JSON appcast {p}: 'items' must be a list")

        parsed: list[AppcastItem] = []
        for entry in raw_items:
            item = self.item_from_dict(entry) if isinstance(entry, dict) else None
            if item is None:
                self.logger.debug("APPCAST", "Skipping JSON item without a version")
                continue
            parsed.append(item)

        items = collapse_duplicates(parsed, overwrite_duplicates)
        self.logger.verbose("APPCAST", f"Read {len(items)} item(s) from {p.name}")
        return items, _as_str(document.get("title"))


register_serializer("json", JsonAppcastSerializer)
