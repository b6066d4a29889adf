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

"""Sparkle-compatible RSS appcast format ("xml").

Layout written:

    <rss version="2.0" xmlns:sparkle="http://www.andymatuschak.org/xml-namespaces/sparkle">
      <channel>
        <title>MyApp</title>
        <description>Most recent changes with links to updates.</description>
        <language>en</language>
        <item>
          <title>MyApp 1.2</title>
          <sparkle:releaseNotesLink sparkle:signature="...">https://.../1.2.md</sparkle:releaseNotesLink>
          <pubDate>Fri, 28 Oct 2016 10:30:00 +0000</pubDate>
          <sparkle:channel>preview</sparkle:channel>
          <enclosure url="..." sparkle:version="1.2" sparkle:shortVersionString="1.2"
                     sparkle:os="windows" length="12288" type="application/octet-stream"
                     sparkle:signature="..." sparkle:criticalUpdate="true" />
        </item>
      </channel>
    </rss>

Inline release notes go into the item's `<description>` instead of
`<sparkle:releaseNotesLink>`. Signatures can be written as
`sparkle:edSignature` (Sparkle 2 style); the reader accepts both.

Example:
    ```python
    from appcastkit.serializers import get_serializer

    serializer = get_serializer("xml", use_ed_signature_attribute=True)
    serializer.write(items, "MyApp", "dist/appcast.xml")
    items, product_name = serializer.read("dist/appcast.xml")
    ```
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path
import xml.etree.ElementTree as ET

from appcastkit.exceptions import SerializationError
from appcastkit.logging import Logger
from appcastkit.model import DEFAULT_MIME_TYPE, AppcastItem

from .base import collapse_duplicates, is_blank_file, register_serializer

SPARKLE_NS = "http://www.andymatuschak.org/xml-namespaces/sparkle"
DC_NS = "http://purl.org/dc/elements/1.1/"

SIGNATURE_ATTRIBUTE = "signature"
ED25519_SIGNATURE_ATTRIBUTE = "edSignature"
DEFAULT_DESCRIPTION = "Most recent changes with links to updates."
DEFAULT_LANGUAGE = "en"

ET.register_namespace("sparkle", SPARKLE_NS)
ET.register_namespace("dc", DC_NS)


def _sp(name: str) -> str:
    return f"{{{SPARKLE_NS}}}{name}"


def _text(element: ET.Element | None) -> str | None:
    if element is None or element.text is None:
        return None
    value = element.text.strip()
    return value or None


def _format_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc))


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_int(value: str | None) -> int:
    try:
        return int((value or "0").strip())
    except ValueError:
        return 0


class XmlAppcastSerializer:
    """Reads and writes Sparkle RSS appcasts.

    Args:
        human_readable: Indent the output.
        use_ed_signature_attribute: Write `sparkle:edSignature` instead of
            `sparkle:signature`.
        logger: Logger for read diagnostics. Defaults to the global logger.

    """

    extension = "xml"

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

    @property
    def _signature_attr(self) -> str:
        name = (
            ED25519_SIGNATURE_ATTRIBUTE
            if self.use_ed_signature_attribute
            else SIGNATURE_ATTRIBUTE
        )
        return _sp(name)

    # ------------------------------------------------------------------ #
    # Writing
    # ------------------------------------------------------------------ #
    def _item_element(self, item: AppcastItem) -> ET.Element:
        node = ET.Element("item")
        ET.SubElement(node, "title").text = item.title

        if item.release_notes_link:
            link = ET.SubElement(node, _sp("releaseNotesLink"))
            link.text = item.release_notes_link
            if item.release_notes_signature:
                link.set(self._signature_attr, item.release_notes_signature)
        elif item.description:
            ET.SubElement(node, "description").text = item.description

        if item.publication_date is not None:
            ET.SubElement(node, "pubDate").text = _format_date(item.publication_date)
        if item.channel:
            ET.SubElement(node, _sp("channel")).text = item.channel

        enclosure = ET.SubElement(node, "enclosure")
        enclosure.set("url", item.download_link)
        enclosure.set(_sp("version"), item.version)
        if item.short_version:
            enclosure.set(_sp("shortVersionString"), item.short_version)
        if item.operating_system:
            enclosure.set(_sp("os"), item.operating_system)
        enclosure.set("length", str(item.update_size))
        enclosure.set("type", item.mime_type or DEFAULT_MIME_TYPE)
        if item.download_signature:
            enclosure.set(self._signature_attr, item.download_signature)
        if item.is_critical_update:
            enclosure.set(_sp("criticalUpdate"), "true")
        return node

    def write(
        self,
        items: list[AppcastItem],
        product_name: str | None,
        output_path: str | Path,
    ) -> None:
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")
        ET.SubElement(channel, "title").text = product_name or ""
        ET.SubElement(channel, "description").text = DEFAULT_DESCRIPTION
        ET.SubElement(channel, "language").text = DEFAULT_LANGUAGE
        for item in items:
            channel.append(self._item_element(item))

        tree = ET.ElementTree(rss)
        if self.human_readable:
            ET.indent(tree, space="  ")
        try:
            tree.write(str(output_path), encoding="utf-8", xml_declaration=True)
        except OSError as err:
            raise SerializationError(f"Failed to write appcast {output_path}: {err}") from err

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #
    def _read_signature(self, element: ET.Element) -> str | None:
        return element.get(_sp(ED25519_SIGNATURE_ATTRIBUTE)) or element.get(
            _sp(SIGNATURE_ATTRIBUTE)
        )

    def _parse_item(self, node: ET.Element) -> AppcastItem | None:
        enclosure = node.find("enclosure")
        if enclosure is None:
            self.logger.debug("APPCAST", "Skipping item without <enclosure>")
            return None
        version = enclosure.get(_sp("version")) or _text(node.find(_sp("version")))
        if not version:
            self.logger.debug("APPCAST", "Skipping item without sparkle:version")
            return None

        notes = node.find(_sp("releaseNotesLink"))
        notes_link = _text(notes)
        description = None if notes_link else _text(node.find("description"))
        critical = (
            (enclosure.get(_sp("criticalUpdate")) or "").strip().lower() == "true"
            or node.find(_sp("criticalUpdate")) is not None
        )
        return AppcastItem(
            title=_text(node.find("title")) or "",
            version=version.strip(),
            short_version=(
                enclosure.get(_sp("shortVersionString"))
                or _text(node.find(_sp("shortVersionString")))
                or ""
            ),
            download_link=(enclosure.get("url") or "").strip(),
            operating_system=enclosure.get(_sp("os")) or "",
            update_size=_parse_int(enclosure.get("length")),
            mime_type=enclosure.get("type") or DEFAULT_MIME_TYPE,
            download_signature=self._read_signature(enclosure),
            publication_date=_parse_date(_text(node.find("pubDate"))),
            description=description,
            release_notes_link=notes_link,
            release_notes_signature=(
                self._read_signature(notes) if notes is not None else None
            ),
            channel=_text(node.find(_sp("channel"))),
            is_critical_update=critical,
        )

    def read(
        self, path: str | Path, overwrite_duplicates: bool = False
    ) -> tuple[list[AppcastItem], str | None]:
        p = Path(path)
        if is_blank_file(p):
            return [], None

        try:
            root = ET.fromstring(p.read_bytes().strip())
        except ET.ParseError as err:
            raise SerializationError(f"Malformed XML appcast {p}: {err}") from err

        channel = root.find("channel")
        if channel is None:
            raise SerializationError(f"XML appcast {p} has no <channel> element")

        product_name = _text(channel.find("title"))
        parsed = [self._parse_item(node) for node in channel.findall("item")]
        items = collapse_duplicates(
            (item for item in parsed if item is not None), overwrite_duplicates
        )
        self.logger.verbose("APPCAST", f"Read {len(items)} item(s) from {p.name}")
        return items, product_name


register_serializer("xml", XmlAppcastSerializer)
