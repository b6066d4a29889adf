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

"""Appcast build and merge orchestration.

This module turns a directory of release binaries (plus, optionally, an
existing appcast) into a sorted, deduplicated, signed list of appcast
items, and writes the result through a pluggable serializer.

Build Process:

1. Find binaries matching the configured extensions
2. Validate the operating system tag (windows, mac, linux, or empty)
3. Seed the item list from the existing appcast (when reparsing)
4. Resolve a version per binary (file name or binary metadata, with a
   single optional override for one unversioned binary)
5. Merge: equal versions are replaced (overwrite) or skipped
6. Sort newest first, flag critical versions, stamp the channel
7. Write the appcast, then sign it and self-verify before writing the
   signature side-file

Non-fatal problems (unversioned binaries, missing changelogs, duplicate
versions, unverifiable signatures) are logged and collected as
`BuildNotice` values. Fatal problems raise a `BuildError` subclass.

Example:
    Programmatic usage:
        ```python
        from appcastkit.build import generate_appcast
        from appcastkit.config import AppcastOptions

        opts = AppcastOptions(
            source_directory="dist",
            extensions=("exe",),
            file_extract_version=True,
            base_url="https://example.com/downloads",
        )
        result = generate_appcast(opts)
        print(result.appcast_path, len(result.items))
        ```

    Injecting collaborators:
        ```python
        from appcastkit.build.maker import AppcastMaker
        from appcastkit.serializers import get_serializer

        maker = AppcastMaker(opts, get_serializer("json"), signer=my_signer)
        build = maker.build()
        ```

Note:
    The build is single-threaded and synchronous. Concurrent builds against
    the same output path must be serialized by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
import mimetypes
from pathlib import Path
from urllib.parse import quote

from appcastkit.config.options import VALID_OPERATING_SYSTEMS, AppcastOptions
from appcastkit.exceptions import (
    AmbiguousOverrideVersionError,
    InvalidOperatingSystemError,
    NoBinariesFoundError,
    SignatureVerificationError,
)
from appcastkit.logging import Logger
from appcastkit.model import DEFAULT_MIME_TYPE, Appcast, AppcastItem
from appcastkit.results import (
    CHANGELOG_NOT_FOUND,
    DUPLICATE_VERSION_SKIPPED,
    SIGNATURE_VERIFICATION_FAILED,
    UNSIGNED_APPCAST,
    VERSION_RESOLUTION_FAILED,
    BuildNotice,
    BuildResult,
    GenerateResult,
)
from appcastkit.serializers.base import AppcastSerializer
from appcastkit.signing import Signer
from appcastkit.versioning.from_name import get_search_patterns, version_from_name
from appcastkit.versioning.keys import SemVerLike
from appcastkit.versioning.metadata import BinaryMetadataReader, MetadataReader

from .changelog import find_changelog, join_url, read_changelog

# -------------------------------
# Helpers
# -------------------------------


def find_binaries(
    directory: str | Path, patterns: Iterable[str], recursive: bool = False
) -> list[Path]:
    """Files in directory matching any glob pattern, sorted, without duplicates.

    "." means the current working directory.
    """
    root = Path.cwd() if str(directory) == "." else Path(directory)
    if not root.is_dir():
        return []
    found: dict[Path, None] = {}
    for pattern in patterns:
        matches = root.rglob(pattern) if recursive else root.glob(pattern)
        for path in matches:
            if path.is_file():
                found.setdefault(path, None)
    return sorted(found)


def get_output_path(
    output_directory: str | Path | None,
    source_directory: str | Path,
    extension: str,
    file_name: str = "appcast",
) -> Path:
    """Appcast path: {output_directory or source_directory}/{file_name}.{extension}."""
    directory = source_directory
    if output_directory and str(output_directory).strip():
        directory = output_directory
    name = (file_name or "appcast").strip().strip(".") or "appcast"
    return Path(directory) / f"{name}.{extension}"


def signature_path_for(appcast_path: Path, extension: str | None) -> Path:
    ext = (extension or "").strip().lstrip(".") or "signature"
    return appcast_path.with_name(f"{appcast_path.name}.{ext}")


def is_valid_operating_system(os_tag: str | None) -> bool:
    """Empty tags pass; otherwise the tag must contain windows, mac or linux."""
    if not os_tag or not os_tag.strip():
        return True
    tag = os_tag.strip().lower()
    return any(name in tag for name in VALID_OPERATING_SYSTEMS)


def guess_mime_type(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    return mime or DEFAULT_MIME_TYPE


def build_download_link(
    base_url: str, file_name: str, version: str | None = None
) -> str:
    """URL-escaped download link, optionally with a version folder."""
    prefix = base_url.strip() if base_url else ""
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    if version:
        prefix += f"{version}/"
    return prefix + quote(file_name.lstrip("/"), safe="")


# -------------------------------
# Maker
# -------------------------------


class AppcastMaker:
    """Builds appcast items from binaries and writes them via a serializer.

    Args:
        options: Generator options.
        serializer: Appcast file format.
        signer: Signing collaborator. When None (or without keys) items and
            the appcast are left unsigned.
        metadata_reader: Reads versions embedded in binaries; used unless
            options.file_extract_version is set.
        logger: Logger. Defaults to the global logger.

    """

    def __init__(
        self,
        options: AppcastOptions,
        serializer: AppcastSerializer,
        signer: Signer | None = None,
        metadata_reader: MetadataReader | None = None,
        logger: Logger | None = None,
    ) -> None:
        if logger is None:
            from appcastkit.logging import get_global_logger

            logger = get_global_logger()
        self.options = options
        self.serializer = serializer
        self.signer = signer
        self.metadata_reader = metadata_reader or BinaryMetadataReader(logger=logger)
        self.logger = logger
        self._notices: list[BuildNotice] = []

    # ------------------------------------------------------------------ #
    # Notices / signing helpers
    # ------------------------------------------------------------------ #
    def _notice(
        self, kind: str, prefix: str, message: str, path: Path | None = None
    ) -> None:
        self.logger.warning(prefix, message)
        self._notices.append(BuildNotice(kind=kind, message=message, path=path))

    def _can_sign(self) -> bool:
        return self.signer is not None and self.signer.keys_exist()

    def _sign(self, path: Path) -> str | None:
        if not self._can_sign():
            return None
        return self.signer.sign_file(path)

    # ------------------------------------------------------------------ #
    # Paths
    # ------------------------------------------------------------------ #
    @property
    def appcast_path(self) -> Path:
        return get_output_path(
            self.options.output_directory,
            self.options.source_directory,
            self.serializer.extension,
            self.options.output_file_name,
        )

    # ------------------------------------------------------------------ #
    # Version resolution
    # ------------------------------------------------------------------ #
    def version_for_binary(self, binary: Path, source_directory: Path) -> str | None:
        """Version from the file name or from binary metadata, or None."""
        if self.options.file_extract_version:
            source = Path.cwd() if str(source_directory) == "." else source_directory
            version = version_from_name(
                str(binary.resolve()),
                str(source.resolve()),
                self.options.extensions,
            )
            if version is None:
                self.logger.verbose(
                    "VERSION",
                    f"No version in file name {binary.name}; a version needs at "
                    "least Major.Minor",
                )
            return version

        version = self.metadata_reader.read_version(binary)
        if version is None:
            self.logger.verbose(
                "VERSION",
                f"No version metadata in {binary.name}; try file_extract_version "
                "to read the version from the file name",
            )
        return version

    # ------------------------------------------------------------------ #
    # Item creation
    # ------------------------------------------------------------------ #
    def _resolve_changelog(
        self, item: AppcastItem, version: str, product_name: str | None
    ) -> None:
        changelog_dir = self.options.changelog_path
        if changelog_dir is None or not changelog_dir.is_dir():
            return

        found = find_changelog(
            changelog_dir,
            version,
            prefix=self.options.changelog_file_name_prefix,
            product_name=product_name,
        )
        if found is None:
            self._notice(
                CHANGELOG_NOT_FOUND,
                "CHANGELOG",
                f"No changelog found for {version}; the item is added without "
                "release notes",
                changelog_dir,
            )
            return

        self.logger.verbose("CHANGELOG", f"Found changelog for {version}: {found}")
        if self.options.changelog_url and self.options.changelog_url.strip():
            item.release_notes_link = join_url(self.options.changelog_url, found.name)
            item.release_notes_signature = self._sign(found)
        else:
            item.description = read_changelog(found)

    def create_item(
        self, binary: Path, version: SemVerLike, product_name: str | None
    ) -> AppcastItem:
        """Build an appcast item for one binary."""
        full_version = str(version).strip()
        title = full_version
        if product_name and product_name.strip():
            title = f"{product_name.strip()} {full_version}"
        stat = binary.stat()
        published = datetime.fromtimestamp(int(stat.st_mtime), tz=timezone.utc)

        item = AppcastItem(
            title=title,
            version=full_version,
            short_version=version.version,
            download_link=build_download_link(
                self.options.base_url,
                binary.name,
                full_version if self.options.prefix_version else None,
            ),
            operating_system=(self.options.operating_system or "").strip(),
            update_size=stat.st_size,
            mime_type=guess_mime_type(binary.name),
            download_signature=self._sign(binary),
            publication_date=published,
        )
        self._resolve_changelog(item, full_version, product_name)
        return item

    # ------------------------------------------------------------------ #
    # Build / merge
    # ------------------------------------------------------------------ #
    def build(
        self,
        source_directory: str | Path | None = None,
        extensions: Iterable[str] | None = None,
        search_subdirectories: bool | None = None,
        reuse_existing: bool | None = None,
        existing_appcast_path: str | Path | None = None,
    ) -> BuildResult:
        """Discover binaries and merge them into the item list.

        Arguments default to the corresponding options.

        Returns:
            Product name, items (newest first) and notices.

        Raises:
            NoBinariesFoundError: If no file matches the extensions.
            InvalidOperatingSystemError: If the OS tag is not recognized.
            AmbiguousOverrideVersionError: If the override version would
                apply to more than one unversioned binary.
            SerializationError: If the existing appcast is malformed.

        """
        opts = self.options
        source = opts.source_directory
        if source_directory is not None:
            source = Path(source_directory)
        exts = list(opts.extensions if extensions is None else extensions)
        recursive = opts.search_subdirectories
        if search_subdirectories is not None:
            recursive = search_subdirectories
        reuse = opts.reparse_existing if reuse_existing is None else reuse_existing
        existing_path = self.appcast_path
        if existing_appcast_path:
            existing_path = Path(existing_appcast_path)

        self._notices = []
        patterns = get_search_patterns(exts)
        binaries = find_binaries(source, patterns, recursive)
        if not binaries:
            raise NoBinariesFoundError(
                f"No files found matching "
                f"{', '.join(patterns) or '(no extensions)'} in {source}"
            )

        if not is_valid_operating_system(opts.operating_system):
            raise InvalidOperatingSystemError(
                f"Invalid operating system: {opts.operating_system!r}. "
                f"Valid options are: {', '.join(VALID_OPERATING_SYSTEMS)}"
            )

        self.logger.verbose(
            "BUILD", f"Operating system: {opts.operating_system or '(none)'}"
        )
        self.logger.verbose("BUILD", f"Searching: {source}")
        self.logger.verbose(
            "BUILD", f"Found {len(binaries)} {','.join(patterns)} file(s)"
        )

        appcast = Appcast(product_name=opts.product_name)
        if reuse:
            existing, existing_name = self.serializer.read(
                existing_path, opts.overwrite_old_items
            )
            appcast.items.extend(existing)
            self.logger.verbose(
                "BUILD", f"Reusing {len(existing)} item(s) from {existing_path}"
            )
            if existing_name and existing_name.strip():
                appcast.product_name = existing_name

        used_override = False
        for binary in binaries:
            version = self.version_for_binary(binary, source)
            if version is not None:
                self.logger.verbose(
                    "BUILD", f"Found {binary.name} with version {version}"
                )
            elif opts.file_version and opts.file_version.strip():
                if used_override:
                    raise AmbiguousOverrideVersionError(
                        "More than one binary has no version while an override "
                        f"version ({opts.file_version}) is set; cannot tell which "
                        "binary it belongs to"
                    )
                version = opts.file_version.strip()
                used_override = True
                self.logger.verbose(
                    "BUILD", f"Using override version {version} for {binary.name}"
                )
            else:
                self._notice(
                    VERSION_RESOLUTION_FAILED,
                    "BUILD",
                    f"Skipping {binary.name}: no version could be determined",
                    binary,
                )
                continue

            semver = SemVerLike.parse(version)
            existing_index = appcast.find(semver)
            if existing_index is not None and not opts.overwrite_old_items:
                self._notice(
                    DUPLICATE_VERSION_SKIPPED,
                    "BUILD",
                    f"An item with version {semver} is already in the appcast; "
                    "not adding it again",
                    binary,
                )
                continue

            if existing_index is not None:
                self.logger.verbose(
                    "BUILD", f"Replacing existing item with version {semver}"
                )
            appcast.merge(
                self.create_item(binary, semver, appcast.product_name),
                overwrite=True,
            )

        appcast.sort()

        critical = set(opts.critical_versions)
        channel = opts.channel.strip() if opts.channel and opts.channel.strip() else None
        for item in appcast.items:
            if str(item.semver) in critical:
                item.is_critical_update = True
            if channel is not None:
                item.channel = channel

        return BuildResult(
            product_name=appcast.product_name,
            items=tuple(appcast.items),
            notices=tuple(self._notices),
        )

    # ------------------------------------------------------------------ #
    # Output
    # ------------------------------------------------------------------ #
    def write(self, build: BuildResult, path: Path | None = None) -> Path:
        """Serialize the build to path (default: the configured output path)."""
        target = path or self.appcast_path
        target.parent.mkdir(parents=True, exist_ok=True)
        self.serializer.write(list(build.items), build.product_name, target)
        self.logger.verbose("APPCAST", f"Wrote {len(build.items)} item(s) to {target}")
        return target

    def create_signature_file(self, appcast_path: Path) -> Path | None:
        """Sign the appcast and write the signature side-file after self-verify.

        Returns:
            The side-file path, or None when nothing was written.

        Raises:
            SignatureVerificationError: If require_signature is set and the
                appcast cannot be signed or the signature does not verify.

        """
        require = self.options.require_signature
        side_file = signature_path_for(
            appcast_path, self.options.signature_file_extension
        )

        if not self._can_sign():
            message = (
                "Skipped appcast signature: no signing keys "
                "(run 'appcastkit generate-keys')"
            )
            if require:
                raise SignatureVerificationError(message)
            self._notice(UNSIGNED_APPCAST, "SIGN", message, appcast_path)
            return None

        signature = self.signer.sign_file(appcast_path)
        if not self.signer.verify_file(appcast_path, signature):
            message = (
                f"Failed to verify the signature of {appcast_path}; "
                f"{side_file.name} not written"
            )
            if require:
                raise SignatureVerificationError(message)
            self._notice(SIGNATURE_VERIFICATION_FAILED, "SIGN", message, appcast_path)
            return None

        side_file.write_text(signature, encoding="utf-8")
        self.logger.verbose("SIGN", f"Wrote {side_file}")
        return side_file

    def generate(self) -> GenerateResult:
        """Build, write and sign the appcast."""
        self.logger.step(1, 3, "Building appcast items...")
        build = self.build()
        build_notices = list(build.notices)

        self.logger.step(2, 3, "Writing appcast...")
        appcast_path = self.write(build)

        self.logger.step(3, 3, "Signing appcast...")
        self._notices = []
        signature_path = self.create_signature_file(appcast_path)

        return GenerateResult(
            appcast_path=appcast_path,
            signature_path=signature_path,
            product_name=build.product_name,
            items=build.items,
            notices=tuple(build_notices + self._notices),
        )


def generate_appcast(
    options: AppcastOptions,
    *,
    signer: Signer | None = None,
    serializer: AppcastSerializer | None = None,
    metadata_reader: MetadataReader | None = None,
    logger: Logger | None = None,
) -> GenerateResult:
    """Generate (or update) an appcast file from options.

    Args:
        options: Generator options.
        signer: Signing collaborator. Defaults to an Ed25519 manager using
            options.key_directory (and APPCAST_* environment variables).
        serializer: Appcast format. Defaults to options.appcast_format.
        metadata_reader: Binary metadata reader. Defaults to
            BinaryMetadataReader.
        logger: Logger. Defaults to the global logger.

    Returns:
        Paths written, items and non-fatal notices.

    Raises:
        ConfigError: If the appcast format is unknown.
        BuildError: On fatal build problems.
        SerializationError: If the existing appcast is malformed.
        SignatureVerificationError: If require_signature is set and the
            appcast could not be signed and verified.

    """
    if serializer is None:
        from appcastkit.serializers import get_serializer

        serializer = get_serializer(
            options.appcast_format,
            human_readable=options.human_readable,
            use_ed_signature_attribute=options.use_ed_signature_attribute,
            logger=logger,
        )
    if signer is None:
        from appcastkit.signing import Ed25519SignatureManager

        signer = Ed25519SignatureManager(key_directory=options.key_directory)

    maker = AppcastMaker(
        options,
        serializer,
        signer=signer,
        metadata_reader=metadata_reader,
        logger=logger,
    )
    return maker.generate()


__all__ = [
    "AppcastMaker",
    "build_download_link",
    "find_binaries",
    "generate_appcast",
    "get_output_path",
    "guess_mime_type",
    "is_valid_operating_system",
    "signature_path_for",
]
