"""
Appcast building for appcastkit.

This package turns a directory of release binaries into appcast items,
merges them with an existing appcast, writes the result and signs it.

Public API:

generate_appcast : function
    Build, write and sign an appcast from AppcastOptions.
AppcastMaker : class
    The build pipeline with injectable serializer, signer and metadata
    reader.
find_changelog : function
    Locate the release notes file for a version.

Example:
    from appcastkit.build import generate_appcast
    from appcastkit.config import load_options

    result = generate_appcast(load_options(overrides={"source_directory": "dist"}))
    print(f"Wrote: {result.appcast_path}")
"""

from .changelog import changelog_candidates, find_changelog, join_url
from .maker import (
    AppcastMaker,
    build_download_link,
    find_binaries,
    generate_appcast,
    get_output_path,
    signature_path_for,
)

__all__ = [
    "AppcastMaker",
    "build_download_link",
    "changelog_candidates",
    "find_binaries",
    "find_changelog",
    "generate_appcast",
    "get_output_path",
    "join_url",
    "signature_path_for",
]
