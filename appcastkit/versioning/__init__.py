"""
Version parsing, ordering and extraction utilities for appcastkit.

Modules
-------
keys : module
    SemVerLike and VersionToken: permissive parsing with a total order.
from_name : module
    Heuristic version extraction from file names and paths.
metadata : module
    Product version extraction from MSI / executable metadata.

Public API
----------
SemVerLike : class
    Sortable, hashable semver-like version value.
VersionToken : dataclass
    Numeric core plus raw prerelease/build suffix.
version_from_name : function
    Find a version in a file name or path (None when absent).
BinaryMetadataReader : class
    Default reader for versions embedded in binaries.

Examples
--------
    >>> from appcastkit.versioning import SemVerLike, version_from_name
    >>> version_from_name("appsetup-2.10.1.exe")
    '2.10.1'
    >>> SemVerLike.parse("2.0-beta1") > SemVerLike.parse("2.0-alpha.1")
    True
"""

from .from_name import (
    get_extensions_from_string,
    get_search_patterns,
    is_valid_version,
    version_from_name,
)
from .keys import SemVerLike, VersionToken
from .metadata import BinaryMetadataReader, MetadataReader

__all__ = [
    "BinaryMetadataReader",
    "MetadataReader",
    "SemVerLike",
    "VersionToken",
    "get_extensions_from_string",
    "get_search_patterns",
    "is_valid_version",
    "version_from_name",
]
