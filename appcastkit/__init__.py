"""
appcastkit - appcast generator for software update clients

A Python CLI and library that builds the release manifest ("appcast")
polled by Sparkle-style auto-update clients.

appcastkit provides:
  - Binary discovery by extension, optionally recursive
  - Version extraction from file names or binary metadata
  - Semver-like ordering, newest release first
  - Merging with an existing appcast (skip or overwrite duplicates)
  - Release notes lookup (inline text or published links)
  - Ed25519 signatures for binaries, release notes and the appcast itself
  - XML (Sparkle RSS) and JSON appcast formats

Quick Start
-----------
Create signing keys:

    $ appcastkit generate-keys

Generate an appcast from ./dist:

    $ appcastkit generate -s dist -e exe --file-extract-version \\
        -u https://example.com/downloads

For full CLI documentation:

    $ appcastkit --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
config : package
    YAML configuration loading and option validation.
versioning : package
    Version ordering and extraction from file names and binaries.
build : package
    Appcast build, merge and write pipeline.
serializers : package
    XML and JSON appcast formats.
signing : module
    Ed25519 key management, signing and verification.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from appcastkit import generate_appcast, load_options
    from appcastkit import SemVerLike, version_from_name

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "appcastkit - signed appcasts for software update clients"

# Re-export commonly used functions for convenience
from appcastkit.build import AppcastMaker, generate_appcast
from appcastkit.config import AppcastOptions, load_options
from appcastkit.model import Appcast, AppcastItem
from appcastkit.results import BuildNotice, BuildResult, GenerateResult
from appcastkit.serializers import get_serializer
from appcastkit.signing import Ed25519SignatureManager
from appcastkit.versioning import SemVerLike, version_from_name

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "Appcast",
    "AppcastItem",
    "AppcastMaker",
    "AppcastOptions",
    "BuildNotice",
    "BuildResult",
    "Ed25519SignatureManager",
    "GenerateResult",
    "SemVerLike",
    "generate_appcast",
    "get_serializer",
    "load_options",
    "version_from_name",
]
