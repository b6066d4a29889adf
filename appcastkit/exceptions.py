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

"""Exception hierarchy for appcastkit.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Option/config file problems (YAML parse, unknown keys, bad types)
- BuildError: Fatal appcast build failures (no binaries, bad OS tag,
    ambiguous override version)
- SerializationError: An existing appcast file could not be parsed
- SigningError: Key material problems and required-signature failures

All exceptions inherit from AppcastError, allowing users to catch all
appcastkit errors with a single except clause if needed.

Non-fatal conditions (a binary without a version, a missing changelog) are
never raised. They are logged and reported as notices on the result.

Example:
    Catching specific error types:
        ```python
        from appcastkit.build import generate_appcast
        from appcastkit.exceptions import AmbiguousOverrideVersionError, BuildError

        try:
            result = generate_appcast(options)
        except AmbiguousOverrideVersionError as e:
            print(f"Pass --file-version only with a single unversioned binary: {e}")
        except BuildError as e:
            print(f"Build failed: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "AppcastError",
    "ConfigError",
    "BuildError",
    "NoBinariesFoundError",
    "InvalidOperatingSystemError",
    "AmbiguousOverrideVersionError",
    "SerializationError",
    "SigningError",
    "SignatureVerificationError",
]


class AppcastError(Exception):
    """Base exception for all appcastkit errors."""

    pass


class ConfigError(AppcastError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, top level not a mapping)
    - Unknown option keys or values of the wrong type
    - A config file passed explicitly that does not exist
    - An unregistered appcast format name
    """

    pass


class BuildError(AppcastError):
    """Base class for fatal appcast build failures."""

    pass


class NoBinariesFoundError(BuildError):
    """Raised when no file in the source directory matches the extensions."""

    pass


class InvalidOperatingSystemError(BuildError):
    """Raised when the configured operating system tag is not recognized."""

    pass


class AmbiguousOverrideVersionError(BuildError):
    """Raised when an override version would apply to more than one binary.

    The override version (--file-version) is only meaningful when exactly
    one discovered binary has no resolvable version. With two or more such
    binaries there is no way to know which one it belongs to, so the whole
    build is aborted.
    """

    pass


class SerializationError(AppcastError):
    """Raised when an existing appcast file exists but cannot be parsed."""

    pass


class SigningError(AppcastError):
    """Raised for key material problems (missing or malformed keys)."""

    pass


class SignatureVerificationError(SigningError):
    """Raised when a freshly written signature does not verify.

    Only raised when the caller asked for signed output to be mandatory.
    Otherwise the failure is logged and the signature side-file is simply
    not written.
    """

    pass
