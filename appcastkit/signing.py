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

"""Ed25519 signing for artifacts, release notes and appcast files.

The build treats signing as a collaborator behind the `Signer` protocol.
`Ed25519SignatureManager` is the default implementation, built on the
`cryptography` package.

Key Sources (first match wins):

1. Environment variables APPCAST_PRIVATE_KEY / APPCAST_PUBLIC_KEY holding
   base64-encoded raw keys. A `.env` file in the working directory is
   loaded first, so keys can live there during local development.
2. Key files `appcast_ed25519.priv` / `appcast_ed25519.pub` in the key
   directory (default: ~/.appcastkit/keys).

The public key is derived from the private key when only the private key
is available. Signatures are base64-encoded raw Ed25519 signatures, the
format Sparkle-style update clients expect.

Example:
    ```python
    from appcastkit.signing import Ed25519SignatureManager

    signer = Ed25519SignatureManager(key_directory="keys")
    signer.generate_keys()
    sig = signer.sign_file("dist/MyApp-1.2.exe")
    signer.verify_file("dist/MyApp-1.2.exe", sig)   # True
    ```

Note:
    Absence of keys is a valid configuration: the build then produces an
    unsigned appcast. Only explicit signing calls raise SigningError.

"""

from __future__ import annotations

import base64
import binascii
import os
from pathlib import Path
from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from dotenv import load_dotenv

from appcastkit.exceptions import SigningError

PRIVATE_KEY_FILE_NAME = "appcast_ed25519.priv"
PUBLIC_KEY_FILE_NAME = "appcast_ed25519.pub"
DEFAULT_KEY_DIRECTORY = Path.home() / ".appcastkit" / "keys"


class Signer(Protocol):
    """Signing collaborator used by the appcast build."""

    def keys_exist(self) -> bool: ...

    def sign_data(self, data: bytes) -> str: ...

    def sign_file(self, file_path: str | Path) -> str: ...

    def verify_data(self, data: bytes, signature: str) -> bool: ...

    def verify_file(self, file_path: str | Path, signature: str) -> bool: ...

    def public_key(self) -> bytes: ...


def _b64decode(value: str, what: str) -> bytes:
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as err:
        raise SigningError(f"{what} is not valid base64: {err}") from err


def _raw_private(key: Ed25519PrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _raw_public(key: Ed25519PublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


class Ed25519SignatureManager:
    """Ed25519 key handling plus sign/verify helpers.

    Args:
        key_directory: Directory holding the key files. Defaults to
            ~/.appcastkit/keys.
        env_prefix: Prefix of the key environment variables.
        use_environment: If False, ignore environment variables and .env.

    """

    def __init__(
        self,
        key_directory: str | Path | None = None,
        env_prefix: str = "APPCAST_",
        use_environment: bool = True,
    ) -> None:
        if use_environment:
            load_dotenv()
        self.key_directory = Path(key_directory) if key_directory else DEFAULT_KEY_DIRECTORY
        self.env_prefix = env_prefix
        self.use_environment = use_environment
        self._private: Ed25519PrivateKey | None = None
        self._public: Ed25519PublicKey | None = None

    # ------------------------------------------------------------------ #
    # Key locations
    # ------------------------------------------------------------------ #
    @property
    def private_key_path(self) -> Path:
        return self.key_directory / PRIVATE_KEY_FILE_NAME

    @property
    def public_key_path(self) -> Path:
        return self.key_directory / PUBLIC_KEY_FILE_NAME

    def _env(self, key: str) -> str | None:
        if not self.use_environment:
            return None
        value = os.getenv(f"{self.env_prefix}{key}")
        return value if value and value.strip() else None

    # ------------------------------------------------------------------ #
    # Key loading
    # ------------------------------------------------------------------ #
    def _load_private(self) -> Ed25519PrivateKey | None:
        if self._private is not None:
            return self._private
        encoded = self._env("PRIVATE_KEY")
        source = f"{self.env_prefix}PRIVATE_KEY"
        if encoded is None and self.private_key_path.is_file():
            encoded = self.private_key_path.read_text(encoding="utf-8")
            source = str(self.private_key_path)
        if encoded is None:
            return None
        raw = _b64decode(encoded, source)
        try:
            self._private = Ed25519PrivateKey.from_private_bytes(raw)
        except ValueError as err:
            raise SigningError(f"invalid Ed25519 private key in {source}: {err}") from err
        return self._private

    def _load_public(self) -> Ed25519PublicKey | None:
        if self._public is not None:
            return self._public
        encoded = self._env("PUBLIC_KEY")
        source = f"{self.env_prefix}PUBLIC_KEY"
        if encoded is None and self.public_key_path.is_file():
            encoded = self.public_key_path.read_text(encoding="utf-8")
            source = str(self.public_key_path)
        if encoded is not None:
            raw = _b64decode(encoded, source)
            try:
                self._public = Ed25519PublicKey.from_public_bytes(raw)
            except ValueError as err:
                raise SigningError(
                    f"invalid Ed25519 public key in {source}: {err}"
                ) from err
            return self._public
        private = self._load_private()
        if private is not None:
            self._public = private.public_key()
        return self._public

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def keys_exist(self) -> bool:
        """True when a private key is available for signing."""
        if self._private is not None or self._env("PRIVATE_KEY") is not None:
            return True
        return self.private_key_path.is_file()

    def generate_keys(self, force: bool = False) -> bool:
        """Create a new key pair in the key directory.

        Args:
            force: Overwrite existing key files.

        Returns:
            True if new keys were written, False if keys already existed
                and force was not set.

        """
        if not force and (self.private_key_path.exists() or self.public_key_path.exists()):
            return False

        private = Ed25519PrivateKey.generate()
        public = private.public_key()
        self.key_directory.mkdir(parents=True, exist_ok=True)
        self.private_key_path.write_text(
            base64.b64encode(_raw_private(private)).decode("ascii"), encoding="utf-8"
        )
        self.public_key_path.write_text(
            base64.b64encode(_raw_public(public)).decode("ascii"), encoding="utf-8"
        )
        self._private = private
        self._public = public
        return True

    def public_key(self) -> bytes:
        """Raw 32-byte public key.

        Raises:
            SigningError: If no key material is available.
        """
        key = self._load_public()
        if key is None:
            raise SigningError(f"no Ed25519 public key found in {self.key_directory}")
        return _raw_public(key)

    def sign_data(self, data: bytes) -> str:
        """Sign bytes and return the base64 signature.

        Raises:
            SigningError: If no private key is available.
        """
        key = self._load_private()
        if key is None:
            raise SigningError(
                f"no Ed25519 private key found (set {self.env_prefix}PRIVATE_KEY "
                f"or run 'appcastkit generate-keys')"
            )
        return base64.b64encode(key.sign(data)).decode("ascii")

    def sign_file(self, file_path: str | Path) -> str:
        return self.sign_data(Path(file_path).read_bytes())

    def verify_data(self, data: bytes, signature: str) -> bool:
        """True if `signature` is a valid signature of `data`.

        Malformed signatures verify as False. A missing public key raises
        SigningError.
        """
        key = self._load_public()
        if key is None:
            raise SigningError(f"no Ed25519 public key found in {self.key_directory}")
        try:
            raw = base64.b64decode((signature or "").strip(), validate=True)
        except (binascii.Error, ValueError):
            return False
        try:
            key.verify(raw, data)
        except InvalidSignature:
            return False
        return True

    def verify_file(self, file_path: str | Path, signature: str) -> bool:
        return self.verify_data(Path(file_path).read_bytes(), signature)
