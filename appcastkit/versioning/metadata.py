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

"""Product version extraction from binary metadata.

When versions cannot (or should not) be taken from file names, the build
asks a metadata reader for the version embedded in the artifact itself.
The default reader handles the two common Windows cases:

MSI packages (ProductVersion in the Property table):

1. msilib (Python standard library on Windows, Python < 3.13)
2. msiinfo (from the msitools package, Linux/macOS)

Executables and DLLs (VersionInfo.ProductVersion):

1. PowerShell `(Get-Item).VersionInfo` query (Windows only)

A reader never raises for an unreadable file: it returns None and logs
the backend failures at debug level. The build then records the binary
as unversioned.

Example:
    ```python
    from appcastkit.versioning.metadata import BinaryMetadataReader

    reader = BinaryMetadataReader()
    reader.read_version("dist/MyApp-setup.msi")
    # '2.4.1'
    ```

Note:
    Pure file introspection, no network calls. Custom readers only need a
    `read_version(path) -> str | None` method.

"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess
import sys
from typing import Protocol

try:
    import msilib  # type: ignore  # Windows-only standard library module
except ImportError:
    msilib = None  # type: ignore

from appcastkit.logging import Logger

_PRODUCT_VERSION_QUERY = (
    "SELECT `Value` FROM `Property` WHERE `Property`='ProductVersion'"
)


class MetadataReader(Protocol):
    """Reads an embedded product version from a binary."""

    def read_version(self, file_path: str | Path) -> str | None:
        """Return the embedded version, or None when it cannot be read."""
        ...


class BinaryMetadataReader:
    """Default metadata reader for MSI and PE (exe/dll) files.

    Args:
        logger: Logger for backend diagnostics. Defaults to the global logger.
        timeout: Seconds allowed for each external command.

    """

    def __init__(self, logger: Logger | None = None, timeout: int = 10) -> None:
        if logger is None:
            from appcastkit.logging import get_global_logger

            logger = get_global_logger()
        self.logger = logger
        self.timeout = timeout

    def read_version(self, file_path: str | Path) -> str | None:
        p = Path(file_path)
        if not p.is_file():
            self.logger.debug("VERSION", f"Not a file, no metadata: {p}")
            return None

        if p.suffix.lower() == ".msi":
            version = self._read_msi(p)
        else:
            version = self._read_file_version(p)

        if version:
            self.logger.verbose("VERSION", f"Read {version} from metadata of {p.name}")
        return version or None

    # -- MSI ------------------------------------------------------------

    def _read_msi(self, p: Path) -> str | None:
        if sys.platform.startswith("win") and msilib is not None:
            self.logger.debug("VERSION", "Trying backend: msilib...")
            try:
                db = msilib.OpenDatabase(str(p), msilib.MSIDBOPEN_READONLY)
                try:
                    view = db.OpenView(_PRODUCT_VERSION_QUERY)
                    view.Execute(None)
                    rec = view.Fetch()
                    version = rec.GetString(1) if rec is not None else None
                    view.Close()
                finally:
                    db.Close()
                if version:
                    return version.strip()
            except Exception as err:
                self.logger.debug("VERSION", f"msilib failed: {err}")

        msiinfo = shutil.which("msiinfo")
        if msiinfo:
            self.logger.debug("VERSION", "Trying backend: msiinfo (msitools)...")
            try:
                # msiinfo export <package> Property -> stdout (tab-separated)
                result = subprocess.run(
                    [msiinfo, "export", str(p), "Property"],
                    check=True,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except (
                subprocess.CalledProcessError,
                subprocess.TimeoutExpired,
                OSError,
            ) as err:
                self.logger.debug("VERSION", f"msiinfo failed: {err}")
                return None
            for line in result.stdout.splitlines():
                parts = line.strip().split("\t", 1)  # "Property<TAB>Value"
                if len(parts) == 2 and parts[0] == "ProductVersion":
                    return parts[1].strip() or None
            self.logger.debug("VERSION", "ProductVersion not found in msiinfo output")
            return None

        self.logger.debug("VERSION", "No MSI extraction backend available on this system")
        return None

    # -- PE version resource -------------------------------------------

    def _read_file_version(self, p: Path) -> str | None:
        if not sys.platform.startswith("win"):
            self.logger.debug(
                "VERSION", f"File version metadata needs Windows, skipping {p.name}"
            )
            return None

        self.logger.debug("VERSION", "Trying backend: PowerShell VersionInfo...")
        # Single-quoted PowerShell literal: embedded quotes are doubled
        literal = str(p).replace("'", "''")
        ps_script = f"(Get-Item -LiteralPath '{literal}').VersionInfo.ProductVersion"
        try:
            result = subprocess.run(
                ["powershell", "-NoProfile", "-NonInteractive", "-Command", ps_script],
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as err:
            self.logger.debug("VERSION", f"PowerShell VersionInfo failed: {err}")
            return None
        except subprocess.TimeoutExpired:
            self.logger.debug("VERSION", "PowerShell VersionInfo timed out")
            return None
        except OSError as err:
            self.logger.debug("VERSION", f"PowerShell not available: {err}")
            return None
        return result.stdout.strip() or None
