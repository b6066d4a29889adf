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

"""Configuration loading and management for appcastkit.

Options are layered:

  - Organization-wide defaults (defaults/appcast.yaml, found upward)
  - Project configuration (the --config YAML file)
  - Command-line overrides

Public API:

- AppcastOptions: validated, frozen option set
- load_options: merge all layers into AppcastOptions
- load_effective_config: merge all layers into a plain dict

Example:
    Basic usage:

        from pathlib import Path
        from appcastkit.config import load_options

        opts = load_options(Path("appcast.yaml"))
        print(opts.source_directory)

"""

from .loader import load_effective_config, load_options
from .options import VALID_OPERATING_SYSTEMS, AppcastOptions

__all__ = [
    "AppcastOptions",
    "VALID_OPERATING_SYSTEMS",
    "load_effective_config",
    "load_options",
]
