"""
Configuration loading and merging for appcastkit.

Options come from up to three layers, later layers winning:

1. **Organization defaults** (defaults/appcast.yaml)
   - Found by walking upward from the config file's directory
   - Optional; shared settings such as base_url or key_directory

2. **Project configuration** (the file passed with --config)
   - Flat mapping of option names to values

3. **Overrides** (usually command-line flags)
   - Keys with a None value are ignored, so unset flags do not clobber
     values from the files

Merge Behavior
--------------
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Path Resolution
---------------
Relative paths in a YAML layer are resolved against that file's directory,
so a config file works no matter where the command is run from:
source_directory, output_directory, changelog_path, key_directory.
Override paths are taken as given (relative to the working directory).

Error Handling
--------------
- ConfigError: missing file, invalid YAML, non-mapping top level, unknown
  option, or a value of the wrong type.

Example:
    ```python
    from pathlib import Path
    from appcastkit.config import load_options

    opts = load_options(Path("release/appcast.yaml"), overrides={"channel": "beta"})
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from appcastkit.exceptions import ConfigError

from .options import _PATH_FIELDS, AppcastOptions

DEFAULTS_DIR_NAME = "defaults"
DEFAULTS_FILE_NAME = "appcast.yaml"

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML file that must contain a mapping.

    An empty file yields an empty mapping.

    Raises:
      ConfigError - file missing, invalid YAML, or top level not a mapping
    """
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = v
    return result


# -------------------------------
# Defaults discovery
# -------------------------------


def _find_defaults_file(start_dir: Path) -> Path | None:
    """
    Walk upward from 'start_dir' looking for 'defaults/appcast.yaml'.
    Returns the file path or None if not found.
    """
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / DEFAULTS_DIR_NAME / DEFAULTS_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


# -------------------------------
# Path resolution
# -------------------------------


def _resolve_known_paths(cfg: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """
    Return a copy of cfg with relative path options resolved against base_dir.
    """
    resolved = dict(cfg)
    for key in _PATH_FIELDS:
        raw = resolved.get(key)
        if isinstance(raw, str) and raw.strip():
            p = Path(raw).expanduser()
            if not p.is_absolute():
                resolved[key] = str((base_dir / p).resolve())
    return resolved


# -------------------------------
# Public API
# -------------------------------


def load_effective_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Merge defaults, config file and overrides into one flat mapping.

    Returns
      The merged mapping (paths from YAML layers already resolved).
      With no config_path the result is just the non-None overrides.
    """
    from appcastkit.logging import get_global_logger

    logger = get_global_logger()
    merged: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path).resolve()
        config_dir = config_path.parent

        defaults_path = _find_defaults_file(config_dir)
        if defaults_path is not None:
            logger.verbose("CONFIG", f"Loading defaults: {defaults_path}")
            defaults = _load_yaml_file(defaults_path)
            merged = _resolve_known_paths(defaults, defaults_path.parent)

        logger.verbose("CONFIG", f"Loading config: {config_path}")
        project = _load_yaml_file(config_path)
        merged = _deep_merge_dicts(merged, _resolve_known_paths(project, config_dir))

    if overrides:
        present = {k: v for k, v in overrides.items() if v is not None}
        if present:
            logger.debug("CONFIG", f"Applying overrides: {', '.join(sorted(present))}")
        merged = _deep_merge_dicts(merged, present)

    return merged


def load_options(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AppcastOptions:
    """
    Load the effective configuration and validate it into AppcastOptions.

    Raises
      ConfigError on any file, YAML, key or type problem.
    """
    merged = load_effective_config(config_path, overrides)
    return AppcastOptions.from_dict(merged)
