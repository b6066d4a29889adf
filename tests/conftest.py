"""
Pytest configuration and shared fixtures for appcastkit tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
import yaml

from appcastkit.logging import SilentLogger, set_global_logger
from appcastkit.signing import Ed25519SignatureManager


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """
    Keep tests independent of the developer's keys and logger state.

    Removes APPCAST_* key variables and resets the global logger.
    """
    for key in list(os.environ):
        if key.startswith("APPCAST_"):
            monkeypatch.delenv(key, raising=False)
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("appcast.yaml", {"channel": "beta"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def create_file(tmp_test_dir: Path):
    """
    Factory fixture for creating files with text content.

    Usage:
        binary = create_file("dist/hello 1.0.txt", "content")
    """

    def _create(relative: str, content: str = "test binary content") -> Path:
        path = tmp_test_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _create


@pytest.fixture
def signer(tmp_test_dir: Path) -> Ed25519SignatureManager:
    """Provide a signer with a freshly generated key pair."""
    manager = Ed25519SignatureManager(
        key_directory=tmp_test_dir / "keys", use_environment=False
    )
    manager.generate_keys()
    return manager


@pytest.fixture
def unsigned_signer(tmp_test_dir: Path) -> Ed25519SignatureManager:
    """Provide a signer whose key directory is empty."""
    return Ed25519SignatureManager(
        key_directory=tmp_test_dir / "no-keys", use_environment=False
    )
