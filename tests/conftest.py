"""
Pytest configuration and shared fixtures for configurability tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
import yaml

from configurability.registry import Registry

SAMPLE_CONFIG = """\
database:
  development:
    adapter: sqlite3
    database: db/dev.db
  testing:
    adapter: sqlite3
    database: db/testing.db
ldap:
  uri: ldap://ldap.acme.com/dc=acme,dc=com
  bind_dn: cn=web,dc=acme,dc=com
  bind_pass: "s3cr3t"
branding:
  header: "#333"
  title: Acme Widgets
  colors:
    - red
    - green
"""


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_config_text() -> str:
    """Provide YAML text with database, ldap and branding sections."""
    return SAMPLE_CONFIG


@pytest.fixture
def sample_config_path(tmp_test_dir: Path, sample_config_text: str) -> Path:
    """Provide the sample config written to a file."""
    path = tmp_test_dir / "config.yml"
    path.write_text(sample_config_text, encoding="utf-8")
    return path


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def bump_mtime():
    """
    Factory fixture that moves a file's modification time forward.

    Filesystem timestamp resolution varies, so the new time is set
    explicitly instead of relying on a write landing in a later tick.
    """

    def _bump(path: Path, seconds: int = 10) -> None:
        st = path.stat()
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))

    return _bump


@pytest.fixture
def registry() -> Registry:
    """Provide a fresh, empty registry."""
    return Registry()
