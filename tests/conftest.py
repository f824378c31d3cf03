"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from pathlib import Path
from typing import Dict

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scopy.processor import Config


# =============================================================================
# TREE FIXTURES
# =============================================================================

def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create files (relative path -> content) under root."""
    for relpath, content in files.items():
        path = root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path):
    """Factory building a file tree under tmp_path."""
    def _make(files: Dict[str, str]) -> Path:
        return write_tree(tmp_path, files)
    return _make


@pytest.fixture
def in_tree(tmp_path: Path, monkeypatch):
    """Run from inside tmp_path so headers show relative paths."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def go_config() -> Config:
    """Config selecting .go files with the default header."""
    return Config(extensions=("go",))


@pytest.fixture
def clean_env(monkeypatch):
    """Remove SCOPY_* variables from the environment."""
    for key in list(os.environ):
        if key.startswith("SCOPY_"):
            monkeypatch.delenv(key)


requires_symlinks = pytest.mark.skipif(
    not hasattr(os, "symlink") or sys.platform == "win32",
    reason="symlinks not available",
)
