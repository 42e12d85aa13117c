"""
Pytest configuration for chronodx tests.

Provides path setup, markers and settings isolation.
"""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(autouse=True, scope="function")
def isolated_settings(monkeypatch, tmp_path):
    """Run each test without CHRONODX_* env vars, config files or cached settings."""
    from chronodx.core.config import reset_settings

    for key in list(os.environ):
        if key.startswith("CHRONODX_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()
