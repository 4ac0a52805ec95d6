"""
pytest configuration for SSO client tests.

Adds src directory to Python path for imports and isolates the environment.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from sso_client.config import ENV_OVERRIDES, reset_config  # noqa: E402


@pytest.fixture(autouse=True)
def clean_sso_env(monkeypatch):
    """Keep SSO_* variables from the developer's shell out of tests."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
