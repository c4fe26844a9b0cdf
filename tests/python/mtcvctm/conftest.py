"""Shared fixtures for mtcvctm tests."""

from pathlib import Path

import pytest

from mtcvctm.config import default_config
from mtcvctm.converter import parse_to_credential
from mtcvctm.formats import default_registry

_REPO_ROOT = Path(__file__).resolve().parents[3]
FIXTURES_DIR = _REPO_ROOT / "tests" / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def pid_path() -> Path:
    """Full-featured credential: front matter, localizations, logo, claims."""
    return FIXTURES_DIR / "pid.md"


@pytest.fixture
def minimal_path() -> Path:
    """Credential without front matter or images."""
    return FIXTURES_DIR / "minimal.md"


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def config():
    return default_config()


@pytest.fixture
def url_config():
    """Config that references assets by URL instead of inlining them."""
    cfg = default_config()
    cfg.base_url = "https://registry.example.com"
    cfg.inline_images = False
    return cfg


@pytest.fixture
def pid_credential(pid_path, config):
    return parse_to_credential(pid_path, config)


@pytest.fixture
def minimal_credential(minimal_path, config):
    return parse_to_credential(minimal_path, config)
