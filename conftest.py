import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent))

import config  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings so each test sees its own environment."""
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()
