import logging

import pytest

from spanmark.config import reset_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config files and SPANMARK_* variables out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for key in (
        "SPANMARK_LEADING_SPACE_MARKER",
        "SPANMARK_ESCAPE_TEXT",
        "SPANMARK_CHECK_NORMALIZED",
        "SPANMARK_DEFAULT_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def isolated_logging():
    """Drop handlers the CLI installs so they don't outlive captured streams."""
    yield
    package_logger = logging.getLogger("spanmark")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
