"""Pytest fixtures shared by the dir_store tests."""

import pytest

from dir_store import log


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    """Send store_log output to a per-test file instead of ~/.flow."""
    log_file = tmp_path / "logs" / "dir_store.log"
    monkeypatch.setattr(log, "LOG_FILE", log_file)
    monkeypatch.setattr(log, "LOG_TO_STDERR", False)
    monkeypatch.setattr(log, "first_line", True)
    yield log_file
