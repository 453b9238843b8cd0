"""dir_store - Central path configuration."""

import os
import tempfile
from pathlib import Path


def _env_path(key: str, default: Path) -> Path:
    """Return the path in env var ``key`` when set, else ``default``."""
    override = os.environ.get(key)
    if override:
        return Path(override).expanduser()
    return default


USER_HOME = Path.home()
FLOW_HOME = USER_HOME / ".flow"
STORE_HOME = _env_path("DIR_STORE_HOME", FLOW_HOME / "dir_store")

# Shared root for assets that do not have an owner yet.
TEMP_ASSETS_ROOT = _env_path(
    "DIR_STORE_TEMP", Path(tempfile.gettempdir()) / "dir_store" / "assets"
)

LOG_FILE = _env_path("DIR_STORE_LOG", STORE_HOME / "dir_store.log")
LOG_TO_STDERR = os.environ.get("DIR_STORE_LOG_STDERR", "0") == "1"

ASSETS_FOLDER_NAME = "Photos"
ASSETS_FILE_NAME = "photos.json"

CACHE_CAPACITY = 50
