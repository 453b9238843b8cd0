"""
dir_store - Logging Module
Provides centralized logging functionality for the store.
"""
import sys
import threading
from datetime import datetime

from .conf import LOG_FILE, LOG_TO_STDERR

# =============================================================================
# CONFIGURATION
# =============================================================================

LOG = True  # Set to False to disable logging
first_line = True
# Cache users log from several threads; one writer at a time.
_write_lock = threading.Lock()

# =============================================================================
# LOGGING
# =============================================================================


def _write_line(message: str) -> None:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_line = f"[{timestamp}] {message}\n"
    if LOG_TO_STDERR:
        sys.stderr.write(log_line)
    with open(LOG_FILE, "a", encoding="utf-8") as f:
        f.write(log_line)


def store_log(message: str) -> None:
    """Append log message to the store log if LOG is enabled."""
    global first_line
    if not LOG:
        return
    with _write_lock:
        if first_line:
            first_line = False
            LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            _write_line("--- New dir_store Session ---")
        _write_line(message)


def store_log_print() -> None:
    """Print the contents of the log file to stdout."""
    if LOG_FILE.exists():
        log_contents = LOG_FILE.read_text(encoding="utf-8")
        if log_contents:
            print(log_contents, end="")
        else:
            print("[dir_store log is empty]")
    else:
        print("[dir_store log file does not exist]")


def store_log_clear() -> None:
    """Delete the log file."""
    global first_line
    if LOG_FILE.exists():
        LOG_FILE.unlink()
    first_line = True
