"""
Logging setup for CLI runs.

Log lines go to stderr (stdout carries the CSV report) and are appended to
~/.logs/gallerysync/gallerysync.log unless GALLERYSYNC_LOG_DISABLED=1.
"""

import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

_LOG_SETUP = False
_LOG_PATH: Optional[Path] = None


class _StderrHandler(logging.StreamHandler):
    """Always writes to the current sys.stderr, which click and pytest may swap."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def default_log_dir() -> Path:
    log_dir = os.environ.get("GALLERYSYNC_LOG_DIR")
    return Path(os.path.expanduser(log_dir)) if log_dir else (Path.home() / ".logs" / "gallerysync")


def log_file_path() -> Path:
    log_file = os.environ.get("GALLERYSYNC_LOG_FILE")
    if log_file:
        return Path(os.path.expanduser(log_file))
    return default_log_dir() / "gallerysync.log"


def setup_logging(verbose: bool = False) -> Optional[Path]:
    """Configure the 'gallerysync' logger once. Returns the log file path, if any."""
    global _LOG_SETUP, _LOG_PATH
    if _LOG_SETUP:
        return _LOG_PATH

    root = logging.getLogger("gallerysync")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    console = _StderrHandler()
    console.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console)

    if os.environ.get("GALLERYSYNC_LOG_DISABLED") != "1":
        log_path = log_file_path()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as e:
            root.warning(f"⚠️  Could not open log file {log_path}: {e}")
        else:
            file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
            root.addHandler(file_handler)
            _LOG_PATH = log_path

    _LOG_SETUP = True
    return _LOG_PATH


def emit_run_header(version: str) -> None:
    logger = logging.getLogger("gallerysync")
    timestamp = time.strftime("%Y-%m-%dT%H:%M:%S%z")
    script = Path(sys.argv[0]).name or "gallerysync"
    logger.info(f"🧾 {script} v{version} @ {timestamp}")
    if _LOG_PATH:
        logger.info(f"🧾 log: {_LOG_PATH}")
