"""
Exception reporting.

The CLI publishes every fault that ends a run. Reporters are injected so
tests can use NullExceptionReporter.
"""

import json
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from gallerysync.logsetup import default_log_dir


class ExceptionReporter(Protocol):
    def publish(self, exc: BaseException) -> None:
        ...


class NullExceptionReporter:
    """Discards everything."""

    def publish(self, exc: BaseException) -> None:
        return None


class JsonlExceptionReporter:
    """Append one JSON object per published exception to a file."""

    def __init__(self, path: Path = None):
        self.path = Path(path) if path else default_log_dir() / "exceptions.jsonl"

    def publish(self, exc: BaseException) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": type(exc).__name__,
            "message": str(exc),
            "data": {str(k): str(v) for k, v in getattr(exc, "data", {}).items()},
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
        if getattr(exc, "reason", None):
            record["reason"] = exc.reason
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")
