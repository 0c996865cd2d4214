"""Exception types raised by gallerysync."""

from typing import Any, Dict, Optional


class GallerySyncError(Exception):
    """Base class for gallerysync failures."""


class RemoteFault(GallerySyncError):
    """
    The editing-side proxy failed at the protocol level.

    Attributes:
        reason: Machine-readable fault code (e.g. ``http-500``, ``transport``)
        message: Human readable description
        data: Diagnostic context attached while the fault propagates
    """

    def __init__(self, reason: str, message: str = "",
                 data: Optional[Dict[str, Any]] = None):
        self.reason = reason
        self.message = message or reason
        self.data: Dict[str, Any] = dict(data or {})
        super().__init__(self.message)

    def add_context(self, key: str, value: Any) -> "RemoteFault":
        self.data[key] = value
        return self

    def __str__(self) -> str:
        if not self.data:
            return f"{self.message} [{self.reason}]"
        context = ", ".join(f"{k}={v}" for k, v in self.data.items())
        return f"{self.message} [{self.reason}] ({context})"


class CatalogError(GallerySyncError):
    """The public content catalog is missing, unreadable or inconsistent."""
