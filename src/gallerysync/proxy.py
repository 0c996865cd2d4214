"""
Editing-server resources proxy (read-only).

Fetches the editing-side counterpart of a public gallery over HTTP/JSON.
"""

import uuid
from typing import Optional

import requests

from gallerysync.config import load_settings
from gallerysync.errors import RemoteFault
from gallerysync.model import EditGallery, EditResource, Fault, Found, GalleryLookup, NotFound


def _guid_for_url(guid: str) -> str:
    text = str(guid).strip()
    try:
        return str(uuid.UUID(text))
    except ValueError:
        return text.strip("{}")


class ResourcesProxy:
    """
    Editing-server gallery client.

    Attributes:
        base_url: Root of the resources service, e.g. http://edit/cms/resources
        session: Requests session carrying the configured credentials
        timeout: Per-request timeout in seconds, or None for no limit
    """

    def __init__(self, base_url: str, username: Optional[str] = None,
                 password: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        if username and password:
            self.session.auth = (username, password)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def lookup_gallery(self, guid: str) -> GalleryLookup:
        """
        Get the editing-side gallery with this GUID.

        Returns:
            Found(EditGallery), NotFound(guid) when the editing server has no
            such gallery, or Fault(RemoteFault) on any protocol failure.
        """
        url = f"{self.base_url}/galleries/{_guid_for_url(guid)}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            return Fault(RemoteFault("transport", f"Request to {url} failed: {e}"))

        try:
            payload = response.json()
        except ValueError:
            payload = None
            if response.ok:
                return Fault(RemoteFault("invalid-response", f"Response from {url} is not JSON"))

        # A fault body wins over the status code, 404 included
        if isinstance(payload, dict) and payload.get("fault"):
            fault = payload["fault"]
            if not isinstance(fault, dict):
                fault = {"message": str(fault)}
            return Fault(RemoteFault(
                str(fault.get("code") or f"http-{response.status_code}"),
                str(fault.get("message") or "Editing server reported a fault"),
            ))

        if response.status_code == 404:
            return NotFound(guid)
        if not response.ok:
            return Fault(RemoteFault(
                f"http-{response.status_code}",
                f"Editing server returned {response.status_code} for {url}",
            ))

        if payload is None:
            return NotFound(guid)
        if not isinstance(payload, dict):
            return Fault(RemoteFault("invalid-response", f"Unexpected gallery payload from {url}"))

        try:
            resources = [
                EditResource(
                    guid=r["guid"],
                    path=r.get("path", ""),
                    display_name=r.get("displayName", ""),
                )
                for r in payload.get("resources") or []
            ]
        except (KeyError, TypeError, AttributeError) as e:
            return Fault(RemoteFault("invalid-response", f"Malformed resource in gallery payload: {e}"))

        return Found(EditGallery(
            guid=payload.get("guid", guid),
            path=payload.get("path", ""),
            resources=resources,
        ))


def get_resources_proxy(base_url: Optional[str] = None,
                        username: Optional[str] = None,
                        password: Optional[str] = None,
                        timeout: Optional[float] = None) -> ResourcesProxy:
    """
    Factory function to create a proxy with environment/config defaults.
    """
    settings = load_settings(edit_url=base_url, edit_user=username,
                             edit_pass=password, edit_timeout=timeout)
    return ResourcesProxy(settings.edit_url, settings.edit_user,
                          settings.edit_pass, settings.edit_timeout)
