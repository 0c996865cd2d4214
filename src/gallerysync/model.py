# src/gallerysync/model.py

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from gallerysync.errors import RemoteFault


def normalize_guid(value) -> str:
    """
    Return the canonical upper-case braced form of an identifier.

    UUIDs are accepted with or without braces or hyphens and in any case.
    Anything else is stripped of braces/whitespace and upper-cased, so two
    identifiers that differ only in case always normalize to the same key.
    """
    if isinstance(value, uuid.UUID):
        return "{" + str(value).upper() + "}"
    text = str(value).strip()
    try:
        return "{" + str(uuid.UUID(text)).upper() + "}"
    except ValueError:
        return "{" + text.strip("{}").strip().upper() + "}"


@dataclass
class HierarchyItem:
    """A node of the public content tree."""
    guid: str
    path: str
    display_name: str = ""
    is_deleted: bool = False
    can_delete: bool = True

    kind = "item"

    @property
    def key(self) -> str:
        return normalize_guid(self.guid)


@dataclass
class Resource(HierarchyItem):
    """Leaf content item (image, document) inside a gallery."""
    kind = "resource"


@dataclass
class ResourceGallery(HierarchyItem):
    """Container node holding resources and child galleries, both ordered."""
    resources: List[Resource] = field(default_factory=list)
    galleries: List["ResourceGallery"] = field(default_factory=list)

    kind = "gallery"

    def walk(self):
        """Yield this gallery and every descendant gallery, depth-first."""
        yield self
        for child in self.galleries:
            yield from child.walk()


@dataclass
class EditResource:
    """A resource as reported by the editing server."""
    guid: str
    path: str
    display_name: str = ""

    @property
    def key(self) -> str:
        return normalize_guid(self.guid)


@dataclass
class EditGallery:
    """The editing-side counterpart of one public gallery."""
    guid: str
    path: str = ""
    resources: List[EditResource] = field(default_factory=list)


@dataclass
class DiffResult:
    """
    Accumulator for one comparison run.

    Both maps are keyed by normalized GUID and keep traversal order.
    """
    only_on_public: Dict[str, HierarchyItem] = field(default_factory=dict)
    only_on_edit: Dict[str, EditResource] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.only_on_public and not self.only_on_edit


# Lookup results, shared by the editing-side proxy and start gallery resolution.

@dataclass
class Found:
    value: Any


@dataclass
class NotFound:
    key: str


@dataclass
class Fault:
    error: RemoteFault


GalleryLookup = Union[Found, NotFound, Fault]
