"""
Public content catalog backed by SQLite.

Holds the published gallery tree and provides the delete/commit/rollback
primitives used when public-only items are removed. Deletes are pending
until ``commit_all`` and all of them are discarded by ``rollback_all``.
"""

import logging
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

from gallerysync.errors import CatalogError
from gallerysync.migrate import apply_migrations
from gallerysync.model import (
    Found,
    GalleryLookup,
    HierarchyItem,
    NotFound,
    Resource,
    ResourceGallery,
)

logger = logging.getLogger("gallerysync.catalog")

_TABLES = {"gallery": "galleries", "resource": "resources"}


class PublishingMode(Enum):
    """How the catalog is opened: read-only for reports, writable for deletes."""
    PUBLISHED = "published"
    UPDATE = "update"


def connect_db(path: Path) -> sqlite3.Connection:
    """Open (creating if needed) a writable catalog with the schema applied."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    apply_migrations(conn)
    return conn


def add_gallery(conn, guid: str, path: str, parent_guid: Optional[str] = None,
                display_name: str = "", can_delete: bool = True,
                is_deleted: bool = False) -> None:
    conn.execute(
        """
        INSERT INTO galleries (guid, parent_guid, path, display_name, can_delete, is_deleted)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (guid, parent_guid, path, display_name, int(can_delete), int(is_deleted)),
    )


def add_resource(conn, guid: str, gallery_guid: str, path: str,
                 display_name: str = "", can_delete: bool = True,
                 is_deleted: bool = False) -> None:
    conn.execute(
        """
        INSERT INTO resources (guid, gallery_guid, path, display_name, can_delete, is_deleted)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (guid, gallery_guid, path, display_name, int(can_delete), int(is_deleted)),
    )


def _normalize_gallery_path(value: str) -> str:
    parsed = urlparse(value)
    path = parsed.path if parsed.scheme and parsed.netloc else value
    path = unquote(path).replace("\\", "/").strip()
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/").lower() or "/"


class ContentStore:
    """
    Public-side content store.

    Usage:
        with ContentStore(db_path) as store:
            store.authenticate(PublishingMode.PUBLISHED)
            root = store.root_gallery()
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.mode: Optional[PublishingMode] = None
        self.conn: Optional[sqlite3.Connection] = None
        self._root: Optional[ResourceGallery] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def authenticate(self, mode: PublishingMode) -> None:
        """Open the catalog in the requested publishing mode."""
        if not self.db_path.exists():
            raise CatalogError(f"Catalog not found: {self.db_path}")

        self.close()
        if mode is PublishingMode.UPDATE:
            self.conn = connect_db(self.db_path)
        else:
            uri = self.db_path.resolve().as_uri() + "?mode=ro"
            self.conn = sqlite3.connect(uri, uri=True)
            self.conn.row_factory = sqlite3.Row
        self.mode = mode
        logger.debug(f"Opened catalog {self.db_path} ({mode.value})")

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise CatalogError("Content store used before authenticate()")
        return self.conn

    def _load_tree(self) -> ResourceGallery:
        """Build the live gallery tree. Committed deletes and everything under them are left out."""
        conn = self._require_conn()
        try:
            gallery_rows = conn.execute(
                "SELECT guid, parent_guid, path, display_name, can_delete, is_deleted "
                "FROM galleries ORDER BY rowid"
            ).fetchall()
            resource_rows = conn.execute(
                "SELECT guid, gallery_guid, path, display_name, can_delete, is_deleted "
                "FROM resources ORDER BY rowid"
            ).fetchall()
        except sqlite3.DatabaseError as e:
            raise CatalogError(f"Cannot read catalog {self.db_path}: {e}") from e

        galleries: Dict[str, ResourceGallery] = {}
        for row in gallery_rows:
            galleries[row["guid"].upper()] = ResourceGallery(
                guid=row["guid"],
                path=row["path"],
                display_name=row["display_name"],
                can_delete=bool(row["can_delete"]),
                is_deleted=bool(row["is_deleted"]),
            )

        # Deleted galleries stay in the map so their subtrees attach to a detached node
        roots = []
        for row in gallery_rows:
            gallery = galleries[row["guid"].upper()]
            if gallery.is_deleted:
                continue
            parent_guid = row["parent_guid"]
            if parent_guid is None:
                roots.append(gallery)
                continue
            parent = galleries.get(parent_guid.upper())
            if parent is None:
                raise CatalogError(f"Gallery {gallery.path} has unknown parent {parent_guid}")
            parent.galleries.append(gallery)

        for row in resource_rows:
            if row["is_deleted"]:
                continue
            parent = galleries.get(row["gallery_guid"].upper())
            if parent is None:
                raise CatalogError(f"Resource {row['path']} has unknown gallery {row['gallery_guid']}")
            parent.resources.append(Resource(
                guid=row["guid"],
                path=row["path"],
                display_name=row["display_name"],
                can_delete=bool(row["can_delete"]),
                is_deleted=bool(row["is_deleted"]),
            ))

        if not roots:
            raise CatalogError(f"Catalog {self.db_path} has no live root gallery")
        if len(roots) > 1:
            logger.warning(f"⚠️  {len(roots)} root galleries found, using {roots[0].path}")
        return roots[0]

    def root_gallery(self) -> ResourceGallery:
        if self._root is None:
            self._root = self._load_tree()
        return self._root

    def resolve_gallery_url(self, url: str) -> GalleryLookup:
        """
        Find the gallery addressed by a path or URL.

        Returns Found(gallery) or NotFound(url).
        """
        wanted = _normalize_gallery_path(url)
        for gallery in self.root_gallery().walk():
            if _normalize_gallery_path(gallery.path) == wanted:
                return Found(gallery)
        return NotFound(url)

    def delete_item(self, item: HierarchyItem) -> None:
        """Mark an item deleted; pending until commit_all()."""
        conn = self._require_conn()
        table = _TABLES.get(item.kind)
        if table is None:
            raise CatalogError(f"Cannot delete {item!r}")
        cursor = conn.execute(
            f"UPDATE {table} SET is_deleted = 1 WHERE guid = ?",
            (item.guid,),
        )
        if cursor.rowcount == 0:
            raise CatalogError(f"{item.kind.capitalize()} not in catalog: {item.path}")
        item.is_deleted = True

        # A deleted gallery takes its own resources with it; child galleries are compared separately
        if item.kind == "gallery":
            conn.execute(
                "UPDATE resources SET is_deleted = 1 WHERE gallery_guid = ?",
                (item.guid,),
            )
            for resource in item.resources:
                resource.is_deleted = True

    def commit_all(self) -> None:
        self._require_conn().commit()

    def rollback_all(self) -> None:
        self._require_conn().rollback()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
        self._root = None
