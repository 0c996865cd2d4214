# src/gallerysync/diff.py

import logging

from gallerysync.model import DiffResult, Fault, Found, ResourceGallery

logger = logging.getLogger("gallerysync.diff")


def _record(target: dict, key: str, item) -> None:
    existing = target.get(key)
    if existing is not None:
        logger.warning(f"⚠️  Duplicate GUID {key}: keeping {existing.path}, ignoring {item.path}")
        return
    target[key] = item


def compare_gallery(public_gallery: ResourceGallery, result: DiffResult, proxy, progress=None):
    """
    Compare one public gallery with its editing-side counterpart, then recurse.

    Public-only galleries/resources go into result.only_on_public and
    edit-only resources into result.only_on_edit, keyed by normalized GUID.
    A gallery missing on the editing server is recorded once and stands for
    its resources, which are not visited. Child galleries are still compared.
    A remote fault aborts the traversal.
    """
    lookup = proxy.lookup_gallery(public_gallery.guid)
    if isinstance(lookup, Fault):
        error = lookup.error
        error.add_context("Gallery path requested", public_gallery.path)
        error.add_context("Gallery GUID requested", public_gallery.guid)
        raise error

    edit_gallery = lookup.value if isinstance(lookup, Found) else None

    if edit_gallery is None:
        # The gallery entry stands for all of its resources
        _record(result.only_on_public, public_gallery.key, public_gallery)
    else:
        # Index the editing-side resources by GUID
        files_on_edit = {}
        for edit_resource in edit_gallery.resources:
            _record(files_on_edit, edit_resource.key, edit_resource)

        matched = set()
        for public_resource in public_gallery.resources:
            key = public_resource.key
            if key in files_on_edit:
                matched.add(key)
            else:
                _record(result.only_on_public, key, public_resource)

        for key, edit_resource in files_on_edit.items():
            if key not in matched:
                _record(result.only_on_edit, key, edit_resource)

    if progress is not None:
        progress.update(1)

    for child in public_gallery.galleries:
        compare_gallery(child, result, proxy, progress)


def compare_resources(start_gallery: ResourceGallery, proxy, progress=None) -> DiffResult:
    """Diff a gallery tree against the editing server. Returns a fresh DiffResult."""
    result = DiffResult()
    compare_gallery(start_gallery, result, proxy, progress)
    logger.debug(
        f"Compared {start_gallery.path}: {len(result.only_on_public)} only on public, "
        f"{len(result.only_on_edit)} only on edit"
    )
    return result
