"""
Sync execution for gallerysync.

Runs the gallery diff, then either prints a CSV report or deletes the
public-only items in a single transaction.
"""

import logging
from typing import Callable, List, Optional

import click

from gallerysync.diff import compare_resources
from gallerysync.model import DiffResult, HierarchyItem, ResourceGallery
from gallerysync.report import report_lines
from gallerysync.reporting import ExceptionReporter, NullExceptionReporter

logger = logging.getLogger("gallerysync.executor")


class SyncExecutor:
    """
    Compares a public gallery tree with the editing server and acts on it.

    Responsibilities:
    - Run one comparison per operation (results are never reused)
    - Report public-only and edit-only items as CSV
    - Delete public-only items all-or-nothing
    """

    def __init__(self, proxy, reporter: Optional[ExceptionReporter] = None,
                 echo: Callable[[str], None] = click.echo, progress=None):
        """
        Args:
            proxy: Editing-side lookup with lookup_gallery(guid)
            reporter: Exception reporter for faults during deletion
            echo: Output sink for report lines (default: stdout)
            progress: Optional tqdm-like object advanced once per gallery
        """
        self.proxy = proxy
        self.reporter = reporter or NullExceptionReporter()
        self.echo = echo
        self.progress = progress

    def compare(self, start_gallery: ResourceGallery) -> DiffResult:
        return compare_resources(start_gallery, self.proxy, self.progress)

    def report_resources(self, start_gallery: ResourceGallery) -> List[str]:
        """Print and return the CSV report. Read-only."""
        result = self.compare(start_gallery)
        lines = list(report_lines(result))
        for line in lines:
            self.echo(line)
        return lines

    def delete_resources(self, context, start_gallery: ResourceGallery) -> List[HierarchyItem]:
        """
        Delete every public-only item, then commit once.

        Items that cannot be deleted or are already deleted are skipped. Any
        error rolls back every pending delete and is re-raised.

        Args:
            context: Content store with delete_item, commit_all and rollback_all
            start_gallery: Root of the comparison

        Returns:
            The items deleted by the committed transaction
        """
        result = self.compare(start_gallery)

        deleted = []
        try:
            for item in result.only_on_public.values():
                if item.can_delete and not item.is_deleted:
                    context.delete_item(item)
                    deleted.append(item)
                    logger.info(f"🗑️  Deleting {item.path}")

            context.commit_all()
        except Exception as e:
            context.rollback_all()
            logger.error(f"❌ Delete failed, rolled back {len(deleted)} pending deletion(s): {e}")
            raise

        skipped = len(result.only_on_public) - len(deleted)
        logger.info(f"✅ Committed {len(deleted)} deletion(s), skipped {skipped}")
        return deleted

    def run(self, context, start_gallery: ResourceGallery, delete: bool = False):
        """
        Report or delete from start_gallery.

        Faults are logged and published to the reporter before propagating.
        """
        try:
            if delete:
                return self.delete_resources(context, start_gallery)
            return self.report_resources(start_gallery)
        except Exception as e:
            logger.error(f"❌ {e}")
            self.reporter.publish(e)
            raise
