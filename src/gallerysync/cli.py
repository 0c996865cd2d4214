# src/gallerysync/cli.py
"""
Command-line interface for gallerysync.

Usage:
    gallerysync [path to gallery] [/delete] [> report.csv]
"""

import logging
import sqlite3
import sys

import click
from rich.console import Console
from tqdm import tqdm

from gallerysync import __version__
from gallerysync.catalog import ContentStore, PublishingMode
from gallerysync.config import load_settings
from gallerysync.errors import GallerySyncError
from gallerysync.executor import SyncExecutor
from gallerysync.logsetup import emit_run_header, setup_logging
from gallerysync.model import NotFound
from gallerysync.proxy import ResourcesProxy
from gallerysync.reporting import JsonlExceptionReporter

logger = logging.getLogger("gallerysync.cli")
console = Console(stderr=True)

DELETE_FLAGS = {"/DELETE", "-DELETE", "--DELETE"}


def _is_delete_flag(arg: str) -> bool:
    return arg.upper() in DELETE_FLAGS


def _fail(reporter, exc: BaseException) -> None:
    logger.error(f"❌ {exc}")
    reporter.publish(exc)
    sys.exit(1)


@click.command(context_settings={"ignore_unknown_options": True})
@click.version_option(__version__)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--delete", "delete_flag", is_flag=True,
              help="Delete public-only resources instead of reporting (same as /delete).")
@click.option("--catalog", type=click.Path(dir_okay=False), default=None,
              help="Public content catalog (default: $GALLERYSYNC_CATALOG or ~/.gallerysync/public.db)")
@click.option("--edit-url", default=None,
              help="Editing server resources URL (default: $GALLERYSYNC_EDIT_URL)")
@click.option("--edit-user", default=None, help="Editing server username")
@click.option("--edit-pass", default=None, help="Editing server password")
@click.option("--no-progress", is_flag=True, help="Hide the gallery progress counter.")
@click.option("--verbose", is_flag=True, help="Debug logging.")
def cli(args, delete_flag, catalog, edit_url, edit_user, edit_pass, no_progress, verbose):
    """
    Compare CMS resources on the editing and public servers.

    Reports, as CSV on stdout, resources to delete from public and to upload
    from editing. With /delete, deletes the public-only galleries and
    resources in one transaction instead.
    """
    setup_logging(verbose)
    emit_run_header(__version__)

    delete = delete_flag or any(_is_delete_flag(a) for a in args)
    paths = [a for a in args if a and not _is_delete_flag(a)]

    reporter = JsonlExceptionReporter()
    mode = PublishingMode.UPDATE if delete else PublishingMode.PUBLISHED

    try:
        settings = load_settings(catalog_path=catalog, edit_url=edit_url,
                                 edit_user=edit_user, edit_pass=edit_pass)
        store = ContentStore(settings.catalog_path)
        store.authenticate(mode)
    except (GallerySyncError, ValueError, sqlite3.Error) as e:
        _fail(reporter, e)

    with store, ResourcesProxy(settings.edit_url, settings.edit_user,
                               settings.edit_pass, settings.edit_timeout) as proxy:
        try:
            start_gallery = None
            for path in paths:
                lookup = store.resolve_gallery_url(path)
                if isinstance(lookup, NotFound):
                    click.echo(f"Gallery not found: {path}")
                    return
                start_gallery = lookup.value

            if start_gallery is None:
                start_gallery = store.root_gallery()
        except (GallerySyncError, sqlite3.Error) as e:
            _fail(reporter, e)
        except Exception as e:
            logger.debug("Unexpected error resolving start gallery", exc_info=True)
            _fail(reporter, e)

        console.print(f"{'🗑️  DELETE' if delete else '🔍 REPORT'} MODE: {start_gallery.path}")
        console.print(f"   edit server: {settings.edit_url}")

        with tqdm(desc="🔍 Comparing galleries", unit="gallery",
                  disable=no_progress or None, leave=False) as progress:
            executor = SyncExecutor(proxy, reporter=reporter, progress=progress)
            try:
                outcome = executor.run(store, start_gallery, delete=delete)
            except Exception:
                # Already logged and published by the executor
                sys.exit(1)

    if delete:
        console.print(f"✅ Deleted {len(outcome)} item(s)")
    else:
        console.print(f"✅ Report complete: {len(outcome)} line(s)")


def main():
    cli()


if __name__ == "__main__":
    main()
