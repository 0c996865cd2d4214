"""CSV report lines: action keyword, path, display name."""

import csv
import io

from gallerysync.model import DiffResult

DELETE = "Delete"
UPLOAD = "Upload"


def format_line(action: str, path: str, display_name: str = "") -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="").writerow([action, path, display_name or ""])
    return buf.getvalue()


def report_lines(result: DiffResult):
    """Yield delete lines for public-only items, then upload lines for edit-only resources."""
    for item in result.only_on_public.values():
        # Galleries are reported without a display name
        name = item.display_name if item.kind == "resource" else ""
        yield format_line(DELETE, item.path, name)
    for resource in result.only_on_edit.values():
        yield format_line(UPLOAD, resource.path, resource.display_name)
