"""
Tests for SyncExecutor: CSV report and transactional delete.
"""

import pytest

from gallerysync.errors import RemoteFault
from gallerysync.executor import SyncExecutor
from gallerysync.model import (
    EditGallery,
    EditResource,
    Fault,
    Found,
    NotFound,
    Resource,
    ResourceGallery,
    normalize_guid,
)

G_ROOT = "{10000000-0000-0000-0000-000000000000}"
G_OLD = "{20000000-0000-0000-0000-000000000000}"
G1 = "{00000000-0000-0000-0000-000000000001}"
G2 = "{00000000-0000-0000-0000-000000000002}"
G3 = "{00000000-0000-0000-0000-000000000003}"
G4 = "{00000000-0000-0000-0000-000000000004}"


class _FakeProxy:
    def __init__(self, galleries=(), faults=()):
        self.galleries = {normalize_guid(g.guid): g for g in galleries}
        self.faults = {normalize_guid(g) for g in faults}

    def lookup_gallery(self, guid):
        key = normalize_guid(guid)
        if key in self.faults:
            return Fault(RemoteFault("Server", "editing server unavailable"))
        if key in self.galleries:
            return Found(self.galleries[key])
        return NotFound(guid)


class _FakeContext:
    """In-memory transactional store: deletes are pending until commit."""

    def __init__(self, fail_on=None, fail_commit=False):
        self.pending = []
        self.committed = []
        self.rolled_back = False
        self.fail_on = fail_on
        self.fail_commit = fail_commit

    def delete_item(self, item):
        if self.fail_on is not None and item.path == self.fail_on:
            raise RuntimeError(f"cannot delete {item.path}")
        self.pending.append(item)
        item.is_deleted = True

    def commit_all(self):
        if self.fail_commit:
            raise RuntimeError("commit failed")
        self.committed.extend(self.pending)
        self.pending = []

    def rollback_all(self):
        for item in self.pending:
            item.is_deleted = False
        self.pending = []
        self.rolled_back = True


class _RecordingReporter:
    def __init__(self):
        self.published = []

    def publish(self, exc):
        self.published.append(exc)


@pytest.fixture
def tree():
    """
    /Resources            (on edit: R1, R3)
      one.png  R1         matched
      two.png  R2         public only
      /Resources/Old      (missing on edit)
        old.png R4
    """
    old = ResourceGallery(guid=G_OLD, path="/Resources/Old",
                          resources=[Resource(guid=G4, path="/Resources/Old/old.png")])
    root = ResourceGallery(
        guid=G_ROOT,
        path="/Resources",
        resources=[
            Resource(guid=G1, path="/Resources/one.png", display_name="One"),
            Resource(guid=G2, path="/Resources/two.png", display_name="Two, again"),
        ],
        galleries=[old],
    )
    proxy = _FakeProxy([EditGallery(guid=G_ROOT, resources=[
        EditResource(guid=G1.upper(), path="/Resources/one.png", display_name="One"),
        EditResource(guid=G3, path="/Resources/three.png", display_name="Three"),
    ])])
    return root, proxy


def test_report_lines(tree):
    root, proxy = tree
    out = []
    executor = SyncExecutor(proxy, echo=out.append)

    lines = executor.report_resources(root)

    assert lines == [
        'Delete,/Resources/two.png,"Two, again"',
        "Delete,/Resources/Old,",
        "Upload,/Resources/three.png,Three",
    ]
    assert out == lines


def test_report_is_idempotent(tree):
    root, proxy = tree
    executor = SyncExecutor(proxy, echo=lambda line: None)
    assert executor.report_resources(root) == executor.report_resources(root)


def test_report_of_identical_trees_is_empty():
    root = ResourceGallery(guid=G_ROOT, path="/Resources",
                           resources=[Resource(guid=G1, path="/Resources/one.png")])
    proxy = _FakeProxy([EditGallery(guid=G_ROOT, resources=[EditResource(guid=G1, path="x")])])
    assert SyncExecutor(proxy, echo=lambda line: None).report_resources(root) == []


def test_report_prints_nothing_when_traversal_fails(tree):
    root, _ = tree
    proxy = _FakeProxy([EditGallery(guid=G_ROOT)], faults=[G_OLD])
    out = []
    with pytest.raises(RemoteFault):
        SyncExecutor(proxy, echo=out.append).report_resources(root)
    assert out == []


def test_delete_public_only_items(tree):
    root, proxy = tree
    context = _FakeContext()

    deleted = SyncExecutor(proxy).delete_resources(context, root)

    assert [item.path for item in deleted] == ["/Resources/two.png", "/Resources/Old"]
    assert context.committed == deleted
    assert not context.rolled_back


def test_delete_logs_each_item(tree, caplog):
    root, proxy = tree
    with caplog.at_level("INFO", logger="gallerysync"):
        SyncExecutor(proxy).delete_resources(_FakeContext(), root)
    assert "Deleting /Resources/two.png" in caplog.text
    assert "Deleting /Resources/Old" in caplog.text


def test_delete_skips_protected_and_already_deleted(tree):
    root, proxy = tree
    root.resources[1].can_delete = False
    root.galleries[0].is_deleted = True
    context = _FakeContext()

    deleted = SyncExecutor(proxy).delete_resources(context, root)

    assert deleted == []
    assert context.committed == []


def test_delete_failure_on_last_item_rolls_back_everything():
    resources = [Resource(guid="{00000000-0000-0000-0000-00000000010%d}" % i,
                          path=f"/Resources/r{i}.png") for i in range(5)]
    root = ResourceGallery(guid=G_ROOT, path="/Resources", resources=resources)
    proxy = _FakeProxy([EditGallery(guid=G_ROOT)])
    context = _FakeContext(fail_on="/Resources/r4.png")

    with pytest.raises(RuntimeError, match="cannot delete"):
        SyncExecutor(proxy).delete_resources(context, root)

    assert context.rolled_back
    assert context.committed == []
    assert not any(r.is_deleted for r in resources)


def test_commit_failure_rolls_back(tree):
    root, proxy = tree
    context = _FakeContext(fail_commit=True)

    with pytest.raises(RuntimeError, match="commit failed"):
        SyncExecutor(proxy).delete_resources(context, root)

    assert context.rolled_back
    assert context.committed == []


def test_delete_does_not_start_when_comparison_fails(tree):
    root, _ = tree
    proxy = _FakeProxy(faults=[G_ROOT])
    context = _FakeContext()

    with pytest.raises(RemoteFault):
        SyncExecutor(proxy).delete_resources(context, root)
    assert context.pending == [] and not context.rolled_back


def test_run_publishes_faults(tree):
    root, _ = tree
    reporter = _RecordingReporter()
    executor = SyncExecutor(_FakeProxy(faults=[G_ROOT]), reporter=reporter,
                            echo=lambda line: None)

    with pytest.raises(RemoteFault) as excinfo:
        executor.run(_FakeContext(), root, delete=False)

    assert reporter.published == [excinfo.value]
    assert excinfo.value.data["Gallery path requested"] == "/Resources"


def test_run_dispatches_on_delete_flag(tree):
    root, proxy = tree
    context = _FakeContext()
    executor = SyncExecutor(proxy, echo=lambda line: None)

    lines = executor.run(context, root, delete=False)
    assert len(lines) == 3 and context.committed == []

    deleted = executor.run(context, root, delete=True)
    assert len(deleted) == 2 and context.committed == deleted
