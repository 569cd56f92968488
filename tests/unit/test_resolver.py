"""Tests for turning queued operations into tree entries."""

import pytest

from ghbatch.batch import collapse_operations, resolve_tree_entries
from ghbatch.error_handling import BatchStep, BatchStepError, translate_error
from ghbatch.models import BatchOperation, OperationKind, TreeEntry

from fixtures.object_store import BRANCH, OWNER, REPO


def write(path, content=b"x"):
    return BatchOperation(kind=OperationKind.WRITE, path=path, content=content)


def delete(path):
    return BatchOperation(kind=OperationKind.DELETE, path=path)


class TestCollapseOperations:
    def test_distinct_paths_unchanged(self):
        ops = [write("a"), delete("b"), write("c")]
        assert collapse_operations(ops) == ops

    def test_last_operation_wins(self):
        ops = [write("a", b"1"), delete("a")]
        assert collapse_operations(ops) == [delete("a")]

        ops = [delete("a"), write("a", b"2")]
        assert collapse_operations(ops) == [write("a", b"2")]

    def test_order_follows_last_occurrence(self):
        ops = [write("a", b"1"), write("b"), write("a", b"2")]
        assert collapse_operations(ops) == [write("b"), write("a", b"2")]


class TestResolveTreeEntries:
    @pytest.mark.asyncio
    async def test_write_creates_blob_entry(self, store):
        entries = await resolve_tree_entries(store, OWNER, REPO, BRANCH, [write("new.txt", b"N")])

        assert len(entries) == 1
        entry = entries[0]
        assert entry.path == "new.txt"
        assert entry.mode == "100644"
        assert entry.type == "blob"
        assert store.blobs[entry.sha] == b"N"
        assert not entry.is_removal

    @pytest.mark.asyncio
    async def test_delete_existing_path_is_removal(self, store):
        entries = await resolve_tree_entries(store, OWNER, REPO, BRANCH, [delete("old.txt")])

        assert entries == [TreeEntry(path="old.txt", sha=None)]
        assert entries[0].is_removal
        assert store.calls_to("exists") == [(OWNER, REPO, "old.txt", BRANCH)]

    @pytest.mark.asyncio
    async def test_delete_missing_path_is_skipped(self, store):
        entries = await resolve_tree_entries(store, OWNER, REPO, BRANCH, [delete("missing.txt")])
        assert entries == []

    @pytest.mark.asyncio
    async def test_superseded_write_creates_no_blob(self, store):
        ops = [write("a.txt", b"first"), write("a.txt", b"second")]
        entries = await resolve_tree_entries(store, OWNER, REPO, BRANCH, ops)

        assert [store.blobs[e.sha] for e in entries] == [b"second"]
        assert len(store.calls_to("create_blob")) == 1

    @pytest.mark.asyncio
    async def test_write_then_delete_of_new_path_resolves_to_nothing(self, store):
        entries = await resolve_tree_entries(
            store, OWNER, REPO, BRANCH, [write("tmp.txt"), delete("tmp.txt")]
        )
        assert entries == []
        assert store.calls_to("create_blob") == []

    @pytest.mark.asyncio
    async def test_blob_failure_is_tagged(self, store):
        cause = translate_error(403, {"message": "Resource not accessible"})
        store.fail("create_blob", cause)

        with pytest.raises(BatchStepError) as exc_info:
            await resolve_tree_entries(store, OWNER, REPO, BRANCH, [write("a.txt")])

        assert exc_info.value.step == BatchStep.CREATE_BLOB
        assert exc_info.value.cause is cause

    @pytest.mark.asyncio
    async def test_existence_failure_is_tagged(self, store):
        store.fail("exists", translate_error(500))

        with pytest.raises(BatchStepError) as exc_info:
            await resolve_tree_entries(store, OWNER, REPO, BRANCH, [delete("old.txt")])

        assert exc_info.value.step == "check file exists"
