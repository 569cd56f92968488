"""End-to-end commit protocol tests against the in-memory object store."""

import pytest

from ghbatch.batch import new_batch
from ghbatch.error_handling import (
    BatchStep,
    BatchStepError,
    is_not_found,
    is_validation,
    translate_error,
)
from ghbatch.models import CommitAuthor

from fixtures.object_store import BRANCH, OWNER, REPO, SEED_FILES


@pytest.mark.asyncio
async def test_mixed_batch_is_one_commit(store):
    old_head = store.head(BRANCH)
    batch = new_batch(store, OWNER, REPO, BRANCH, "Update files")
    batch.write("a.txt", b"A")
    batch.write("b/c.txt", b"C")
    batch.delete("old.txt")

    commit_sha = await batch.commit()

    assert commit_sha == store.head(BRANCH)
    assert batch.committed

    commit = store.commits[commit_sha]
    assert commit["parents"] == [old_head]
    assert commit["message"] == "Update files"

    (owner, repo, base_tree, entries), = store.calls_to("create_tree")
    assert base_tree == store.commits[old_head]["tree"]
    assert [(e.path, e.is_removal) for e in entries] == [
        ("a.txt", False),
        ("b/c.txt", False),
        ("old.txt", True),
    ]

    assert store.files_at(BRANCH) == {
        "README.md": SEED_FILES["README.md"],
        "docs/guide.md": SEED_FILES["docs/guide.md"],
        "a.txt": b"A",
        "b/c.txt": b"C",
    }
    assert store.call_names().count("create_commit") == 1
    assert store.call_names().count("update_ref") == 1
    assert store.calls_to("update_ref")[0][-1] is False


@pytest.mark.asyncio
async def test_protocol_call_order(store):
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.write("a.txt", b"A")

    await batch.commit()

    assert store.call_names() == [
        "get_ref",
        "get_commit",
        "create_blob",
        "create_tree",
        "create_commit",
        "update_ref",
    ]
    assert store.calls_to("get_ref") == [(OWNER, REPO, "refs/heads/main")]


@pytest.mark.asyncio
async def test_delete_of_missing_path_commits_nothing(store):
    head = store.head(BRANCH)
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.delete("never-existed.txt")

    assert await batch.commit() is None

    assert batch.committed
    assert store.head(BRANCH) == head
    assert "create_tree" not in store.call_names()
    assert "create_commit" not in store.call_names()
    assert "update_ref" not in store.call_names()


@pytest.mark.asyncio
async def test_write_then_delete_removes_existing_file(store):
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.write("README.md", b"replaced")
    batch.delete("README.md")

    await batch.commit()

    assert "README.md" not in store.files_at(BRANCH)
    assert store.calls_to("create_blob") == []


@pytest.mark.asyncio
async def test_delete_then_write_keeps_new_content(store):
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.delete("old.txt")
    batch.write("old.txt", b"fresh")

    await batch.commit()

    assert store.files_at(BRANCH)["old.txt"] == b"fresh"


@pytest.mark.asyncio
async def test_author_and_message_pass_through(store):
    author = CommitAuthor(name="Release Bot", email="bot@example.com")
    batch = new_batch(store, OWNER, REPO, BRANCH, "Release 1.2", author=author)
    batch.write("VERSION", b"1.2\n")

    commit_sha = await batch.commit()

    assert store.commits[commit_sha]["author"] == author
    assert store.commits[commit_sha]["message"] == "Release 1.2"


@pytest.mark.asyncio
async def test_binary_content_is_preserved(store):
    payload = bytes(range(256))
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.write("bin/data.bin", payload)

    await batch.commit()

    assert store.files_at(BRANCH)["bin/data.bin"] == payload


@pytest.mark.asyncio
async def test_missing_branch_fails_at_get_ref(store):
    batch = new_batch(store, OWNER, REPO, "no-such-branch")
    batch.write("a.txt", b"A")

    with pytest.raises(BatchStepError) as exc_info:
        await batch.commit()

    assert exc_info.value.step == BatchStep.GET_REF
    assert is_not_found(exc_info.value)
    assert store.call_names() == ["get_ref"]


@pytest.mark.parametrize(
    "operation, step",
    [
        ("get_commit", BatchStep.GET_COMMIT),
        ("create_blob", BatchStep.CREATE_BLOB),
        ("create_tree", BatchStep.CREATE_TREE),
        ("create_commit", BatchStep.CREATE_COMMIT),
        ("update_ref", BatchStep.UPDATE_REF),
    ],
)
@pytest.mark.asyncio
async def test_failures_are_tagged_with_step(store, operation, step):
    head = store.head(BRANCH)
    cause = translate_error(500, {"message": "Server Error"})
    store.fail(operation, cause)
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.write("a.txt", b"A")

    with pytest.raises(BatchStepError) as exc_info:
        await batch.commit()

    assert exc_info.value.step == step
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert str(exc_info.value).startswith(f"batch {step} failed: ")
    assert store.head(BRANCH) == head
    assert batch.committed


@pytest.mark.asyncio
async def test_existence_check_failure_is_tagged(store):
    store.fail("exists", translate_error(502))
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.delete("old.txt")

    with pytest.raises(BatchStepError) as exc_info:
        await batch.commit()

    assert exc_info.value.step == BatchStep.CHECK_FILE_EXISTS


@pytest.mark.asyncio
async def test_deleted_branch_before_update_fails_at_update_ref(store):
    def drop_branch():
        del store.refs[f"refs/heads/{BRANCH}"]

    store.before_update_ref = drop_branch
    batch = new_batch(store, OWNER, REPO, BRANCH)
    batch.write("a.txt", b"A")

    with pytest.raises(BatchStepError) as exc_info:
        await batch.commit()

    assert exc_info.value.step == BatchStep.UPDATE_REF
    assert is_validation(exc_info.value)


@pytest.mark.asyncio
async def test_new_batch_after_failure_succeeds(store):
    store.fail("create_tree", translate_error(503))
    failed = new_batch(store, OWNER, REPO, BRANCH)
    failed.write("a.txt", b"A")
    with pytest.raises(BatchStepError):
        await failed.commit()

    store.failures.clear()
    retry = new_batch(store, OWNER, REPO, BRANCH)
    for op in failed.operations():
        retry.write(op.path, op.content)

    assert await retry.commit() == store.head(BRANCH)
    assert store.files_at(BRANCH)["a.txt"] == b"A"
