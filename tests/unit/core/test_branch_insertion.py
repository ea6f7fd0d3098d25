"""Tests for BranchInsertionEngine using FakeGit and FakeStackStore."""

from pathlib import Path

import pytest

from stk.core.branch_insertion import BranchInsertionEngine, InsertionMode, InsertionState
from stk.core.errors import (
    BackendError,
    InvalidOperationError,
    MissingNameError,
    NotTrackedError,
    RestackConflictError,
    RollbackError,
    StateError,
)
from stk.core.restack import GitRestackEngine
from stk_shared.gateway.git.fake import FakeGit
from stk_shared.gateway.git.rebase_ops.fake import RebaseCall
from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.fake import FakeStackStore
from stk_shared.gateway.stack_store.real import RealStackStore
from stk_shared.gateway.stack_store.types import (
    BranchBase,
    BranchNotTracked,
    StackBranch,
    StackStateError,
    UpsertBranchRequest,
)
from tests.fakes.restack_engine import FakeRestackEngine
from tests.test_utils.stacks import (
    A_SHA,
    B_SHA,
    C_SHA,
    MAIN_SHA,
    forked_heads,
    forked_store,
    linear_heads,
    linear_store,
)

REPO_ROOT = Path("/repo")


def _sha(n: int) -> str:
    """SHA the fakes assign to the n-th commit they create."""
    return f"{n:040x}"


def _engine(
    git: FakeGit, store: StackStore, restack: FakeRestackEngine | None = None
) -> BranchInsertionEngine:
    return BranchInsertionEngine(
        git=git,
        stack_store=store,
        restack_engine=restack if restack is not None else FakeRestackEngine(),
        repo_root=REPO_ROOT,
    )


# ============================================================================
# Append
# ============================================================================


def test_append_commits_staged_changes_on_new_branch() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C", staged_files=["x.py"])
    store = linear_store()
    restack = FakeRestackEngine()

    result = _engine(git, store, restack).create("D", InsertionMode.APPEND, "add x")

    assert result.branch == "D"
    assert result.anchor == BranchBase(name="C", hash=C_SHA)
    assert result.restacked == ()
    assert result.message == "create branch D"

    # Detached at the anchor commit, committed, then created and checked out D
    assert git.branch.detached_checkouts == [C_SHA]
    assert len(git.commit.commits) == 1
    commit = git.commit.commits[0]
    assert commit.parent == C_SHA
    assert commit.message == "add x"
    assert commit.allow_empty is False
    assert git.branch.created_branches == [("D", "HEAD")]
    assert git.branch.get_current_branch(REPO_ROOT) == "D"
    assert git.branch_head("D") == _sha(1)

    # The anchor branch itself does not move
    assert git.branch_head("C") == C_SHA

    assert store.lookup_branch("D") == StackBranch(name="D", base="C", base_hash=C_SHA)
    assert store.messages == ["create branch D"]
    assert restack.calls == []


def test_append_with_nothing_staged_creates_empty_commit() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")
    store = linear_store()

    _engine(git, store).create("D", InsertionMode.APPEND, "empty")

    assert git.commit.commits[0].allow_empty is True
    assert git.branch_head("D") == _sha(1)


def test_append_from_trunk_tracks_branch_on_trunk() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="main")
    store = linear_store()

    result = _engine(git, store).create("feature", InsertionMode.APPEND, "feature")

    assert result.anchor == BranchBase(name="main", hash=MAIN_SHA)
    assert store.lookup_branch("feature") == StackBranch(
        name="feature", base="main", base_hash=MAIN_SHA
    )


def test_append_with_no_message_lets_git_open_editor() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C", staged_files=["x.py"])

    _engine(git, linear_store()).create("D", InsertionMode.APPEND, None)

    assert git.commit.commits[0].message is None


def test_successful_create_ends_in_done_state() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")
    engine = _engine(git, linear_store())

    assert engine.state is InsertionState.IDLE
    engine.create("D", InsertionMode.APPEND, "d")
    assert engine.state is InsertionState.DONE


# ============================================================================
# Insert above
# ============================================================================


def test_insert_above_moves_children_onto_new_branch() -> None:
    git = FakeGit(branch_heads=forked_heads(), current_branch="C")
    store = forked_store()
    restack = FakeRestackEngine()

    result = _engine(git, store, restack).create("X", InsertionMode.INSERT_ABOVE, "x")

    assert result.anchor == BranchBase(name="C", hash=C_SHA)
    assert result.restacked == ("D", "E")
    assert result.message == "insert branch X above C"

    assert store.lookup_branch("X") == StackBranch(name="X", base="C", base_hash=C_SHA)
    # Reparented children keep their old base hash until they are restacked
    assert store.lookup_branch("D") == StackBranch(name="D", base="X", base_hash=C_SHA)
    assert store.lookup_branch("E") == StackBranch(name="E", base="X", base_hash=C_SHA)
    assert store.list_above("C") == ["X"]
    assert store.list_above("X") == ["D", "E"]

    # One transaction for the whole topology change
    assert store.messages == ["insert branch X above C"]
    assert restack.calls == [REPO_ROOT]


def test_insert_above_without_children_skips_restack() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")
    store = linear_store()
    restack = FakeRestackEngine()

    result = _engine(git, store, restack).create("X", InsertionMode.INSERT_ABOVE, "x")

    assert result.restacked == ()
    assert restack.calls == []


# ============================================================================
# Insert below
# ============================================================================


def test_insert_below_places_branch_between_current_and_its_base() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="B")
    store = linear_store()
    restack = FakeRestackEngine()

    result = _engine(git, store, restack).create("X", InsertionMode.INSERT_BELOW, "x")

    assert result.anchor == BranchBase(name="A", hash=A_SHA)
    assert result.restacked == ("B",)
    assert result.message == "insert branch X below A"

    # Built on the base commit B was stacked on, not on B itself
    assert git.branch.detached_checkouts == [A_SHA]
    assert git.commit.commits[0].parent == A_SHA

    assert store.lookup_branch("X") == StackBranch(name="X", base="A", base_hash=A_SHA)
    assert store.lookup_branch("B") == StackBranch(name="B", base="X", base_hash=A_SHA)
    assert store.lookup_branch("C") == StackBranch(name="C", base="B", base_hash=B_SHA)
    assert restack.calls == [REPO_ROOT]


def test_insert_below_without_recorded_base_hash_uses_base_head() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="B")
    store = FakeStackStore(
        trunk="main",
        branches=[
            StackBranch(name="A", base="main", base_hash=MAIN_SHA),
            StackBranch(name="B", base="A", base_hash=None),
        ],
    )

    result = _engine(git, store).create("X", InsertionMode.INSERT_BELOW, "x")

    assert result.anchor == BranchBase(name="A", hash=A_SHA)


def test_insert_below_from_trunk_is_rejected_before_any_git_change() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="main")
    store = linear_store()

    with pytest.raises(InvalidOperationError, match="--below cannot be used from main"):
        _engine(git, store).create("X", InsertionMode.INSERT_BELOW, "x")

    assert git.branch.detached_checkouts == []
    assert git.commit.commits == []
    assert store.messages == []


# ============================================================================
# Validation
# ============================================================================


@pytest.mark.parametrize("name", ["", None])
def test_missing_name_is_rejected(name: str | None) -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")

    with pytest.raises(MissingNameError, match="branch name is required"):
        _engine(git, linear_store()).create(name, InsertionMode.APPEND, "x")

    assert git.branch.detached_checkouts == []


@pytest.mark.parametrize(
    "mode", [InsertionMode.APPEND, InsertionMode.INSERT_ABOVE, InsertionMode.INSERT_BELOW]
)
def test_untracked_current_branch_is_rejected_before_any_git_change(
    mode: InsertionMode,
) -> None:
    heads = linear_heads()
    heads["loose"] = "9" * 40
    git = FakeGit(branch_heads=heads, current_branch="loose")
    store = linear_store()

    with pytest.raises(NotTrackedError, match="branch not tracked: loose") as exc_info:
        _engine(git, store).create("X", mode, "x")

    assert exc_info.value.branch == "loose"
    assert git.branch.detached_checkouts == []
    assert isinstance(store.lookup_branch("X"), BranchNotTracked)


def test_detached_head_is_reported_as_resolve_failure() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch=None)

    with pytest.raises(BackendError) as exc_info:
        _engine(git, linear_store()).create("X", InsertionMode.APPEND, "x")

    assert exc_info.value.stage == "resolve"


def test_detach_failure_leaves_branch_checked_out() -> None:
    git = FakeGit(
        branch_heads=linear_heads(),
        current_branch="C",
        detach_raises=RuntimeError("Failed to checkout detached HEAD: dirty tree"),
    )

    with pytest.raises(BackendError) as exc_info:
        _engine(git, linear_store()).create("X", InsertionMode.APPEND, "x")

    assert exc_info.value.stage == "detach"
    assert git.branch.get_current_branch(REPO_ROOT) == "C"
    assert git.branch.checked_out_branches == []


# ============================================================================
# Rollback
# ============================================================================


def test_commit_failure_restores_original_branch() -> None:
    git = FakeGit(
        branch_heads=linear_heads(),
        current_branch="C",
        commit_raises=RuntimeError("Failed to create commit: hook rejected"),
    )
    store = linear_store()
    engine = _engine(git, store)

    with pytest.raises(BackendError, match="commit: Failed to create commit") as exc_info:
        engine.create("X", InsertionMode.APPEND, "x")

    assert exc_info.value.stage == "commit"
    assert git.branch.get_current_branch(REPO_ROOT) == "C"
    assert git.branch.checked_out_branches == ["C"]
    assert store.messages == []
    assert engine.state is InsertionState.IDLE


def test_existing_branch_name_fails_at_create_and_rolls_back() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")
    store = linear_store()

    with pytest.raises(BackendError) as exc_info:
        _engine(git, store).create("B", InsertionMode.APPEND, "x")

    assert exc_info.value.stage == "create"
    assert git.branch.get_current_branch(REPO_ROOT) == "C"
    assert git.branch_head("B") == B_SHA
    assert git.branch_head("C") == C_SHA
    assert store.lookup_branch("B") == StackBranch(name="B", base="A", base_hash=A_SHA)


def test_checkout_failure_restores_original_branch() -> None:
    git = FakeGit(
        branch_heads=linear_heads(),
        current_branch="C",
        checkout_raises={"X": RuntimeError("Failed to checkout branch 'X'")},
    )
    store = linear_store()

    with pytest.raises(BackendError) as exc_info:
        _engine(git, store).create("X", InsertionMode.APPEND, "x")

    assert exc_info.value.stage == "checkout"
    assert git.branch.get_current_branch(REPO_ROOT) == "C"
    assert store.messages == []


def test_store_failure_is_reported_as_state_error_and_rolls_back() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")
    store = FakeStackStore(
        trunk="main",
        branches=linear_store().list_branches(),
        upsert_raises=StackStateError("disk full"),
    )
    restack = FakeRestackEngine()

    with pytest.raises(StateError, match="update state: disk full"):
        _engine(git, store, restack).create("X", InsertionMode.INSERT_ABOVE, "x")

    assert git.branch.get_current_branch(REPO_ROOT) == "C"
    assert isinstance(store.lookup_branch("X"), BranchNotTracked)
    assert restack.calls == []


def test_failed_rollback_reports_both_errors() -> None:
    commit_error = RuntimeError("Failed to create commit: hook rejected")
    restore_error = RuntimeError("Failed to checkout branch 'C'")
    git = FakeGit(
        branch_heads=linear_heads(),
        current_branch="C",
        commit_raises=commit_error,
        checkout_raises={"C": restore_error},
    )

    with pytest.raises(RollbackError) as exc_info:
        _engine(git, linear_store()).create("X", InsertionMode.APPEND, "x")

    error = exc_info.value
    assert error.branch == "C"
    assert isinstance(error.error, BackendError)
    assert error.error.cause is commit_error
    assert error.rollback_error is restore_error
    assert error.__cause__ is error.error
    assert "restore branch C" in str(error)


def test_interrupt_during_commit_restores_original_branch() -> None:
    git = FakeGit(
        branch_heads=linear_heads(),
        current_branch="C",
        commit_raises=KeyboardInterrupt(),
    )

    with pytest.raises(KeyboardInterrupt):
        _engine(git, linear_store()).create("X", InsertionMode.APPEND, "x")

    assert git.branch.get_current_branch(REPO_ROOT) == "C"


# ============================================================================
# Restack
# ============================================================================


def test_restack_failure_propagates_unwrapped_after_state_is_persisted() -> None:
    git = FakeGit(branch_heads=forked_heads(), current_branch="C")
    store = forked_store()
    conflict = RestackConflictError("D", "X", ("app.py",))
    engine = _engine(git, store, FakeRestackEngine(raises=conflict))

    with pytest.raises(RestackConflictError) as exc_info:
        engine.create("X", InsertionMode.INSERT_ABOVE, "x")

    assert exc_info.value is conflict
    # No rollback: the new branch and topology are kept
    assert git.branch.get_current_branch(REPO_ROOT) == "X"
    assert store.lookup_branch("X") == StackBranch(name="X", base="C", base_hash=C_SHA)
    assert engine.state is InsertionState.RESTACKING


def test_insert_below_with_git_restack_rebases_upstack() -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="B")
    store = linear_store()
    engine = BranchInsertionEngine(
        git=git,
        stack_store=store,
        restack_engine=GitRestackEngine(git=git, stack_store=store),
        repo_root=REPO_ROOT,
    )

    engine.create("X", InsertionMode.INSERT_BELOW, "x")

    x_head = _sha(1)
    assert git.rebase.rebases == [
        RebaseCall(onto=x_head, upstream=A_SHA, branch="B"),
        RebaseCall(onto=_sha(2), upstream=B_SHA, branch="C"),
    ]
    assert store.lookup_branch("B") == StackBranch(name="B", base="X", base_hash=x_head)
    assert store.lookup_branch("C") == StackBranch(name="C", base="B", base_hash=_sha(2))
    assert git.branch.get_current_branch(REPO_ROOT) == "X"
    assert store.messages == [
        "insert branch X below A",
        "B: restack on X",
        "C: restack on B",
    ]


def test_interrupt_with_failed_restore_stays_an_interrupt() -> None:
    git = FakeGit(
        branch_heads=linear_heads(),
        current_branch="C",
        commit_raises=KeyboardInterrupt(),
        checkout_raises={"C": RuntimeError("Failed to checkout branch 'C'")},
    )

    with pytest.raises(KeyboardInterrupt) as exc_info:
        _engine(git, linear_store()).create("X", InsertionMode.APPEND, "x")

    assert exc_info.value.__notes__ == ["restore branch C: Failed to checkout branch 'C'"]


def test_unwritable_log_fails_create_without_tracking_branch(tmp_path: Path) -> None:
    git = FakeGit(branch_heads=linear_heads(), current_branch="C")
    store = RealStackStore(tmp_path / "stk")
    store.initialize("main")
    store.upsert_branches(
        [
            UpsertBranchRequest("A", "main", MAIN_SHA),
            UpsertBranchRequest("B", "A", A_SHA),
            UpsertBranchRequest("C", "B", B_SHA),
        ],
        "track stack",
    )
    store.log_path.unlink()
    store.log_path.mkdir()

    with pytest.raises(StateError):
        _engine(git, store).create("X", InsertionMode.APPEND, "x")

    assert git.branch.get_current_branch(REPO_ROOT) == "C"
    assert isinstance(store.lookup_branch("X"), BranchNotTracked)
