"""Create a branch at any position in a stack.

A new branch can be appended on top of the current branch, inserted above it
(the current branch's children move onto the new branch), or inserted below
it (the new branch goes between the current branch and its base).

The engine drives git through detach -> commit -> create branch -> checkout,
then records the new topology in a single stack store transaction. The
git sequence is not atomic, so once HEAD has been detached every failure
path checks the original branch out again before the error propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeVar

from stk.core.errors import (
    BackendError,
    InvalidOperationError,
    MissingNameError,
    NotTrackedError,
    RollbackError,
    StateError,
)
from stk.core.restack import RestackEngine
from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.types import (
    BranchBase,
    BranchNotTracked,
    StackBranch,
    StackStateError,
    UpsertBranchRequest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InsertionMode(Enum):
    APPEND = "append"
    INSERT_ABOVE = "insert-above"
    INSERT_BELOW = "insert-below"

    @staticmethod
    def from_flags(*, insert: bool, below: bool) -> InsertionMode:
        """Map CLI flags to a mode. --below implies --insert."""
        if below:
            return InsertionMode.INSERT_BELOW
        if insert:
            return InsertionMode.INSERT_ABOVE
        return InsertionMode.APPEND


class InsertionState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    DETACHED = "detached"
    COMMITTED = "committed"
    BRANCH_CREATED = "branch-created"
    CHECKED_OUT = "checked-out"
    STATE_PERSISTED = "state-persisted"
    RESTACKING = "restacking"
    DONE = "done"


@dataclass(frozen=True)
class InsertionPlan:
    """Where the new branch goes and which branches move onto it.

    Attributes:
        anchor: Branch and commit the new branch is built on
        restack: Branches to reparent onto the new branch, in store order
    """

    anchor: BranchBase
    restack: tuple[str, ...]


@dataclass(frozen=True)
class InsertionResult:
    """Outcome of a successful BranchInsertionEngine.create() call."""

    branch: str
    anchor: BranchBase
    restacked: tuple[str, ...]
    message: str


class BranchInsertionEngine:
    """Creates branches and keeps the stack store consistent with them.

    Composes the Git gateway, the stack store and a restack engine, all
    passed in explicitly by the caller.
    """

    def __init__(
        self,
        *,
        git: Git,
        stack_store: StackStore,
        restack_engine: RestackEngine,
        repo_root: Path,
    ) -> None:
        self._git = git
        self._stack_store = stack_store
        self._restack_engine = restack_engine
        self._repo_root = repo_root
        self._state = InsertionState.IDLE

    @property
    def state(self) -> InsertionState:
        """Last state reached by the most recent create() call."""
        return self._state

    def create(self, name: str | None, mode: InsertionMode, message: str | None) -> InsertionResult:
        """Create branch `name` with a commit of the staged changes.

        Args:
            name: Name of the new branch (required)
            mode: Where to place the new branch relative to the current branch
            message: Commit message; None lets git open an editor

        Returns:
            InsertionResult describing the new branch

        Raises:
            MissingNameError: If name is empty
            InvalidOperationError: For INSERT_BELOW from the trunk
            NotTrackedError: If the current branch is not tracked
            BackendError: If a git step fails
            StateError: If the stack store transaction fails
            RollbackError: If a step fails and the original branch cannot be
                checked out again. A KeyboardInterrupt is re-raised as is,
                with the failed checkout attached as a note.
            RestackError: Propagated from the restack engine, unwrapped
        """
        if not name:
            raise MissingNameError()

        self._transition(InsertionState.RESOLVING)
        current = self._run_stage("resolve", self._current_branch)
        head = self._run_stage("resolve", self._git.peel_to_commit, self._repo_root, "HEAD")
        staged = self._run_stage("diff", self._git.diff_index, self._repo_root, head)

        plan = self._plan(mode, current, head)
        logger.debug(
            "creating %s on %s@%s, restacking %s",
            name,
            plan.anchor.name,
            plan.anchor.hash,
            list(plan.restack),
        )

        self._run_stage(
            "detach", self._git.branch.checkout_detached, self._repo_root, plan.anchor.hash
        )
        self._transition(InsertionState.DETACHED)

        try:
            transaction_message = self._build_and_persist(name, mode, message, plan, staged)
        except BaseException as error:
            self._rollback(current, error)
            raise

        if plan.restack:
            self._transition(InsertionState.RESTACKING)
            self._restack_engine.restack_upstack_of_current(self._repo_root)

        self._transition(InsertionState.DONE)
        return InsertionResult(
            branch=name, anchor=plan.anchor, restacked=plan.restack, message=transaction_message
        )

    def _plan(self, mode: InsertionMode, current: str, head: str) -> InsertionPlan:
        trunk = self._read_store(self._stack_store.trunk)

        if mode is InsertionMode.INSERT_BELOW:
            if current == trunk:
                raise InvalidOperationError(f"--below cannot be used from {trunk}")
            record = self._tracked_record(current)
            base_hash = record.base_hash
            if base_hash is None:
                base_hash = self._run_stage(
                    "resolve", self._git.peel_to_commit, self._repo_root, record.base
                )
            return InsertionPlan(
                anchor=BranchBase(name=record.base, hash=base_hash), restack=(current,)
            )

        if current != trunk:
            self._tracked_record(current)

        anchor = BranchBase(name=current, hash=head)
        if mode is InsertionMode.INSERT_ABOVE:
            above = self._read_store(self._stack_store.list_above, current)
            return InsertionPlan(anchor=anchor, restack=tuple(above))
        return InsertionPlan(anchor=anchor, restack=())

    def _build_and_persist(
        self,
        name: str,
        mode: InsertionMode,
        message: str | None,
        plan: InsertionPlan,
        staged: list[str],
    ) -> str:
        # Nothing staged: allow an empty commit so the branch can still be created
        self._run_stage(
            "commit",
            self._git.commit.commit,
            self._repo_root,
            message,
            allow_empty=len(staged) == 0,
        )
        self._transition(InsertionState.COMMITTED)

        self._run_stage(
            "create", self._git.branch.create_branch, self._repo_root, name, "HEAD", force=False
        )
        self._transition(InsertionState.BRANCH_CREATED)

        self._run_stage("checkout", self._git.branch.checkout_branch, self._repo_root, name)
        self._transition(InsertionState.CHECKED_OUT)

        requests = [
            UpsertBranchRequest(name=name, base=plan.anchor.name, base_hash=plan.anchor.hash)
        ]
        # base_hash left unset: the restack resolves it against the rewritten commits
        requests.extend(UpsertBranchRequest(name=branch, base=name) for branch in plan.restack)

        transaction_message = _transaction_message(mode, name, plan.anchor.name)
        try:
            self._stack_store.upsert_branches(requests, transaction_message)
        except (StackStateError, OSError) as e:
            raise StateError(e) from e
        self._transition(InsertionState.STATE_PERSISTED)
        return transaction_message

    def _rollback(self, branch: str, error: BaseException) -> None:
        logger.debug("rolling back to %s after %r", branch, error)
        try:
            self._git.branch.checkout_branch(self._repo_root, branch)
        except Exception as rollback_error:
            self._transition(InsertionState.IDLE)
            if not isinstance(error, Exception):
                # Cancellation stays a cancellation; the caller re-raises it
                error.add_note(f"restore branch {branch}: {rollback_error}")
                return
            raise RollbackError(error, rollback_error, branch) from error
        self._transition(InsertionState.IDLE)

    def _current_branch(self) -> str:
        current = self._git.branch.get_current_branch(self._repo_root)
        if current is None:
            raise RuntimeError("HEAD is detached; check out a branch first")
        return current

    def _tracked_record(self, branch: str) -> StackBranch:
        record = self._read_store(self._stack_store.lookup_branch, branch)
        if isinstance(record, BranchNotTracked):
            raise NotTrackedError(branch)
        return record

    def _run_stage(self, stage: str, fn: Callable[..., T], *args: object, **kwargs: object) -> T:
        try:
            return fn(*args, **kwargs)
        except (RuntimeError, OSError) as e:
            raise BackendError(stage, e) from e

    def _read_store(self, fn: Callable[..., T], *args: object) -> T:
        try:
            return fn(*args)
        except (StackStateError, OSError) as e:
            raise StateError(e) from e

    def _transition(self, state: InsertionState) -> None:
        logger.debug("branch insertion: %s -> %s", self._state.value, state.value)
        self._state = state


def _transaction_message(mode: InsertionMode, name: str, anchor: str) -> str:
    if mode is InsertionMode.INSERT_BELOW:
        return f"insert branch {name} below {anchor}"
    if mode is InsertionMode.INSERT_ABOVE:
        return f"insert branch {name} above {anchor}"
    return f"create branch {name}"
