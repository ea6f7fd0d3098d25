"""Restack the current branch and everything stacked above it.

A branch needs a restack when its base has moved since the branch was last
placed on it, i.e. the base's head no longer matches the recorded
base_hash. Restacking replays the branch's own commits (those after
base_hash) onto the base's head with `git rebase --onto`, then records the
new base_hash.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from stk.core.errors import NotTrackedError, RestackConflictError, RestackError
from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.types import BranchNotTracked, UpsertBranchRequest

logger = logging.getLogger(__name__)


class RestackEngine(ABC):
    """Service that rewrites the upstack of the current branch onto updated bases.

    Implementations:
    - GitRestackEngine: Rebases with git and records new base hashes
    - FakeRestackEngine (tests/fakes): Records calls for testing
    """

    @abstractmethod
    def restack_upstack_of_current(self, repo_root: Path) -> list[str]:
        """Restack the checked-out branch and every branch above it.

        Returns:
            Names of the branches that were rebased, parents before children
        """
        ...


class GitRestackEngine(RestackEngine):
    """Restacks branches with `git rebase --onto` and persists the new hashes."""

    def __init__(self, *, git: Git, stack_store: StackStore) -> None:
        self._git = git
        self._stack_store = stack_store

    def restack_upstack_of_current(self, repo_root: Path) -> list[str]:
        current = self._git.branch.get_current_branch(repo_root)
        if current is None:
            raise RestackError("HEAD is detached; check out a branch to restack")

        trunk = self._stack_store.trunk()
        if current != trunk and isinstance(
            self._stack_store.lookup_branch(current), BranchNotTracked
        ):
            raise NotTrackedError(current)

        restacked: list[str] = []
        for branch in self._upstack(current, trunk):
            if self._restack_branch(repo_root, branch):
                restacked.append(branch)

        if restacked:
            self._git.branch.checkout_branch(repo_root, current)
        return restacked

    def _upstack(self, current: str, trunk: str) -> list[str]:
        """current (unless it is the trunk) followed by its descendants, parents first."""
        order = [] if current == trunk else [current]
        pending = self._stack_store.list_above(current)
        while pending:
            branch = pending.pop(0)
            order.append(branch)
            pending.extend(self._stack_store.list_above(branch))
        return order

    def _restack_branch(self, repo_root: Path, branch: str) -> bool:
        record = self._stack_store.lookup_branch(branch)
        if isinstance(record, BranchNotTracked):
            raise NotTrackedError(branch)

        base_head = self._git.peel_to_commit(repo_root, record.base)
        if record.base_hash == base_head:
            logger.debug("%s: already on %s@%s", branch, record.base, base_head)
            return False

        upstream = record.base_hash
        if upstream is None:
            upstream = self._git.get_merge_base(repo_root, record.base, branch)
            if upstream is None:
                raise RestackError(f"{branch} shares no history with its base {record.base}")

        logger.debug("%s: rebasing onto %s@%s from %s", branch, record.base, base_head, upstream)
        result = self._git.rebase.rebase_onto(
            repo_root, onto=base_head, upstream=upstream, branch=branch
        )
        if not result.success:
            raise RestackConflictError(branch, record.base, result.conflict_files)

        self._stack_store.upsert_branches(
            [UpsertBranchRequest(name=branch, base=record.base, base_hash=base_head)],
            f"{branch}: restack on {record.base}",
        )
        return True

