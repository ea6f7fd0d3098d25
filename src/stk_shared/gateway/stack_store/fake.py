"""Fake stack store for testing."""

from __future__ import annotations

from collections.abc import Sequence

from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.forest import apply_upserts, children_of
from stk_shared.gateway.stack_store.types import (
    BranchNotTracked,
    StackBranch,
    StackLogEntry,
    StackStateError,
    UpsertBranchRequest,
)


class FakeStackStore(StackStore):
    """In-memory stack store.

    Transactions go through the same validation as RealStackStore. Pass
    upsert_raises to make every upsert_branches() call fail before anything
    is applied.

    Args:
        trunk: Trunk branch name, or None for an uninitialized store
        branches: Initial records, in tracking order
        upsert_raises: Exception raised by upsert_branches()
    """

    def __init__(
        self,
        *,
        trunk: str | None = "main",
        branches: list[StackBranch] | None = None,
        upsert_raises: Exception | None = None,
    ) -> None:
        self._trunk = trunk
        self._branches = {b.name: b for b in branches} if branches is not None else {}
        self._upsert_raises = upsert_raises
        self._log: list[StackLogEntry] = []

    def is_initialized(self) -> bool:
        return self._trunk is not None

    def initialize(self, trunk: str) -> None:
        if self._trunk is not None:
            raise StackStateError("stack store already initialized")
        self._trunk = trunk

    def trunk(self) -> str:
        if self._trunk is None:
            raise StackStateError("stack store not initialized (run 'stk init')")
        return self._trunk

    def lookup_branch(self, name: str) -> StackBranch | BranchNotTracked:
        if name in self._branches:
            return self._branches[name]
        return BranchNotTracked(branch_name=name, message=f"branch {name} is not tracked")

    def list_above(self, name: str) -> list[str]:
        return children_of(self._branches, name)

    def list_branches(self) -> list[StackBranch]:
        return list(self._branches.values())

    def upsert_branches(self, requests: Sequence[UpsertBranchRequest], message: str) -> None:
        if self._upsert_raises is not None:
            raise self._upsert_raises
        self._branches = apply_upserts(self.trunk(), self._branches, requests)
        self._log.append(
            StackLogEntry(message=message, timestamp="fake", requests=tuple(requests))
        )

    def log_entries(self) -> list[StackLogEntry]:
        return list(self._log)

    @property
    def messages(self) -> list[str]:
        """Transaction messages in commit order, for test assertions."""
        return [entry.message for entry in self._log]
