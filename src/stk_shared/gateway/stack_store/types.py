"""Types for the stack store gateway.

BranchNotTracked follows the NonIdealState pattern: lookups return it
instead of raising, and callers branch on isinstance().
"""

from __future__ import annotations

from dataclasses import dataclass


class StackStateError(Exception):
    """Stack state could not be read, or a transaction was rejected."""


@dataclass(frozen=True)
class StackBranch:
    """A tracked branch and its position in the stack.

    Attributes:
        name: Branch name
        base: Branch this one is stacked on (may be the trunk)
        base_hash: Commit of base when this branch was last placed on it.
            None after a reparent whose hash has not been resolved yet.
    """

    name: str
    base: str
    base_hash: str | None


@dataclass(frozen=True)
class BranchBase:
    """A (branch name, commit) pair a branch is built on top of."""

    name: str
    hash: str


@dataclass(frozen=True)
class UpsertBranchRequest:
    """Create or update the record of one tracked branch.

    Leaving base_hash unset on an existing branch keeps its recorded hash,
    so a reparent can be resolved by a later restack.
    """

    name: str
    base: str
    base_hash: str | None = None


@dataclass(frozen=True)
class BranchNotTracked:
    """Error: branch is not tracked by the stack store. Implements NonIdealState."""

    branch_name: str
    message: str

    @property
    def error_type(self) -> str:
        return "branch-not-tracked"


@dataclass(frozen=True)
class StackLogEntry:
    """One committed stack store transaction.

    Attributes:
        message: Human-readable description, e.g. "create branch feature"
        timestamp: ISO-8601 time the transaction was committed
        requests: The upserts applied by the transaction
    """

    message: str
    timestamp: str
    requests: tuple[UpsertBranchRequest, ...]
