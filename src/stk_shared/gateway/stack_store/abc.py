"""Abstract base class for the stack store.

The stack store records which branch every tracked branch is stacked on.
Writes happen in transactions: a batch of upserts plus a log message that
is applied entirely or not at all.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from stk_shared.gateway.stack_store.types import (
    BranchNotTracked,
    StackBranch,
    StackLogEntry,
    UpsertBranchRequest,
)


class StackStore(ABC):
    """ABC for stack state persistence.

    Implementations:
    - RealStackStore: JSON files under the repository's git directory
    - FakeStackStore: In-memory, configurable via constructor for testing
    """

    @abstractmethod
    def is_initialized(self) -> bool:
        """Check whether the store has been initialized with a trunk."""
        ...

    @abstractmethod
    def initialize(self, trunk: str) -> None:
        """Create an empty store rooted at trunk.

        Raises:
            StackStateError: If the store is already initialized
        """
        ...

    @abstractmethod
    def trunk(self) -> str:
        """Name of the trunk branch at the root of the forest.

        Raises:
            StackStateError: If the store is not initialized
        """
        ...

    @abstractmethod
    def lookup_branch(self, name: str) -> StackBranch | BranchNotTracked:
        """Look up the record of a tracked branch.

        Returns:
            The branch record, or BranchNotTracked (also for the trunk,
            which has no record)
        """
        ...

    @abstractmethod
    def list_above(self, name: str) -> list[str]:
        """Branches stacked directly on name, in the order they were first tracked."""
        ...

    @abstractmethod
    def list_branches(self) -> list[StackBranch]:
        """All tracked branch records, in the order they were first tracked."""
        ...

    @abstractmethod
    def upsert_branches(self, requests: Sequence[UpsertBranchRequest], message: str) -> None:
        """Apply a batch of upserts as one transaction.

        Either every request is applied or none is, as observed by any later
        read. The message is recorded in the transaction log.

        Raises:
            StackStateError: If the batch is invalid (untracked base, cycle,
                new branch without a base hash, ...). Nothing is written.
        """
        ...

    @abstractmethod
    def log_entries(self) -> list[StackLogEntry]:
        """Committed transactions, oldest first."""
        ...
