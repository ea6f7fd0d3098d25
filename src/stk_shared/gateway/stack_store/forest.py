"""Pure functions over the branch forest shared by the store implementations.

Both RealStackStore and FakeStackStore apply transactions through
apply_upserts(), so validation behaves identically in tests and production.
"""

from collections.abc import Mapping, Sequence

from stk_shared.gateway.stack_store.types import (
    StackBranch,
    StackStateError,
    UpsertBranchRequest,
)


def apply_upserts(
    trunk: str,
    branches: Mapping[str, StackBranch],
    requests: Sequence[UpsertBranchRequest],
) -> dict[str, StackBranch]:
    """Return a new forest with requests applied, or raise without side effects.

    Args:
        trunk: Name of the trunk branch
        branches: Current records keyed by branch name
        requests: Upserts to apply, in order

    Returns:
        New mapping of branch name -> record. New branches are appended after
        existing ones, so insertion order is preserved across transactions.

    Raises:
        StackStateError: If a request is malformed, a base is neither trunk
            nor tracked, or the result contains a cycle
    """
    updated = dict(branches)
    for request in requests:
        if not request.name:
            raise StackStateError("branch name must not be empty")
        if request.name == trunk:
            raise StackStateError(f"trunk branch {trunk} cannot be tracked")
        if not request.base:
            raise StackStateError(f"branch {request.name} needs a base")

        existing = updated.get(request.name)
        base_hash = request.base_hash
        if base_hash is None:
            if existing is None:
                raise StackStateError(f"new branch {request.name} needs a base hash")
            base_hash = existing.base_hash

        updated[request.name] = StackBranch(
            name=request.name, base=request.base, base_hash=base_hash
        )

    for request in requests:
        if request.base != trunk and request.base not in updated:
            raise StackStateError(f"base {request.base} of {request.name} is not tracked")

    _check_trunk_rooted(trunk, updated)
    return updated


def _check_trunk_rooted(trunk: str, branches: Mapping[str, StackBranch]) -> None:
    for name in branches:
        seen = {name}
        current = branches[name].base
        while current != trunk:
            if current in seen:
                raise StackStateError(f"branch {name} would be stacked on itself via {current}")
            parent = branches.get(current)
            if parent is None:
                raise StackStateError(f"base {current} of a stacked branch is not tracked")
            seen.add(current)
            current = parent.base


def children_of(branches: Mapping[str, StackBranch], name: str) -> list[str]:
    """Direct children of name, in record order."""
    return [branch.name for branch in branches.values() if branch.base == name]
