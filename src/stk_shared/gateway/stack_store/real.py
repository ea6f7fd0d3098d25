"""Stack store persisted as JSON files under the git directory.

Layout (inside `<git-common-dir>/stk/`):
- state.json: {"version", "trunk", "branches": {name: {"base", "base_hash"}}}
- log.jsonl: one JSON object per committed transaction

state.json is replaced atomically (write to a temp file, then os.replace),
so readers see the forest either before or after a transaction, never a
mix of both. The log entry is appended before the state is replaced and
truncated away again if the replace fails.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.forest import apply_upserts, children_of
from stk_shared.gateway.stack_store.types import (
    BranchNotTracked,
    StackBranch,
    StackLogEntry,
    StackStateError,
    UpsertBranchRequest,
)

logger = logging.getLogger(__name__)

STATE_VERSION = "1"


class RealStackStore(StackStore):
    """Production stack store backed by files in state_dir."""

    def __init__(self, state_dir: Path) -> None:
        """Initialize RealStackStore.

        Args:
            state_dir: Directory holding state.json and log.jsonl
                (typically `<git-common-dir>/stk`)
        """
        self._state_dir = state_dir

    @property
    def state_path(self) -> Path:
        return self._state_dir / "state.json"

    @property
    def log_path(self) -> Path:
        return self._state_dir / "log.jsonl"

    def is_initialized(self) -> bool:
        return self.state_path.exists()

    def initialize(self, trunk: str) -> None:
        if self.is_initialized():
            raise StackStateError(f"stack store already initialized at {self._state_dir}")
        self._state_dir.mkdir(parents=True, exist_ok=True)
        self._write_state(trunk, {})
        logger.debug("initialized stack store at %s with trunk %s", self._state_dir, trunk)

    def trunk(self) -> str:
        trunk, _ = self._read_state()
        return trunk

    def lookup_branch(self, name: str) -> StackBranch | BranchNotTracked:
        _, branches = self._read_state()
        if name in branches:
            return branches[name]
        return BranchNotTracked(branch_name=name, message=f"branch {name} is not tracked")

    def list_above(self, name: str) -> list[str]:
        _, branches = self._read_state()
        return children_of(branches, name)

    def list_branches(self) -> list[StackBranch]:
        _, branches = self._read_state()
        return list(branches.values())

    def upsert_branches(self, requests: Sequence[UpsertBranchRequest], message: str) -> None:
        trunk, branches = self._read_state()
        updated = apply_upserts(trunk, branches, requests)

        # The log entry is cut back if state.json cannot be replaced
        log_size = self._append_log(message, requests)
        try:
            self._write_state(trunk, updated)
        except BaseException:
            self._truncate_log(log_size)
            raise
        logger.debug("committed %d upsert(s): %s", len(requests), message)

    def log_entries(self) -> list[StackLogEntry]:
        if not self.log_path.exists():
            return []

        entries: list[StackLogEntry] = []
        for line in self.log_path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            data = json.loads(line)
            entries.append(
                StackLogEntry(
                    message=data["message"],
                    timestamp=data["timestamp"],
                    requests=tuple(
                        UpsertBranchRequest(
                            name=r["name"], base=r["base"], base_hash=r.get("base_hash")
                        )
                        for r in data.get("requests", [])
                    ),
                )
            )
        return entries

    def _read_state(self) -> tuple[str, dict[str, StackBranch]]:
        if not self.state_path.exists():
            raise StackStateError(
                f"stack store not initialized at {self._state_dir} (run 'stk init')"
            )

        try:
            data = json.loads(self.state_path.read_text(encoding="utf-8"))
            trunk = data["trunk"]
            branches = {
                name: StackBranch(
                    name=name, base=record["base"], base_hash=record.get("base_hash")
                )
                for name, record in data.get("branches", {}).items()
            }
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise StackStateError(f"corrupt stack state in {self.state_path}: {e!r}") from e
        return trunk, branches

    def _write_state(self, trunk: str, branches: dict[str, StackBranch]) -> None:
        data = {
            "version": STATE_VERSION,
            "trunk": trunk,
            "branches": {
                b.name: {"base": b.base, "base_hash": b.base_hash} for b in branches.values()
            },
        }

        fd, tmp_name = tempfile.mkstemp(dir=self._state_dir, prefix="state-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.state_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _append_log(self, message: str, requests: Sequence[UpsertBranchRequest]) -> int:
        """Append one entry to log.jsonl and return the file size before it."""
        entry = {
            "message": message,
            "timestamp": datetime.now(UTC).isoformat(),
            "requests": [
                {"name": r.name, "base": r.base, "base_hash": r.base_hash} for r in requests
            ],
        }
        size = self.log_path.stat().st_size if self.log_path.exists() else 0
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
        return size

    def _truncate_log(self, size: int) -> None:
        with self.log_path.open("r+", encoding="utf-8") as f:
            f.truncate(size)
