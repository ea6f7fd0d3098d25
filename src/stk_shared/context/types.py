"""Context types for stk.

This module provides the core data types used by StkContext:
- RepoContext: Repository discovery result
- NoRepoSentinel: Sentinel for when not in a repository
- LoadedConfig: Repository-level configuration
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepoContext:
    """Represents a git repo root and the directory holding stk's stack state.

    Attributes:
        root: Root of the worktree the command runs in
        git_common_dir: The repository's common .git directory
    """

    root: Path
    git_common_dir: Path

    @property
    def state_dir(self) -> Path:
        """Directory holding the stack store files."""
        return self.git_common_dir / "stk"

    @property
    def config_dir(self) -> Path:
        """Directory holding the checked-in config.toml."""
        return self.root / ".stk"


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a git repository.

    Used when commands run outside git repositories (e.g., `stk --help`).
    """

    message: str = "Not inside a git repository"


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `.stk/config.toml`.

    Attributes:
        trunk: Trunk branch to initialize the stack store with, or None to
            detect it from the repository
    """

    trunk: str | None

    @staticmethod
    def defaults() -> LoadedConfig:
        return LoadedConfig(trunk=None)
