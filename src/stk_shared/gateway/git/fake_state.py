"""Shared mutable repository state for the in-memory Git fakes.

FakeGit and its sub-gateway fakes all read and write one FakeRepoState so a
checkout made through `git.branch` is visible to `git.commit` and to the
repository-level queries on FakeGit itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class FakeCommit:
    """A commit created through the fake.

    Attributes:
        sha: Generated commit identifier
        parent: Commit HEAD pointed at when the commit was made
        message: Commit message (None when an editor would have been opened)
        allow_empty: Whether the commit was created with allow_empty
    """

    sha: str
    parent: str
    message: str | None
    allow_empty: bool


@dataclass
class FakeRepoState:
    """Mutable state of a single in-memory repository.

    HEAD is either a branch name (`current_branch`) or a detached commit
    (`detached_head`); exactly one of them is set while the repository has
    commits.
    """

    repo_root: Path
    trunk: str
    branch_heads: dict[str, str]
    current_branch: str | None
    detached_head: str | None = None
    staged_files: list[str] = field(default_factory=list)
    merge_bases: dict[tuple[str, str], str] = field(default_factory=dict)
    known_commits: set[str] = field(default_factory=set)
    rebase_in_progress: bool = False
    commit_counter: int = 0

    def head_commit(self) -> str | None:
        if self.current_branch is not None:
            return self.branch_heads.get(self.current_branch)
        return self.detached_head

    def resolve(self, ref: str) -> str | None:
        """Resolve HEAD, a branch name or a known commit SHA."""
        if ref == "HEAD":
            return self.head_commit()
        if ref in self.branch_heads:
            return self.branch_heads[ref]
        if ref in self.known_commits:
            return ref
        return None

    def new_commit_sha(self) -> str:
        self.commit_counter += 1
        sha = f"{self.commit_counter:040x}"
        self.known_commits.add(sha)
        return sha
