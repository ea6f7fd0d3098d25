"""Production implementation of Git commit operations using subprocess."""

import subprocess
from pathlib import Path

from stk_shared.gateway.git.commit_ops.abc import GitCommitOps
from stk_shared.subprocess_utils import run_subprocess_with_context


class RealGitCommitOps(GitCommitOps):
    """Real implementation of Git commit operations using subprocess."""

    def commit(self, cwd: Path, message: str | None, *, allow_empty: bool) -> None:
        """Create a commit with staged changes."""
        cmd = ["git", "commit"]
        if allow_empty:
            cmd.append("--allow-empty")

        if message is None:
            # Editor session: inherit the terminal instead of capturing output
            result = subprocess.run(cmd, cwd=cwd, check=False)
            if result.returncode != 0:
                raise RuntimeError(f"Failed to create commit: git exited with {result.returncode}")
            return

        cmd.extend(["--allow-empty-message", "-m", message])
        run_subprocess_with_context(
            cmd=cmd,
            operation_context="create commit",
            cwd=cwd,
        )
