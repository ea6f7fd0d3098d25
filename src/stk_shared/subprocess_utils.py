"""Subprocess helpers that attach operation context to failures."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    *,
    cmd: list[str],
    operation_context: str,
    cwd: Path,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising RuntimeError with context when it fails.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of the operation,
            used in the error message (e.g., "checkout branch 'feature'")
        cwd: Working directory for the command

    Returns:
        The completed process with captured text stdout and stderr

    Raises:
        RuntimeError: If the command exits non-zero or the executable
            cannot be found
    """
    logger.debug("running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"Failed to {operation_context}: {cmd[0]} not found") from e

    if result.returncode != 0:
        stderr = result.stderr.strip()
        message = f"Failed to {operation_context}"
        if stderr:
            message = f"{message}: {stderr}"
        raise RuntimeError(message) from subprocess.CalledProcessError(
            result.returncode, cmd, output=result.stdout, stderr=result.stderr
        )

    return result
