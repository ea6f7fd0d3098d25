"""Context holding the dependencies of stk commands.

Factories (create_context, context_for_test) are NOT defined here because
they need the restack engine, which lives in the stk package. They are in
stk.core.context to avoid circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from stk_shared.context.types import LoadedConfig, NoRepoSentinel, RepoContext
from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.stack_store.abc import StackStore

if TYPE_CHECKING:
    from stk.core.restack import RestackEngine


@dataclass(frozen=True)
class StkContext:
    """Immutable context holding all dependencies for stk commands.

    Created at the CLI entry point and threaded through the application via
    Click's context system. Frozen to prevent accidental modification at
    runtime.

    stack_store and restack_engine are None when the command runs outside a
    git repository; commands that need them call require_repo() first.
    """

    git: Git
    stack_store: StackStore | None
    restack_engine: RestackEngine | None

    cwd: Path
    repo: RepoContext | NoRepoSentinel
    local_config: LoadedConfig

    debug: bool
