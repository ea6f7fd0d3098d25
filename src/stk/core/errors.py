"""Errors raised by the branch insertion and restack engines.

The CLI catches StkError, prints it and exits non-zero. Errors raised by the
restack engine during an insertion propagate unwrapped.
"""


class StkError(Exception):
    """Base class for errors reported to the user."""


class MissingNameError(StkError):
    def __init__(self) -> None:
        super().__init__("branch name is required")


class InvalidOperationError(StkError):
    """The requested operation is not valid from the current position."""


class NotTrackedError(StkError):
    def __init__(self, branch: str) -> None:
        super().__init__(f"branch not tracked: {branch}")
        self.branch = branch


class BackendError(StkError):
    """A git primitive failed.

    Attributes:
        stage: Which step failed: resolve, diff, detach, commit, create or checkout
        cause: The gateway exception
    """

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause


class StateError(StkError):
    """A stack store transaction failed; nothing was written."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"update state: {cause}")
        self.cause = cause


class RollbackError(StkError):
    """An operation failed and restoring the original branch failed too.

    Both errors are kept so neither is lost: `error` is the failure that
    triggered the rollback and `rollback_error` is the failed checkout.
    """

    def __init__(self, error: BaseException, rollback_error: BaseException, branch: str) -> None:
        super().__init__(f"{error}\nrestore branch {branch}: {rollback_error}")
        self.error = error
        self.rollback_error = rollback_error
        self.branch = branch


class RestackError(StkError):
    """A branch could not be restacked onto its base."""


class RestackConflictError(RestackError):
    """A rebase stopped on conflicts and was left in progress."""

    def __init__(self, branch: str, onto: str, conflict_files: tuple[str, ...]) -> None:
        files = ", ".join(conflict_files) if conflict_files else "unknown files"
        super().__init__(
            f"restack {branch} onto {onto}: conflicts in {files}; "
            "resolve them and run 'git rebase --continue', then 'stk upstack restack'"
        )
        self.branch = branch
        self.onto = onto
        self.conflict_files = conflict_files
