"""Custom exceptions for git-preview-flow"""

from typing import Iterable, Optional


class GitPreviewFlowError(Exception):
    """Base exception for all git-preview-flow errors."""
    pass


class InvalidArgumentError(GitPreviewFlowError, ValueError):
    """Exception raised for malformed or missing arguments."""
    pass


class InvalidBranchNameError(InvalidArgumentError):
    """Exception raised when a branch name contains disallowed characters."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(
            f"Invalid branch name '{branch}'. Only letters, digits, dots, "
            "hyphens and underscores are allowed."
        )


class RepositoryNotFoundError(GitPreviewFlowError):
    """Exception raised when a path is not a git working copy."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No git repository found at '{path}'")


class GitOperationError(GitPreviewFlowError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class BranchAlreadyExistsError(GitOperationError):
    """Exception raised when creating a branch that already exists."""

    def __init__(self, branch: str):
        super().__init__("create_branch", branch, "Branch already exists")


class BranchNotFoundError(GitOperationError):
    """Exception raised when a branch is not found."""

    def __init__(self, branch: str):
        super().__init__("find_branch", branch, "Branch not found")


class NoBaseBranchFoundError(GitOperationError):
    """Exception raised when none of the base branch candidates exist."""

    def __init__(self, candidates: Iterable[str]):
        self.candidates = list(candidates)
        names = ", ".join(f"'{name}'" for name in self.candidates)
        super().__init__("find_base_branch", message=f"None of {names} could be checked out")


class RemoteNotConfiguredError(GitOperationError):
    """Exception raised when an operation needs a remote that has no URL."""

    def __init__(self, remote_name: str = "origin"):
        self.remote_name = remote_name
        super().__init__(
            "resolve_remote",
            message=f"Remote '{remote_name}' has no URL configured",
        )


class MergeConflictError(GitOperationError):
    """Exception raised when a merge cannot complete automatically."""

    def __init__(self, branch: Optional[str], conflicts: Optional[Iterable[str]] = None):
        self.conflicts = list(conflicts or [])
        message = "Merge conflict"
        if self.conflicts:
            message += f" in {', '.join(self.conflicts)}"
        super().__init__("merge", branch, message)


class PlumbingError(GitOperationError):
    """Exception wrapping an unrecognized failure from the git layer."""
    pass


class PushRejectedError(PlumbingError):
    """Exception raised when the remote rejects a non-fast-forward push."""
    pass


class ProjectNotFoundError(GitPreviewFlowError):
    """Exception raised when a project id cannot be resolved."""

    def __init__(self, project_id):
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found")
