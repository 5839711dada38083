"""Git-related services for git-preview-flow."""

from .plumbing import GitPlumbing, RepositoryStatus

__all__ = [
    "GitPlumbing",
    "RepositoryStatus",
]
