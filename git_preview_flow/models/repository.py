"""Repository model: a read projection of a working copy's branch state.

A ``Repository`` is rebuilt from live git state on every query and is never
mutated; ``update_current_branch`` and ``add_branch`` return new values.
"""
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from git_preview_flow.constants import DEFAULT_REMOTE_NAME
from git_preview_flow.exceptions import InvalidArgumentError
from git_preview_flow.models.branch import normalize_branch_name


def _require_name(branch_name) -> str:
    if not isinstance(branch_name, str) or not branch_name.strip():
        raise InvalidArgumentError("Branch name is required")
    return branch_name.strip()


@dataclass(frozen=True)
class Repository:
    """Branch state of one local working copy."""
    remote_url: Optional[str] = None
    current_branch: Optional[str] = None
    branches: Tuple[str, ...] = ()

    def __post_init__(self):
        # Collapse origin/X and X into X, keeping first-seen order
        unique = dict.fromkeys(normalize_branch_name(name) for name in self.branches)
        object.__setattr__(self, "branches", tuple(unique))
        if self.current_branch is not None and self.current_branch not in self.branches:
            raise InvalidArgumentError(
                f"Current branch '{self.current_branch}' is not one of the repository branches"
            )

    @classmethod
    def from_refs(
        cls,
        remote_url: Optional[str],
        current_branch: Optional[str],
        refs: Iterable[str],
        remote_name: str = DEFAULT_REMOTE_NAME,
    ) -> "Repository":
        """Build from raw ref names, making sure the current branch is listed.

        An unborn branch (fresh ``git init``) is current but has no ref yet.
        """
        names = [normalize_branch_name(ref, remote_name) for ref in refs]
        if current_branch and current_branch not in names:
            names.append(current_branch)
        return cls(remote_url=remote_url or None, current_branch=current_branch or None, branches=tuple(names))

    @property
    def has_remote(self) -> bool:
        return bool(self.remote_url)

    def to_dict(self) -> dict:
        return {
            "remote_url": self.remote_url,
            "current_branch": self.current_branch,
            "branches": list(self.branches),
        }


def update_current_branch(repository: Repository, branch_name: str) -> Repository:
    """Return a copy of ``repository`` with ``branch_name`` checked out."""
    name = _require_name(branch_name)
    branches = repository.branches
    if normalize_branch_name(name) not in branches:
        branches = branches + (name,)
    return replace(repository, current_branch=normalize_branch_name(name), branches=branches)


def add_branch(repository: Repository, branch_name: str) -> Repository:
    """Return a copy of ``repository`` that includes ``branch_name``.

    Adding a name that is already known is a no-op.
    """
    name = normalize_branch_name(_require_name(branch_name))
    if name in repository.branches:
        return repository
    return replace(repository, branches=repository.branches + (name,))
