"""Branch model, naming rules and operation results"""
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from git_preview_flow.constants import BRANCH_NAME_PATTERN, DEFAULT_REMOTE_NAME


class BranchSource(Enum):
    """Where a branch ref was found."""
    LOCAL = "local"
    REMOTE = "remote"


class PublishStatus(Enum):
    """Outcome of publishing a newly created branch to the remote."""
    PUBLISHED = "published"
    SKIPPED_NO_REMOTE = "skipped-no-remote"
    SKIPPED_NO_CREDENTIALS = "skipped-no-credentials"
    FAILED = "failed"


@dataclass(frozen=True)
class BranchRef:
    """A branch name tagged with its provenance.

    ``name`` is always the canonical (unprefixed) name, so ``origin/X`` and
    ``X`` compare equal by name and differ only by ``source``.
    """
    name: str
    source: BranchSource
    remote: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        """Name as the git layer reports it (``origin/X`` for remote refs)."""
        if self.source is BranchSource.REMOTE and self.remote:
            return f"{self.remote}/{self.name}"
        return self.name


def parse_branch_ref(raw_name: str, remote_name: str = DEFAULT_REMOTE_NAME) -> BranchRef:
    """Turn a raw ref name from the git layer into a BranchRef."""
    prefix = f"{remote_name}/"
    if raw_name.startswith(prefix):
        return BranchRef(raw_name[len(prefix):], BranchSource.REMOTE, remote_name)
    return BranchRef(raw_name, BranchSource.LOCAL)


def normalize_branch_name(raw_name: str, remote_name: str = DEFAULT_REMOTE_NAME) -> str:
    """Canonical branch identifier for a local or remote ref name."""
    return parse_branch_ref(raw_name.strip(), remote_name).name


def unique_branch_names(refs: Iterable[BranchRef]) -> List[str]:
    """Deduplicate refs by canonical name, keeping first-seen order."""
    seen = {}
    for ref in refs:
        seen.setdefault(ref.name, ref)
    return list(seen)


def is_valid_branch_name(name: Optional[str]) -> bool:
    """Check a name against the allowed branch-name characters."""
    return bool(name) and BRANCH_NAME_PATTERN.fullmatch(name) is not None


@dataclass(frozen=True)
class BranchListing:
    """Result of listing the branches of a working copy."""
    branches: List[str]
    current_branch: Optional[str]
    local_branches: List[str] = field(default_factory=list)
    remote_branches: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "branches": list(self.branches),
            "current_branch": self.current_branch,
            "local_branches": list(self.local_branches),
            "remote_branches": list(self.remote_branches),
        }


@dataclass(frozen=True)
class PublishReport:
    """Side-channel report of the best-effort remote publish."""
    status: PublishStatus
    message: Optional[str] = None

    @property
    def published(self) -> bool:
        return self.status is PublishStatus.PUBLISHED

    @property
    def is_warning(self) -> bool:
        return self.status is PublishStatus.FAILED


@dataclass(frozen=True)
class PreviewBranchResult:
    """Outcome of ensuring the preview branch exists and is checked out."""
    created: bool
    checked_out: bool
    source: Optional[BranchSource] = None  # Set when the branch already existed
    base_branch: Optional[str] = None  # Set when the branch was created
    publish: Optional[PublishReport] = None  # Set when the branch was created

    def to_dict(self) -> dict:
        result = {"created": self.created, "checked_out": self.checked_out}
        if self.source is not None:
            result["source"] = self.source.value
        if self.base_branch is not None:
            result["base_branch"] = self.base_branch
        if self.publish is not None:
            result["publish"] = {
                "status": self.publish.status.value,
                "message": self.publish.message,
            }
        return result


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a remote synchronization (pull/push)."""
    success: bool
    message: str
    branch: Optional[str] = None

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message, "branch": self.branch}
