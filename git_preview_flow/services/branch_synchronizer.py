"""Branch synchronization service.

Decides which branches exist, reconciles local and remote names, and keeps the
preview branch established on top of the primitive operations in GitPlumbing.
"""

import logging
import os
from contextlib import contextmanager
from typing import Callable, List, Optional, Union, TYPE_CHECKING

from git_preview_flow.config import Config
from git_preview_flow.exceptions import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    GitPreviewFlowError,
    InvalidArgumentError,
    InvalidBranchNameError,
    NoBaseBranchFoundError,
    PlumbingError,
    RemoteNotConfiguredError,
)
from git_preview_flow.models.branch import (
    BranchListing,
    BranchSource,
    OperationResult,
    PreviewBranchResult,
    PublishReport,
    PublishStatus,
    is_valid_branch_name,
    parse_branch_ref,
    unique_branch_names,
)
from git_preview_flow.models.repository import Repository
from git_preview_flow.services.credentials import get_credential
from git_preview_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_preview_flow.services.credentials import CredentialProvider
    from git_preview_flow.services.git.plumbing import GitPlumbing

logger = get_logger(__name__)

OutputSink = Callable[[str], None]


def _discard_output(text: str) -> None:
    pass


class BranchSynchronizer:
    """Service for branch listing, creation, checkout and the preview branch lifecycle.

    Operations run their git steps strictly in sequence. There is no locking
    across calls: two concurrent ``create_branch`` calls for the same name can
    both pass the existence check, and git decides which one wins. Callers that
    need mutual exclusion must hold their own lock per repository path.
    """

    def __init__(
        self,
        plumbing: "GitPlumbing",
        credentials: Optional["CredentialProvider"] = None,
        output: Optional[OutputSink] = None,
        config: Union[Config, dict, None] = None,
    ):
        """Initialize the synchronizer.

        Args:
            plumbing: Primitive git operations (required)
            credentials: Token source for authenticated remote operations
            output: Callback receiving human-readable progress text
            config: Configuration dictionary or Config object
        """
        if plumbing is None:
            raise InvalidArgumentError("plumbing is required")

        self.plumbing = plumbing
        self.credentials = credentials
        self.output = output if callable(output) else _discard_output
        self.config = Config.coerce(config)
        self.remote_name = self.config.remote_name
        self.preview_branch = self.config.preview_branch
        self.base_branches = list(self.config.base_branches)

    def _narrate(self, message: str, level: int = logging.INFO) -> None:
        """Log ``message`` and stream it to the output sink."""
        logger.log(level, message)
        self.output(f"{message}\n")

    @contextmanager
    def _step(self, description: str):
        """Narrate the failure of an operation before letting it propagate."""
        try:
            yield
        except GitPreviewFlowError as e:
            self._narrate(f"Error {description}: {e}", logging.ERROR)
            raise

    def _remote_ref(self, branch_name: str) -> str:
        return f"{self.remote_name}/{branch_name}"

    def _remote_url(self, path: str) -> Optional[str]:
        return self.plumbing.get_config(path, f"remote.{self.remote_name}.url")

    def _require_remote_url(self, path: str) -> str:
        remote_url = self._remote_url(path)
        if not remote_url:
            raise RemoteNotConfiguredError(self.remote_name)
        return remote_url

    def _require_current_branch(self, path: str) -> str:
        current_branch = self.plumbing.current_branch(path)
        if not current_branch:
            raise InvalidArgumentError("No branch is checked out (detached HEAD)")
        return current_branch

    @staticmethod
    def _require_name(name, label: str = "Branch name") -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError(f"{label} is required")
        return name

    def list_branches(self, path: str) -> BranchListing:
        """List local and remote branches, collapsing ``origin/X`` into ``X``."""
        with self._step("listing branches"):
            self._narrate(f"Listing branches in {path}...")
            raw_branches = self.plumbing.list_branches(path)
            current_branch = self.plumbing.current_branch(path)
            self._narrate(f"Current branch: {current_branch or '(detached HEAD)'}")

            refs = [parse_branch_ref(name, self.remote_name) for name in raw_branches]
            local_branches = [ref.name for ref in refs if ref.source is BranchSource.LOCAL]
            remote_branches = [ref.name for ref in refs if ref.source is BranchSource.REMOTE]
            branches = unique_branch_names(refs)

            self._narrate(
                f"Found {len(local_branches)} local and {len(remote_branches)} remote "
                f"branches ({len(branches)} unique)"
            )
            return BranchListing(
                branches=branches,
                current_branch=current_branch,
                local_branches=local_branches,
                remote_branches=remote_branches,
            )

    def create_branch(self, path: str, name: str) -> None:
        """Create branch ``name`` from HEAD and check it out."""
        with self._step(f"creating branch '{name}'"):
            self._require_name(name)
            if not is_valid_branch_name(name):
                raise InvalidBranchNameError(name)

            self._narrate(f"Creating branch '{name}' in {path}...")
            existing = self.plumbing.list_branches(path)
            if name in existing:
                raise BranchAlreadyExistsError(name)

            self.plumbing.branch(path, name, checkout=True)
            self._narrate(f"Branch '{name}' created and checked out")

    def checkout_branch(self, path: str, name: str) -> BranchSource:
        """Check out ``name``, creating a tracking branch from the remote if needed.

        A local branch always wins over a remote one of the same name.

        Returns:
            Where the branch was found
        """
        with self._step(f"checking out branch '{name}'"):
            self._require_name(name)
            self._narrate(f"Checking out branch '{name}' in {path}...")

            existing = self.plumbing.list_branches(path)
            if name in existing:
                self.plumbing.checkout(path, name)
                source = BranchSource.LOCAL
            elif self._remote_ref(name) in existing:
                self._narrate(f"Creating local branch '{name}' to track {self._remote_ref(name)}")
                self.plumbing.branch(
                    path, name, checkout=True, start_point=self._remote_ref(name), track=True
                )
                source = BranchSource.REMOTE
            else:
                raise BranchNotFoundError(name)

            self._narrate(f"Branch '{name}' checked out")
            return source

    def get_current_branch(self, path: str) -> Optional[str]:
        return self.plumbing.current_branch(path)

    def get_repository_info(self, path: str) -> Repository:
        """Snapshot of remote URL, current branch and known branches."""
        with self._step("reading repository info"):
            remote_url = self._remote_url(path)
            current_branch = self.plumbing.current_branch(path)
            raw_branches = self.plumbing.list_branches(path)
            return Repository.from_refs(remote_url, current_branch, raw_branches, self.remote_name)

    def list_remote_branches(self, path: str) -> List[str]:
        """Names of the branches known on the remote (from the last fetch)."""
        with self._step("listing remote branches"):
            self._narrate(f"Listing remote branches in {path}...")
            self._require_remote_url(path)
            branches = self.plumbing.list_branches(path, remote=self.remote_name)
            self._narrate(f"Found {len(branches)} remote branches")
            return branches

    def ensure_preview_branch(self, path: str) -> PreviewBranchResult:
        """Make sure the preview branch exists and is checked out.

        Safe to call repeatedly. Only a missing base branch is fatal; once the
        preview branch exists locally, publishing it is best effort and its
        outcome is reported in ``result.publish``.
        """
        preview = self.preview_branch
        with self._step(f"ensuring branch '{preview}'"):
            self._narrate(f"Ensuring branch '{preview}' exists in {path}...")

            existing = self.plumbing.list_branches(path)
            has_local = preview in existing
            has_remote = self._remote_ref(preview) in existing
            self._narrate(f"Local '{preview}': {'yes' if has_local else 'no'}")
            self._narrate(f"Remote '{preview}': {'yes' if has_remote else 'no'}")

            if has_local or has_remote:
                source = BranchSource.LOCAL if has_local else BranchSource.REMOTE
                self._narrate(f"Branch '{preview}' found ({source.value}), checking it out...")
                self.checkout_branch(path, preview)
                return PreviewBranchResult(created=False, checked_out=True, source=source)

            base_branch = self._checkout_base_branch(path)
            self._warn_if_dirty(path)

            self._narrate(f"Creating branch '{preview}' from '{base_branch}'...")
            self.create_branch(path, preview)

        publish = self._publish_branch(path, preview)
        return PreviewBranchResult(
            created=True, checked_out=True, base_branch=base_branch, publish=publish
        )

    def _checkout_base_branch(self, path: str) -> str:
        """Check out the first base branch candidate that exists."""
        for candidate in self.base_branches:
            self._narrate(f"Trying '{candidate}' as base branch...")
            try:
                self.checkout_branch(path, candidate)
                return candidate
            except (BranchNotFoundError, PlumbingError) as e:
                self._narrate(f"'{candidate}' is not available: {e}", logging.WARNING)

        raise NoBaseBranchFoundError(self.base_branches)

    def _warn_if_dirty(self, path: str) -> None:
        """Warn about uncommitted changes; they do not block branch creation."""
        try:
            status = self.plumbing.status(path)
        except PlumbingError as e:
            self._narrate(f"Could not check working tree status: {e}", logging.WARNING)
            return

        if status.is_clean:
            self._narrate("Working tree is clean")
        else:
            self._narrate("There are uncommitted changes in the working tree", logging.WARNING)
            self._narrate(f"Changed files: {', '.join(status.files)}", logging.WARNING)

    def _publish_branch(self, path: str, branch_name: str) -> PublishReport:
        """Push ``branch_name`` to the remote if a remote and a token are available."""
        try:
            remote_url = self._remote_url(path)
            if not remote_url:
                self._narrate("No remote configured, branch stays local")
                return PublishReport(PublishStatus.SKIPPED_NO_REMOTE, "No remote configured")

            auth = get_credential(self.credentials)
            if auth is None:
                self._narrate("No access token available, branch stays local")
                return PublishReport(PublishStatus.SKIPPED_NO_CREDENTIALS, "No access token available")

            self._narrate(f"Publishing '{branch_name}' to {self.remote_name}...")
            self.plumbing.push(path, remote_url, f"{branch_name}:{branch_name}", auth=auth, force=False)
            self._narrate(f"Branch '{branch_name}' published")
            return PublishReport(PublishStatus.PUBLISHED)
        except GitPreviewFlowError as e:
            self._narrate(f"Could not publish branch '{branch_name}': {e}", logging.WARNING)
            return PublishReport(PublishStatus.FAILED, str(e))

    def pull_from_preview(self, path: str) -> OperationResult:
        """Fetch the remote preview branch and merge it into the current branch."""
        preview = self.preview_branch
        with self._step(f"pulling from '{preview}'"):
            self._narrate(f"Fetching updates from '{preview}' in {path}...")
            remote_url = self._require_remote_url(path)
            current_branch = self._require_current_branch(path)
            self._narrate(f"Current branch: {current_branch}")

            self.plumbing.fetch(path, remote_url, preview, auth=get_credential(self.credentials))

            self._narrate(f"Merging {self._remote_ref(preview)} into {current_branch}...")
            self.plumbing.merge(
                path,
                ours=current_branch,
                theirs=self._remote_ref(preview),
                message=f"Merge {preview} into {current_branch}",
            )

            self._narrate(f"Branch '{preview}' merged into '{current_branch}'")
            return OperationResult(
                success=True,
                message=f"Changes from '{preview}' were merged into '{current_branch}'.",
                branch=current_branch,
            )

    def push_to_branch(self, path: str, target_branch: str) -> OperationResult:
        """Push the current branch to ``target_branch`` on the remote (fast-forward only)."""
        with self._step(f"pushing to '{target_branch}'"):
            self._require_name(target_branch, "Target branch")
            self._narrate(f"Publishing from {path} to branch '{target_branch}'...")
            remote_url = self._require_remote_url(path)
            current_branch = self._require_current_branch(path)
            self._narrate(f"Current branch: {current_branch}")

            self.plumbing.push(
                path,
                remote_url,
                f"{current_branch}:{target_branch}",
                auth=get_credential(self.credentials),
                force=False,
            )

            self._narrate(f"Branch '{current_branch}' published to '{target_branch}'")
            return OperationResult(
                success=True,
                message=f"Branch '{current_branch}' was published to '{target_branch}'.",
                branch=current_branch,
            )

    def clone(self, url: str, path: str) -> Repository:
        """Clone ``url`` into ``path`` (which must be missing or empty)."""
        with self._step(f"cloning {url}"):
            self._require_name(url, "Repository URL")
            if os.path.isdir(path) and os.listdir(path):
                raise InvalidArgumentError(f"Destination '{path}' already exists and is not empty")

            self._narrate(f"Cloning {url} into {path}...")
            self.plumbing.clone(url, path, auth=get_credential(self.credentials))
            self._narrate("Clone finished")
            return self.get_repository_info(path)

    def configure_identity(self, path: str, name: str, email: str) -> None:
        """Set the commit author identity for the working copy."""
        with self._step("configuring commit identity"):
            self._require_name(name, "User name")
            self._require_name(email, "User email")
            self._narrate(f"Setting commit identity: {name} <{email}>")
            self.plumbing.set_config(path, "user.name", name)
            self.plumbing.set_config(path, "user.email", email)
