"""Primitive git operations on top of GitPython.

Every method opens a fresh ``git.Repo`` for the working copy it is given and
translates GitPython failures into git-preview-flow exceptions, so callers
never see ``git.exc`` types.
"""

import git
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import List, Optional

from git_preview_flow.constants import DEFAULT_REMOTE_NAME
from git_preview_flow.exceptions import (
    MergeConflictError,
    PlumbingError,
    PushRejectedError,
    RepositoryNotFoundError,
)
from git_preview_flow.services.credentials import GitCredential, authenticated_url, redact
from git_preview_flow.utils.logging import get_logger

logger = get_logger(__name__)

_REJECTION_MARKERS = ("[rejected]", "non-fast-forward", "fetch first", "[remote rejected]")


@dataclass(frozen=True)
class RepositoryStatus:
    """Paths with uncommitted changes (modified, staged or untracked)."""
    files: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.files


def _clean_output(text: Optional[str]) -> str:
    """Strip GitPython's "stderr: '...'" decoration from command output."""
    text = (text or "").strip()
    for label in ("stderr:", "stdout:"):
        if text.startswith(label):
            text = text[len(label):].strip()
            if len(text) >= 2 and text[0] == text[-1] == "'":
                text = text[1:-1]
    return text.strip()


class GitPlumbing:
    """Service for primitive git operations."""

    def __init__(self, remote_name: str = DEFAULT_REMOTE_NAME):
        self.remote_name = remote_name

    def _open(self, dir: str) -> git.Repo:
        """Open the working copy at ``dir``.

        Raises:
            RepositoryNotFoundError: if ``dir`` is not a git working copy
        """
        try:
            return git.Repo(dir)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise RepositoryNotFoundError(str(dir)) from None

    @contextmanager
    def _git_operation(self, operation: str, branch: Optional[str] = None,
                       auth: Optional[GitCredential] = None):
        """Translate GitPython errors raised inside the block into PlumbingError."""
        try:
            yield
        except git.exc.GitCommandError as e:
            stderr = _clean_output(e.stderr) or _clean_output(e.stdout)
            status = e.status if e.status is not None else "unknown"

            if stderr:
                error_msg = f"exit {status}: {stderr}"
            else:
                error_msg = f"failed with exit code {status}"
            error_msg = redact(error_msg, auth)

            logger.debug(f"git {operation} failed: {error_msg}")
            if operation == "push" and any(marker in stderr for marker in _REJECTION_MARKERS):
                raise PushRejectedError(operation, branch, error_msg) from e
            raise PlumbingError(operation, branch, error_msg) from e
        except git.exc.GitError as e:
            raise PlumbingError(operation, branch, redact(str(e), auth)) from e

    def clone(self, url: str, dir: str, auth: Optional[GitCredential] = None) -> None:
        """Clone ``url`` into ``dir``.

        The token is only used for the transfer; the stored remote URL is the plain one.
        """
        logger.info(f"Cloning into {dir}")
        with self._git_operation("clone", auth=auth):
            repo = git.Repo.clone_from(authenticated_url(url, auth), dir)
            with repo:
                if auth:
                    repo.git.remote("set-url", self.remote_name, url)

    def checkout(self, dir: str, ref: str) -> None:
        with self._open(dir) as repo, self._git_operation("checkout", ref):
            repo.git.checkout(ref)

    def branch(self, dir: str, ref: str, checkout: bool = False,
               start_point: Optional[str] = None, track: bool = False) -> None:
        """Create branch ``ref``, optionally from ``start_point`` and tracking it."""
        args = [ref]
        if start_point:
            args.append(start_point)
        if track:
            args.insert(0, "--track")

        with self._open(dir) as repo, self._git_operation("branch", ref):
            repo.git.branch(*args)
            if checkout:
                repo.git.checkout(ref)

    def current_branch(self, dir: str) -> Optional[str]:
        """Name of the checked-out branch, or None on a detached HEAD."""
        with self._open(dir) as repo:
            try:
                return repo.active_branch.name
            except TypeError:
                # Detached HEAD
                return None

    def list_branches(self, dir: str, remote: Optional[str] = None) -> List[str]:
        """List branch names.

        Without ``remote``: local branches, then the configured remote's
        branches prefixed (``origin/X``). With ``remote``: that remote's
        branch names without prefix. Symbolic ``HEAD`` refs are skipped.
        """
        with self._open(dir) as repo, self._git_operation("list_branches"):
            if remote:
                return self._remote_branch_names(repo, remote)

            local = self._ref_names(repo, "refs/heads/")
            remote_refs = [
                f"{self.remote_name}/{name}"
                for name in self._remote_branch_names(repo, self.remote_name)
            ]
            return local + remote_refs

    def _ref_names(self, repo: git.Repo, prefix: str) -> List[str]:
        output = repo.git.for_each_ref("--format=%(refname)", prefix)
        return [line[len(prefix):] for line in output.splitlines() if line.startswith(prefix)]

    def _remote_branch_names(self, repo: git.Repo, remote: str) -> List[str]:
        return [
            name for name in self._ref_names(repo, f"refs/remotes/{remote}/")
            if name != "HEAD"
        ]

    def get_config(self, dir: str, path: str) -> Optional[str]:
        """Read a config value, None if it is not set."""
        with self._open(dir) as repo:
            try:
                value = repo.git.config("--get", path)
            except git.exc.GitCommandError:
                # Exit status 1 means the key is missing
                return None
            return value or None

    def set_config(self, dir: str, path: str, value: str) -> None:
        with self._open(dir) as repo, self._git_operation("set_config"):
            repo.git.config(path, value)

    def status(self, dir: str) -> RepositoryStatus:
        """Working-tree status as a list of changed paths."""
        with self._open(dir) as repo, self._git_operation("status"):
            output = repo.git.status("--porcelain")

        files = []
        for line in output.split("\n"):
            if len(line) < 4:
                continue
            path = line[3:]
            if " -> " in path:
                # Renames are reported as "old -> new"
                path = path.split(" -> ", 1)[1]
            files.append(path.strip('"'))
        return RepositoryStatus(files=files)

    def fetch(self, dir: str, url: str, ref: str, auth: Optional[GitCredential] = None) -> None:
        """Fetch branch ``ref`` from ``url`` into ``refs/remotes/<remote>/<ref>``."""
        refspec = f"+refs/heads/{ref}:refs/remotes/{self.remote_name}/{ref}"
        with self._open(dir) as repo, self._git_operation("fetch", ref, auth):
            repo.git.fetch(authenticated_url(url, auth), refspec)

    def merge(self, dir: str, ours: str, theirs: str, message: str) -> None:
        """Merge ``theirs`` into ``ours``.

        A conflicted merge is aborted, leaving the working copy as it was,
        and reported as MergeConflictError.
        """
        with self._open(dir) as repo:
            try:
                current = repo.active_branch.name
            except TypeError:
                current = None
            with self._git_operation("merge", ours):
                if current != ours:
                    repo.git.checkout(ours)

            try:
                repo.git.merge(theirs, "--no-edit", "-m", message)
            except git.exc.GitCommandError as e:
                conflicts = self._conflicted_files(repo)
                if not conflicts:
                    with self._git_operation("merge", ours):
                        raise e

                logger.warning(f"Merge of {theirs} into {ours} conflicts in {len(conflicts)} file(s), aborting")
                with self._git_operation("merge_abort", ours):
                    repo.git.merge("--abort")
                raise MergeConflictError(ours, conflicts) from e

    def _conflicted_files(self, repo: git.Repo) -> List[str]:
        try:
            output = repo.git.diff("--name-only", "--diff-filter=U")
        except git.exc.GitCommandError:
            return []
        return [line for line in output.splitlines() if line]

    def push(self, dir: str, url: str, ref: str, auth: Optional[GitCredential] = None,
             force: bool = False) -> None:
        """Push refspec ``ref`` (``src:dst``) to ``url``."""
        args = [authenticated_url(url, auth), ref]
        if force:
            args.insert(0, "--force")
        with self._open(dir) as repo, self._git_operation("push", ref.split(":")[-1], auth):
            repo.git.push(*args)
