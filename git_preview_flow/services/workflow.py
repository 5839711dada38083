"""Project-level workflow operations.

Binds project ids to repository paths and exposes every BranchSynchronizer
operation by project id. Each call re-resolves the project and runs the
blocking git work in a worker thread, so operations are independently
awaitable. Nothing is cached between calls.
"""

import asyncio
from typing import Any, Callable, List, Optional, TypeVar, TYPE_CHECKING

from git_preview_flow.exceptions import InvalidArgumentError, ProjectNotFoundError
from git_preview_flow.models.branch import BranchListing, OperationResult, PreviewBranchResult
from git_preview_flow.models.project import Project
from git_preview_flow.models.repository import Repository
from git_preview_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_preview_flow.services.branch_synchronizer import BranchSynchronizer
    from git_preview_flow.services.project_registry import ProjectLookup

logger = get_logger(__name__)

T = TypeVar("T")


class WorkflowFacade:
    """Branch workflow addressed by project id instead of filesystem path."""

    def __init__(self, synchronizer: "BranchSynchronizer", projects: "ProjectLookup"):
        if synchronizer is None:
            raise InvalidArgumentError("synchronizer is required")
        if projects is None:
            raise InvalidArgumentError("projects is required")

        self.synchronizer = synchronizer
        self.projects = projects

    async def with_project(self, project_id: Any, handler: Callable[[Project, str], T]) -> T:
        """Resolve ``project_id`` and call ``handler(project, repository_path)``.

        Raises:
            ProjectNotFoundError: if the project cannot be resolved
        """
        project = await asyncio.to_thread(self.projects.get_project_details, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        repository_path = self.projects.resolve_project_repository_path(project)
        logger.debug(f"Project {project_id} resolved to {repository_path}")
        return await asyncio.to_thread(handler, project, repository_path)

    async def list_branches(self, project_id) -> BranchListing:
        return await self.with_project(project_id, lambda _p, path: self.synchronizer.list_branches(path))

    async def create_branch(self, project_id, branch_name: str) -> None:
        return await self.with_project(
            project_id, lambda _p, path: self.synchronizer.create_branch(path, branch_name)
        )

    async def checkout_branch(self, project_id, branch_name: str):
        return await self.with_project(
            project_id, lambda _p, path: self.synchronizer.checkout_branch(path, branch_name)
        )

    async def get_current_branch(self, project_id) -> Optional[str]:
        return await self.with_project(project_id, lambda _p, path: self.synchronizer.get_current_branch(path))

    async def get_repository_info(self, project_id) -> Repository:
        return await self.with_project(project_id, lambda _p, path: self.synchronizer.get_repository_info(path))

    async def pull_from_preview(self, project_id) -> OperationResult:
        return await self.with_project(project_id, lambda _p, path: self.synchronizer.pull_from_preview(path))

    async def push_to_branch(self, project_id, target_branch: str) -> OperationResult:
        return await self.with_project(
            project_id, lambda _p, path: self.synchronizer.push_to_branch(path, target_branch)
        )

    async def list_remote_branches(self, project_id) -> List[str]:
        return await self.with_project(project_id, lambda _p, path: self.synchronizer.list_remote_branches(path))

    async def ensure_preview_branch(self, project_id) -> PreviewBranchResult:
        return await self.with_project(project_id, lambda _p, path: self.synchronizer.ensure_preview_branch(path))

    async def clone_project(self, project_id) -> Repository:
        """Clone the project's GitHub URL into its repository path."""
        return await self.with_project(
            project_id, lambda project, path: self.synchronizer.clone(project.github_url, path)
        )

    async def configure_identity(self, project_id, name: str, email: str) -> None:
        return await self.with_project(
            project_id, lambda _p, path: self.synchronizer.configure_identity(path, name, email)
        )
