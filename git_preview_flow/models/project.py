"""Project model and repository path rules"""
import os
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from git_preview_flow.exceptions import InvalidArgumentError


def _require_text(value, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(message)
    return value.strip()


@dataclass(frozen=True)
class Project:
    """A registered project and the location of its working copy."""
    name: str
    project_path: str
    github_url: str
    id: Optional[int] = None
    repo_folder_name: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "name", _require_text(self.name, "Project name is required"))
        object.__setattr__(self, "project_path", _require_text(self.project_path, "Project path is required"))
        object.__setattr__(self, "github_url", _require_text(self.github_url, "GitHub URL is required"))

        folder = self.repo_folder_name.strip() if isinstance(self.repo_folder_name, str) else None
        object.__setattr__(self, "repo_folder_name", folder or None)

        if not self.created_at:
            object.__setattr__(self, "created_at", datetime.now(timezone.utc).isoformat())

    @property
    def has_repository_folder(self) -> bool:
        return self.repo_folder_name is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "project_path": self.project_path,
            "github_url": self.github_url,
            "repo_folder_name": self.repo_folder_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            project_path=data.get("project_path"),
            github_url=data.get("github_url"),
            repo_folder_name=data.get("repo_folder_name"),
            created_at=data.get("created_at"),
        )


def assign_repository_folder(project: Project, repo_folder_name: str) -> Project:
    """Return a copy of ``project`` whose working copy lives in ``repo_folder_name``."""
    folder = _require_text(repo_folder_name, "Repository folder name is required")
    return replace(project, repo_folder_name=folder)


def resolve_repository_path(project: Project) -> str:
    """Filesystem path of the project's git working copy."""
    if project is None:
        raise InvalidArgumentError("Project is required")
    if not project.repo_folder_name:
        return project.project_path
    return os.path.join(project.project_path, project.repo_folder_name)
