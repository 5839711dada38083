"""Project registry: maps project ids to working-copy locations."""
import json
import os
from contextlib import contextmanager
from typing import Dict, List, Optional, Protocol, Union, TYPE_CHECKING

from git_preview_flow.config import Config
from git_preview_flow.constants import PROJECTS_FILE_NAME
from git_preview_flow.exceptions import (
    GitPreviewFlowError,
    InvalidArgumentError,
    ProjectNotFoundError,
)
from git_preview_flow.models.project import (
    Project,
    assign_repository_folder,
    resolve_repository_path,
)
from git_preview_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from typing import IO

# Import fcntl for POSIX file locking (Unix/Linux/macOS)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

logger = get_logger(__name__)


class ProjectLookup(Protocol):
    """What the workflow needs to turn a project id into a repository path."""

    def get_project_details(self, project_id) -> Project:
        ...

    def resolve_project_repository_path(self, project: Project) -> str:
        ...


class ProjectRegistry:
    """Stores registered projects in a JSON file under the data directory."""

    def __init__(self, config: Union[Config, dict, None] = None):
        self.config = Config.coerce(config)
        self.data_dir = self.config.data_path
        self.registry_file = self.data_dir / PROJECTS_FILE_NAME

    @contextmanager
    def _locked(self, operation: str = "read"):
        """Open the registry file holding a shared (read) or exclusive (write) lock."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.registry_file, "a+", encoding="utf-8") as handle:
            if HAS_FCNTL:
                lock_type = fcntl.LOCK_EX if operation == "write" else fcntl.LOCK_SH
                fcntl.flock(handle.fileno(), lock_type)
            try:
                handle.seek(0)
                yield handle
            finally:
                if HAS_FCNTL:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def _read(self, handle: "IO[str]") -> Dict:
        content = handle.read()
        if not content.strip():
            return {"next_id": 1, "projects": []}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise GitPreviewFlowError(f"Project registry {self.registry_file} is corrupt: {e}") from e
        data.setdefault("next_id", 1)
        data.setdefault("projects", [])
        return data

    def _write(self, handle: "IO[str]", data: Dict) -> None:
        handle.seek(0)
        handle.truncate()
        json.dump(data, handle, indent=2)
        handle.flush()

    def _load_projects(self) -> List[Project]:
        with self._locked("read") as handle:
            data = self._read(handle)
        return [Project.from_dict(entry) for entry in data["projects"]]

    @staticmethod
    def _coerce_id(project_id) -> Optional[int]:
        if project_id is None or (isinstance(project_id, str) and not project_id.strip()):
            raise InvalidArgumentError("Project id is required")
        try:
            return int(project_id)
        except (TypeError, ValueError):
            return None

    def register_project(self, name: str, project_path: str, github_url: str) -> Project:
        """Add a project; its path must not already be registered."""
        project = Project(name=name, project_path=project_path, github_url=github_url)

        with self._locked("write") as handle:
            data = self._read(handle)
            if any(entry["project_path"] == project.project_path for entry in data["projects"]):
                raise InvalidArgumentError(f"A project is already registered at '{project.project_path}'")

            project = Project.from_dict({**project.to_dict(), "id": data["next_id"]})
            data["projects"].append(project.to_dict())
            data["next_id"] += 1
            self._write(handle, data)

        logger.info(f"Registered project {project.id}: {project.name}")
        return project

    def get_project_by_id(self, project_id) -> Optional[Project]:
        wanted = self._coerce_id(project_id)
        return next((p for p in self._load_projects() if p.id == wanted), None)

    def get_project_details(self, project_id) -> Project:
        """Like get_project_by_id, but a missing project is an error."""
        project = self.get_project_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def list_projects(self) -> List[Project]:
        return self._load_projects()

    def resolve_project_repository_path(self, project: Project) -> str:
        return resolve_repository_path(project)

    def find_project_by_path(self, absolute_path: str) -> Optional[Project]:
        """Find the project whose repository (or project) path is ``absolute_path``."""
        target = os.path.normpath(absolute_path)
        for project in self._load_projects():
            if target in (os.path.normpath(resolve_repository_path(project)),
                          os.path.normpath(project.project_path)):
                return project
        return None

    def set_repository_folder(self, project_id, repo_folder_name: str) -> Project:
        """Point the project at a sub-folder of its project path."""
        project = self.get_project_details(project_id)
        updated = assign_repository_folder(project, repo_folder_name)

        conflicting = self.find_project_by_path(resolve_repository_path(updated))
        if conflicting and conflicting.id != updated.id:
            raise InvalidArgumentError(
                f"Project {conflicting.id} already uses '{resolve_repository_path(updated)}'"
            )

        with self._locked("write") as handle:
            data = self._read(handle)
            data["projects"] = [
                updated.to_dict() if entry["id"] == updated.id else entry
                for entry in data["projects"]
            ]
            self._write(handle, data)
        return updated

    def remove_project(self, project_id) -> bool:
        wanted = self._coerce_id(project_id)
        with self._locked("write") as handle:
            data = self._read(handle)
            remaining = [entry for entry in data["projects"] if entry["id"] != wanted]
            if len(remaining) == len(data["projects"]):
                return False
            data["projects"] = remaining
            self._write(handle, data)
        logger.info(f"Removed project {wanted}")
        return True

