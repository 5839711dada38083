"""Tests for the JSON project registry"""
import json
import os

import pytest

from git_preview_flow.exceptions import GitPreviewFlowError, InvalidArgumentError, ProjectNotFoundError
from git_preview_flow.services.project_registry import ProjectRegistry


@pytest.fixture
def registry(mock_config):
    return ProjectRegistry(mock_config)


class TestRegisterProject:
    """Test adding projects."""

    def test_assigns_incrementing_ids(self, registry):
        first = registry.register_project("Site", "/work/site", "https://github.com/a/site")
        second = registry.register_project("Docs", "/work/docs", "https://github.com/a/docs")

        assert first.id == 1
        assert second.id == 2
        assert [p.name for p in registry.list_projects()] == ["Site", "Docs"]

    def test_persists_to_data_dir(self, registry, mock_config):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")

        registry_file = os.path.join(mock_config["data_dir"], "projects.json")
        with open(registry_file, encoding="utf-8") as f:
            data = json.load(f)
        assert data["next_id"] == 2
        assert data["projects"][0]["github_url"] == "https://github.com/a/site"

    def test_duplicate_path(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")
        with pytest.raises(InvalidArgumentError):
            registry.register_project("Again", "/work/site", "https://github.com/a/again")

    def test_ids_not_reused_after_removal(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")
        registry.remove_project(1)

        project = registry.register_project("Docs", "/work/docs", "https://github.com/a/docs")
        assert project.id == 2

    def test_empty_registry(self, registry):
        assert registry.list_projects() == []


class TestLookup:
    """Test finding projects."""

    def test_get_by_id_accepts_strings(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")

        assert registry.get_project_by_id("1").name == "Site"
        assert registry.get_project_by_id("abc") is None
        assert registry.get_project_by_id(42) is None

    @pytest.mark.parametrize("project_id", [None, "", "   "])
    def test_empty_id(self, registry, project_id):
        with pytest.raises(InvalidArgumentError):
            registry.get_project_by_id(project_id)

    def test_get_project_details_missing(self, registry):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            registry.get_project_details(7)
        assert exc_info.value.project_id == 7

    def test_find_by_path(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")
        registry.set_repository_folder(1, "repo")

        assert registry.find_project_by_path("/work/site/repo").id == 1
        assert registry.find_project_by_path("/work/site/").id == 1
        assert registry.find_project_by_path("/work/other") is None

    def test_corrupt_file(self, registry):
        registry.data_dir.mkdir(parents=True, exist_ok=True)
        registry.registry_file.write_text("{not json")

        with pytest.raises(GitPreviewFlowError, match="corrupt"):
            registry.list_projects()


class TestRepositoryFolder:
    """Test pointing a project at a sub-folder."""

    def test_set_repository_folder(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")

        updated = registry.set_repository_folder(1, "repo")

        assert updated.repo_folder_name == "repo"
        stored = registry.get_project_details(1)
        assert registry.resolve_project_repository_path(stored) == os.path.join("/work/site", "repo")

    def test_conflicting_folder(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")
        registry.register_project("Repo", "/work/site/repo", "https://github.com/a/repo")

        with pytest.raises(InvalidArgumentError):
            registry.set_repository_folder(1, "repo")

    def test_unknown_project(self, registry):
        with pytest.raises(ProjectNotFoundError):
            registry.set_repository_folder(3, "repo")


class TestRemoveProject:
    """Test removing projects."""

    def test_remove(self, registry):
        registry.register_project("Site", "/work/site", "https://github.com/a/site")

        assert registry.remove_project("1") is True
        assert registry.list_projects() == []

    def test_remove_missing(self, registry):
        assert registry.remove_project(5) is False
