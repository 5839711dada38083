"""Tests for command-line parsing and dispatch"""
import pytest

from git_preview_flow.cli.args import parse_args
from git_preview_flow.cli.main import main
from git_preview_flow.services.project_registry import ProjectRegistry


def _output(capsys) -> str:
    """Captured stdout with rich line wrapping undone."""
    return " ".join(capsys.readouterr().out.split())


class TestParseArgs:
    """Test argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_global_options(self):
        args = parse_args(["--debug", "--data-dir", "/tmp/data", "branches", "1"])

        assert args.debug is True
        assert args.data_dir == "/tmp/data"
        assert args.command == "branches"
        assert args.project == "1"

    def test_push_target(self):
        args = parse_args(["push", "3", "stage"])
        assert (args.project, args.target) == ("3", "stage")

    def test_projects_action_required(self):
        with pytest.raises(SystemExit):
            parse_args(["projects"])

    def test_identity_options(self):
        args = parse_args(["identity", "1", "--name", "Jane Doe"])
        assert args.name == "Jane Doe"
        assert args.email is None


class TestMain:
    """Test end-to-end command dispatch."""

    @pytest.fixture(autouse=True)
    def _logging(self, restore_root_logger):
        yield

    @pytest.fixture
    def data_dir(self, temp_dir):
        return str(temp_dir / "data")

    @pytest.fixture
    def registered(self, git_repo, data_dir):
        """A project registered against the test repository."""
        registry = ProjectRegistry({"data_dir": data_dir})
        return registry.register_project("Site", git_repo.working_dir, "https://github.com/a/site.git")

    def test_projects_add(self, data_dir, git_repo, capsys):
        code = main(["--data-dir", data_dir, "projects", "add", "Site", git_repo.working_dir,
                     "https://github.com/a/site.git"])

        assert code == 0
        assert "Registered project 1" in _output(capsys)
        assert ProjectRegistry({"data_dir": data_dir}).get_project_details(1).name == "Site"

    def test_projects_list_empty(self, data_dir, capsys):
        assert main(["--data-dir", data_dir, "projects", "list"]) == 0
        assert "No projects registered" in _output(capsys)

    def test_branches(self, data_dir, registered, capsys):
        code = main(["--data-dir", data_dir, "branches", str(registered.id)])

        assert code == 0
        out = _output(capsys)
        assert "main" in out
        assert "Total branches: 1" in out

    def test_preview_and_current(self, data_dir, registered, git_repo, capsys):
        assert main(["--data-dir", data_dir, "preview", str(registered.id)]) == 0
        assert "Created preview branch from 'main'" in _output(capsys)

        assert main(["--data-dir", data_dir, "current", str(registered.id)]) == 0
        assert _output(capsys).strip().endswith("preview")
        assert git_repo.active_branch.name == "preview"

    def test_unknown_project(self, data_dir, capsys):
        assert main(["--data-dir", data_dir, "branches", "42"]) == 1
        assert "Project '42' not found" in _output(capsys)

    def test_invalid_branch_name(self, data_dir, registered, git_repo, capsys):
        assert main(["--data-dir", data_dir, "create", str(registered.id), "bad name"]) == 1
        assert "Invalid branch name" in _output(capsys)
        assert [head.name for head in git_repo.heads] == ["main"]

    def test_pull_without_remote(self, data_dir, registered, capsys):
        assert main(["--data-dir", data_dir, "pull-preview", str(registered.id)]) == 1
        assert "no URL configured" in _output(capsys)

    def test_identity_without_token(self, data_dir, registered, capsys):
        """Without --name/--email the GitHub account is needed."""
        assert main(["--data-dir", data_dir, "identity", str(registered.id)]) == 1
        assert "GITHUB_TOKEN" in _output(capsys)

    def test_identity_explicit(self, data_dir, registered, git_repo):
        code = main(["--data-dir", data_dir, "identity", str(registered.id),
                     "--name", "Jane Doe", "--email", "jane@example.com"])

        assert code == 0
        reader = git_repo.config_reader(config_level="repository")
        assert reader.get_value("user", "email") == "jane@example.com"
