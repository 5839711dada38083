"""Command-line argument parsing for git-preview-flow."""

import argparse
from typing import List, Optional

from git_preview_flow.__version__ import __version__


def _add_project_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("project", help="Project id (see 'projects list')")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-preview-flow",
        description="Branch and preview-branch workflow for local project repositories",
        epilog="Remote operations over HTTPS use the GITHUB_TOKEN environment variable when set.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-preview-flow {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--data-dir",
        metavar="DIR",
        help="Directory holding the project registry (default: ~/.git-preview-flow)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    projects = subparsers.add_parser("projects", help="Manage registered projects")
    project_commands = projects.add_subparsers(dest="projects_command", metavar="ACTION")
    project_commands.required = True

    add = project_commands.add_parser("add", help="Register a project")
    add.add_argument("name", help="Project name")
    add.add_argument("path", help="Directory the project lives in")
    add.add_argument("url", help="GitHub repository URL")
    project_commands.add_parser("list", help="List registered projects")
    remove = project_commands.add_parser("remove", help="Forget a project")
    _add_project_argument(remove)
    set_folder = project_commands.add_parser(
        "set-folder", help="Use a sub-folder of the project path as the working copy"
    )
    _add_project_argument(set_folder)
    set_folder.add_argument("folder", help="Folder name inside the project path")

    for name, help_text in [
        ("clone", "Clone the project's repository into its path"),
        ("branches", "List local and remote branches"),
        ("remote-branches", "List branches known on the remote"),
        ("current", "Show the current branch"),
        ("info", "Show remote URL, current branch and branches"),
        ("preview", "Create or check out the preview branch"),
        ("pull-preview", "Merge the remote preview branch into the current branch"),
    ]:
        _add_project_argument(subparsers.add_parser(name, help=help_text))

    create = subparsers.add_parser("create", help="Create a branch and check it out")
    _add_project_argument(create)
    create.add_argument("branch", help="New branch name (letters, digits, '.', '-', '_')")

    checkout = subparsers.add_parser("checkout", help="Check out a local or remote branch")
    _add_project_argument(checkout)
    checkout.add_argument("branch", help="Branch name")

    push = subparsers.add_parser("push", help="Push the current branch to a remote branch")
    _add_project_argument(push)
    push.add_argument("target", help="Remote branch to push to")

    identity = subparsers.add_parser(
        "identity", help="Set the commit identity (defaults to the GitHub account)"
    )
    _add_project_argument(identity)
    identity.add_argument("--name", help="Author name")
    identity.add_argument("--email", help="Author email")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
