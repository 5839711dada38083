"""Command-line interface for git-preview-flow"""

import asyncio
import sys
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from git_preview_flow.config import Config
from git_preview_flow.exceptions import GitPreviewFlowError
from git_preview_flow.services.branch_synchronizer import BranchSynchronizer
from git_preview_flow.services.credentials import TokenCredentialProvider
from git_preview_flow.services.display_service import DisplayService
from git_preview_flow.services.git.plumbing import GitPlumbing
from git_preview_flow.services.github_service import GitHubAccountService
from git_preview_flow.services.project_registry import ProjectRegistry
from git_preview_flow.services.workflow import WorkflowFacade
from git_preview_flow.utils.logging import setup_logging
from .args import parse_args

console = Console()


class CommandContext:
    """Collaborators shared by the command handlers."""

    def __init__(self, config: Config, display: DisplayService):
        self.config = config
        self.display = display
        self.credentials = TokenCredentialProvider(config)
        self.registry = ProjectRegistry(config)
        self.synchronizer = BranchSynchronizer(
            GitPlumbing(config.remote_name),
            credentials=self.credentials,
            output=display.output_sink,
            config=config,
        )
        self.workflow = WorkflowFacade(self.synchronizer, self.registry)


def _projects(ctx: CommandContext, args) -> int:
    if args.projects_command == "add":
        project = ctx.registry.register_project(args.name, args.path, args.url)
        console.print(f"[green]Registered project {project.id}: {escape(project.name)}[/green]")
    elif args.projects_command == "list":
        ctx.display.display_projects(ctx.registry.list_projects())
    elif args.projects_command == "remove":
        if not ctx.registry.remove_project(args.project):
            console.print(f"[yellow]Project {escape(str(args.project))} not found[/yellow]")
            return 1
        console.print(f"[green]Removed project {escape(str(args.project))}[/green]")
    elif args.projects_command == "set-folder":
        project = ctx.registry.set_repository_folder(args.project, args.folder)
        console.print(
            f"Project {project.id} now uses {escape(ctx.registry.resolve_project_repository_path(project))}"
        )
    return 0


def _clone(ctx: CommandContext, args) -> int:
    repository = asyncio.run(ctx.workflow.clone_project(args.project))
    ctx.display.display_repository_info(repository)
    return 0


def _branches(ctx: CommandContext, args) -> int:
    ctx.display.display_branch_listing(asyncio.run(ctx.workflow.list_branches(args.project)))
    return 0


def _remote_branches(ctx: CommandContext, args) -> int:
    ctx.display.display_branch_names(asyncio.run(ctx.workflow.list_remote_branches(args.project)))
    return 0


def _current(ctx: CommandContext, args) -> int:
    current_branch = asyncio.run(ctx.workflow.get_current_branch(args.project))
    console.print(current_branch or "(detached HEAD)", markup=False, highlight=False)
    return 0


def _info(ctx: CommandContext, args) -> int:
    ctx.display.display_repository_info(asyncio.run(ctx.workflow.get_repository_info(args.project)))
    return 0


def _create(ctx: CommandContext, args) -> int:
    asyncio.run(ctx.workflow.create_branch(args.project, args.branch))
    return 0


def _checkout(ctx: CommandContext, args) -> int:
    asyncio.run(ctx.workflow.checkout_branch(args.project, args.branch))
    return 0


def _preview(ctx: CommandContext, args) -> int:
    ctx.display.display_preview_result(asyncio.run(ctx.workflow.ensure_preview_branch(args.project)))
    return 0


def _pull_preview(ctx: CommandContext, args) -> int:
    ctx.display.display_operation_result(asyncio.run(ctx.workflow.pull_from_preview(args.project)))
    return 0


def _push(ctx: CommandContext, args) -> int:
    ctx.display.display_operation_result(asyncio.run(ctx.workflow.push_to_branch(args.project, args.target)))
    return 0


def _identity(ctx: CommandContext, args) -> int:
    name, email = args.name, args.email
    if not (name and email):
        user = GitHubAccountService(ctx.credentials).get_user_info()
        if user is None:
            console.print("[red]Pass --name and --email, or set GITHUB_TOKEN to use your GitHub account[/red]")
            return 1
        name = name or user.name
        email = email or user.email

    asyncio.run(ctx.workflow.configure_identity(args.project, name, email))
    return 0


COMMANDS: Dict[str, Callable[[CommandContext, object], int]] = {
    "projects": _projects,
    "clone": _clone,
    "branches": _branches,
    "remote-branches": _remote_branches,
    "current": _current,
    "info": _info,
    "create": _create,
    "checkout": _checkout,
    "preview": _preview,
    "pull-preview": _pull_preview,
    "push": _push,
    "identity": _identity,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        config = Config(
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            data_dir=parsed_args.data_dir,
        )

        # Setup logging before creating any service
        setup_logging(
            verbose=config.verbose,
            debug=config.debug,
            log_dir=config.data_path,
            secrets=[TokenCredentialProvider(config).get_token()],
        )

        if config.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token" and value:
                    value = "***"
                console.print(f"  {key}: {escape(str(value))}")

        ctx = CommandContext(config, DisplayService(console))
        return COMMANDS[parsed_args.command](ctx, parsed_args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except GitPreviewFlowError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
