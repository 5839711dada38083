"""Display and formatting service for branch workflow results"""
from rich.console import Console
from rich.table import Table
from typing import List, Optional

from git_preview_flow.constants import SYMBOL_CURRENT_BRANCH, SYMBOL_LOCAL, SYMBOL_REMOTE
from git_preview_flow.models.branch import BranchListing, OperationResult, PreviewBranchResult, PublishStatus
from git_preview_flow.models.project import Project, resolve_repository_path
from git_preview_flow.models.repository import Repository

console = Console()

PUBLISH_STYLES = {
    PublishStatus.PUBLISHED: "green",
    PublishStatus.SKIPPED_NO_REMOTE: "dim",
    PublishStatus.SKIPPED_NO_CREDENTIALS: "yellow",
    PublishStatus.FAILED: "yellow",
}


def format_branch_name(name: str, is_current: bool = False) -> str:
    """Branch name with the current-branch marker."""
    return name + (SYMBOL_CURRENT_BRANCH if is_current else "")


def format_presence(present: bool, symbol: str) -> str:
    return symbol if present else ""


class DisplayService:
    def __init__(self, output_console: Optional[Console] = None):
        self.console = output_console or console

    def output_sink(self, text: str) -> None:
        """Stream synchronizer narration to the terminal."""
        self.console.print(text, end="", style="dim", markup=False, highlight=False)

    def display_branch_listing(self, listing: BranchListing) -> None:
        table = Table()
        table.add_column("Branch")
        table.add_column("Local")
        table.add_column("Remote")

        local = set(listing.local_branches)
        remote = set(listing.remote_branches)
        for name in listing.branches:
            is_current = name == listing.current_branch
            table.add_row(
                format_branch_name(name, is_current),
                format_presence(name in local, SYMBOL_LOCAL),
                format_presence(name in remote, SYMBOL_REMOTE),
                style="cyan" if is_current else None,
            )

        self.console.print(table)
        self.console.print(
            f"Total branches: {len(listing.branches)} "
            f"({len(listing.local_branches)} local, {len(listing.remote_branches)} remote)"
        )

    def display_branch_names(self, names: List[str]) -> None:
        for name in names:
            self.console.print(name, markup=False, highlight=False)

    def display_repository_info(self, repository: Repository) -> None:
        self.console.print(f"Remote URL:     {repository.remote_url or '(none)'}", markup=False)
        self.console.print(f"Current branch: {repository.current_branch or '(detached HEAD)'}", markup=False)
        self.console.print(f"Branches:       {', '.join(repository.branches) or '(none)'}", markup=False)

    def display_preview_result(self, result: PreviewBranchResult) -> None:
        if result.created:
            self.console.print(f"[green]Created preview branch from '{result.base_branch}'[/green]")
        else:
            self.console.print(f"[green]Checked out existing preview branch ({result.source.value})[/green]")

        if result.publish is not None:
            style = PUBLISH_STYLES[result.publish.status]
            detail = f": {result.publish.message}" if result.publish.message else ""
            self.console.print(f"[{style}]Publish {result.publish.status.value}{detail}[/{style}]")

    def display_operation_result(self, result: OperationResult) -> None:
        style = "green" if result.success else "red"
        self.console.print(f"[{style}]{result.message}[/{style}]")

    def display_projects(self, projects: List[Project]) -> None:
        if not projects:
            self.console.print("[yellow]No projects registered[/yellow]")
            return

        table = Table()
        table.add_column("ID")
        table.add_column("Name")
        table.add_column("Repository")
        table.add_column("GitHub URL")
        for project in projects:
            table.add_row(str(project.id), project.name, resolve_repository_path(project), project.github_url)
        self.console.print(table)
