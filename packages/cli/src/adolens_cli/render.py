"""Rich renderables for repositories, pull requests, diffs and review results."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from adolens_core.ado.models import ChangeEntry, PullRequest, Repository, strip_branch_ref
from adolens_core.findings import Severity, count_by_severity, group_by_file
from adolens_core.session import ReviewState
from adolens_core.utils.diff import diff_stats

SEVERITY_STYLE = {
    Severity.BLOCKER: "bold red",
    Severity.MAJOR: "yellow",
    Severity.MINOR: "blue",
    Severity.NIT: "dim",
}
_CHANGE_STYLE = {"add": "green", "edit": "yellow", "delete": "red"}


def repositories_table(repos: list[Repository]) -> Table:
    table = Table(title="Repositories", show_header=True)
    table.add_column("Name", style="bold cyan")
    table.add_column("Default branch")
    table.add_column("Last update", style="dim")
    table.add_column("ID", style="dim")
    for repo in sorted(repos, key=lambda r: r.name.lower()):
        table.add_row(repo.name, strip_branch_ref(repo.default_branch), repo.last_update_time, repo.id)
    return table


def pull_requests_table(prs: list[PullRequest]) -> Table:
    table = Table(title="Active pull requests", show_header=True)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Branches", style="dim")
    table.add_column("Created", style="dim")
    for pr in prs:
        title = f"{pr.title} [dim](draft)[/dim]" if pr.is_draft else pr.title
        table.add_row(
            str(pr.pull_request_id),
            title,
            pr.created_by.display_name,
            f"{pr.source_branch} → {pr.target_branch}",
            pr.creation_date[:10],
        )
    return table


def changes_table(changes: list[ChangeEntry]) -> Table:
    table = Table(title="Changed files (latest iteration)", show_header=True)
    table.add_column("Change")
    table.add_column("Path")
    for change in changes:
        if not change.is_blob:
            continue
        style = _CHANGE_STYLE.get(change.change_type.value, "white")
        table.add_row(f"[{style}]{change.change_type.value}[/{style}]", change.path)
    return table


def print_diff(console: Console, patch: str) -> None:
    added, removed = diff_stats(patch)
    console.print(Syntax(patch, "diff", word_wrap=True))
    console.print(f"[green]+{added}[/green] [red]-{removed}[/red]")


def print_review(console: Console, state: ReviewState) -> None:
    """Findings grouped by file, in the order the model reported them."""
    if state.last_message:
        style = "red" if state.failed else "green"
        console.print(f"\n[{style}]{state.last_message}[/{style}]")

    findings = list(state.reviews)
    if not findings:
        console.print("[green]No issues found.[/green]")
        return

    counts = count_by_severity(findings)
    # Most severe first, whatever order the model reported them in.
    summary = "  ".join(
        f"[{SEVERITY_STYLE[s]}]{s.value}: {counts[s]}[/{SEVERITY_STYLE[s]}]"
        for s in sorted(counts, key=lambda s: s.rank, reverse=True)
        if counts[s]
    )
    console.print(summary)

    for file_path, file_findings in group_by_file(findings).items():
        lines = []
        for finding in file_findings:
            style = SEVERITY_STYLE[finding.severity]
            lines.append(f"[{style}]{finding.severity.value}[/{style}]  {finding.message}")
        console.print(Panel("\n\n".join(lines), title=f"[bold cyan]{file_path}[/bold cyan]", title_align="left"))
