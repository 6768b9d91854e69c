"""review command: run an AI review on files of a pull request."""

from __future__ import annotations

import json
from functools import partial

import click
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from adolens_cli.common import build_client, build_reviewer, console, get_config, reported_errors, resolve_repo_id
from adolens_cli.render import print_review
from adolens_core.reviewer import default_selection, prepare_review_data, review_files
from adolens_core.session import ReviewSession, ReviewState


def _state_to_dict(state: ReviewState) -> dict:
    return {
        "success": not state.failed,
        "message": state.last_message,
        "reviews": [r.to_dict() for r in state.reviews],
    }


@click.command("review")
@click.argument("repo")
@click.option(
    "--pr",
    "pr_id",
    type=int,
    default=None,
    help="Pull request id. Omit to pick from the active pull requests.",
)
@click.option(
    "--file",
    "-f",
    "paths",
    multiple=True,
    help="Changed file to review (repeatable). Defaults to every changed code file not excluded in config.",
)
@click.option("--context", "pr_context", default=None, help="Extra context about the PR passed to the reviewer.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON instead of panels.")
@click.pass_context
def review_cmd(ctx, repo: str, pr_id: int | None, paths: tuple[str, ...], pr_context: str | None, as_json: bool):
    """AI code review of a pull request in REPO (name or id).

    Fetches the before/after content of each selected file, builds unified
    diffs, sends everything to the model in a single request and prints the
    findings grouped by file.

    \b
    Required environment variables:
      AZURE_DEVOPS_PAT     Azure DevOps personal access token (Code: Read)
      OPENAI_API_KEY       OpenAI API key
    """
    config = get_config(ctx)
    client = build_client(ctx)
    # Built before any network call so a missing API key fails immediately.
    reviewer = build_reviewer(ctx)

    with reported_errors():
        repo_id = resolve_repo_id(client, repo)

        if pr_id is None:
            prs = client.list_pull_requests(repo_id)
            if not prs:
                console.print("[yellow]No active pull requests found.[/yellow]")
                return
            console.print("\nActive pull requests:")
            for pr in prs:
                console.print(f"  [bold]#{pr.pull_request_id}[/bold]  {pr.title}")
            pr_id = click.prompt("\nEnter the pull request id", type=int)

        selected = list(paths)
        if not selected:
            changes = client.list_changed_files(repo_id, pr_id)
            selected = default_selection(changes, config.get("exclude", []))

        if not selected:
            console.print("[yellow]No reviewable files in this pull request.[/yellow]")
            return

        if not as_json:
            console.print(f"Preparing {len(selected)} file(s) for review...")
        files = prepare_review_data(client, repo_id, pr_id, selected, max_workers=config.get("fetch_workers", 4))

    if not files:
        console.print("[yellow]None of the selected files are changed by this pull request.[/yellow]")
        return

    session = ReviewSession()
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
        transient=True,
        disable=as_json,
    ) as progress:
        task = progress.add_task(f"Reviewing {len(files)} file(s)", total=100)
        state = session.start(
            files,
            pr_context,
            partial(review_files, reviewer=reviewer),
            on_update=lambda s: progress.update(task, completed=s.progress),
        )

    if as_json:
        click.echo(json.dumps(_state_to_dict(state), indent=2))
    else:
        print_review(console, state)

    if state.failed:
        ctx.exit(1)
