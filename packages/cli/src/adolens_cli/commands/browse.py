"""repos / prs / files commands: browse what can be reviewed."""

from __future__ import annotations

import click

from adolens_cli.common import build_client, console, reported_errors, resolve_repo_id
from adolens_cli.render import changes_table, pull_requests_table, repositories_table


@click.command("repos")
@click.pass_context
def repos_cmd(ctx):
    """List repositories in the configured project."""
    client = build_client(ctx)
    with reported_errors():
        repos = client.list_repositories()
    if not repos:
        console.print("[yellow]No repositories found.[/yellow]")
        return
    console.print(repositories_table(repos))


@click.command("prs")
@click.argument("repo")
@click.pass_context
def prs_cmd(ctx, repo: str):
    """List active pull requests of REPO (name or id)."""
    client = build_client(ctx)
    with reported_errors():
        prs = client.list_pull_requests(resolve_repo_id(client, repo))
    if not prs:
        console.print("[yellow]No active pull requests found.[/yellow]")
        return
    console.print(pull_requests_table(prs))


@click.command("files")
@click.argument("repo")
@click.argument("pr_id", type=int)
@click.pass_context
def files_cmd(ctx, repo: str, pr_id: int):
    """List files changed by pull request PR_ID of REPO."""
    client = build_client(ctx)
    with reported_errors():
        changes = client.list_changed_files(resolve_repo_id(client, repo), pr_id)
    if not changes:
        console.print("[yellow]The pull request has no iterations yet.[/yellow]")
        return
    console.print(changes_table(changes))
