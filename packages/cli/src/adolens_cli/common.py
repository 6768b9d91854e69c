"""Helpers shared by the CLI commands."""

from __future__ import annotations

from contextlib import contextmanager

import click
from rich.console import Console

from adolens_core.ado.client import AzureDevOpsClient
from adolens_core.errors import AdolensError, ConfigurationError
from adolens_core.providers.openai import OpenAIReviewer

console = Console()


def get_config(ctx: click.Context) -> dict:
    return ctx.obj["config"]


def build_client(ctx: click.Context) -> AzureDevOpsClient:
    try:
        return AzureDevOpsClient.from_config(get_config(ctx))
    except ConfigurationError as e:
        raise click.UsageError(f"{e}\nRun `adolens init` or set AZURE_DEVOPS_ORG / AZURE_DEVOPS_PROJECT / AZURE_DEVOPS_PAT.")


def build_reviewer(ctx: click.Context) -> OpenAIReviewer:
    try:
        return OpenAIReviewer.from_config(get_config(ctx))
    except ConfigurationError as e:
        raise click.UsageError(str(e))


def resolve_repo_id(client: AzureDevOpsClient, repo: str) -> str:
    """Accept a repository name (as in dashboard URLs) or a repository id."""
    found = client.get_repository_by_name(repo)
    return found.id if found else repo


@contextmanager
def reported_errors():
    """Show pipeline errors as one readable line and exit non-zero."""
    try:
        yield
    except ConfigurationError as e:
        raise click.UsageError(str(e))
    except AdolensError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)
