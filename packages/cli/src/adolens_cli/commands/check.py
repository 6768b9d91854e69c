"""check command: verify configuration and the Azure DevOps connection."""

from __future__ import annotations

import click

from adolens_cli.common import build_client, console, get_config
from adolens_core.config import is_configured
from adolens_core.errors import GatewayError

_SHOWN_REPOS = 5


@click.command("check")
@click.pass_context
def check_cmd(ctx):
    """Report which settings are present and test the Azure DevOps API."""
    config = get_config(ctx)

    console.print("\n[bold]Configuration[/bold]")
    for key, label, secret in (
        ("organization", "AZURE_DEVOPS_ORG", False),
        ("project", "AZURE_DEVOPS_PROJECT", False),
        ("azure_devops_pat", "AZURE_DEVOPS_PAT", True),
        ("openai_api_key", "OPENAI_API_KEY", True),
    ):
        if not is_configured(config, key):
            console.print(f"  {label}: [red]NOT SET[/red]")
        elif secret:
            console.print(f"  {label}: [green]SET[/green]")
        else:
            console.print(f"  {label}: {config[key]}")

    client = build_client(ctx)
    console.print("\nTesting API connection...")
    try:
        repos = client.list_repositories()
    except GatewayError as e:
        console.print(f"[red]Connection failed: {e}[/red]")
        console.print(
            "\nPossible issues:\n"
            "  1. Invalid organization or project name\n"
            "  2. Invalid or expired personal access token\n"
            "  3. Network connectivity issues\n"
            "  4. Insufficient permissions for the token"
        )
        ctx.exit(1)

    console.print(f"[green]Connection successful![/green] Found {len(repos)} repositories")
    for repo in repos[:_SHOWN_REPOS]:
        console.print(f"  - {repo.name} (ID: {repo.id})")
    if len(repos) > _SHOWN_REPOS:
        console.print(f"  ... and {len(repos) - _SHOWN_REPOS} more")
