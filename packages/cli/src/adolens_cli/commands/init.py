"""init command: interactive setup wizard.

Writes the non-secret settings (organization, project, model) to
.adolens.yml. Secrets stay in the environment and are only listed here so
the user knows what to export.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click
import yaml

from adolens_cli.common import console

_SECRETS = {
    "AZURE_DEVOPS_PAT": "Azure DevOps personal access token with Code (Read) scope",
    "OPENAI_API_KEY": "OpenAI API key used for reviews",
}


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Set up adolens for an Azure DevOps project."""
    console.print("\n[bold cyan]adolens init[/bold cyan] setup wizard\n")

    detected = _detect_project_from_git()
    if detected:
        console.print(f"[dim]Detected Azure DevOps remote: {detected[0]}/{detected[1]}[/dim]")
    default_org, default_project = detected or (None, None)

    organization = click.prompt("Azure DevOps organization", default=default_org)
    project = click.prompt("Azure DevOps project", default=default_project)
    model = click.prompt("OpenAI model", default="gpt-4")

    config_path = Path(ctx.obj.get("config_path", ".adolens.yml") if ctx.obj else ".adolens.yml")
    _write_config(config_path, {"organization": organization, "project": project, "model": model})
    console.print(f"[green]Created {config_path}[/green]")

    console.print("\n[bold]Next steps:[/bold] export these environment variables (never commit them):")
    for name, description in _SECRETS.items():
        console.print(f"  [bold]{name}[/bold]  {description}")
    console.print("\nThen verify the connection with: [bold]adolens check[/bold]")


def _detect_project_from_git() -> tuple[str, str] | None:
    """Try to detect organization and project from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return parse_remote_url(result.stdout.strip())


def parse_remote_url(url: str) -> tuple[str, str] | None:
    """Extract (organization, project) from an Azure DevOps remote.

    https://dev.azure.com/org/project/_git/repo      →  (org, project)
    https://user@dev.azure.com/org/project/_git/repo →  (org, project)
    git@ssh.dev.azure.com:v3/org/project/repo        →  (org, project)
    """
    if "dev.azure.com" not in url:
        return None
    tail = url.split("dev.azure.com", 1)[1].lstrip("/:")
    parts = [p for p in tail.split("/") if p]
    if parts and parts[0] == "v3":
        parts = parts[1:]
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
