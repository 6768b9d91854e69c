"""CLI entry point for adolens.

Commands:
  repos: list repositories in the configured project
  prs: list active pull requests of a repository
  files: list files changed by a pull request's latest iteration
  diff: show the diff of one changed file
  review: run an AI review on selected files of a pull request
  init: interactive setup wizard
  check: verify the Azure DevOps connection
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from adolens_cli.commands.browse import files_cmd, prs_cmd, repos_cmd
from adolens_cli.commands.check import check_cmd
from adolens_cli.commands.diff import diff_cmd
from adolens_cli.commands.init import init_cmd
from adolens_cli.commands.review import review_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Keep transport chatter out of --verbose output.
    for noisy in ("urllib3", "httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("adolens"),
    prog_name="adolens",
)
@click.option(
    "--config",
    "config_path",
    default=".adolens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="ADOLENS_CONFIG",
)
@click.option("--org", "organization", default=None, help="Azure DevOps organization. Overrides config file.")
@click.option("--project", default=None, help="Azure DevOps project. Overrides config file.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, organization: str | None, project: str | None, verbose: bool):
    """Browse Azure DevOps pull requests and request AI code reviews."""
    from adolens_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path, cli_overrides={"organization": organization, "project": project})
    ctx.obj["config_path"] = config_path


main.add_command(repos_cmd)
main.add_command(prs_cmd)
main.add_command(files_cmd)
main.add_command(diff_cmd)
main.add_command(review_cmd)
main.add_command(init_cmd)
main.add_command(check_cmd)
