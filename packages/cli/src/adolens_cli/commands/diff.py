"""diff command: show one changed file as a unified diff."""

from __future__ import annotations

import click

from adolens_cli.common import build_client, console, reported_errors, resolve_repo_id
from adolens_cli.render import print_diff
from adolens_core.ado.content import normalize_path
from adolens_core.ado.models import ChangeType
from adolens_core.errors import ReviewPreparationError
from adolens_core.reviewer import get_file_diff
from adolens_core.utils.diff import create_patch


@click.command("diff")
@click.argument("repo")
@click.argument("pr_id", type=int)
@click.argument("path")
@click.option(
    "--change-type",
    type=click.Choice([c.value for c in ChangeType]),
    default=None,
    help="Change type of the file. Looked up from the pull request when omitted.",
)
@click.pass_context
def diff_cmd(ctx, repo: str, pr_id: int, path: str, change_type: str | None):
    """Show the diff of PATH in pull request PR_ID of REPO."""
    client = build_client(ctx)
    with reported_errors():
        repo_id = resolve_repo_id(client, repo)
        pr = client.get_pull_request(repo_id, pr_id)
        if pr is None:
            raise ReviewPreparationError(f"Could not get pull request {pr_id}")
        if change_type is None:
            changes = client.list_changed_files(repo_id, pr_id)
            match = next((c for c in changes if normalize_path(c.path) == normalize_path(path)), None)
            if match is None:
                raise click.BadParameter(f"{path} is not changed by pull request {pr_id}.", param_hint="PATH")
            change_type = match.change_type.value
        contents = get_file_diff(client, repo_id, pr_id, path, change_type, pr=pr)

    patch = create_patch(
        path,
        contents.old_content,
        contents.new_content,
        f"branch {pr.target_branch}",
        f"branch {pr.source_branch}",
    )
    print_diff(console, patch)
