from __future__ import annotations

from dataclasses import dataclass

from adolens_core.ado.models import ChangeType


@dataclass(frozen=True)
class FileContents:
    old_content: str = ""
    new_content: str = ""


def normalize_path(path: str) -> str:
    """Drop the leading separator the changes API puts on every item path."""
    return path[1:] if path.startswith("/") else path


def resolve_contents(
    client,
    repo_id: str,
    path: str,
    change_type: ChangeType | str,
    source_branch: str,
    target_branch: str,
) -> FileContents:
    """Fetch the before/after text of one changed file.

    ``old`` comes from the target branch and ``new`` from the source branch.
    An added file has no old side and a deleted file has no new side; those
    sides are never fetched. A failed fetch yields "" for that side only
    (see AzureDevOpsClient.get_file_content) so one missing blob never blocks
    the rest of the review.
    """
    change_type = ChangeType(change_type)
    key = normalize_path(path)
    old_content = ""
    new_content = ""
    if change_type in (ChangeType.EDIT, ChangeType.DELETE):
        old_content = client.get_file_content(repo_id, key, target_branch, "branch")
    if change_type in (ChangeType.EDIT, ChangeType.ADD):
        new_content = client.get_file_content(repo_id, key, source_branch, "branch")
    return FileContents(old_content=old_content, new_content=new_content)
