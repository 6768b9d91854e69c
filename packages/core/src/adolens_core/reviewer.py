"""Review-preparation pipeline.

    prepare_review_data: PR + changes → per-file contents → diff → FileReviewInput
    review_files:        FileReviewInput[] → one model call → parsed findings

These are the operations the presentation layer calls; everything they need
(gateway client, reviewer) is passed in, so nothing here holds state between
requests.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from adolens_core.ado.content import FileContents, normalize_path, resolve_contents
from adolens_core.ado.models import ChangeEntry, ChangeType, PullRequest
from adolens_core.errors import EmptyResponseError, ReviewPreparationError, UpstreamError
from adolens_core.findings import ReviewResult, parse_review_chunks
from adolens_core.prompts import FileReviewInput
from adolens_core.utils.code import detect_language, is_code_file, is_excluded
from adolens_core.utils.diff import create_patch

logger = logging.getLogger(__name__)

_DEFAULT_WORKERS = 4


def _require_pull_request(client, repo_id: str, pr_id: int | str) -> PullRequest:
    pr = client.get_pull_request(repo_id, pr_id)
    if pr is None:
        raise ReviewPreparationError("Could not get pull request details")
    return pr


def default_selection(changes: list[ChangeEntry], exclude_patterns: list[str] | None = None) -> list[str]:
    """Paths reviewed when the user has not picked files: code blobs not excluded."""
    patterns = exclude_patterns or []
    return [
        c.path for c in changes if c.is_blob and is_code_file(c.path) and not is_excluded(c.path, patterns)
    ]


def build_file_review_input(
    change: ChangeEntry, contents: FileContents, source_branch: str, target_branch: str
) -> FileReviewInput:
    patch = create_patch(
        change.path,
        contents.old_content,
        contents.new_content,
        f"branch {target_branch}",
        f"branch {source_branch}",
    )
    return FileReviewInput(
        path=change.path,
        language=detect_language(change.path),
        diff=patch,
        full_text=contents.new_content,
    )


def prepare_review_data(
    client,
    repo_id: str,
    pr_id: int | str,
    selected_paths: list[str],
    max_workers: int = _DEFAULT_WORKERS,
) -> list[FileReviewInput]:
    """Build one FileReviewInput per selected path that the PR actually changes.

    Output follows the order of the PR's change list. Content fetches are
    independent reads, so they run on a thread pool; ``Executor.map`` returns
    results in submission order, keeping the prompt deterministic.
    """
    pr = _require_pull_request(client, repo_id, pr_id)
    changes = client.list_changed_files(repo_id, pr_id)
    # "src/a.ts" and "/src/a.ts" name the same file.
    wanted = {normalize_path(p) for p in selected_paths}
    selected = [c for c in changes if normalize_path(c.path) in wanted]

    missing = wanted - {normalize_path(c.path) for c in selected}
    if missing:
        logger.warning("Ignoring %d selected path(s) not in the latest iteration: %s", len(missing), sorted(missing))

    source_branch = pr.source_branch
    target_branch = pr.target_branch

    def _resolve(change: ChangeEntry) -> FileReviewInput:
        contents = resolve_contents(client, repo_id, change.path, change.change_type, source_branch, target_branch)
        return build_file_review_input(change, contents, source_branch, target_branch)

    if not selected:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(selected)))) as executor:
        return list(executor.map(_resolve, selected))


def get_file_diff(
    client,
    repo_id: str,
    pr_id: int | str,
    path: str,
    change_type: ChangeType | str,
    pr: PullRequest | None = None,
) -> FileContents:
    """Before/after content of a single file, for side-by-side diff display.

    ``pr`` may be passed when the caller already fetched it.
    """
    if pr is None:
        pr = _require_pull_request(client, repo_id, pr_id)
    return resolve_contents(client, repo_id, path, change_type, pr.source_branch, pr.target_branch)


def review_files(files: list[FileReviewInput], pr_context: str | None, reviewer) -> ReviewResult:
    """Run one model review over ``files`` and parse the response.

    Upstream failures are reported as an unsuccessful ReviewResult rather than
    raised, so the caller always has a readable message to show.
    """
    if not files:
        raise ValueError("No files provided for review")

    try:
        raw = reviewer.review(files, pr_context)
    except (UpstreamError, EmptyResponseError) as e:
        logger.error("Review error: %s", e)
        return ReviewResult(success=False, message=f"Review failed: {e}", reviews=[])

    findings = parse_review_chunks(raw, default_file=files[0].path)
    return ReviewResult(
        success=True,
        message=f"Review completed for {len(files)} files with {len(findings)} feedback items",
        reviews=findings,
    )
