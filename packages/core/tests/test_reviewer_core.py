"""Tests for the review-preparation pipeline: prepare_review_data and review_files."""

import json
from unittest.mock import MagicMock

import pytest

from adolens_core.ado.models import ChangeEntry, ChangeType, ItemRef, PullRequest, PullRequestStatus
from adolens_core.errors import EmptyResponseError, ReviewPreparationError, UpstreamError
from adolens_core.findings import Severity, group_by_file
from adolens_core.prompts import FileReviewInput, build_user_prompt
from adolens_core.providers.openai import OpenAIReviewer
from adolens_core.reviewer import default_selection, get_file_diff, prepare_review_data, review_files

PR = PullRequest(
    pull_request_id=7,
    status=PullRequestStatus.ACTIVE,
    source_ref_name="refs/heads/feature/x",
    target_ref_name="refs/heads/main",
    title="Rename variable",
)


def _change(path, change_type=ChangeType.EDIT, kind="blob"):
    return ChangeEntry(change_type=change_type, item=ItemRef(path=path, git_object_type=kind))


def make_client(changes, blobs, pr=PR):
    """Fake gateway; ``blobs`` maps (path, branch) to file text."""
    client = MagicMock()
    client.get_pull_request.return_value = pr
    client.list_changed_files.return_value = changes
    client.get_file_content.side_effect = lambda repo_id, path, version, version_type: blobs.get((path, version), "")
    return client


class StubReviewer:
    def __init__(self, raw=None, error=None):
        self.raw = raw
        self.error = error
        self.calls = []

    def review(self, files, pr_context=None):
        self.calls.append((files, pr_context))
        if self.error:
            raise self.error
        return self.raw


# ---------------------------------------------------------------------------
# prepare_review_data
# ---------------------------------------------------------------------------


class TestPrepareReviewData:
    def test_edit_builds_diff_and_full_text(self):
        client = make_client(
            [_change("/src/a.ts")],
            {("src/a.ts", "main"): "const a = 1;\n", ("src/a.ts", "feature/x"): "const b = 1;\n"},
        )
        [item] = prepare_review_data(client, "r-1", 7, ["/src/a.ts"])
        assert item.path == "/src/a.ts"
        assert item.language == "ts"
        assert item.full_text == "const b = 1;\n"
        assert "-const a = 1;" in item.diff
        assert "+const b = 1;" in item.diff
        assert "--- /src/a.ts\tbranch main" in item.diff
        assert "+++ /src/a.ts\tbranch feature/x" in item.diff

    def test_added_file_has_empty_old_side(self):
        client = make_client([_change("/new.py", ChangeType.ADD)], {("new.py", "feature/x"): "x = 1\n"})
        [item] = prepare_review_data(client, "r-1", 7, ["/new.py"])
        assert "+x = 1" in item.diff
        assert "@@ -0,0 +1 @@" in item.diff
        client.get_file_content.assert_called_once_with("r-1", "new.py", "feature/x", "branch")

    def test_deleted_file_has_empty_full_text(self):
        client = make_client([_change("/old.py", ChangeType.DELETE)], {("old.py", "main"): "x = 1\n"})
        [item] = prepare_review_data(client, "r-1", 7, ["/old.py"])
        assert item.full_text == ""
        assert "-x = 1" in item.diff

    def test_only_selected_paths_in_change_list_order(self):
        changes = [_change("/a.py"), _change("/b.py"), _change("/c.py")]
        client = make_client(changes, {})
        items = prepare_review_data(client, "r-1", 7, ["/c.py", "/a.py"])
        assert [i.path for i in items] == ["/a.py", "/c.py"]

    def test_selected_path_not_in_pr_is_ignored(self):
        client = make_client([_change("/a.py")], {})
        items = prepare_review_data(client, "r-1", 7, ["/a.py", "/ghost.py"])
        assert [i.path for i in items] == ["/a.py"]

    def test_selection_matches_with_or_without_leading_slash(self):
        client = make_client([_change("/src/a.ts"), _change("/src/b.ts")], {})
        items = prepare_review_data(client, "r-1", 7, ["src/a.ts", "/src/b.ts"])
        assert [i.path for i in items] == ["/src/a.ts", "/src/b.ts"]

    def test_empty_selection(self):
        client = make_client([_change("/a.py")], {})
        assert prepare_review_data(client, "r-1", 7, []) == []
        client.get_file_content.assert_not_called()

    def test_missing_pr_aborts(self):
        client = make_client([_change("/a.py")], {}, pr=None)
        with pytest.raises(ReviewPreparationError, match="Could not get pull request details"):
            prepare_review_data(client, "r-1", 7, ["/a.py"])
        client.list_changed_files.assert_not_called()

    def test_deterministic_prompt(self):
        changes = [_change(f"/f{i}.py") for i in range(6)]
        blobs = {(f"f{i}.py", "feature/x"): f"v = {i}\n" for i in range(6)}
        paths = [c.path for c in changes]
        first = prepare_review_data(make_client(changes, blobs), "r-1", 7, paths, max_workers=4)
        second = prepare_review_data(make_client(changes, blobs), "r-1", 7, paths, max_workers=1)
        assert build_user_prompt(first) == build_user_prompt(second)


class TestDefaultSelection:
    def test_skips_trees_binaries_and_excluded(self):
        changes = [
            _change("/src/a.ts"),
            _change("/src", kind="tree"),
            _change("/img/logo.png"),
            _change("/db/migrations/0001.sql"),
        ]
        assert default_selection(changes, ["migrations/"]) == ["/src/a.ts"]


def test_get_file_diff():
    client = make_client([], {("a.py", "main"): "old\n", ("a.py", "feature/x"): "new\n"})
    contents = get_file_diff(client, "r-1", 7, "/a.py", "edit")
    assert (contents.old_content, contents.new_content) == ("old\n", "new\n")


def test_get_file_diff_reuses_known_pr():
    client = make_client([], {("a.py", "feature/x"): "new\n"})
    get_file_diff(client, "r-1", 7, "/a.py", ChangeType.ADD, pr=PR)
    client.get_pull_request.assert_not_called()


# ---------------------------------------------------------------------------
# review_files
# ---------------------------------------------------------------------------


FILE = FileReviewInput(path="src/a.ts", language="ts", diff="@@ -1 +1 @@\n-a\n+b\n", full_text="b\n")


class TestReviewFiles:
    def test_findings_grouped_under_file(self):
        raw = json.dumps([{"file": "src/a.ts", "severity": "MAJOR", "message": "unused variable"}])
        result = review_files([FILE], None, StubReviewer(raw))
        assert result.success
        assert result.message == "Review completed for 1 files with 1 feedback items"
        grouped = group_by_file(result.reviews)
        assert list(grouped) == ["src/a.ts"]
        assert grouped["src/a.ts"][0].severity is Severity.MAJOR

    def test_context_passed_to_reviewer(self):
        reviewer = StubReviewer("[]")
        review_files([FILE], "Fixes #12", reviewer)
        assert reviewer.calls == [([FILE], "Fixes #12")]

    def test_plain_text_attributed_to_first_file(self):
        result = review_files([FILE], None, StubReviewer("Looks fine overall."))
        assert result.reviews[0].file == "src/a.ts"
        assert result.reviews[0].severity is Severity.MINOR

    def test_no_files_raises(self):
        reviewer = StubReviewer("[]")
        with pytest.raises(ValueError):
            review_files([], None, reviewer)
        assert reviewer.calls == []

    @pytest.mark.parametrize(
        "error",
        [UpstreamError("OpenAI API error: 500", status_code=500), EmptyResponseError("No content received from OpenAI")],
    )
    def test_upstream_failure_is_failed_result(self, error):
        result = review_files([FILE], None, StubReviewer(error=error))
        assert not result.success
        assert result.reviews == []
        assert result.message == f"Review failed: {error}"


def test_end_to_end_single_edit():
    """One edited file: the prompt carries path, diff and content; findings come back grouped."""
    client = make_client(
        [_change("/src/a.ts")],
        {("src/a.ts", "main"): "let a = 1;\n", ("src/a.ts", "feature/x"): "let b = 1;\n"},
    )
    files = prepare_review_data(client, "r-1", 7, ["/src/a.ts"])
    openai_client = MagicMock()
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = json.dumps(
        [{"file": "src/a.ts", "severity": "NIT", "message": "prefer const"}]
    )
    openai_client.chat.completions.create.return_value = completion
    reviewer = OpenAIReviewer(api_key="sk-test", client=openai_client)

    result = review_files(files, "Rename variable", reviewer)

    system, user = openai_client.chat.completions.create.call_args.kwargs["messages"]
    assert system["role"] == "system"
    assert user["role"] == "user"
    assert "Rename variable" in user["content"]
    assert "File: /src/a.ts" in user["content"]
    assert "Diff:\nIndex: /src/a.ts" in user["content"]
    assert "-let a = 1;" in user["content"]
    assert "+let b = 1;" in user["content"]
    assert "Full Content:\nlet b = 1;" in user["content"]
    assert result.success
    grouped = group_by_file(result.reviews)
    assert list(grouped) == ["src/a.ts"]
    assert grouped["src/a.ts"][0].severity is Severity.NIT
