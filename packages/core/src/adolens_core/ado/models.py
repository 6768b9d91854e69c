"""Typed snapshots of Azure DevOps REST payloads.

The REST API omits fields freely (a repository with no pushes has no
``defaultBranch``, a PR without reviewers has no ``reviewers`` key). Each
``from_api`` constructor is the decode boundary: every optional field gets an
explicit default here so downstream code never sees ``None`` where it expects
a string or number. A payload that is not a JSON object at all raises
DecodeError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from adolens_core.errors import DecodeError

BRANCH_PREFIX = "refs/heads/"


class PullRequestStatus(str, Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"
    COMPLETED = "completed"


class ChangeType(str, Enum):
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"

    @classmethod
    def parse(cls, raw) -> ChangeType:
        """Map an API change type onto add/edit/delete.

        Azure DevOps reports compound values such as ``"edit, rename"``. A
        delete always wins, then add; renames and anything else are edits.
        """
        value = str(raw or "").lower()
        if "delete" in value:
            return cls.DELETE
        if "add" in value:
            return cls.ADD
        return cls.EDIT


def _obj(data, what: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _str(value, default: str = "") -> str:
    return str(value) if value not in (None, "") else default


def _int(value, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def strip_branch_ref(ref_name: str) -> str:
    """``refs/heads/feature/x`` -> ``feature/x``; other refs are returned unchanged."""
    return ref_name[len(BRANCH_PREFIX) :] if ref_name.startswith(BRANCH_PREFIX) else ref_name


@dataclass(frozen=True)
class ProjectRef:
    id: str = ""
    name: str = ""

    @classmethod
    def from_api(cls, data) -> ProjectRef:
        data = _obj(data, "project")
        return cls(id=_str(data.get("id")), name=_str(data.get("name")))


@dataclass(frozen=True)
class Repository:
    id: str
    name: str
    url: str = ""
    project: ProjectRef = field(default_factory=ProjectRef)
    default_branch: str = "refs/heads/main"
    size: int = 0
    remote_url: str = ""
    ssh_url: str = ""
    web_url: str = ""
    last_update_time: str = ""

    @classmethod
    def from_api(cls, data) -> Repository:
        data = _obj(data, "repository")
        return cls(
            id=_str(data.get("id")),
            name=_str(data.get("name")),
            url=_str(data.get("url")),
            project=ProjectRef.from_api(data.get("project")),
            default_branch=_str(data.get("defaultBranch"), "refs/heads/main"),
            size=_int(data.get("size")),
            remote_url=_str(data.get("remoteUrl")),
            ssh_url=_str(data.get("sshUrl")),
            web_url=_str(data.get("webUrl")),
            last_update_time=_str(data.get("lastUpdateTime"), _now_iso()),
        )


@dataclass(frozen=True)
class IdentityRef:
    display_name: str = ""
    url: str = ""
    id: str = ""
    unique_name: str = ""
    image_url: str = ""

    @classmethod
    def from_api(cls, data) -> IdentityRef:
        data = _obj(data, "identity")
        return cls(
            display_name=_str(data.get("displayName")),
            url=_str(data.get("url")),
            id=_str(data.get("id")),
            unique_name=_str(data.get("uniqueName")),
            image_url=_str(data.get("imageUrl")),
        )


@dataclass(frozen=True)
class Reviewer(IdentityRef):
    reviewer_url: str = ""
    vote: int = 0

    @classmethod
    def from_api(cls, data) -> Reviewer:
        data = _obj(data, "reviewer")
        return cls(
            display_name=_str(data.get("displayName")),
            url=_str(data.get("url")),
            id=_str(data.get("id")),
            unique_name=_str(data.get("uniqueName")),
            image_url=_str(data.get("imageUrl")),
            reviewer_url=_str(data.get("reviewerUrl")),
            vote=_int(data.get("vote")),
        )


@dataclass(frozen=True)
class CommitRef:
    commit_id: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, data) -> CommitRef:
        data = _obj(data, "commit")
        return cls(commit_id=_str(data.get("commitId")), url=_str(data.get("url")))


@dataclass(frozen=True)
class PullRequest:
    pull_request_id: int
    status: PullRequestStatus
    source_ref_name: str
    target_ref_name: str
    title: str = ""
    description: str = ""
    code_review_id: int = 0
    created_by: IdentityRef = field(default_factory=IdentityRef)
    creation_date: str = ""
    merge_status: str = ""
    is_draft: bool = False
    merge_id: str = ""
    last_merge_source_commit: CommitRef = field(default_factory=CommitRef)
    last_merge_target_commit: CommitRef = field(default_factory=CommitRef)
    reviewers: tuple[Reviewer, ...] = ()
    url: str = ""

    @property
    def source_branch(self) -> str:
        return strip_branch_ref(self.source_ref_name)

    @property
    def target_branch(self) -> str:
        return strip_branch_ref(self.target_ref_name)

    @classmethod
    def from_api(cls, data) -> PullRequest:
        data = _obj(data, "pull request")
        try:
            status = PullRequestStatus(str(data.get("status") or "active").lower())
        except ValueError:
            raise DecodeError(f"Unknown pull request status: {data.get('status')!r}")
        return cls(
            pull_request_id=_int(data.get("pullRequestId")),
            status=status,
            source_ref_name=_str(data.get("sourceRefName")),
            target_ref_name=_str(data.get("targetRefName")),
            title=_str(data.get("title")),
            description=_str(data.get("description")),
            code_review_id=_int(data.get("codeReviewId")),
            created_by=IdentityRef.from_api(data.get("createdBy")),
            creation_date=_str(data.get("creationDate")),
            merge_status=_str(data.get("mergeStatus")),
            is_draft=bool(data.get("isDraft") or False),
            merge_id=_str(data.get("mergeId")),
            last_merge_source_commit=CommitRef.from_api(data.get("lastMergeSourceCommit")),
            last_merge_target_commit=CommitRef.from_api(data.get("lastMergeTargetCommit")),
            reviewers=tuple(Reviewer.from_api(r) for r in data.get("reviewers") or []),
            url=_str(data.get("url")),
        )


@dataclass(frozen=True)
class ItemRef:
    path: str = ""
    git_object_type: str = "blob"
    url: str = ""

    @classmethod
    def from_api(cls, data) -> ItemRef:
        data = _obj(data, "change item")
        return cls(
            path=_str(data.get("path")),
            git_object_type=_str(data.get("gitObjectType"), "blob"),
            url=_str(data.get("url")),
        )


@dataclass(frozen=True)
class InlineContent:
    content: str = ""
    content_type: str = "text/plain"


@dataclass(frozen=True)
class ChangeEntry:
    change_type: ChangeType
    item: ItemRef
    new_content: InlineContent | None = None

    @property
    def path(self) -> str:
        return self.item.path

    @property
    def is_blob(self) -> bool:
        return self.item.git_object_type == "blob"

    @classmethod
    def from_api(cls, data) -> ChangeEntry:
        data = _obj(data, "change entry")
        new_content = None
        raw_content = data.get("newContent")
        if isinstance(raw_content, dict):
            new_content = InlineContent(
                content=_str(raw_content.get("content")),
                content_type=_str(raw_content.get("contentType"), "text/plain"),
            )
        return cls(
            change_type=ChangeType.parse(data.get("changeType")),
            item=ItemRef.from_api(data.get("item")),
            new_content=new_content,
        )
