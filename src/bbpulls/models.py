from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, ClassVar


class PullRequestState(StrEnum):
    OPEN = "OPEN"
    DECLINED = "DECLINED"
    MERGED = "MERGED"
    SUPERSEDED = "SUPERSEDED"


class MergeStrategy(StrEnum):
    MERGE_COMMIT = "merge_commit"
    SQUASH = "squash"
    FAST_FORWARD = "fast_forward"


@dataclass(frozen=True)
class User:
    nickname: str | None = None
    display_name: str | None = None
    uuid: str | None = None
    account_id: str | None = None


@dataclass(frozen=True)
class Branch:
    name: str


@dataclass(frozen=True)
class Endpoint:
    branch: Branch
    commit_hash: str | None = None
    repository: str | None = None


@dataclass(frozen=True)
class PullRequest:
    title: str
    source: Endpoint
    id: int | None = None
    state: PullRequestState | str | None = None
    author: User | None = None
    destination: Endpoint | None = None
    description: str = ""
    close_source_branch: bool = False
    created_on: datetime | None = None
    updated_on: datetime | None = None


@dataclass(frozen=True)
class Content:
    raw: str
    markup: str | None = None
    html: str | None = None


@dataclass(frozen=True)
class Comment:
    id: int
    content: Content
    user: User | None = None
    created_on: datetime | None = None
    updated_on: datetime | None = None
    deleted: bool = False
    parent_id: int | None = None
    inline_path: str | None = None


@dataclass(frozen=True)
class Commit:
    hash: str
    message: str
    date: datetime | None = None
    author: str | None = None


@dataclass(frozen=True)
class Approval:
    approved: bool
    user: User | None = None
    role: str | None = None
    date: datetime | None = None


@dataclass(frozen=True)
class Update:
    state: PullRequestState | str | None = None
    title: str | None = None
    description: str | None = None
    reason: str | None = None
    date: datetime | None = None
    author: User | None = None


# Activity variants: exactly one event group per instance, tagged by ``kind``.


@dataclass(frozen=True)
class UpdateActivity:
    kind: ClassVar[str] = "update"
    update: Update
    pull_request: PullRequest | None = None


@dataclass(frozen=True)
class CommentActivity:
    kind: ClassVar[str] = "comment"
    comment: Comment
    pull_request: PullRequest | None = None


@dataclass(frozen=True)
class ApprovalActivity:
    kind: ClassVar[str] = "approval"
    approval: Approval
    pull_request: PullRequest | None = None


@dataclass(frozen=True)
class SnapshotActivity:
    kind: ClassVar[str] = "snapshot"
    pull_request: PullRequest


@dataclass(frozen=True)
class OtherActivity:
    """An event group this client has no model for, such as ``changes_requested``."""

    kind: ClassVar[str] = "other"
    event: str
    payload: dict[str, Any]
    pull_request: PullRequest | None = None


Activity = UpdateActivity | CommentActivity | ApprovalActivity | SnapshotActivity | OtherActivity
