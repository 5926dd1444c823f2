"""Turn Bitbucket JSON payloads into model objects, and drafts back into payloads.

Unknown fields are ignored so newer API responses keep parsing.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from .errors import ResponseFormatError
from .models import (
    Activity,
    Approval,
    ApprovalActivity,
    Branch,
    Comment,
    CommentActivity,
    Commit,
    Content,
    Endpoint,
    OtherActivity,
    PullRequest,
    PullRequestState,
    SnapshotActivity,
    Update,
    UpdateActivity,
    User,
)


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    # Bitbucket emits both "+00:00" offsets and a trailing "Z"
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def parse_state(value: str | None) -> PullRequestState | str | None:
    if not value:
        return None
    try:
        return PullRequestState(value)
    except ValueError:
        # states added server-side are kept verbatim
        return value


def parse_user(node: dict[str, Any] | None) -> User | None:
    if not node:
        return None
    return User(
        nickname=node.get("nickname") or node.get("username"),
        display_name=node.get("display_name"),
        uuid=node.get("uuid"),
        account_id=node.get("account_id"),
    )


def parse_endpoint(node: dict[str, Any] | None) -> Endpoint | None:
    if not node or not node.get("branch"):
        return None
    commit = node.get("commit") or {}
    repository = node.get("repository") or {}
    return Endpoint(
        branch=Branch(name=node["branch"]["name"]),
        commit_hash=commit.get("hash"),
        repository=repository.get("full_name"),
    )


def parse_pull_request(node: dict[str, Any]) -> PullRequest:
    source = parse_endpoint(node.get("source"))
    return PullRequest(
        id=node.get("id"),
        title=node.get("title", ""),
        state=parse_state(node.get("state")),
        author=parse_user(node.get("author")),
        # activity snapshots only carry id, title and links
        source=source if source is not None else Endpoint(branch=Branch(name="")),
        destination=parse_endpoint(node.get("destination")),
        description=node.get("description") or "",
        close_source_branch=bool(node.get("close_source_branch", False)),
        created_on=parse_datetime(node.get("created_on")),
        updated_on=parse_datetime(node.get("updated_on")),
    )


def parse_content(node: dict[str, Any] | None) -> Content:
    node = node or {}
    return Content(
        raw=node.get("raw") or "",
        markup=node.get("markup"),
        html=node.get("html"),
    )


def parse_comment(node: dict[str, Any]) -> Comment:
    parent = node.get("parent") or {}
    inline = node.get("inline") or {}
    return Comment(
        id=node["id"],
        content=parse_content(node.get("content")),
        user=parse_user(node.get("user")),
        created_on=parse_datetime(node.get("created_on")),
        updated_on=parse_datetime(node.get("updated_on")),
        deleted=bool(node.get("deleted", False)),
        parent_id=parent.get("id"),
        inline_path=inline.get("path"),
    )


def parse_commit(node: dict[str, Any]) -> Commit:
    author = node.get("author") or {}
    return Commit(
        hash=node["hash"],
        message=node.get("message", ""),
        date=parse_datetime(node.get("date")),
        author=author.get("raw"),
    )


def parse_approval(node: dict[str, Any]) -> Approval:
    """Parse either a participant (the /approve answer) or an activity approval.

    Participants report ``approved`` and ``participated_on``; approvals in the
    activity log only have ``date`` and are approved by definition.
    """
    return Approval(
        approved=bool(node.get("approved", True)),
        user=parse_user(node.get("user")),
        role=node.get("role"),
        date=parse_datetime(node.get("participated_on") or node.get("date")),
    )


def parse_update(node: dict[str, Any]) -> Update:
    return Update(
        state=parse_state(node.get("state")),
        title=node.get("title"),
        description=node.get("description"),
        reason=node.get("reason") or None,
        date=parse_datetime(node.get("date")),
        author=parse_user(node.get("author")),
    )


_ACTIVITY_ENVELOPE = frozenset({"pull_request", "type", "links"})


def parse_activity(node: dict[str, Any]) -> Activity:
    snapshot = node.get("pull_request")
    pull_request = parse_pull_request(snapshot) if snapshot else None

    groups = [key for key, value in node.items() if key not in _ACTIVITY_ENVELOPE and value]
    if len(groups) > 1:
        raise ResponseFormatError(f"Activity carries several event groups: {', '.join(groups)}")

    if node.get("update"):
        return UpdateActivity(update=parse_update(node["update"]), pull_request=pull_request)
    if node.get("comment"):
        return CommentActivity(comment=parse_comment(node["comment"]), pull_request=pull_request)
    if node.get("approval"):
        return ApprovalActivity(approval=parse_approval(node["approval"]), pull_request=pull_request)
    if groups:
        return OtherActivity(event=groups[0], payload=node[groups[0]], pull_request=pull_request)
    if pull_request is None:
        raise ResponseFormatError("Activity carries no event group and no pull request snapshot")
    return SnapshotActivity(pull_request=pull_request)


def _endpoint_payload(endpoint: Endpoint) -> dict[str, Any]:
    payload: dict[str, Any] = {"branch": {"name": endpoint.branch.name}}
    if endpoint.commit_hash:
        payload["commit"] = {"hash": endpoint.commit_hash}
    if endpoint.repository:
        payload["repository"] = {"full_name": endpoint.repository}
    return payload


def dump_pull_request(pull_request: PullRequest) -> dict[str, Any]:
    """Build the request body for creating a pull request.

    Server-owned fields (id, state, author, timestamps) are never sent.
    """
    payload: dict[str, Any] = {
        "title": pull_request.title,
        "source": _endpoint_payload(pull_request.source),
        "close_source_branch": pull_request.close_source_branch,
    }
    if pull_request.description:
        payload["description"] = pull_request.description
    if pull_request.destination is not None:
        payload["destination"] = _endpoint_payload(pull_request.destination)
    return payload


def dump_pull_request_update(pull_request: PullRequest) -> dict[str, Any]:
    """Build the PUT body for an existing pull request.

    Only title, description and destination are sent. The description is
    always sent so it can be cleared.
    """
    payload: dict[str, Any] = {
        "title": pull_request.title,
        "description": pull_request.description,
    }
    if pull_request.destination is not None:
        payload["destination"] = _endpoint_payload(pull_request.destination)
    return payload
