from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from ..models import (
    ApprovalActivity,
    Comment,
    CommentActivity,
    Commit,
    OtherActivity,
    PullRequest,
    SnapshotActivity,
    UpdateActivity,
    User,
)


def _who(user: User | None) -> str:
    if user is None:
        return "unknown"
    return user.nickname or user.display_name or "unknown"


def _when(value: datetime | None) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ") if value else "-"


def _pull_request_lines(pr: PullRequest) -> list[str]:
    lines = [f"## PR #{pr.id} — {pr.title}", ""]
    lines.append("| Field | Value |")
    lines.append("| --- | --- |")
    lines.append(f"| Author | {_who(pr.author)} |")
    lines.append(f"| State | {pr.state or '-'} |")
    lines.append(f"| Source | {pr.source.branch.name} |")
    if pr.destination is not None:
        lines.append(f"| Destination | {pr.destination.branch.name} |")
    lines.append(f"| Created | {_when(pr.created_on)} |")
    lines.append(f"| Updated | {_when(pr.updated_on)} |")
    lines.append("")
    if pr.description:
        lines.append(pr.description)
        lines.append("")
    return lines


def _activity_line(activity: Any) -> str:
    if isinstance(activity, UpdateActivity):
        update = activity.update
        return f"- {_when(update.date)} **update** by @{_who(update.author)}: state {update.state or '-'}"
    if isinstance(activity, ApprovalActivity):
        approval = activity.approval
        return f"- {_when(approval.date)} **approval** by @{_who(approval.user)}"
    if isinstance(activity, CommentActivity):
        comment = activity.comment
        return f"- {_when(comment.created_on)} **comment** by @{_who(comment.user)}: {comment.content.raw}"
    if isinstance(activity, SnapshotActivity):
        return f"- **snapshot** of PR #{activity.pull_request.id}"
    if isinstance(activity, OtherActivity):
        return f"- **{activity.event}** (not modelled)"
    raise TypeError(f"Not an activity: {activity!r}")


def _comment_lines(comment: Comment) -> list[str]:
    header = f"#### Comment {comment.id} by @{_who(comment.user)} — {_when(comment.created_on)}"
    lines = [header, ""]
    if comment.inline_path:
        lines.append(f"**File:** `{comment.inline_path}`")
        lines.append("")
    lines.append("*deleted*" if comment.deleted else comment.content.raw)
    lines.append("")
    return lines


def _commit_line(commit: Commit) -> str:
    summary = commit.message.splitlines()[0] if commit.message else ""
    return f"- `{commit.hash[:12]}` {summary}"


def format_markdown(items: Sequence[Any], owner_repo: str = "") -> str:
    now = datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    title = f"Bitbucket: {owner_repo}" if owner_repo else "Bitbucket"
    lines: list[str] = [f"# {title}", f"> {len(items)} items · Generated: {now}", ""]

    for item in items:
        if isinstance(item, PullRequest):
            lines.extend(_pull_request_lines(item))
        elif isinstance(item, Comment):
            lines.extend(_comment_lines(item))
        elif isinstance(item, Commit):
            lines.append(_commit_line(item))
        else:
            lines.append(_activity_line(item))

    return "\n".join(lines)
