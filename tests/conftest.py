"""Shared factories and fixtures for the test suite."""
from __future__ import annotations

import pytest

from bbpulls.client import BitbucketClient
from bbpulls.models import (
    Approval,
    ApprovalActivity,
    Branch,
    Comment,
    Content,
    Commit,
    Endpoint,
    PullRequest,
    PullRequestState,
    Update,
    UpdateActivity,
    User,
)
from bbpulls.parsers import parse_datetime

API = "https://api.bitbucket.org/2.0"
REPO_PATH = f"{API}/repositories/owner/repo"
PR_PATH = f"{REPO_PATH}/pullrequests/2"

# ---------------------------------------------------------------------------
# JSON node factories — return raw dicts that mirror API responses
# ---------------------------------------------------------------------------


def user_node(nickname: str = "alice", display_name: str = "Alice") -> dict:
    return {
        "type": "user",
        "nickname": nickname,
        "display_name": display_name,
        "uuid": "{1234}",
        "account_id": "557058:abcd",
        "links": {"avatar": {"href": "https://avatar"}},
    }


def endpoint_node(branch: str = "feature", commit: str | None = "abc123def456") -> dict:
    node: dict = {
        "branch": {"name": branch},
        "repository": {"full_name": "owner/repo", "type": "repository"},
    }
    if commit:
        node["commit"] = {"hash": commit, "type": "commit"}
    return node


def pr_node(
    id: int = 2,
    title: str = "Fix bug",
    state: str = "OPEN",
    author: str | None = "alice",
    source: str = "feature",
    destination: str | None = "main",
    description: str = "",
) -> dict:
    return {
        "type": "pullrequest",
        "id": id,
        "title": title,
        "state": state,
        "description": description,
        "author": user_node(author) if author else None,
        "source": endpoint_node(source),
        "destination": endpoint_node(destination) if destination else None,
        "close_source_branch": False,
        "created_on": "2024-01-01T00:00:00.000000+00:00",
        "updated_on": "2024-01-02T00:00:00.000000+00:00",
        "comment_count": 0,
        "task_count": 0,
    }


def snapshot_node(id: int = 2, title: str = "Fix bug") -> dict:
    return {"type": "pullrequest", "id": id, "title": title, "links": {}}


def comment_node(
    id: int = 53789,
    raw: str = "Looks good",
    user: str = "reviewer",
    inline_path: str | None = None,
    parent_id: int | None = None,
) -> dict:
    node: dict = {
        "type": "pullrequest_comment",
        "id": id,
        "content": {"raw": raw, "markup": "markdown", "html": f"<p>{raw}</p>", "type": "rendered"},
        "user": user_node(user),
        "created_on": "2024-01-01T10:00:00.000000+00:00",
        "updated_on": "2024-01-01T10:00:00.000000+00:00",
        "deleted": False,
    }
    if inline_path:
        node["inline"] = {"path": inline_path, "to": 3, "from": None}
    if parent_id:
        node["parent"] = {"id": parent_id}
    return node


def commit_node(hash: str = "abc123def4567890", message: str = "Update the docstring") -> dict:
    return {
        "type": "commit",
        "hash": hash,
        "message": message,
        "date": "2024-01-01T09:00:00+00:00",
        "author": {"raw": "Alice <alice@example.com>", "type": "author"},
    }


def participant_node(nickname: str = "alice", approved: bool = True) -> dict:
    return {
        "type": "participant",
        "user": user_node(nickname),
        "role": "PARTICIPANT",
        "approved": approved,
        "state": "approved" if approved else None,
        "participated_on": "2024-01-03T12:00:00.000000+00:00",
    }


def update_activity_node(state: str = "OPEN", date: str = "2024-01-01T00:00:00+00:00") -> dict:
    return {
        "update": {
            "state": state,
            "title": "Fix bug",
            "description": "",
            "reason": "",
            "date": date,
            "author": user_node(),
            "source": endpoint_node("feature"),
            "destination": endpoint_node("main"),
        },
        "pull_request": snapshot_node(),
    }


def approval_activity_node(nickname: str = "alice", date: str = "2024-01-03T12:00:00+00:00") -> dict:
    return {
        "approval": {"date": date, "user": user_node(nickname), "pullrequest": snapshot_node()},
        "pull_request": snapshot_node(),
    }


def comment_activity_node(raw: str = "Looks good") -> dict:
    return {"comment": comment_node(raw=raw), "pull_request": snapshot_node()}


def paged(values: list[dict], next_url: str | None = None, page: int = 1) -> dict:
    body: dict = {"pagelen": 10, "page": page, "values": values}
    if next_url:
        body["next"] = next_url
    return body


def error_body(message: str = "There are no pull requests with id 2147483647") -> dict:
    return {"type": "error", "error": {"message": message}}


# ---------------------------------------------------------------------------
# Model object factories — construct typed model instances
# ---------------------------------------------------------------------------


def make_pull_request(
    id: int | None = 2,
    title: str = "Fix bug",
    state: PullRequestState | str | None = PullRequestState.OPEN,
    source: str = "feature",
    destination: str | None = "main",
    author: str | None = "alice",
    description: str = "",
) -> PullRequest:
    return PullRequest(
        id=id,
        title=title,
        state=state,
        source=Endpoint(branch=Branch(name=source)),
        destination=Endpoint(branch=Branch(name=destination)) if destination else None,
        author=User(nickname=author) if author else None,
        description=description,
        created_on=parse_datetime("2024-01-01T00:00:00+00:00"),
        updated_on=parse_datetime("2024-01-02T00:00:00+00:00"),
    )


def make_comment(id: int = 1, raw: str = "Looks good", inline_path: str | None = None) -> Comment:
    return Comment(
        id=id,
        content=Content(raw=raw, markup="markdown", html=f"<p>{raw}</p>"),
        user=User(nickname="reviewer"),
        created_on=parse_datetime("2024-01-01T10:00:00+00:00"),
        inline_path=inline_path,
    )


def make_commit(hash: str = "abc123def4567890", message: str = "Update the docstring") -> Commit:
    return Commit(hash=hash, message=message, date=parse_datetime("2024-01-01T09:00:00+00:00"))


def make_update_activity(state: PullRequestState = PullRequestState.DECLINED) -> UpdateActivity:
    return UpdateActivity(
        update=Update(state=state, date=parse_datetime("2024-01-02T00:00:00+00:00"), author=User(nickname="alice")),
        pull_request=make_pull_request(),
    )


def make_approval_activity() -> ApprovalActivity:
    return ApprovalActivity(
        approval=Approval(
            approved=True,
            user=User(nickname="bob"),
            date=parse_datetime("2024-01-03T12:00:00+00:00"),
        ),
        pull_request=make_pull_request(),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    with BitbucketClient(username="alice", app_password="secret") as c:
        yield c


@pytest.fixture(autouse=True)
def no_dotenv(mocker):
    """Prevent tests from loading a real .env file."""
    mocker.patch("bbpulls.cli.load_dotenv")
