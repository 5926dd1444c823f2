"""Resource accessors scoped to a repository, its pull requests, or one pull request.

Accessors hold no state besides their identifiers: every call goes back to
the server, and every failure surfaces as ``BitbucketApiError``.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from . import endpoints
from .client import BitbucketClient
from .models import (
    Activity,
    Approval,
    Comment,
    Commit,
    MergeStrategy,
    PullRequest,
    PullRequestState,
)
from .parsers import (
    dump_pull_request,
    dump_pull_request_update,
    parse_activity,
    parse_approval,
    parse_comment,
    parse_commit,
    parse_pull_request,
)

logger = logging.getLogger(__name__)


class RepositoryResource:
    def __init__(self, client: BitbucketClient, owner: str, slug: str) -> None:
        self._client = client
        self.owner = owner
        self.slug = slug

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.slug}"

    def pull_requests_resource(self) -> PullRequestsResource:
        return PullRequestsResource(self._client, self.owner, self.slug)


class PullRequestsResource:
    """The pull-request collection of one repository."""

    def __init__(self, client: BitbucketClient, owner: str, slug: str) -> None:
        self._client = client
        self.owner = owner
        self.slug = slug

    def _path(self, template: str) -> str:
        return template.format(owner=self.owner, slug=self.slug)

    def pull_request_resource(self, pull_request_id: int) -> PullRequestResource:
        return PullRequestResource(self._client, self.owner, self.slug, pull_request_id)

    def list_pull_requests(
        self,
        state: PullRequestState | str | Iterable[PullRequestState | str] | None = None,
        limit: int | None = None,
    ) -> list[PullRequest]:
        """List pull requests; Bitbucket only returns OPEN ones when no state is given."""
        params: dict[str, Any] | None = None
        if state is not None:
            states = [state] if isinstance(state, str) else list(state)
            params = {"state": [str(s) for s in states]}
        return [
            parse_pull_request(node)
            for node in self._client.paginate(self._path(endpoints.PULL_REQUESTS), params, limit)
        ]

    def post_pull_request(self, draft: PullRequest) -> PullRequest:
        if not draft.title:
            raise ValueError("A pull request needs a title.")
        if not draft.source.branch.name:
            raise ValueError("A pull request needs a source branch.")

        node = self._client.post_json(self._path(endpoints.PULL_REQUESTS), dump_pull_request(draft))
        created = parse_pull_request(node)
        logger.info("Created pull request #%s in %s/%s", created.id, self.owner, self.slug)
        return created

    def put_pull_request(self, pull_request: PullRequest) -> PullRequest:
        if pull_request.id is None:
            raise ValueError("Only a pull request with an id can be updated.")
        path = endpoints.PULL_REQUEST.format(owner=self.owner, slug=self.slug, pr_id=pull_request.id)
        return parse_pull_request(self._client.put_json(path, dump_pull_request_update(pull_request)))

    def get_pull_requests_activity(self, limit: int | None = None) -> list[Activity]:
        return [
            parse_activity(node)
            for node in self._client.paginate(self._path(endpoints.PULL_REQUESTS_ACTIVITY), limit=limit)
        ]


class PullRequestResource:
    """Operations bound to a single pull request of a repository."""

    def __init__(self, client: BitbucketClient, owner: str, slug: str, pull_request_id: int) -> None:
        self._client = client
        self.owner = owner
        self.slug = slug
        self.pull_request_id = pull_request_id

    def _path(self, template: str, **kwargs: Any) -> str:
        return template.format(owner=self.owner, slug=self.slug, pr_id=self.pull_request_id, **kwargs)

    def get_pull_request(self) -> PullRequest:
        return parse_pull_request(self._client.get_json(self._path(endpoints.PULL_REQUEST)))

    def get_pull_request_activity(self, limit: int | None = None) -> list[Activity]:
        """Activity of this pull request, most recent first."""
        return [
            parse_activity(node)
            for node in self._client.paginate(self._path(endpoints.PULL_REQUEST_ACTIVITY), limit=limit)
        ]

    def list_pull_request_comments(self, limit: int | None = None) -> list[Comment]:
        return [
            parse_comment(node)
            for node in self._client.paginate(self._path(endpoints.PULL_REQUEST_COMMENTS), limit=limit)
        ]

    def get_pull_request_comment(self, comment_id: int) -> Comment:
        path = self._path(endpoints.PULL_REQUEST_COMMENT, comment_id=comment_id)
        return parse_comment(self._client.get_json(path))

    def list_pull_request_commits(self, limit: int | None = None) -> list[Commit]:
        return [
            parse_commit(node)
            for node in self._client.paginate(self._path(endpoints.PULL_REQUEST_COMMITS), limit=limit)
        ]

    def get_diff_for_pull_request(self) -> str:
        return self._client.get_text(self._path(endpoints.PULL_REQUEST_DIFF))

    def get_patch_for_pull_request(self) -> str:
        return self._client.get_text(self._path(endpoints.PULL_REQUEST_PATCH))

    def decline_pull_request(self) -> PullRequest:
        declined = parse_pull_request(self._client.post_json(self._path(endpoints.PULL_REQUEST_DECLINE)))
        logger.info("Declined pull request #%s", self.pull_request_id)
        return declined

    def approve_pull_request(self) -> Approval:
        approval = parse_approval(self._client.post_json(self._path(endpoints.PULL_REQUEST_APPROVE)))
        logger.info("Approved pull request #%s", self.pull_request_id)
        return approval

    def remove_pull_request_approval(self) -> None:
        self._client.delete(self._path(endpoints.PULL_REQUEST_APPROVE))
        logger.info("Removed approval from pull request #%s", self.pull_request_id)

    def accept_and_merge_pull_request(
        self,
        message: str | None = None,
        close_source_branch: bool | None = None,
        merge_strategy: MergeStrategy | None = None,
    ) -> PullRequest:
        payload: dict[str, Any] = {}
        if message is not None:
            payload["message"] = message
        if close_source_branch is not None:
            payload["close_source_branch"] = close_source_branch
        if merge_strategy is not None:
            payload["merge_strategy"] = str(merge_strategy)

        merged = parse_pull_request(self._client.post_json(self._path(endpoints.PULL_REQUEST_MERGE), payload))
        logger.info("Merged pull request #%s", self.pull_request_id)
        return merged
