"""Fixtures for the live suite; every test here talks to Bitbucket Cloud.

Configure it through the environment (a ``.env`` file is honoured):

- ``BITBUCKET_USERNAME`` / ``BITBUCKET_APP_PASSWORD`` or ``BITBUCKET_ACCESS_TOKEN``
- ``BBPULLS_IT_READ_REPO``: ``owner/slug`` of a repository holding a pull
  request that will not change
- ``BBPULLS_IT_READ_PR`` and ``BBPULLS_IT_READ_COMMENT``: its id and the id
  of one of its comments
- ``BBPULLS_IT_WRITE_REPO``: ``owner/slug`` of a scratch repository the
  account may open, approve and decline pull requests in
- ``BBPULLS_IT_DECLINE_BRANCH`` / ``BBPULLS_IT_APPROVE_BRANCH``: branches of
  the scratch repository to open pull requests from
"""
from __future__ import annotations

import os

import pytest
from dotenv import load_dotenv

from bbpulls.config import Settings
from bbpulls.resources import PullRequestResource, PullRequestsResource, RepositoryResource

load_dotenv()

# no pull request will ever reach this id
NOT_EXISTING_ID = 2**31 - 1


def _require(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        pytest.skip(f"{name} is not set")
    return value


def _require_credentials() -> None:
    if not Settings.from_env().authenticated:
        pytest.skip("Bitbucket credentials are not set")


def _repository(client, name: str) -> RepositoryResource:
    owner, slug = _require(name).split("/", 1)
    return RepositoryResource(client, owner, slug)


@pytest.fixture(scope="module")
def live_client():
    settings = Settings.from_env()
    with settings.build_client() as client:
        yield client


@pytest.fixture(scope="module")
def account_nickname(live_client) -> str:
    _require_credentials()
    return live_client.get_current_user().nickname


@pytest.fixture(scope="module")
def read_pull_requests(live_client) -> PullRequestsResource:
    return _repository(live_client, "BBPULLS_IT_READ_REPO").pull_requests_resource()


@pytest.fixture(scope="module")
def existing_pull_request(read_pull_requests) -> PullRequestResource:
    return read_pull_requests.pull_request_resource(int(_require("BBPULLS_IT_READ_PR")))


@pytest.fixture(scope="module")
def not_existing_pull_request(read_pull_requests) -> PullRequestResource:
    return read_pull_requests.pull_request_resource(NOT_EXISTING_ID)


@pytest.fixture(scope="module")
def existing_comment_id() -> int:
    return int(_require("BBPULLS_IT_READ_COMMENT"))


@pytest.fixture(scope="module")
def write_pull_requests(live_client) -> PullRequestsResource:
    _require_credentials()
    return _repository(live_client, "BBPULLS_IT_WRITE_REPO").pull_requests_resource()


@pytest.fixture
def decline_branch() -> str:
    return _require("BBPULLS_IT_DECLINE_BRANCH")


@pytest.fixture
def approve_branch() -> str:
    return _require("BBPULLS_IT_APPROVE_BRANCH")
