from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .config import Settings
from .errors import BbPullsError, BitbucketApiError
from .formatters import get_formatter
from .models import Branch, Endpoint, MergeStrategy, PullRequest, PullRequestState
from .resources import PullRequestResource, PullRequestsResource, RepositoryResource

_stderr = Console(stderr=True)

_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "markdown"]),
    default="json",
    show_default=True,
    help="Output format.",
)
_limit_option = click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of items to fetch.",
)


def _split_repo(repo: str) -> tuple[str, str]:
    if repo.count("/") != 1:
        raise click.BadParameter(f"{repo!r} is not a valid OWNER/REPO format.", param_hint="REPO")
    owner, slug = repo.split("/", 1)
    if not owner or not slug:
        raise click.BadParameter(f"{repo!r} is not a valid OWNER/REPO format.", param_hint="REPO")
    return owner, slug


@contextmanager
def _pull_requests(repo: str) -> Iterator[PullRequestsResource]:
    owner, slug = _split_repo(repo)
    try:
        settings = Settings.from_env()
        with settings.build_client() as client:
            yield RepositoryResource(client, owner, slug).pull_requests_resource()
    except BitbucketApiError as exc:
        _stderr.print(f"[red]Error:[/red] HTTP {exc.status_code}: {exc.message or exc}")
        sys.exit(1)
    except (BbPullsError, ValueError) as exc:
        _stderr.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


@contextmanager
def _pull_request(repo: str, pull_request_id: int) -> Iterator[PullRequestResource]:
    with _pull_requests(repo) as pull_requests:
        yield pull_requests.pull_request_resource(pull_request_id)


def _emit(items: list[Any], output_format: str, repo: str) -> None:
    formatter = get_formatter(output_format, owner_repo=repo)
    click.echo(formatter(items))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every API request to stderr.")
def cli(verbose: bool) -> None:
    """bbpulls — work with Bitbucket Cloud pull requests."""
    load_dotenv()
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=_stderr, show_path=False)],
        )


@cli.command("list")
@click.argument("repo", metavar="OWNER/REPO")
@click.option(
    "--state",
    "states",
    type=click.Choice([s.value for s in PullRequestState]),
    multiple=True,
    help="Filter by state; repeatable. Bitbucket defaults to OPEN.",
)
@_limit_option
@_format_option
def list_(repo: str, states: tuple[str, ...], limit: int | None, output_format: str) -> None:
    """List pull requests of OWNER/REPO."""
    with _pull_requests(repo) as pull_requests:
        prs = pull_requests.list_pull_requests(state=list(states) or None, limit=limit)
    _emit(prs, output_format, repo)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
@_format_option
def show(repo: str, pull_request_id: int, output_format: str) -> None:
    """Show one pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        pr = resource.get_pull_request()
    _emit([pr], output_format, repo)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
@_limit_option
@_format_option
def activity(repo: str, pull_request_id: int, limit: int | None, output_format: str) -> None:
    """Show the activity of a pull request, most recent first."""
    with _pull_request(repo, pull_request_id) as resource:
        activities = resource.get_pull_request_activity(limit=limit)
    _emit(activities, output_format, repo)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
@_limit_option
@_format_option
def comments(repo: str, pull_request_id: int, limit: int | None, output_format: str) -> None:
    """List the comments of a pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        items = resource.list_pull_request_comments(limit=limit)
    _emit(items, output_format, repo)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
@_limit_option
@_format_option
def commits(repo: str, pull_request_id: int, limit: int | None, output_format: str) -> None:
    """List the commits of a pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        items = resource.list_pull_request_commits(limit=limit)
    _emit(items, output_format, repo)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
@click.option("--patch", is_flag=True, help="Print the patch series instead of the diff.")
def diff(repo: str, pull_request_id: int, patch: bool) -> None:
    """Print the raw diff of a pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        text = resource.get_patch_for_pull_request() if patch else resource.get_diff_for_pull_request()
    click.echo(text, nl=False)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.option("--title", required=True, help="Pull request title.")
@click.option("--source", "source_branch", required=True, help="Source branch name.")
@click.option("--destination", "destination_branch", default=None, help="Destination branch; repository main branch if omitted.")
@click.option("--description", default="", help="Pull request description.")
@click.option("--close-source-branch", is_flag=True, help="Delete the source branch once merged.")
@_format_option
def create(
    repo: str,
    title: str,
    source_branch: str,
    destination_branch: str | None,
    description: str,
    close_source_branch: bool,
    output_format: str,
) -> None:
    """Open a new pull request in OWNER/REPO."""
    draft = PullRequest(
        title=title,
        source=Endpoint(branch=Branch(name=source_branch)),
        destination=Endpoint(branch=Branch(name=destination_branch)) if destination_branch else None,
        description=description,
        close_source_branch=close_source_branch,
    )
    with _pull_requests(repo) as pull_requests:
        pr = pull_requests.post_pull_request(draft)
    _stderr.print(f"[green]Created pull request #{pr.id}[/green]")
    _emit([pr], output_format, repo)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
def decline(repo: str, pull_request_id: int) -> None:
    """Decline an open pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        pr = resource.decline_pull_request()
    _stderr.print(f"[green]Pull request #{pr.id} is now {pr.state}[/green]")


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
def approve(repo: str, pull_request_id: int) -> None:
    """Approve a pull request as the authenticated user."""
    with _pull_request(repo, pull_request_id) as resource:
        approval = resource.approve_pull_request()
    who = approval.user.nickname if approval.user else "you"
    _stderr.print(f"[green]Pull request #{pull_request_id} approved by {who}[/green]")


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
def unapprove(repo: str, pull_request_id: int) -> None:
    """Withdraw your approval of a pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        resource.remove_pull_request_approval()
    _stderr.print(f"[green]Approval removed from pull request #{pull_request_id}[/green]")


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pull_request_id", metavar="ID", type=int)
@click.option("--message", default=None, help="Merge commit message.")
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in MergeStrategy]),
    default=None,
    help="Merge strategy; repository default if omitted.",
)
@click.option("--close-source-branch", is_flag=True, help="Delete the source branch; repository default if omitted.")
def merge(
    repo: str,
    pull_request_id: int,
    message: str | None,
    strategy: str | None,
    close_source_branch: bool,
) -> None:
    """Accept and merge a pull request."""
    with _pull_request(repo, pull_request_id) as resource:
        pr = resource.accept_and_merge_pull_request(
            message=message,
            close_source_branch=True if close_source_branch else None,
            merge_strategy=MergeStrategy(strategy) if strategy else None,
        )
    _stderr.print(f"[green]Pull request #{pr.id} is now {pr.state}[/green]")
