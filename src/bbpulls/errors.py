from __future__ import annotations

from http import HTTPStatus

import httpx


class BbPullsError(Exception):
    """Base class for every error raised by bbpulls."""


class ConfigError(BbPullsError):
    pass


class NetworkError(BbPullsError):
    """No HTTP response was received (connection refused, DNS, timeout)."""


class ResponseFormatError(BbPullsError, ValueError):
    """A 2xx answer whose body does not have the shape the endpoint promises."""


class BitbucketApiError(BbPullsError):
    """Any non-2xx answer from the Bitbucket API.

    The status code is carried verbatim so callers can branch on it
    instead of parsing the message.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        method: str | None = None,
        url: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.method = method
        self.url = url
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"Bitbucket API returned HTTP {self.status_code}"
        if self.method and self.url:
            text += f" for {self.method} {self.url}"
        if self.message:
            text += f": {self.message}"
        return text

    @property
    def status(self) -> HTTPStatus | None:
        try:
            return HTTPStatus(self.status_code)
        except ValueError:
            return None

    @property
    def is_not_found(self) -> bool:
        return self.status_code == HTTPStatus.NOT_FOUND

    @classmethod
    def from_response(cls, response: httpx.Response) -> BitbucketApiError:
        return cls(
            status_code=response.status_code,
            message=_error_message(response),
            method=response.request.method,
            url=str(response.request.url),
        )


def _error_message(response: httpx.Response) -> str:
    # Bitbucket wraps errors as {"type": "error", "error": {"message": ...}}
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text.strip()
