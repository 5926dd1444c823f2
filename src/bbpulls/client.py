from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import httpx

from .endpoints import CURRENT_USER
from .errors import BitbucketApiError, NetworkError, ResponseFormatError
from .models import User
from .parsers import parse_user

DEFAULT_API_URL = "https://api.bitbucket.org/2.0"

logger = logging.getLogger(__name__)


class BitbucketClient:
    """One authenticated session against the Bitbucket Cloud 2.0 API.

    Every call is a single request/response round trip. Non-2xx answers are
    raised as :class:`BitbucketApiError` and transport failures as
    :class:`NetworkError`; nothing is retried.
    """

    def __init__(
        self,
        username: str | None = None,
        app_password: str | None = None,
        access_token: str | None = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
    ) -> None:
        headers = {"Accept": "application/json"}
        auth: httpx.BasicAuth | None = None
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        elif username and app_password:
            auth = httpx.BasicAuth(username, app_password)

        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            auth=auth,
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    def __enter__(self) -> BitbucketClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = self._client.request(method, path, params=params, json=json)
        except httpx.RequestError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response

        error = BitbucketApiError.from_response(response)
        logger.debug("%s", error)
        raise error

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.request("GET", path, params=params).json()

    def get_text(self, path: str) -> str:
        return self.request("GET", path).text

    def post_json(self, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.request("POST", path, json=json).json()

    def put_json(self, path: str, json: dict[str, Any]) -> dict[str, Any]:
        return self.request("PUT", path, json=json).json()

    def delete(self, path: str) -> None:
        self.request("DELETE", path)

    def paginate(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield the ``values`` of a paged listing, following ``next`` links."""
        fetched = 0
        url: str | None = path
        while url:
            page = self.get_json(url, params=params)
            for value in page.get("values", []):
                if limit is not None and fetched >= limit:
                    return
                yield value
                fetched += 1

            if limit is not None and fetched >= limit:
                return
            url = page.get("next")
            # the next link already carries every query parameter
            params = None

    def get_current_user(self) -> User:
        user = parse_user(self.get_json(CURRENT_USER))
        if user is None:
            raise ResponseFormatError(f"GET {CURRENT_USER} returned an empty user")
        return user
