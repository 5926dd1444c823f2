from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .client import DEFAULT_API_URL, BitbucketClient
from .errors import ConfigError


@dataclass(frozen=True)
class Settings:
    username: str | None = None
    app_password: str | None = None
    access_token: str | None = None
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        settings = cls(
            username=env.get("BITBUCKET_USERNAME") or None,
            app_password=env.get("BITBUCKET_APP_PASSWORD") or None,
            access_token=env.get("BITBUCKET_ACCESS_TOKEN") or None,
            api_url=env.get("BITBUCKET_API_URL") or DEFAULT_API_URL,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if bool(self.username) != bool(self.app_password):
            raise ConfigError(
                "BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD must be set together."
            )
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigError(f"BITBUCKET_API_URL is not an http(s) URL: {self.api_url!r}")

    @property
    def authenticated(self) -> bool:
        return bool(self.access_token or (self.username and self.app_password))

    def build_client(self) -> BitbucketClient:
        return BitbucketClient(
            username=self.username,
            app_password=self.app_password,
            access_token=self.access_token,
            base_url=self.api_url,
        )
