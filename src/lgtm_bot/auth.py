"""Bot credentials and their per-request httpx authentication."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generator

import httpx

TOKEN = "token"
OAUTH = "oauth"
BASIC = "basic"


class BearerAuth(httpx.Auth):
    """Attach a personal access token as a Bearer header."""

    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


@dataclass(frozen=True)
class Credentials:
    """An immutable set of credentials for mutating GitHub calls.

    ``kind`` is one of ``token``, ``oauth`` or ``basic``. OAuth2 key/secret
    pairs are sent as HTTP basic client credentials.
    """

    kind: str
    username: str = ""
    secret: str = ""

    def to_auth(self) -> httpx.Auth:
        if self.kind == TOKEN:
            return BearerAuth(self.secret)
        if self.kind in (OAUTH, BASIC):
            return httpx.BasicAuth(self.username, self.secret)
        raise ValueError(f"Unknown credential kind '{self.kind}'")

    def __repr__(self) -> str:
        return f"Credentials(kind={self.kind!r}, username={self.username!r})"


def resolve_credentials(
    token: str = "",
    oauth2_key: str = "",
    oauth2_secret: str = "",
    username: str = "",
    password: str = "",
) -> Credentials | None:
    """Pick the credentials to use, or None when nothing is configured.

    Precedence: token, then OAuth2 key/secret, then username/password.
    Half-configured pairs are ignored.
    """
    if token:
        return Credentials(kind=TOKEN, secret=token)
    if oauth2_key and oauth2_secret:
        return Credentials(kind=OAUTH, username=oauth2_key, secret=oauth2_secret)
    if username and password:
        return Credentials(kind=BASIC, username=username, secret=password)
    return None
