"""GitHub API client for pull requests, labels and issue comments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import httpx

from .auth import Credentials

GITHUB_API = "https://api.github.com"
MAX_PER_PAGE = 100

T = TypeVar("T")


@dataclass
class PullRequest:
    """Pull request fields the bot reads."""

    number: int
    state: str
    title: str = ""
    author: str = ""
    merged: bool = False
    url: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> PullRequest:
        return cls(
            number=item["number"],
            state=item.get("state", "open"),
            title=item.get("title", "") or "",
            author=(item.get("user") or {}).get("login", "unknown"),
            merged=bool(item.get("merged_at")),
            url=item.get("html_url", ""),
        )


@dataclass
class Comment:
    """An issue comment on a pull request."""

    body: str
    author: str = ""
    created_at: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> Comment:
        return cls(
            body=item.get("body") or "",
            author=(item.get("user") or {}).get("login", "unknown"),
            created_at=item.get("created_at", ""),
        )


def _auth(credentials: Credentials | None) -> httpx.Auth | None:
    return credentials.to_auth() if credentials is not None else None


def _json(resp: httpx.Response) -> Any:
    """Decode a JSON body, raising httpx.DecodingError when it is not JSON."""
    try:
        return resp.json()
    except ValueError as e:
        raise httpx.DecodingError(
            f"Invalid JSON in response from {resp.request.url}", request=resp.request
        ) from e


def _json_list(resp: httpx.Response) -> list[dict]:
    data = _json(resp)
    if not isinstance(data, list):
        raise httpx.DecodingError(
            f"Expected a JSON list from {resp.request.url}, got {type(data).__name__}",
            request=resp.request,
        )
    return data


def _parse(items: list[dict], parse: Callable[[dict], T], what: str) -> list[T]:
    try:
        return [parse(item) for item in items]
    except (KeyError, TypeError, AttributeError) as e:
        raise httpx.DecodingError(f"Unexpected {what} payload: {e!r}") from e


class GitHubClient:
    """Thin synchronous wrapper over the GitHub REST API for one repository.

    The underlying ``httpx.Client`` holds no credentials. Every call takes
    its credentials explicitly; mutating calls require them. Errors surface
    as ``httpx.HTTPError``, including ``httpx.DecodingError`` for bodies that
    are not the JSON shape expected.
    """

    def __init__(
        self,
        repo: str,
        api_url: str = GITHUB_API,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            repo: Repository in 'owner/name' format.
            api_url: Base URL of the GitHub REST API.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, for tests.
        """
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.repo}/{path}"

    def _get_pages(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        credentials: Credentials | None = None,
    ) -> list[dict]:
        """GET every page of a list endpoint."""
        items: list[dict] = []
        page = 1
        while True:
            resp = self._client.get(
                self._url(path),
                params={**(params or {}), "per_page": MAX_PER_PAGE, "page": page},
                auth=_auth(credentials),
            )
            resp.raise_for_status()
            batch = _json_list(resp)
            items.extend(batch)
            if len(batch) < MAX_PER_PAGE:
                return items
            page += 1

    def list_pull_requests(
        self, state: str = "open", credentials: Credentials | None = None
    ) -> list[PullRequest]:
        """List pull requests in the given state ('open', 'closed' or 'all')."""
        items = self._get_pages("pulls", {"state": state}, credentials)
        return _parse(items, PullRequest.from_api, "pull request")

    def get_labels(
        self, number: int, credentials: Credentials | None = None
    ) -> list[str]:
        """Return the label names on an issue or pull request."""
        items = self._get_pages(f"issues/{number}/labels", credentials=credentials)
        return _parse(items, lambda item: item.get("name", ""), "label")

    def get_comments(
        self,
        number: int,
        per_page: int | None = None,
        credentials: Credentials | None = None,
    ) -> list[Comment]:
        """Return issue comments, oldest first.

        Args:
            number: Issue or pull request number.
            per_page: Fetch only the first page of this size. All pages are
                fetched when omitted.
            credentials: Optional credentials for private repositories.
        """
        if per_page is None:
            items = self._get_pages(f"issues/{number}/comments", credentials=credentials)
        else:
            resp = self._client.get(
                self._url(f"issues/{number}/comments"),
                params={"per_page": per_page},
                auth=_auth(credentials),
            )
            resp.raise_for_status()
            items = _json_list(resp)
        return _parse(items, Comment.from_api, "comment")

    def edit_labels(
        self, number: int, labels: list[str], credentials: Credentials
    ) -> dict:
        """Replace the full label set of an issue or pull request."""
        resp = self._client.patch(
            self._url(f"issues/{number}"),
            json={"labels": labels},
            auth=credentials.to_auth(),
        )
        resp.raise_for_status()
        return _json(resp)

    def create_comment(self, number: int, body: str, credentials: Credentials) -> dict:
        """Post a new comment on an issue or pull request."""
        resp = self._client.post(
            self._url(f"issues/{number}/comments"),
            json={"body": body},
            auth=credentials.to_auth(),
        )
        resp.raise_for_status()
        return _json(resp)

    def merge_pull_request(
        self, number: int, credentials: Credentials, merge_method: str = "merge"
    ) -> dict:
        """Merge a pull request through the merge endpoint."""
        resp = self._client.put(
            self._url(f"pulls/{number}/merge"),
            json={"merge_method": merge_method},
            auth=credentials.to_auth(),
        )
        resp.raise_for_status()
        return _json(resp)
