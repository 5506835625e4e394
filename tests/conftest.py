"""Shared pytest fixtures for lgtm-bot test suite."""

from __future__ import annotations

from typing import Any

import pytest

from lgtm_bot.config import ATOMIC, DEFAULT_APPROVAL_PATTERN, GITHUB_API, Config
from lgtm_bot.github_client import PullRequest

REPO = "owner/repo"
# Custom instructions body; must not match the approval pattern
INSTRUCTIONS = (
    "Thanks for opening this pull request! Two reviewer approvals are needed."
)

_ENV_VARS = [
    "TARGET_REPO",
    "GITHUB_API_URL",
    "HTTP_TIMEOUT",
    "GITHUB_TOKEN",
    "BOT_USER",
    "BOT_PASSWORD",
    "OAUTH2_KEY",
    "OAUTH2_SECRET",
    "LABEL_NEEDS_REVIEW",
    "LABEL_REVIEWED",
    "REVIEWS_NEEDED",
    "APPROVAL_PATTERN",
    "LABEL_TRANSITIONS",
    "INSTRUCTIONS_COMMENT",
    "PR_STATE",
    "POST_INSTRUCTIONS",
    "AUTO_MERGE",
    "MERGE_METHOD",
    "POLL_INTERVAL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's .env or shell settings out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def make_config() -> callable:
    """Factory fixture that returns a valid Config with configurable fields."""

    def _factory(**overrides: Any) -> Config:
        defaults: dict[str, Any] = {
            "target_repo": REPO,
            "api_url": GITHUB_API,
            "github_token": "ghp_test",
            "bot_user": "",
            "bot_password": "",
            "oauth2_key": "",
            "oauth2_secret": "",
            "label_needs_review": "needs-review",
            "label_reviewed": "reviewed",
            "reviews_needed": 2,
            "approval_pattern": DEFAULT_APPROVAL_PATTERN,
            "label_transitions": ATOMIC,
            "instructions_comment": INSTRUCTIONS,
            "pr_state": "open",
            "post_instructions": True,
            "auto_merge": False,
            "merge_method": "merge",
            "poll_interval": 60,
        }
        defaults.update(overrides)
        return Config(**defaults)

    return _factory


@pytest.fixture()
def config(make_config: callable) -> Config:
    return make_config()


@pytest.fixture()
def instructions() -> str:
    """The instructions comment body configured by make_config."""
    return INSTRUCTIONS


@pytest.fixture()
def make_pr() -> callable:
    """Factory fixture that returns PullRequest objects."""

    def _factory(**overrides: Any) -> PullRequest:
        defaults: dict[str, Any] = {
            "number": 42,
            "state": "open",
            "title": "Fix memory leak in parser",
            "author": "contributor123",
            "url": f"https://github.com/{REPO}/pull/42",
        }
        defaults.update(overrides)
        return PullRequest(**defaults)

    return _factory


@pytest.fixture()
def make_comments() -> callable:
    """Factory fixture that builds a GitHub API issue comment listing."""

    def _factory(*bodies: str | None) -> list[dict[str, Any]]:
        return [
            {
                "id": i,
                "body": body,
                "user": {"login": f"reviewer{i}"},
                "created_at": "2025-06-01T10:00:00Z",
            }
            for i, body in enumerate(bodies, start=1)
        ]

    return _factory


@pytest.fixture()
def make_labels() -> callable:
    """Factory fixture that builds a GitHub API label listing."""

    def _factory(*names: str) -> list[dict[str, Any]]:
        return [
            {"id": i, "name": name, "color": "ededed"} for i, name in enumerate(names)
        ]

    return _factory
