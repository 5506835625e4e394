"""Configuration and environment management."""

import os
import re
from dataclasses import dataclass, field
from dotenv import load_dotenv

from .auth import Credentials, resolve_credentials
from .comments import render_instructions

load_dotenv()

GITHUB_API = "https://api.github.com"

DEFAULT_APPROVAL_PATTERN = r"(LGTM)|(Looks good to me!)"
# Pattern used by the first version of the bot. The trailing ``w+?``
# alternative matches any body containing a "w".
LEGACY_APPROVAL_PATTERN = r"(LGTM)|(Looks good to me!)|w+?"

ATOMIC = "atomic"
STEPWISE = "stepwise"
TRANSITION_MODES = (ATOMIC, STEPWISE)

MERGE_METHODS = ("merge", "squash", "rebase")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # GitHub
    target_repo: str = field(default_factory=lambda: os.getenv("TARGET_REPO", ""))
    api_url: str = field(
        default_factory=lambda: os.getenv("GITHUB_API_URL", GITHUB_API)
    )
    http_timeout: float = field(
        default_factory=lambda: float(os.getenv("HTTP_TIMEOUT", "30"))
    )

    # Credentials
    github_token: str = field(default_factory=lambda: os.getenv("GITHUB_TOKEN", ""))
    bot_user: str = field(default_factory=lambda: os.getenv("BOT_USER", ""))
    bot_password: str = field(default_factory=lambda: os.getenv("BOT_PASSWORD", ""))
    oauth2_key: str = field(default_factory=lambda: os.getenv("OAUTH2_KEY", ""))
    oauth2_secret: str = field(
        default_factory=lambda: os.getenv("OAUTH2_SECRET", "")
    )

    # Review rules
    label_needs_review: str = field(
        default_factory=lambda: os.getenv("LABEL_NEEDS_REVIEW", "needs-review")
    )
    label_reviewed: str = field(
        default_factory=lambda: os.getenv("LABEL_REVIEWED", "reviewed")
    )
    reviews_needed: int = field(
        default_factory=lambda: int(os.getenv("REVIEWS_NEEDED", "2"))
    )
    approval_pattern: str = field(
        default_factory=lambda: os.getenv("APPROVAL_PATTERN", DEFAULT_APPROVAL_PATTERN)
    )
    label_transitions: str = field(
        default_factory=lambda: os.getenv("LABEL_TRANSITIONS", ATOMIC)
    )
    instructions_comment: str = field(
        default_factory=lambda: os.getenv("INSTRUCTIONS_COMMENT", "")
    )

    # Runner
    pr_state: str = field(default_factory=lambda: os.getenv("PR_STATE", "open"))
    post_instructions: bool = field(
        default_factory=lambda: _env_bool("POST_INSTRUCTIONS", True)
    )
    auto_merge: bool = field(default_factory=lambda: _env_bool("AUTO_MERGE", False))
    merge_method: str = field(
        default_factory=lambda: os.getenv("MERGE_METHOD", "merge")
    )
    poll_interval: int = field(
        default_factory=lambda: int(os.getenv("POLL_INTERVAL", "300"))
    )

    @property
    def instructions(self) -> str:
        """The instructions comment body.

        INSTRUCTIONS_COMMENT when set, otherwise the packaged template rendered
        with the current label names, threshold and auto-merge setting.
        """
        if self.instructions_comment:
            return self.instructions_comment
        return render_instructions(
            self.label_needs_review,
            self.label_reviewed,
            self.reviews_needed,
            auto_merge=self.auto_merge,
        )

    @property
    def owner(self) -> str:
        return self.target_repo.partition("/")[0]

    @property
    def repo_name(self) -> str:
        return self.target_repo.partition("/")[2]

    @property
    def credentials(self) -> Credentials | None:
        return resolve_credentials(
            token=self.github_token,
            oauth2_key=self.oauth2_key,
            oauth2_secret=self.oauth2_secret,
            username=self.bot_user,
            password=self.bot_password,
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []
        if not re.fullmatch(r"[\w.-]+/[\w.-]+", self.target_repo or ""):
            issues.append(
                f"TARGET_REPO must be in 'owner/name' format, got '{self.target_repo}'"
            )
        if self.credentials is None:
            issues.append(
                "No credentials configured: set GITHUB_TOKEN, "
                "OAUTH2_KEY/OAUTH2_SECRET or BOT_USER/BOT_PASSWORD"
            )
        if self.reviews_needed < 1:
            issues.append(
                f"REVIEWS_NEEDED must be at least 1, got {self.reviews_needed}"
            )
        if self.label_needs_review == self.label_reviewed:
            issues.append(
                "LABEL_NEEDS_REVIEW and LABEL_REVIEWED must be different, "
                f"both are '{self.label_reviewed}'"
            )
        if not self.label_needs_review or not self.label_reviewed:
            issues.append("Label names must not be empty")
        if self.label_transitions not in TRANSITION_MODES:
            issues.append(
                f"Unknown LABEL_TRANSITIONS '{self.label_transitions}'. "
                f"Available: {', '.join(TRANSITION_MODES)}"
            )
        if self.merge_method not in MERGE_METHODS:
            issues.append(
                f"Unknown MERGE_METHOD '{self.merge_method}'. "
                f"Available: {', '.join(MERGE_METHODS)}"
            )
        instructions = self.instructions
        if not instructions.strip():
            issues.append("Instructions comment must not be empty")
        try:
            approval = re.compile(self.approval_pattern)
        except re.error as e:
            issues.append(f"APPROVAL_PATTERN is not a valid regex: {e}")
        else:
            # The bot's own comment would count as an approval
            if approval.search(instructions):
                issues.append(
                    "Instructions comment matches APPROVAL_PATTERN; "
                    "reword it so it does not count as an approval"
                )
        if self.poll_interval < 1:
            issues.append(
                f"POLL_INTERVAL must be at least 1 second, got {self.poll_interval}"
            )
        return issues
