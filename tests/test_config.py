"""Tests for lgtm_bot.config module."""

from __future__ import annotations

import pytest

from lgtm_bot.auth import BASIC, OAUTH, TOKEN
from lgtm_bot.config import (
    ATOMIC,
    DEFAULT_APPROVAL_PATTERN,
    GITHUB_API,
    LEGACY_APPROVAL_PATTERN,
    STEPWISE,
    Config,
    _env_bool,
)


class TestEnvBool:
    """Tests for _env_bool() helper."""

    def test_unset_returns_default(self) -> None:
        assert _env_bool("AUTO_MERGE", True) is True
        assert _env_bool("AUTO_MERGE", False) is False

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on", " True "])
    def test_truthy_values(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("AUTO_MERGE", value)
        assert _env_bool("AUTO_MERGE", False) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "off", "nope"])
    def test_falsy_values(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("AUTO_MERGE", value)
        assert _env_bool("AUTO_MERGE", True) is False

    def test_blank_returns_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTO_MERGE", "  ")
        assert _env_bool("AUTO_MERGE", True) is True


class TestConfigCreation:
    """Tests for Config dataclass creation."""

    def test_defaults(self) -> None:
        config = Config()
        assert config.target_repo == ""
        assert config.api_url == GITHUB_API
        assert config.label_needs_review == "needs-review"
        assert config.label_reviewed == "reviewed"
        assert config.reviews_needed == 2
        assert config.approval_pattern == DEFAULT_APPROVAL_PATTERN
        assert config.label_transitions == ATOMIC
        assert config.pr_state == "open"
        assert config.post_instructions is True
        assert config.auto_merge is False
        assert config.merge_method == "merge"
        assert config.poll_interval == 300
        assert config.http_timeout == 30.0

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TARGET_REPO", "acme/widgets")
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        monkeypatch.setenv("LABEL_NEEDS_REVIEW", "review-me")
        monkeypatch.setenv("LABEL_REVIEWED", "peer-reviewed")
        monkeypatch.setenv("REVIEWS_NEEDED", "3")
        monkeypatch.setenv("LABEL_TRANSITIONS", STEPWISE)
        monkeypatch.setenv("AUTO_MERGE", "true")
        monkeypatch.setenv("MERGE_METHOD", "squash")
        monkeypatch.setenv("POLL_INTERVAL", "120")
        monkeypatch.setenv("PR_STATE", "all")

        config = Config()
        assert config.target_repo == "acme/widgets"
        assert config.owner == "acme"
        assert config.repo_name == "widgets"
        assert config.github_token == "ghp_env"
        assert config.label_needs_review == "review-me"
        assert config.label_reviewed == "peer-reviewed"
        assert config.reviews_needed == 3
        assert config.label_transitions == STEPWISE
        assert config.auto_merge is True
        assert config.merge_method == "squash"
        assert config.poll_interval == 120
        assert config.pr_state == "all"

    def test_default_instructions_rendered_from_labels(self) -> None:
        config = Config(label_needs_review="review-me", label_reviewed="ok", reviews_needed=3)
        assert "`review-me`" in config.instructions
        assert "`ok`" in config.instructions
        assert "3 approvals" in config.instructions

    def test_instructions_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSTRUCTIONS_COMMENT", "Please wait for two approvals.")
        assert Config().instructions == "Please wait for two approvals."

    def test_default_instructions_follow_auto_merge(self) -> None:
        config = Config()
        assert "merged automatically" not in config.instructions
        config.auto_merge = True
        assert "merged automatically" in config.instructions

    def test_custom_instructions_take_precedence(self) -> None:
        config = Config(instructions_comment="Read CONTRIBUTING.md first.", auto_merge=True)
        assert config.instructions == "Read CONTRIBUTING.md first."


class TestCredentials:
    """Tests for Config.credentials precedence."""

    def test_token_wins(self, make_config: callable) -> None:
        config = make_config(
            github_token="ghp_x", oauth2_key="k", oauth2_secret="s",
            bot_user="bot", bot_password="pw",
        )
        assert config.credentials.kind == TOKEN

    def test_oauth_preferred_over_basic(self, make_config: callable) -> None:
        config = make_config(
            github_token="", oauth2_key="k", oauth2_secret="s",
            bot_user="bot", bot_password="pw",
        )
        assert config.credentials.kind == OAUTH
        assert config.credentials.username == "k"

    def test_basic_when_only_user_password(self, make_config: callable) -> None:
        config = make_config(github_token="", bot_user="bot", bot_password="pw")
        assert config.credentials.kind == BASIC

    def test_none_when_unconfigured(self, make_config: callable) -> None:
        assert make_config(github_token="").credentials is None


class TestValidate:
    """Tests for Config.validate()."""

    def test_valid_config(self, make_config: callable) -> None:
        assert make_config().validate() == []

    def test_bad_repo(self, make_config: callable) -> None:
        issues = make_config(target_repo="no-slash").validate()
        assert any("TARGET_REPO" in i for i in issues)

    def test_missing_credentials(self, make_config: callable) -> None:
        issues = make_config(github_token="").validate()
        assert any("No credentials" in i for i in issues)

    def test_half_configured_oauth_is_missing(self, make_config: callable) -> None:
        issues = make_config(github_token="", oauth2_key="k").validate()
        assert any("No credentials" in i for i in issues)

    def test_reviews_needed_positive(self, make_config: callable) -> None:
        issues = make_config(reviews_needed=0).validate()
        assert any("REVIEWS_NEEDED" in i for i in issues)

    def test_same_label_names(self, make_config: callable) -> None:
        issues = make_config(label_needs_review="x", label_reviewed="x").validate()
        assert any("must be different" in i for i in issues)

    def test_unknown_transition_mode(self, make_config: callable) -> None:
        issues = make_config(label_transitions="sideways").validate()
        assert any("LABEL_TRANSITIONS" in i for i in issues)

    def test_unknown_merge_method(self, make_config: callable) -> None:
        issues = make_config(merge_method="octopus").validate()
        assert any("MERGE_METHOD" in i for i in issues)

    def test_invalid_pattern(self, make_config: callable) -> None:
        issues = make_config(approval_pattern="(LGTM").validate()
        assert any("APPROVAL_PATTERN" in i for i in issues)

    def test_blank_instructions(self, make_config: callable) -> None:
        issues = make_config(instructions_comment="   ").validate()
        assert any("Instructions" in i for i in issues)

    def test_multiple_issues(self, make_config: callable) -> None:
        issues = make_config(target_repo="", github_token="", reviews_needed=0).validate()
        assert len(issues) == 3

    def test_default_instructions_do_not_match_approval_pattern(
        self, make_config: callable
    ) -> None:
        assert make_config(instructions_comment="").validate() == []
        assert make_config(instructions_comment="", auto_merge=True).validate() == []

    def test_instructions_matching_approval_pattern(self, make_config: callable) -> None:
        issues = make_config(instructions_comment="Say LGTM to approve.").validate()
        assert any("matches APPROVAL_PATTERN" in i for i in issues)

    def test_legacy_pattern_matches_default_instructions(
        self, make_config: callable
    ) -> None:
        issues = make_config(
            instructions_comment="", approval_pattern=LEGACY_APPROVAL_PATTERN
        ).validate()
        assert any("matches APPROVAL_PATTERN" in i for i in issues)
