"""Review bot operations.

Each operation fetches what it needs through the GitHub client, applies the
review-state decisions from :mod:`lgtm_bot.evaluator` and returns a
:class:`~lgtm_bot.results.Result`. Failures are logged and reported in the
result; nothing is raised to the caller.
"""

from __future__ import annotations

import logging

import httpx

from .config import Config
from .evaluator import (
    LabelState,
    compute_label_delta,
    count_approvals,
    instructions_posted,
    is_approved,
    scan_labels,
)
from .github_client import GitHubClient
from .results import Result

logger = logging.getLogger(__name__)

# Comments fetched when counting approvals (one page)
APPROVAL_PAGE_SIZE = 99


class ReviewBot:
    """Review-state operations for the configured repository."""

    def __init__(self, config: Config, client: GitHubClient | None = None) -> None:
        self.config = config
        self.client = client or GitHubClient(
            config.target_repo, api_url=config.api_url, timeout=config.http_timeout
        )

    def close(self) -> None:
        self.client.close()

    def get_pull_requests(self) -> Result:
        """List pull requests in the configured state."""
        try:
            prs = self.client.list_pull_requests(
                state=self.config.pr_state, credentials=self.config.credentials
            )
        except httpx.HTTPError as e:
            logger.error("get_pull_requests: error while fetching PRs: %s", e)
            return Result.transport_error(str(e))

        if not prs:
            logger.info(
                "get_pull_requests: no %s PRs found in %s",
                self.config.pr_state,
                self.config.target_repo,
            )
            return Result.not_found(f"no {self.config.pr_state} pull requests")
        return Result.success(prs)

    def check_for_label(self, number: int) -> Result:
        """Report whether a PR carries the needs-review and reviewed labels."""
        if not number:
            logger.warning("check_for_label: insufficient parameters")
            return Result.invalid_input("PR number is required")

        try:
            labels = self.client.get_labels(number, credentials=self.config.credentials)
        except httpx.HTTPError as e:
            logger.error(
                "check_for_label: error while fetching labels for #%s: %s", number, e
            )
            return Result.transport_error(str(e))

        state: LabelState = scan_labels(
            labels, self.config.label_needs_review, self.config.label_reviewed
        )
        return Result.success(state)

    def _approval_bodies(self, number: int, operation: str) -> Result:
        """Fetch the comment bodies inspected for approvals."""
        if not number:
            logger.warning("%s: insufficient parameters", operation)
            return Result.invalid_input("PR number is required")

        try:
            comments = self.client.get_comments(
                number,
                per_page=APPROVAL_PAGE_SIZE,
                credentials=self.config.credentials,
            )
        except httpx.HTTPError as e:
            logger.error(
                "%s: error while fetching comments for #%s: %s", operation, number, e
            )
            return Result.transport_error(str(e))
        return Result.success([c.body for c in comments])

    def count_approval_comments(self, number: int) -> Result:
        """Count the comments on a PR that match the approval pattern."""
        fetched = self._approval_bodies(number, "count_approval_comments")
        if not fetched.ok:
            return fetched
        count = count_approvals(fetched.value, self.config.approval_pattern)
        logger.debug("#%s has %d approval comment(s)", number, count)
        return Result.success(count)

    def check_for_approval_comments(self, number: int) -> Result:
        """Decide whether a PR has enough approval comments."""
        fetched = self._approval_bodies(number, "check_for_approval_comments")
        if not fetched.ok:
            return fetched
        return Result.success(
            is_approved(
                fetched.value,
                self.config.reviews_needed,
                self.config.approval_pattern,
            )
        )

    def check_for_instructions_comment(self, number: int) -> Result:
        """Report whether the instructions comment is already on a PR."""
        if not number:
            logger.warning("check_for_instructions_comment: insufficient parameters")
            return Result.invalid_input("PR number is required")

        try:
            comments = self.client.get_comments(
                number, credentials=self.config.credentials
            )
        except httpx.HTTPError as e:
            logger.error(
                "check_for_instructions_comment: error while fetching comments "
                "for #%s: %s",
                number,
                e,
            )
            return Result.transport_error(str(e))

        return Result.success(
            instructions_posted(
                (c.body for c in comments), self.config.instructions
            )
        )

    def update_labels(
        self, number: int, approved: bool, labels: list[str] | None = None
    ) -> Result:
        """Label a PR as reviewed or needing review.

        The full label list is replaced only when something changed; an
        ``unchanged`` result carries the current labels and means no request
        was made.
        """
        labels = list(labels or [])
        if not number or not isinstance(approved, bool):
            logger.warning("update_labels: insufficient parameters")
            return Result.invalid_input("PR number and boolean approval are required")

        delta = compute_label_delta(
            labels,
            approved,
            self.config.label_needs_review,
            self.config.label_reviewed,
            mode=self.config.label_transitions,
        )
        if not delta.changed:
            return Result.unchanged(labels)

        credentials = self.config.credentials
        if credentials is None:
            logger.warning("update_labels: no credentials configured")
            return Result.invalid_input("credentials are required to edit labels")

        new_labels = delta.apply(labels)
        logger.info(
            "Labeling #%s: +%s -%s",
            number,
            list(delta.to_add),
            list(delta.to_remove),
        )
        try:
            response = self.client.edit_labels(number, new_labels, credentials)
        except httpx.HTTPError as e:
            logger.error("update_labels: error while trying to label #%s: %s", number, e)
            return Result.transport_error(str(e))
        return Result.success(response)

    def post_instructions_comment(self, number: int) -> Result:
        """Post the instructions comment on a PR."""
        if not number:
            logger.warning("post_instructions_comment: insufficient parameters")
            return Result.invalid_input("PR number is required")
        credentials = self.config.credentials
        if credentials is None:
            logger.warning("post_instructions_comment: no credentials configured")
            return Result.invalid_input("credentials are required to comment")

        logger.info("Posting instructions on #%s", number)
        try:
            response = self.client.create_comment(
                number, self.config.instructions, credentials
            )
        except httpx.HTTPError as e:
            logger.error(
                "post_instructions_comment: error while posting instructions "
                "on #%s: %s",
                number,
                e,
            )
            return Result.transport_error(str(e))
        return Result.success(response)

    def merge(self, number: int) -> Result:
        """Merge a PR with the configured merge method."""
        if not number:
            logger.warning("merge: insufficient parameters")
            return Result.invalid_input("PR number is required")
        credentials = self.config.credentials
        if credentials is None:
            logger.warning("merge: no credentials configured")
            return Result.invalid_input("credentials are required to merge")

        logger.info("Merging #%s (%s)", number, self.config.merge_method)
        try:
            response = self.client.merge_pull_request(
                number, credentials, merge_method=self.config.merge_method
            )
        except httpx.HTTPError as e:
            logger.error("merge: error while trying to merge #%s: %s", number, e)
            return Result.transport_error(str(e))
        return Result.success(response)
