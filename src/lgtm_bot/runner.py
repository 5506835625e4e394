"""Polling passes over the repository's pull requests.

A pass lists pull requests and, for each open one, syncs its review labels,
posts the instructions comment once and merges it when approved and
auto-merge is enabled.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from .bot import ReviewBot
from .evaluator import compute_label_delta
from .github_client import PullRequest
from .results import Outcome

logger = logging.getLogger(__name__)


@dataclass
class PullRequestReport:
    """What one pass did to a single pull request."""

    number: int
    approved: bool | None = None
    labels_added: list[str] = field(default_factory=list)
    labels_removed: list[str] = field(default_factory=list)
    label_outcome: str = ""
    instructions_posted: bool = False
    merged: bool = False
    skipped: str = ""


@dataclass
class PassReport:
    """Summary of one pass over the repository."""

    outcome: str
    pull_requests: list[PullRequestReport] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(1 for r in self.pull_requests if not r.skipped)

    @property
    def relabeled(self) -> int:
        return sum(1 for r in self.pull_requests if r.labels_added or r.labels_removed)


def process_pull_request(
    bot: ReviewBot, pr: PullRequest, dry_run: bool = False
) -> PullRequestReport:
    """Sync review labels, instructions and merge state for one PR.

    Args:
        bot: Bot bound to the target repository.
        pr: Pull request from the listing.
        dry_run: Compute what would change without mutating calls.

    Returns:
        PullRequestReport describing the actions taken (or planned).
    """
    report = PullRequestReport(number=pr.number)
    config = bot.config

    if pr.state != "open":
        report.skipped = f"state is {pr.state}"
        return report

    labeled = bot.check_for_label(pr.number)
    if not labeled.ok:
        report.skipped = f"labels: {labeled.outcome.value}"
        return report

    approval = bot.check_for_approval_comments(pr.number)
    if not approval.ok:
        report.skipped = f"comments: {approval.outcome.value}"
        return report
    report.approved = approval.value

    delta = compute_label_delta(
        labeled.value.labels,
        report.approved,
        config.label_needs_review,
        config.label_reviewed,
        mode=config.label_transitions,
    )
    if dry_run:
        report.label_outcome = "dry-run" if delta.changed else Outcome.UNCHANGED.value
    else:
        updated = bot.update_labels(pr.number, report.approved, labeled.value.labels)
        report.label_outcome = updated.outcome.value
    if delta.changed and report.label_outcome in (Outcome.SUCCESS.value, "dry-run"):
        report.labels_added = list(delta.to_add)
        report.labels_removed = list(delta.to_remove)

    if config.post_instructions:
        instructed = bot.check_for_instructions_comment(pr.number)
        if instructed.ok and not instructed.value:
            report.instructions_posted = (
                dry_run or bot.post_instructions_comment(pr.number).ok
            )

    if config.auto_merge and report.approved:
        report.merged = dry_run or bot.merge(pr.number).ok

    return report


def run_once(bot: ReviewBot, dry_run: bool = False) -> PassReport:
    """Run one pass over every listed pull request."""
    listed = bot.get_pull_requests()
    if not listed.ok:
        return PassReport(outcome=listed.outcome.value)

    report = PassReport(outcome=Outcome.SUCCESS.value)
    for pr in listed.value:
        report.pull_requests.append(process_pull_request(bot, pr, dry_run=dry_run))
    logger.info(
        "Pass complete: %d PR(s) processed, %d relabeled",
        report.processed,
        report.relabeled,
    )
    return report


def run_forever(
    bot: ReviewBot,
    interval: int,
    max_passes: int | None = None,
    dry_run: bool = False,
    on_pass: Callable[[PassReport], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Repeat passes every ``interval`` seconds.

    Args:
        bot: Bot bound to the target repository.
        interval: Seconds to wait between passes.
        max_passes: Stop after this many passes. Runs until interrupted
            when None.
        dry_run: Compute changes without mutating calls.
        on_pass: Called with each PassReport.
        sleep: Sleep function, replaced in tests.

    Returns:
        Number of passes run.
    """
    passes = 0
    while max_passes is None or passes < max_passes:
        report = run_once(bot, dry_run=dry_run)
        passes += 1
        if on_pass is not None:
            on_pass(report)
        if max_passes is not None and passes >= max_passes:
            break
        sleep(interval)
    return passes
