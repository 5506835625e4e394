"""Review-state decisions.

Pure functions that turn fetched labels and comment bodies into a review
status and the label delta needed to reach it. Nothing here performs I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from .config import ATOMIC, DEFAULT_APPROVAL_PATTERN, STEPWISE

# Characters compared when looking for an already-posted instructions comment
INSTRUCTIONS_PREFIX = slice(1, 30)

# Current label states
NONE = "none"
NEEDS_REVIEW = "needs-review"
REVIEWED = "reviewed"
BOTH = "both"

# Symbolic actions, resolved to configured label names by compute_label_delta
_ADD_NR = ("add", NEEDS_REVIEW)
_ADD_RV = ("add", REVIEWED)
_DROP_NR = ("remove", NEEDS_REVIEW)
_DROP_RV = ("remove", REVIEWED)

# (current state, approved) -> actions moving straight to the desired label
ATOMIC_TRANSITIONS: dict[tuple[str, bool], tuple[tuple[str, str], ...]] = {
    (NONE, True): (_ADD_RV,),
    (NEEDS_REVIEW, True): (_DROP_NR, _ADD_RV),
    (REVIEWED, True): (),
    (BOTH, True): (_DROP_NR,),
    (NONE, False): (_ADD_NR,),
    (NEEDS_REVIEW, False): (),
    (REVIEWED, False): (_DROP_RV, _ADD_NR),
    (BOTH, False): (_DROP_RV,),
}

# One action per call: needs-review -> reviewed takes two passes
STEPWISE_TRANSITIONS: dict[tuple[str, bool], tuple[tuple[str, str], ...]] = {
    (NONE, True): (_ADD_RV,),
    (NEEDS_REVIEW, True): (_DROP_NR,),
    (REVIEWED, True): (),
    (BOTH, True): (_DROP_NR,),
    (NONE, False): (_ADD_NR,),
    (NEEDS_REVIEW, False): (),
    (REVIEWED, False): (_DROP_RV,),
    (BOTH, False): (_DROP_RV,),
}

_TRANSITIONS = {ATOMIC: ATOMIC_TRANSITIONS, STEPWISE: STEPWISE_TRANSITIONS}


@dataclass
class LabelState:
    """How a pull request is currently labeled."""

    labeled_needs_review: bool = False
    labeled_reviewed: bool = False
    labels: list[str] = field(default_factory=list)

    @property
    def state(self) -> str:
        if self.labeled_needs_review and self.labeled_reviewed:
            return BOTH
        if self.labeled_needs_review:
            return NEEDS_REVIEW
        if self.labeled_reviewed:
            return REVIEWED
        return NONE


@dataclass(frozen=True)
class LabelDelta:
    """Labels to add and remove to reach the desired review state."""

    to_add: tuple[str, ...] = ()
    to_remove: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.to_add or self.to_remove)

    def apply(self, labels: Iterable[str]) -> list[str]:
        """Return the full label list after this delta.

        Untracked labels keep their order; every copy of a removed label goes.
        """
        result = [name for name in labels if name not in self.to_remove]
        for name in self.to_add:
            if name not in result:
                result.append(name)
        return result


def scan_labels(
    labels: Iterable[str], label_needs_review: str, label_reviewed: str
) -> LabelState:
    """Scan label names once for the two tracked labels."""
    state = LabelState()
    for name in labels:
        if name == label_needs_review:
            state.labeled_needs_review = True
        if name == label_reviewed:
            state.labeled_reviewed = True
        state.labels.append(name)
    return state


def count_approvals(
    bodies: Iterable[str | None], pattern: str = DEFAULT_APPROVAL_PATTERN
) -> int:
    compiled = re.compile(pattern)
    return sum(1 for body in bodies if body and compiled.search(body))


def is_approved(
    bodies: Iterable[str | None],
    reviews_needed: int,
    pattern: str = DEFAULT_APPROVAL_PATTERN,
) -> bool:
    """Whether enough approval comments have been posted."""
    return count_approvals(bodies, pattern) >= reviews_needed


def instructions_posted(bodies: Iterable[str | None], template: str) -> bool:
    """Whether any comment starts like the instructions template.

    Compares characters 1 through 29 of each body, trimmed, against the same
    window of the template. Shorter bodies compare whatever is there.
    """
    expected = template[INSTRUCTIONS_PREFIX].strip()
    for body in bodies:
        if (body or "")[INSTRUCTIONS_PREFIX].strip() == expected:
            return True
    return False


def compute_label_delta(
    labels: Iterable[str] | None,
    approved: bool,
    label_needs_review: str,
    label_reviewed: str,
    mode: str = ATOMIC,
) -> LabelDelta:
    """Work out the labels to add and remove for the given review status.

    Args:
        labels: Current label names. None is treated as no labels.
        approved: Whether the pull request has enough approvals.
        label_needs_review: Configured name of the needs-review label.
        label_reviewed: Configured name of the reviewed label.
        mode: ``atomic`` moves straight to the desired label;
            ``stepwise`` performs at most one action per call.

    Returns:
        The LabelDelta to apply.

    Raises:
        ValueError: If ``mode`` is unknown.
    """
    if mode not in _TRANSITIONS:
        raise ValueError(
            f"Unknown transition mode '{mode}'. Available: {', '.join(_TRANSITIONS)}"
        )
    state = scan_labels(labels or [], label_needs_review, label_reviewed).state
    names = {NEEDS_REVIEW: label_needs_review, REVIEWED: label_reviewed}

    to_add: list[str] = []
    to_remove: list[str] = []
    for action, target in _TRANSITIONS[mode][(state, bool(approved))]:
        (to_add if action == "add" else to_remove).append(names[target])
    return LabelDelta(to_add=tuple(to_add), to_remove=tuple(to_remove))
