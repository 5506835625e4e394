"""Instructions comment rendering."""
from __future__ import annotations

from pathlib import Path

import jinja2

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def _load_template() -> jinja2.Template:
    """Load the instructions comment Jinja2 template."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
    )
    return env.get_template("instructions_comment.md.j2")


def render_instructions(
    label_needs_review: str,
    label_reviewed: str,
    reviews_needed: int,
    auto_merge: bool = False,
) -> str:
    """Render the default instructions comment posted once per pull request.

    Args:
        label_needs_review: Name of the label for unreviewed PRs.
        label_reviewed: Name of the label for approved PRs.
        reviews_needed: Number of approval comments required.
        auto_merge: Whether approved PRs are merged by the bot.

    Returns:
        The comment body in Markdown.
    """
    template = _load_template()
    return template.render(
        label_needs_review=label_needs_review,
        label_reviewed=label_reviewed,
        reviews_needed=reviews_needed,
        auto_merge=auto_merge,
    )
