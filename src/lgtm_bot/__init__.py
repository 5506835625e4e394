"""lgtm-bot: label pull requests by review state from LGTM comments."""

__version__ = "0.1.0"

# Shared types
from .github_client import Comment, PullRequest
from .results import Outcome, Result

__all__ = ["Comment", "PullRequest", "Outcome", "Result", "__version__"]
