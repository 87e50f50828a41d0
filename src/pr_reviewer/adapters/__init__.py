"""Adapters package for git hosting providers."""

from .base_adapter import BaseAdapter, PRInfo, PRSummary, ReviewComment
from .github_adapter import GitHubAdapter

__all__ = ["BaseAdapter", "GitHubAdapter", "PRInfo", "PRSummary", "ReviewComment"]
