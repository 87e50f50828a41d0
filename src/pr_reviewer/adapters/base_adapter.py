"""
Base adapter interface for git hosting providers.

This module defines the narrow platform interface the reviewer depends on:
listing pull requests, reading a pull request and its diff, and writing
review feedback back to it.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional
from dataclasses import dataclass


@dataclass
class PRSummary:
    """One entry of a pull request listing."""

    number: int
    title: str
    author: str


@dataclass
class PRInfo:
    """Data class representing Pull Request information."""

    number: int
    title: str
    description: str
    source_branch: str
    target_branch: str
    author: str
    state: str
    head_sha: str
    html_url: str


@dataclass
class ReviewComment:
    """Data class representing an inline review comment."""

    body: str
    file_path: str
    line_number: int
    side: str = "RIGHT"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.file_path,
            "line": self.line_number,
            "side": self.side,
            "body": self.body,
        }


class BaseAdapter(ABC):
    """Abstract base class for git hosting provider adapters."""

    def __init__(self, token: Optional[str] = None, api_url: Optional[str] = None):
        """
        Initialize the adapter.

        Args:
            token: API token for authentication
            api_url: Base API URL (for self-hosted instances)
        """
        self.token = token
        self.api_url = api_url

    @abstractmethod
    def list_pull_requests(
        self, owner: str, repo: str, state: str = "open", limit: int = 10
    ) -> List[PRSummary]:
        """
        List pull requests across result pages.

        Args:
            owner: Repository owner
            repo: Repository name
            state: open, closed or all
            limit: Maximum number of pull requests to return

        Returns:
            PRSummary objects in the order the server returned them
        """
        pass

    @abstractmethod
    def get_pr_info(self, owner: str, repo: str, pr_number: int) -> PRInfo:
        """Get pull request information."""
        pass

    @abstractmethod
    def get_pr_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """Get the unified diff for a pull request."""
        pass

    @abstractmethod
    def post_review_comment(
        self, owner: str, repo: str, pr_number: int, body: str
    ) -> Dict[str, Any]:
        """Post a general comment on the pull request."""
        pass

    @abstractmethod
    def create_pull_request_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        event: str = "COMMENT",
        comments: Optional[List[ReviewComment]] = None,
        commit_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a pull request review with optional inline comments.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            body: Review summary
            event: Review event type (COMMENT, APPROVE, REQUEST_CHANGES)
            comments: Inline comments
            commit_id: Commit the review applies to

        Returns:
            API response data
        """
        pass
