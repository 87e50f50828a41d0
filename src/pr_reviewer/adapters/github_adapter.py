"""
GitHub adapter implementation for the PR Reviewer.

This module provides GitHub-specific implementation of the BaseAdapter interface.
It handles GitHub API interactions for listing and fetching PR data and
posting reviews.
"""

import logging
import os
import requests
from typing import Dict, Iterator, List, Any, Optional

from .base_adapter import BaseAdapter, PRInfo, PRSummary, ReviewComment

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
MAX_PAGE_SIZE = 100


class GitHubAdapter(BaseAdapter):
    """GitHub implementation of the BaseAdapter interface."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub adapter.

        Args:
            token: GitHub personal access token
            api_url: GitHub API URL (defaults to public GitHub)
            session: Preconfigured requests session
        """
        super().__init__(token, api_url)
        self.token = token or os.environ.get("GITHUB_TOKEN")
        self.api_url = (
            api_url or os.environ.get("GITHUB_API_URL") or "https://api.github.com"
        ).rstrip("/")

        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable or pass token parameter."
            )

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {self.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    def paginate(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Iterator[Dict[str, Any]]:
        """
        Iterate over every item of a paginated list endpoint.

        Follows the `Link: rel="next"` header until the last page.
        """
        next_url: Optional[str] = url
        next_params = params
        while next_url:
            logger.debug("GET %s", next_url)
            response = self.session.get(
                next_url, params=next_params, timeout=REQUEST_TIMEOUT
            )
            response.raise_for_status()
            for item in response.json():
                yield item

            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            next_params = None

    def list_pull_requests(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        limit: int = 10,
        per_page: int = MAX_PAGE_SIZE,
    ) -> List[PRSummary]:
        """List pull requests, stopping once `limit` items are collected."""
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls"
        params = {"state": state, "per_page": min(per_page, MAX_PAGE_SIZE)}

        pulls = []
        if limit <= 0:
            return pulls

        for data in self.paginate(url, params):
            pulls.append(
                PRSummary(
                    number=data["number"],
                    title=data["title"],
                    author=(data.get("user") or {}).get("login", ""),
                )
            )
            if len(pulls) >= limit:
                break

        return pulls

    def get_pr_info(self, owner: str, repo: str, pr_number: int) -> PRInfo:
        """Get pull request information from GitHub."""
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}"
        response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()

        data = response.json()

        return PRInfo(
            number=data["number"],
            title=data["title"],
            description=data["body"] or "",
            source_branch=data["head"]["ref"],
            target_branch=data["base"]["ref"],
            author=data["user"]["login"],
            state=data["state"],
            head_sha=data["head"]["sha"],
            html_url=data["html_url"],
        )

    def get_pr_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """Get the unified diff for the pull request."""
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}"
        headers = {"Accept": "application/vnd.github.v3.diff"}

        response = self.session.get(url, headers=headers, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()

        return response.text

    def post_review_comment(
        self, owner: str, repo: str, pr_number: int, body: str
    ) -> Dict[str, Any]:
        """Post a general comment on the pull request."""
        url = f"{self.api_url}/repos/{owner}/{repo}/issues/{pr_number}/comments"
        payload = {"body": body}

        response = self.session.post(url, json=payload, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()

        return response.json()

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
        """Create a pull request review with optional inline comments."""
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}/reviews"

        payload = {"body": body, "event": event}

        if comments:
            payload["comments"] = [comment.to_payload() for comment in comments]
        if commit_id:
            payload["commit_id"] = commit_id

        response = self.session.post(url, json=payload, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()

        return response.json()
