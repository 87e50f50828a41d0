"""
Reporter module for formatting and publishing PR review feedback.

In dry-run mode the formatted review is printed to the console; otherwise
it is posted as a single pull request review through the adapter.
"""

import logging
from typing import List, Dict, Any

import requests

from .adapters.base_adapter import BaseAdapter, PRInfo, ReviewComment
from .analyzers.ai_analyzer import AIFeedback, ReviewAnalysis
from .environment import ReviewEnvironment
from .transcript import Console

logger = logging.getLogger(__name__)

INLINE_SEVERITIES = ("critical", "error", "warning")


class Reporter:
    """Handles formatting and posting of PR review results."""

    def __init__(self, adapter: BaseAdapter, console: Console):
        """
        Initialize the reporter.

        Args:
            adapter: Git server adapter for posting reviews
            console: Console for dry-run output
        """
        self.adapter = adapter
        self.console = console

    def publish(
        self, environment: ReviewEnvironment, pr_info: PRInfo, analysis: ReviewAnalysis
    ) -> Dict[str, Any]:
        """
        Publish a review, or print it when the environment is a dry run.

        Returns:
            Dictionary with posting results
        """
        body = self.generate_summary(analysis)
        comments = self.build_inline_comments(analysis.feedback)
        results = {"posted": False, "inline_comments": 0, "dry_run": environment.dry_run}

        if environment.dry_run:
            self.print_review(body, comments)
            return results

        try:
            self.adapter.create_pull_request_review(
                environment.owner,
                environment.repo,
                environment.pr_number,
                body=body,
                comments=comments,
                commit_id=pr_info.head_sha,
            )
            results["inline_comments"] = len(comments)
        except requests.HTTPError as e:
            # Inline comments outside the diff are rejected with 422
            if not comments or e.response is None or e.response.status_code != 422:
                raise
            logger.warning(
                "Inline comments rejected (%s); posting summary only", e
            )
            self.adapter.post_review_comment(
                environment.owner, environment.repo, environment.pr_number, body
            )

        results["posted"] = True
        return results

    def print_review(self, body: str, comments: List[ReviewComment]) -> None:
        """Print results to the console (dry run mode)."""
        self.console.print("DRY RUN - Review Results")
        self.console.print("=" * 50)
        self.console.print(body)

        if comments:
            self.console.print(f"\nInline comments ({len(comments)}):")
            for comment in comments:
                self.console.print(f"  {comment.file_path}:{comment.line_number}")
                for line in comment.body.splitlines():
                    self.console.print(f"    {line}")
                self.console.print()

    def generate_summary(self, analysis: ReviewAnalysis) -> str:
        """Generate the review summary body."""
        lines = ["# PR Review", ""]

        if analysis.score:
            lines.append(f"**Overall Score: {analysis.score.overall}/100**")
            lines.append(f"- **Security:** {analysis.score.security}/100")
            lines.append(f"- **Maintainability:** {analysis.score.maintainability}/100")
            lines.append("")

        lines.append(analysis.summary)

        severity_counts = self._count_by_severity(analysis.feedback)
        if severity_counts:
            lines.append("")
            lines.append("### Issue Severity Breakdown")
            for severity, count in severity_counts.items():
                lines.append(f"- **{severity.title()}:** {count}")

        general = [item for item in analysis.feedback if not self._is_inline(item)]
        if general:
            lines.append("")
            lines.append("## General Feedback")
            lines.append("")
            for item in general:
                location = f"**{item.file_path}**: " if item.file_path else ""
                lines.append(f"- {location}{item.title}. {item.message}")

        lines.append("")
        lines.append("---")
        lines.append(
            "*This review was generated automatically. Please use your judgment for final decisions.*"
        )

        return "\n".join(lines)

    def build_inline_comments(self, feedback: List[AIFeedback]) -> List[ReviewComment]:
        return [
            ReviewComment(
                body=self._format_ai_feedback_comment(item),
                file_path=item.file_path,
                line_number=item.line_number,
            )
            for item in feedback
            if self._is_inline(item)
        ]

    def _is_inline(self, item: AIFeedback) -> bool:
        return bool(
            item.file_path and item.line_number and item.severity in INLINE_SEVERITIES
        )

    def _format_ai_feedback_comment(self, feedback: AIFeedback) -> str:
        """Format AI feedback as an inline comment."""
        lines = [
            f"**AI Review** - {feedback.category.title()} ({feedback.severity.title()})",
            "",
            f"**{feedback.title}**",
            "",
            feedback.message,
        ]

        if feedback.suggestion:
            lines.append("")
            lines.append("**Suggested improvement:**")
            lines.append("```")
            lines.append(feedback.suggestion)
            lines.append("```")

        lines.append(f"\n*Confidence: {feedback.confidence:.0%}*")

        return "\n".join(lines)

    def _count_by_severity(self, feedback: List[AIFeedback]) -> Dict[str, int]:
        counts = {}
        for item in feedback:
            counts[item.severity] = counts.get(item.severity, 0) + 1
        return counts
