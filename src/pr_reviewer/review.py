"""
Pull request review flow.

Reads everything it needs from the ReviewEnvironment built by the
dispatcher: fetches the pull request, asks the model for a structured
review and hands the result to the reporter.
"""

import logging
from typing import Any, Dict, Optional

from .adapters.base_adapter import BaseAdapter
from .analyzers.ai_analyzer import AIAnalyzer
from .environment import PULL_REQUEST_EVENT, ReviewEnvironment
from .reporter import Reporter
from .transcript import Console

logger = logging.getLogger(__name__)

REVIEWABLE_ACTIONS = ("opened", "synchronize", "reopened")


async def handle_pull_request(
    environment: ReviewEnvironment,
    adapter: BaseAdapter,
    analyzer: AIAnalyzer,
    reporter: Reporter,
    console: Console,
) -> Optional[Dict[str, Any]]:
    """
    Review the pull request described by the environment.

    Returns:
        The reporter's results, or None when there was nothing to review

    Raises:
        SchemaValidationError: If the model response cannot be validated
    """
    if (
        environment.event_name != PULL_REQUEST_EVENT
        or environment.event_action not in REVIEWABLE_ACTIONS
    ):
        logger.info(
            "Skipping %s.%s event", environment.event_name, environment.event_action
        )
        return None

    owner, repo, number = environment.owner, environment.repo, environment.pr_number
    console.print(f"Reviewing {owner}/{repo}#{number}")

    pr_info = adapter.get_pr_info(owner, repo, number)
    console.print(f"PR: {pr_info.title}")
    console.print(f"Author: {pr_info.author}")
    console.print(f"{pr_info.source_branch} -> {pr_info.target_branch}")

    diff_text = adapter.get_pr_diff(owner, repo, number)
    if not diff_text.strip():
        logger.warning("No changes found in PR #%s", number)
        return None

    analysis = await analyzer.analyze_diff(diff_text, pr_info)
    logger.debug("Model returned %d feedback items", len(analysis.feedback))

    results = reporter.publish(environment, pr_info, analysis)
    if results["posted"]:
        console.print(
            f"Review posted with {results['inline_comments']} inline comments"
        )
    return results
