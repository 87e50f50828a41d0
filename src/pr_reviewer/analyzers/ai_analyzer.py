"""
AI-powered diff analysis on top of the inference provider.

This module describes the structured review the model must return and
builds the request for a pull request diff.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..adapters.base_adapter import PRInfo
from ..providers import InferenceProvider, InferenceRequest

MAX_DIFF_CHARS = 8000


class AIFeedback(BaseModel):
    """A single review finding."""

    file_path: Optional[str] = Field(None, description="File the finding applies to")
    line_number: Optional[int] = Field(
        None, description="Line in the new version of the file"
    )
    severity: Literal["critical", "error", "warning", "suggestion", "info"]
    category: str = Field(
        ...,
        description="security, performance, architecture, maintainability, style, testing or documentation",
    )
    title: str
    message: str
    suggestion: Optional[str] = None
    confidence: float = Field(0.8, ge=0.0, le=1.0)


class CodeQualityScore(BaseModel):
    """Overall quality scoring, each value 0-100."""

    overall: int = Field(..., ge=0, le=100)
    security: int = Field(..., ge=0, le=100)
    maintainability: int = Field(..., ge=0, le=100)


class ReviewAnalysis(BaseModel):
    """Structured review returned by the model."""

    summary: str
    feedback: List[AIFeedback] = Field(default_factory=list)
    score: Optional[CodeQualityScore] = None


SYSTEM_PROMPT = """You are a senior software engineer reviewing a pull request.
Focus on correctness, security, performance and maintainability.
Only report issues introduced or touched by the diff, reference the file path
and the line in the new version of the file, and keep each finding actionable.
Limit yourself to the 15 most important findings."""


class AIAnalyzer:
    """Reviews pull request diffs through an InferenceProvider."""

    def __init__(self, provider: InferenceProvider, temperature: float = 0.0):
        self.provider = provider
        self.temperature = temperature

    async def analyze_diff(self, diff_text: str, pr_info: PRInfo) -> ReviewAnalysis:
        """
        Analyze a diff and return the structured review.

        Raises:
            SchemaValidationError: If the model response does not match
                ReviewAnalysis
        """
        request = InferenceRequest(
            prompt=self._prepare_context(diff_text, pr_info),
            system=SYSTEM_PROMPT,
            temperature=self.temperature,
            schema=ReviewAnalysis,
        )
        return await self.provider.run_inference(request)

    def _prepare_context(self, diff_text: str, pr_info: PRInfo) -> str:
        """Prepare context for AI analysis."""
        context_parts = [f"**PR Title:** {pr_info.title}"]

        if pr_info.description:
            context_parts.append(f"**PR Description:** {pr_info.description[:500]}")

        context_parts.append("**Code Changes:**")
        context_parts.append("```diff")

        # Truncate diff if too long
        if len(diff_text) > MAX_DIFF_CHARS:
            diff_text = diff_text[:MAX_DIFF_CHARS] + "\n\n... (diff truncated for analysis)"

        context_parts.append(diff_text)
        context_parts.append("```")

        return "\n".join(context_parts)
