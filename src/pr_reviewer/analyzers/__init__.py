"""Analyzers that turn a pull request diff into review feedback."""

from .ai_analyzer import AIAnalyzer, AIFeedback, CodeQualityScore, ReviewAnalysis

__all__ = ["AIAnalyzer", "AIFeedback", "CodeQualityScore", "ReviewAnalysis"]
