"""
PR Reviewer - AI-powered Pull Request review from the command line

Resolves GitHub credentials, simulates the GitHub Actions pull request
event for local runs, and reviews pull requests through a pluggable
structured-output model backend.
"""

__version__ = "1.0.0"
__author__ = "PR Reviewer Team"
__description__ = "AI-powered Pull Request reviewer"

from .config import ConfigManager, ReviewerConfig
from .credentials import resolve_token
from .providers import InferenceProvider, InferenceRequest

__all__ = [
    "ConfigManager",
    "ReviewerConfig",
    "InferenceProvider",
    "InferenceRequest",
    "resolve_token",
]
