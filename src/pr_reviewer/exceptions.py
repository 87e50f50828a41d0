"""
Exception types for the PR Reviewer.

Resolution errors fail fast with an instructional message; inference and
validation errors propagate to the caller of the review flow.
"""

from typing import Any, Dict, Optional


class PRReviewerError(Exception):
    """Base class for all PR Reviewer errors."""


class ConfigurationError(PRReviewerError):
    """Raised when the configuration cannot support the requested flow."""


class NoCredentialError(PRReviewerError):
    """Raised when no GitHub token can be resolved from any source."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "No GITHUB_TOKEN found; set env/.env or run `gh auth login`."
        )


class ExternalProcessError(PRReviewerError):
    """Raised when an external command (such as `gh`) fails or is missing."""

    def __init__(self, command: str, detail: str):
        self.command = command
        self.detail = detail
        super().__init__(f"`{command}` failed: {detail}")


class FileIOError(PRReviewerError):
    """Raised when a local file cannot be read or written."""

    def __init__(self, path: Any, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class TranscriptWriteError(FileIOError):
    """Raised when a captured transcript cannot be flushed to disk."""


class SchemaValidationError(PRReviewerError):
    """Raised when a model response does not conform to the requested schema."""

    def __init__(self, value: Any, schema: Dict[str, Any], detail: str):
        self.value = value
        self.schema = schema
        self.detail = detail
        super().__init__(
            f"Model response does not match schema: {detail}\nValue: {value!r}"
        )
