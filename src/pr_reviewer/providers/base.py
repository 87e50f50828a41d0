"""
Structured-output inference over interchangeable model backends.

The provider turns a pydantic-describable schema into JSON Schema itself and
hands that to the backend, then validates whatever comes back against the
original schema. Some backends mis-handle SDK-side schema wrapping and nest
the real payload under a `$PARAMETER_NAME` key; that wrapper is removed
before validation.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError

from ..exceptions import SchemaValidationError

logger = logging.getLogger(__name__)

SENTINEL_KEY = "$PARAMETER_NAME"


class ModelFamily(str, Enum):
    """Supported model backend families."""

    GEMINI = "gemini"
    OPENAI = "openai"


@dataclass(frozen=True)
class InferenceRequest:
    """A single structured-output request."""

    prompt: str
    schema: Any  # pydantic model or any type TypeAdapter accepts
    system: Optional[str] = None
    temperature: Optional[float] = 0


@dataclass
class BackendResponse:
    """Raw object and usage metadata returned by a backend."""

    object: Any
    usage: Dict[str, Any] = field(default_factory=dict)


class ModelHandle(ABC):
    """A callable handle on one model of a backend."""

    def __init__(self, model_name: str):
        self.model_name = model_name

    @abstractmethod
    async def generate_object(
        self,
        prompt: str,
        system: Optional[str],
        temperature: float,
        json_schema: Dict[str, Any],
    ) -> BackendResponse:
        """
        Generate a JSON object for a prompt.

        Args:
            prompt: User prompt
            system: Optional system instruction
            temperature: Sampling temperature
            json_schema: JSON Schema the object should follow

        Returns:
            BackendResponse with the decoded object and usage metadata
        """
        pass


class ModelBackend(ABC):
    """Factory for model handles of one backend family."""

    family: ModelFamily

    def __init__(self, api_key: str):
        self.api_key = api_key

    @abstractmethod
    def model(self, model_name: str) -> ModelHandle:
        """Create a handle for the named model."""
        pass


def parse_json_text(text: Optional[str], json_schema: Dict[str, Any]) -> Any:
    """Decode a backend's JSON text, tolerating markdown code fences."""
    content = (text or "").strip()

    # Only a response that is itself a fenced block is unwrapped; fences
    # inside JSON string values are left alone
    if content.startswith("```"):
        body = content[3:]
        if body.startswith("json"):
            body = body[4:]
        end = body.rfind("```")
        if end != -1:
            body = body[:end]
        content = body.strip()

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise SchemaValidationError(text, json_schema, f"invalid JSON: {e}") from e


class InferenceProvider:
    """Runs structured-output requests against a configured backend."""

    def __init__(self, backend: ModelBackend, model_name: str, debug: bool = False):
        """
        Initialize the provider.

        Args:
            backend: Model backend to send requests to
            model_name: Model to use on that backend
            debug: Log usage metadata for every call
        """
        self.backend = backend
        self.model_name = model_name
        self.debug = debug

    async def run_inference(self, request: InferenceRequest) -> Any:
        """
        Run a structured-output request.

        Args:
            request: Prompt, optional system text, temperature and schema

        Returns:
            The response validated against request.schema

        Raises:
            SchemaValidationError: If the response (raw or unwrapped) does
                not conform to the schema
        """
        adapter = TypeAdapter(request.schema)
        json_schema = adapter.json_schema()

        handle = self.backend.model(self.model_name)
        response = await handle.generate_object(
            prompt=request.prompt,
            system=request.system,
            temperature=request.temperature or 0,
            json_schema=json_schema,
        )

        if self.debug:
            logger.info("usage: \n%s", json.dumps(response.usage, indent=2, default=str))

        value = response.object
        if isinstance(value, dict) and SENTINEL_KEY in value:
            logger.debug("Unwrapping response nested under %s", SENTINEL_KEY)
            value = value[SENTINEL_KEY]

        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            raise SchemaValidationError(value, json_schema, str(e)) from e
