"""Model backends and the structured-output inference provider."""

from typing import Dict, Type, Union

from ..config import LLMConfig
from ..exceptions import ConfigurationError
from .base import (
    SENTINEL_KEY,
    BackendResponse,
    InferenceProvider,
    InferenceRequest,
    ModelBackend,
    ModelFamily,
    ModelHandle,
)
from .gemini import GeminiBackend
from .openai_backend import OpenAIBackend

BACKENDS: Dict[ModelFamily, Type[ModelBackend]] = {
    ModelFamily.GEMINI: GeminiBackend,
    ModelFamily.OPENAI: OpenAIBackend,
}


def create_backend(family: Union[str, ModelFamily], api_key: str) -> ModelBackend:
    """Create the backend registered for a model family."""
    try:
        family = ModelFamily(family)
    except ValueError:
        raise ConfigurationError(
            f"Unknown LLM provider '{family}'. "
            f"Choose one of: {', '.join(f.value for f in ModelFamily)}."
        )
    if not api_key:
        raise ConfigurationError(
            "LLM API key is required. Set LLM_API_KEY environment variable."
        )
    return BACKENDS[family](api_key)


def create_provider(llm: LLMConfig, debug: bool = False) -> InferenceProvider:
    """Build an InferenceProvider from the LLM section of the config."""
    backend = create_backend(llm.family, llm.api_key)
    return InferenceProvider(backend, llm.model_name, debug=debug)


__all__ = [
    "SENTINEL_KEY",
    "BACKENDS",
    "BackendResponse",
    "InferenceProvider",
    "InferenceRequest",
    "ModelBackend",
    "ModelFamily",
    "ModelHandle",
    "create_backend",
    "create_provider",
]
