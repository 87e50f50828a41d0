"""
OpenAI (and OpenAI-compatible) chat completions backend.
"""

import re
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from .base import BackendResponse, ModelBackend, ModelFamily, ModelHandle, parse_json_text


def _schema_name(json_schema: Dict[str, Any]) -> str:
    name = re.sub(r"[^a-zA-Z0-9_-]", "_", str(json_schema.get("title") or ""))
    return name[:64] or "response"


class OpenAIModelHandle(ModelHandle):
    """Handle on a single chat completions model."""

    def __init__(self, client: AsyncOpenAI, model_name: str):
        super().__init__(model_name)
        self.client = client

    async def generate_object(
        self,
        prompt: str,
        system: Optional[str],
        temperature: float,
        json_schema: Dict[str, Any],
    ) -> BackendResponse:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=messages,
            temperature=temperature,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": _schema_name(json_schema), "schema": json_schema},
            },
        )

        content = response.choices[0].message.content
        usage = response.usage.model_dump() if response.usage is not None else {}
        return BackendResponse(object=parse_json_text(content, json_schema), usage=usage)


class OpenAIBackend(ModelBackend):
    """Backend for OpenAI chat completion models."""

    family = ModelFamily.OPENAI

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        super().__init__(api_key)
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    def model(self, model_name: str) -> ModelHandle:
        return OpenAIModelHandle(self.client, model_name)
