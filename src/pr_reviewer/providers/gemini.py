"""
Google Gemini backend.
"""

from typing import Any, Dict, Optional

import google.generativeai as genai

from .base import BackendResponse, ModelBackend, ModelFamily, ModelHandle, parse_json_text

# Keys of the OpenAPI subset Gemini accepts for response_schema
_SUPPORTED_KEYS = {
    "type",
    "format",
    "description",
    "nullable",
    "enum",
    "items",
    "properties",
    "required",
    "minItems",
    "maxItems",
    "minimum",
    "maximum",
}


def to_gemini_schema(json_schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert pydantic JSON Schema to Gemini's response_schema dialect.

    $ref pointers are inlined from $defs, Optional[X] (anyOf with null)
    becomes a nullable X, and unsupported keywords are dropped.
    """
    defs = json_schema.get("$defs", {})

    def convert(node: Dict[str, Any]) -> Dict[str, Any]:
        if "$ref" in node:
            name = node["$ref"].rsplit("/", 1)[-1]
            merged = {**defs[name], **{k: v for k, v in node.items() if k != "$ref"}}
            return convert(merged)

        if "anyOf" in node:
            variants = [v for v in node["anyOf"] if v.get("type") != "null"]
            nullable = len(variants) < len(node["anyOf"])
            base = convert(variants[0]) if variants else {"type": "STRING"}
            if nullable:
                base["nullable"] = True
            if node.get("description"):
                base["description"] = node["description"]
            return base

        result = {}
        for key, value in node.items():
            if key not in _SUPPORTED_KEYS:
                continue
            if key == "type":
                result[key] = str(value).upper()
            elif key == "properties":
                result[key] = {name: convert(prop) for name, prop in value.items()}
            elif key == "items":
                result[key] = convert(value)
            else:
                result[key] = value
        return result

    return convert(json_schema)


def _usage(response: Any) -> Dict[str, Any]:
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return {}
    return {
        "prompt_tokens": getattr(metadata, "prompt_token_count", None),
        "completion_tokens": getattr(metadata, "candidates_token_count", None),
        "total_tokens": getattr(metadata, "total_token_count", None),
    }


class GeminiModelHandle(ModelHandle):
    """Handle on a single Gemini model."""

    async def generate_object(
        self,
        prompt: str,
        system: Optional[str],
        temperature: float,
        json_schema: Dict[str, Any],
    ) -> BackendResponse:
        model = genai.GenerativeModel(
            model_name=self.model_name, system_instruction=system
        )
        response = await model.generate_content_async(
            prompt,
            generation_config=genai.types.GenerationConfig(
                temperature=temperature,
                response_mime_type="application/json",
                response_schema=to_gemini_schema(json_schema),
            ),
        )
        return BackendResponse(
            object=parse_json_text(response.text, json_schema),
            usage=_usage(response),
        )


class GeminiBackend(ModelBackend):
    """Backend for Google Gemini models."""

    family = ModelFamily.GEMINI

    def __init__(self, api_key: str):
        super().__init__(api_key)
        genai.configure(api_key=api_key)

    def model(self, model_name: str) -> ModelHandle:
        return GeminiModelHandle(model_name)
