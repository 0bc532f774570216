"""OpenAI Responses API client for the nutritionist backend."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutriwise.services.nutritionist import NutritionistClient


@dataclass
class OpenAINutritionistClient(NutritionistClient):
    """Nutritionist client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAINutritionistClient":
        """Create an OpenAI nutritionist client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str | None,
        prompt: str,
        image_data_url: str | None,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if instructions:
            request_payload["instructions"] = instructions
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(_strip_code_fences(output_text))

    async def generate_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str | None,
        messages: list[dict[str, str]],
    ) -> str:
        """Call OpenAI Responses API for a plain text reply."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": messages,
            "store": store,
        }
        if instructions:
            request_payload["instructions"] = instructions
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        return response.output_text or ""


def _strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper around model output."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.removeprefix("```json").removeprefix("```")
        cleaned = cleaned.removesuffix("```")
    return cleaned.strip()
