"""OpenAI Responses API client for piece recognition."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from marble_catalog.domain.errors import RecognitionFailed
from marble_catalog.services.recognition import RecognitionClient


@dataclass
class OpenAIRecognitionClient(RecognitionClient):
    """Recognition client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIRecognitionClient":
        """Create an OpenAI recognition client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def detect(  # noqa: PLR0913
        self,
        *,
        model: str,
        max_output_tokens: int,
        image_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> object:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_url},
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "piece_detections",
                    "strict": True,
                    "schema": schema,
                }
            },
            "max_output_tokens": max_output_tokens,
        }

        try:
            response = await self.client.responses.create(**request_payload)
        except OpenAIError as exc:
            raise RecognitionFailed(f"OpenAI API error: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise RecognitionFailed("OpenAI returned an empty response")
        try:
            return json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise RecognitionFailed("Failed to parse AI response as JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
