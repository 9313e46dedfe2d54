"""OpenAI Responses API client that transcribes text from stored photos."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from photo_submissions.services.ocr import TextClient

logger = logging.getLogger(__name__)

_SCHEMA_NAME = "ocr_extract"


@dataclass
class OpenAIOcrClient(TextClient):
    """Reads the text of an image given by a signed URL."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIOcrClient":
        """Create an OpenAI OCR client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Transcribe the image and return the decoded ``{"text": ...}`` object.

        The image is fetched by OpenAI from ``image_url`` at full detail, since
        odometer digits are small relative to the frame.
        """
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {
                            "type": "input_image",
                            "image_url": image_url,
                            "detail": "high",
                        },
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": _SCHEMA_NAME,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        return _parse_output(response.output_text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _parse_output(output_text: str | None) -> dict[str, object]:
    """Decode the structured OCR output, rejecting empty or non-object bodies."""
    if not output_text or not output_text.strip():
        raise RuntimeError("OCR returned an empty response")
    try:
        payload = json.loads(output_text)
    except json.JSONDecodeError as exc:
        logger.warning("OCR output is not JSON", extra={"length": len(output_text)})
        raise RuntimeError("OCR returned malformed JSON") from exc
    if not isinstance(payload, dict):
        raise RuntimeError("OCR returned a non-object payload")
    return payload
