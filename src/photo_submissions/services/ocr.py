"""Text extraction service for uploaded photos."""

from dataclasses import dataclass
from typing import Protocol

from photo_submissions.domain.ocr import OcrExtract

OCR_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"text": {"type": "string"}},
    "required": ["text"],
    "additionalProperties": False,
}

OCR_PROMPT = (
    "Transcribe all text visible in the image exactly as it appears, "
    "including digits on instrument displays. "
    "Keep line breaks. Return an empty string if there is no text."
)


class TextClient(Protocol):
    """Interface for an image-to-text engine."""

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
        """Return structured text extraction data."""


@dataclass
class OcrService:
    """Service that reads the text out of a stored image."""

    client: TextClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def read_text(self, image_url: str) -> str:
        """Return the trimmed text recognized in the image at the URL."""
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_url=image_url,
            schema=OCR_SCHEMA,
            prompt=OCR_PROMPT,
        )
        return OcrExtract.model_validate(raw).text.strip()
