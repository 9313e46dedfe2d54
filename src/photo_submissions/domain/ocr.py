"""Models for OCR extraction results."""

from pydantic import BaseModel


class OcrExtract(BaseModel):
    """Structured output for text extraction."""

    text: str
