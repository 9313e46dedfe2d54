"""Domain models for verified uploads and immutable submissions."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class VerifiedUpload:
    """Object metadata as recorded by the object store at upload time."""

    object_path: str
    image_hash: str
    lat: float | None
    lng: float | None
    taken_at: str | None


@dataclass(frozen=True)
class StoredObject:
    """What the object store recorded when the photo was written."""

    metadata: dict[str, str]
    content_type: str | None
    uploaded_at: datetime | None


@dataclass(frozen=True)
class GeoPoint:
    """Coordinates read from the verified object metadata."""

    lat: float | None
    lng: float | None


@dataclass(frozen=True)
class OcrReading:
    """Text recognized in the photo and the reading extracted from it."""

    raw_text: str
    value: int | None
    confidence: float


@dataclass(frozen=True)
class SubmissionRecord:
    """Append-only record created when a session is completed."""

    submission_id: str
    uid: str
    bucket_path: str
    image_hash: str
    gps: GeoPoint
    taken_at: str | None
    ocr: OcrReading
    server_timestamp: datetime

    def to_document(self) -> dict[str, object]:
        """Serialize into the JSON document persisted by the store."""
        return {
            "submission_id": self.submission_id,
            "uid": self.uid,
            "bucket_path": self.bucket_path,
            "image_sha256": self.image_hash,
            "gps": {"lat": self.gps.lat, "lng": self.gps.lng},
            "taken_at": self.taken_at,
            "ocr": {
                "raw_text": self.ocr.raw_text,
                "value": self.ocr.value,
                "confidence": self.ocr.confidence,
            },
            "server_timestamp": self.server_timestamp.isoformat(),
        }
