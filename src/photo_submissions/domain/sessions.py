"""Domain models for upload sessions."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ExpectedUpload:
    """Client-declared description of the object it is about to upload."""

    content_type: str
    size_bytes: int
    image_hash: str | None
    lat: float | None = None
    lng: float | None = None
    taken_at: str | None = None


@dataclass(frozen=True)
class ScopedWriteCredential:
    """Write credential for exactly one object path."""

    upload_url: str
    token: str | None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted upload session."""

    id: str
    owner_id: str | None
    nonce: str
    object_path: str
    expires_at: datetime
    used: bool
    expected: ExpectedUpload
    created_at: datetime
    completed_at: datetime | None = None


@dataclass(frozen=True)
class IssuedCredential:
    """Everything minted when a session is opened."""

    session_id: str
    nonce: str
    object_path: str
    credential: ScopedWriteCredential
    expires_at: datetime
