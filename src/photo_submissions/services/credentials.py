"""Session id, nonce and scoped upload credential issuance."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import uuid4

from photo_submissions.domain.sessions import (
    ExpectedUpload,
    IssuedCredential,
    ScopedWriteCredential,
)
from photo_submissions.domain.submissions import StoredObject

HASH_METADATA_KEY = "image_sha256"


class ObjectStore(Protocol):
    """Interface for the object store holding uploaded photos."""

    def issue_scoped_write_credential(
        self,
        object_path: str,
        content_type: str,
        metadata: dict[str, str],
        expires_in_seconds: int,
    ) -> ScopedWriteCredential:
        """Return a write credential bound to one path, type and metadata."""

    def exists(self, object_path: str) -> bool:
        """Return whether an object was uploaded at the path."""

    def get_object_info(self, object_path: str) -> StoredObject:
        """Return custom metadata, content type and write time of the object."""

    def create_read_url(self, object_path: str, expires_in_seconds: int) -> str:
        """Return a short-lived URL that can read the object."""


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def object_path_for(session_id: str) -> str:
    """Return the storage key a session's photo must be uploaded to."""
    return f"submissions/open/{session_id}/original.jpg"


@dataclass
class CredentialIssuer:
    """Mints session identifiers and the matching upload credential."""

    object_store: ObjectStore
    ttl_seconds: int = 120
    clock: Callable[[], datetime] = field(default=utcnow)

    def issue(self, expected: ExpectedUpload) -> IssuedCredential:
        """Create ids and a write credential pinned to the declared metadata."""
        session_id = str(uuid4())
        nonce = str(uuid4())
        object_path = object_path_for(session_id)
        expires_at = self.clock() + timedelta(seconds=self.ttl_seconds)
        credential = self.object_store.issue_scoped_write_credential(
            object_path=object_path,
            content_type=expected.content_type,
            metadata=_pinned_metadata(expected),
            expires_in_seconds=self.ttl_seconds,
        )
        return IssuedCredential(
            session_id=session_id,
            nonce=nonce,
            object_path=object_path,
            credential=credential,
            expires_at=expires_at,
        )


def _pinned_metadata(expected: ExpectedUpload) -> dict[str, str]:
    """Build the metadata an upload must carry to match the credential."""
    metadata: dict[str, str] = {}
    if expected.image_hash:
        metadata[HASH_METADATA_KEY] = expected.image_hash
    if expected.lat is not None:
        metadata["lat"] = str(expected.lat)
    if expected.lng is not None:
        metadata["lng"] = str(expected.lng)
    if expected.taken_at is not None:
        metadata["takenAt"] = expected.taken_at
    return metadata
