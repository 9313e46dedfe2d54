"""Completion checks run before any submission is committed."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from photo_submissions.domain.errors import (
    ConflictError,
    ExpiredError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from photo_submissions.domain.sessions import SessionRecord
from photo_submissions.domain.submissions import VerifiedUpload
from photo_submissions.services.credentials import (
    HASH_METADATA_KEY,
    ObjectStore,
    utcnow,
)
from photo_submissions.services.sessions import SessionRepository

logger = logging.getLogger(__name__)


@dataclass
class CompletionVerifier:
    """Validates a completion request against session and object state.

    Checks run in a fixed order so the same request always fails with the
    same error: session lookup, ownership, reuse, nonce, expiry, object
    presence, integrity metadata, then content type and write time. The
    object store's recorded hash is trusted as-is; the bytes are never
    re-hashed here.
    """

    session_repository: SessionRepository
    object_store: ObjectStore
    grace_seconds: int = 300
    clock: Callable[[], datetime] = field(default=utcnow)

    def verify(
        self, session_id: str, nonce: str, claimant_id: str
    ) -> tuple[SessionRecord, VerifiedUpload]:
        """Return the session and its verified upload, or raise."""
        session = self.session_repository.get_session(session_id)
        if session is None:
            raise NotFoundError("session not found")
        # Unowned sessions are claimed by the first identity that completes them.
        if session.owner_id and session.owner_id != claimant_id:
            raise ForbiddenError("forbidden (uid mismatch)")
        if session.used:
            raise ConflictError("session already used")
        if session.nonce != nonce:
            raise InvalidInputError("nonce mismatch")
        deadline = session.expires_at + timedelta(seconds=self.grace_seconds)
        if deadline < self.clock():
            raise ExpiredError("session expired")

        if not self.object_store.exists(session.object_path):
            raise NotFoundError("uploaded file not found")
        stored = self.object_store.get_object_info(session.object_path)
        metadata = stored.metadata
        recorded_hash = metadata.get(HASH_METADATA_KEY) or metadata.get("imageSha256")
        if not recorded_hash:
            raise InvalidInputError("missing image_sha256 object metadata")
        expected_hash = session.expected.image_hash
        if expected_hash and expected_hash != recorded_hash:
            logger.warning(
                "Uploaded object hash does not match declared hash",
                extra={"session_id": session.id, "object_path": session.object_path},
            )
            raise InvalidInputError("image_sha256 mismatch")
        if stored.content_type != session.expected.content_type:
            raise InvalidInputError("content type mismatch")
        # Storage does not expire signed upload URLs on our schedule.
        if stored.uploaded_at is None:
            raise InvalidInputError("missing upload timestamp")
        if stored.uploaded_at > session.expires_at:
            logger.warning(
                "Object was written after the upload credential expired",
                extra={"session_id": session.id, "object_path": session.object_path},
            )
            raise InvalidInputError("uploaded after credential expiry")

        return session, VerifiedUpload(
            object_path=session.object_path,
            image_hash=recorded_hash,
            lat=_parse_coordinate(metadata.get("lat")),
            lng=_parse_coordinate(metadata.get("lng")),
            taken_at=metadata.get("takenAt") or None,
        )


def _parse_coordinate(raw: str | None) -> float | None:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None
