"""Two-phase upload protocol: open a session, then complete it."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from photo_submissions.domain.errors import InternalError, SubmissionError
from photo_submissions.domain.sessions import (
    ExpectedUpload,
    ScopedWriteCredential,
    SessionRecord,
)
from photo_submissions.domain.submissions import (
    GeoPoint,
    OcrReading,
    SubmissionRecord,
    VerifiedUpload,
)
from photo_submissions.services.credentials import (
    CredentialIssuer,
    ObjectStore,
    utcnow,
)
from photo_submissions.services.extraction import extract_reading
from photo_submissions.services.ocr import OcrService
from photo_submissions.services.sessions import SessionRepository
from photo_submissions.services.verification import CompletionVerifier

logger = logging.getLogger(__name__)


class SubmissionCommitter(Protocol):
    """Atomic writer of submissions."""

    def commit(self, submission: SubmissionRecord) -> None:
        """Create the submission and mark its session used in one transaction.

        Raises ConflictError when the submission already exists or the
        session was consumed by a concurrent completion.
        """


@dataclass(frozen=True)
class OpenedSession:
    """A freshly persisted session and its upload credential."""

    session: SessionRecord
    credential: ScopedWriteCredential


@dataclass
class SubmissionService:
    """Orchestrates session opening and verified completion."""

    credential_issuer: CredentialIssuer
    session_repository: SessionRepository
    verifier: CompletionVerifier
    object_store: ObjectStore
    ocr_service: OcrService
    committer: SubmissionCommitter
    ocr_max_chars: int = 4000
    read_url_ttl_seconds: int = 300
    timeout_seconds: float = 60.0
    clock: Callable[[], datetime] = field(default=utcnow)

    def open_session(self, expected: ExpectedUpload) -> OpenedSession:
        """Mint a credential and persist the unclaimed session behind it."""
        issued = self.credential_issuer.issue(expected)
        session = SessionRecord(
            id=issued.session_id,
            owner_id=None,
            nonce=issued.nonce,
            object_path=issued.object_path,
            expires_at=issued.expires_at,
            used=False,
            expected=expected,
            created_at=self.clock(),
        )
        self.session_repository.create_session(session)
        logger.info(
            "Opened submission session",
            extra={"session_id": session.id, "object_path": session.object_path},
        )
        return OpenedSession(session=session, credential=issued.credential)

    async def complete_session(
        self, session_id: str, nonce: str, claimant_id: str
    ) -> SubmissionRecord:
        """Verify, read and commit a session within the request budget.

        ``wait_for`` can only cancel at an await, so the budget bounds the OCR
        call. Verification and the commit are synchronous calls that run to
        completion once started; a commit is either never attempted or fully
        applied.
        """
        try:
            return await asyncio.wait_for(
                self._complete(session_id, nonce, claimant_id),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            logger.error(
                "Submission completion timed out", extra={"session_id": session_id}
            )
            raise InternalError("request timed out") from exc

    async def _complete(
        self, session_id: str, nonce: str, claimant_id: str
    ) -> SubmissionRecord:
        session, upload = self.verifier.verify(session_id, nonce, claimant_id)
        raw_text = await self._read_text(session, upload)
        reading = extract_reading(raw_text)
        submission = SubmissionRecord(
            submission_id=session.id,
            uid=claimant_id,
            bucket_path=upload.object_path,
            image_hash=upload.image_hash,
            gps=GeoPoint(lat=upload.lat, lng=upload.lng),
            taken_at=upload.taken_at,
            ocr=OcrReading(
                raw_text=raw_text[: self.ocr_max_chars],
                value=reading.value,
                confidence=reading.confidence,
            ),
            server_timestamp=self.clock(),
        )
        self.committer.commit(submission)
        logger.info(
            "Committed submission",
            extra={"session_id": session.id, "ocr_value": reading.value},
        )
        return submission

    async def _read_text(self, session: SessionRecord, upload: VerifiedUpload) -> str:
        try:
            image_url = self.object_store.create_read_url(
                upload.object_path, self.read_url_ttl_seconds
            )
            return await self.ocr_service.read_text(image_url)
        except SubmissionError:
            raise
        except Exception as exc:
            logger.exception(
                "Text extraction failed",
                extra={"session_id": session.id, "object_path": upload.object_path},
            )
            raise InternalError("text extraction failed") from exc
