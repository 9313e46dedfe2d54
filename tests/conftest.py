"""Shared test fixtures."""

import asyncio
import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

import pytest

from photo_submissions.config import Settings
from photo_submissions.containers import AppContainer
from photo_submissions.domain.errors import ConflictError, UnauthenticatedError
from photo_submissions.domain.sessions import ScopedWriteCredential, SessionRecord
from photo_submissions.domain.submissions import StoredObject, SubmissionRecord
from photo_submissions.services.credentials import CredentialIssuer, ObjectStore
from photo_submissions.services.identity import IdentityVerifier
from photo_submissions.services.ocr import OcrService, TextClient
from photo_submissions.services.sessions import SessionRepository
from photo_submissions.services.submissions import (
    SubmissionCommitter,
    SubmissionService,
)
from photo_submissions.services.verification import CompletionVerifier

IMAGE_HASH = "ab" * 32
OTHER_HASH = "cd" * 32


@dataclass
class FixedClock:
    """Clock that only moves when told to."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@dataclass
class FakeObjectStore(ObjectStore):
    """In-memory object store that records issued credentials."""

    clock: FixedClock = field(default_factory=FixedClock)
    objects: dict[str, StoredObject] = field(default_factory=dict)
    issued: list[dict[str, object]] = field(default_factory=list)

    def issue_scoped_write_credential(
        self,
        object_path: str,
        content_type: str,
        metadata: dict[str, str],
        expires_in_seconds: int,
    ) -> ScopedWriteCredential:
        self.issued.append(
            {
                "object_path": object_path,
                "content_type": content_type,
                "metadata": metadata,
                "expires_in_seconds": expires_in_seconds,
            }
        )
        return ScopedWriteCredential(
            upload_url=f"https://storage.test/upload/{object_path}",
            token="upload-token",
            headers={"content-type": content_type},
        )

    def exists(self, object_path: str) -> bool:
        return object_path in self.objects

    def get_object_info(self, object_path: str) -> StoredObject:
        return self.objects[object_path]

    def create_read_url(self, object_path: str, expires_in_seconds: int) -> str:
        return f"https://storage.test/read/{object_path}"

    def upload(
        self,
        object_path: str,
        metadata: dict[str, str],
        content_type: str = "image/jpeg",
        uploaded_at: datetime | None = None,
    ) -> None:
        """Simulate a client upload; it is stamped with the clock by default."""
        self.objects[object_path] = StoredObject(
            metadata=dict(metadata),
            content_type=content_type,
            uploaded_at=uploaded_at or self.clock(),
        )


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[str, SessionRecord] = field(default_factory=dict)

    def create_session(self, session: SessionRecord) -> None:
        if session.id in self.sessions:
            raise RuntimeError("Failed to create submission session")
        self.sessions[session.id] = session

    def get_session(self, session_id: str) -> SessionRecord | None:
        return self.sessions.get(session_id)


@dataclass
class InMemorySubmissionStore(SubmissionCommitter):
    """Commits submissions under a lock, like a serializable transaction."""

    session_repository: InMemorySessionRepository
    submissions: dict[str, SubmissionRecord] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def commit(self, submission: SubmissionRecord) -> None:
        with self._lock:
            session = self.session_repository.sessions[submission.submission_id]
            if session.used or submission.submission_id in self.submissions:
                raise ConflictError("submission already exists")
            self.submissions[submission.submission_id] = submission
            self.session_repository.sessions[session.id] = replace(
                session,
                used=True,
                owner_id=submission.uid,
                completed_at=submission.server_timestamp,
            )


@dataclass
class FakeIdentityVerifier(IdentityVerifier):
    """Maps known tokens to subject ids."""

    tokens: dict[str, str] = field(
        default_factory=lambda: {"token-alice": "alice", "token-bob": "bob"}
    )

    def verify_token(self, token: str) -> str:
        if token not in self.tokens:
            raise UnauthenticatedError("Invalid or expired access token")
        return self.tokens[token]


@dataclass
class FakeTextClient(TextClient):
    """Fake OCR engine returning fixed text."""

    text: str = "ODO 123456 km"
    calls: list[str] = field(default_factory=list)
    error: Exception | None = None
    delay: float = 0.0

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
        self.calls.append(image_url)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {"text": self.text}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def object_store(clock: FixedClock) -> FakeObjectStore:
    return FakeObjectStore(clock=clock)


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def submission_store(
    session_repository: InMemorySessionRepository,
) -> InMemorySubmissionStore:
    return InMemorySubmissionStore(session_repository)


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def verifier(
    session_repository: InMemorySessionRepository,
    object_store: FakeObjectStore,
    clock: FixedClock,
) -> CompletionVerifier:
    return CompletionVerifier(
        session_repository=session_repository,
        object_store=object_store,
        grace_seconds=300,
        clock=clock,
    )


@pytest.fixture
def submission_service(  # noqa: PLR0913
    settings: Settings,
    clock: FixedClock,
    object_store: FakeObjectStore,
    session_repository: InMemorySessionRepository,
    submission_store: InMemorySubmissionStore,
    text_client: FakeTextClient,
    verifier: CompletionVerifier,
) -> SubmissionService:
    return SubmissionService(
        credential_issuer=CredentialIssuer(
            object_store=object_store, ttl_seconds=120, clock=clock
        ),
        session_repository=session_repository,
        verifier=verifier,
        object_store=object_store,
        ocr_service=OcrService(
            client=text_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        committer=submission_store,
        ocr_max_chars=settings.ocr_max_chars,
        clock=clock,
    )


@pytest.fixture
def container(
    settings: Settings, submission_service: SubmissionService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_verifier=FakeIdentityVerifier(),
        submission_service=submission_service,
        close_resources=close_resources,
    )
