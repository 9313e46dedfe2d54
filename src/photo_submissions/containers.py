"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photo_submissions.adapters.openai_ocr_client import OpenAIOcrClient
from photo_submissions.adapters.supabase_identity_verifier import (
    SupabaseIdentityVerifier,
)
from photo_submissions.adapters.supabase_object_store import SupabaseObjectStore
from photo_submissions.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from photo_submissions.adapters.supabase_submission_repository import (
    SupabaseSubmissionRepository,
)
from photo_submissions.config import Settings
from photo_submissions.services.credentials import CredentialIssuer
from photo_submissions.services.identity import IdentityVerifier
from photo_submissions.services.ocr import OcrService
from photo_submissions.services.submissions import SubmissionService
from photo_submissions.services.verification import CompletionVerifier


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_verifier: IdentityVerifier
    submission_service: SubmissionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    object_store = SupabaseObjectStore(
        client=supabase_client, bucket=resolved_settings.storage_bucket
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    submission_repository = SupabaseSubmissionRepository(supabase_client)
    identity_verifier = SupabaseIdentityVerifier(supabase_client)
    openai_client = OpenAIOcrClient.create(resolved_settings.openai_api_key)
    ocr_service = OcrService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    submission_service = SubmissionService(
        credential_issuer=CredentialIssuer(
            object_store=object_store,
            ttl_seconds=resolved_settings.upload_url_ttl_seconds,
        ),
        session_repository=session_repository,
        verifier=CompletionVerifier(
            session_repository=session_repository,
            object_store=object_store,
            grace_seconds=resolved_settings.completion_grace_seconds,
        ),
        object_store=object_store,
        ocr_service=ocr_service,
        committer=submission_repository,
        ocr_max_chars=resolved_settings.ocr_max_chars,
        read_url_ttl_seconds=resolved_settings.read_url_ttl_seconds,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_verifier=identity_verifier,
        submission_service=submission_service,
        close_resources=close_resources,
    )
