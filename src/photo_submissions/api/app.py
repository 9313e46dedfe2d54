"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from photo_submissions.api.auth import require_subject
from photo_submissions.api.models import (
    CompleteSubmissionRequest,
    CompleteSubmissionResponse,
    CreateSubmissionRequest,
    CreateSubmissionResponse,
)
from photo_submissions.app_logging import configure_logging
from photo_submissions.containers import AppContainer
from photo_submissions.domain.errors import InternalError, SubmissionError
from photo_submissions.domain.sessions import ExpectedUpload


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(SubmissionError)
    async def submission_error_handler(
        request: Request, exc: SubmissionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_input",
                "message": "Invalid request body",
                "details": [
                    {
                        "loc": list(error["loc"]),
                        "msg": error["msg"],
                        "type": error["type"],
                    }
                    for error in exc.errors()
                ],
            },
        )

    @app.get("/ping", response_class=PlainTextResponse)
    async def ping() -> str:
        """Liveness probe."""
        return "pong"

    @app.post("/createSubmissionSession")
    async def create_submission_session(
        body: CreateSubmissionRequest, request: Request
    ) -> CreateSubmissionResponse:
        """Open an upload session and return its write credential."""
        state_container: AppContainer = request.app.state.container
        expected = ExpectedUpload(
            content_type=body.content_type,
            size_bytes=body.size_bytes,
            image_hash=body.image_hash,
            lat=body.lat,
            lng=body.lng,
            taken_at=body.taken_at,
        )
        try:
            opened = state_container.submission_service.open_session(expected)
        except SubmissionError:
            raise
        except Exception as exc:
            logger.exception("Failed to open submission session")
            raise InternalError(
                _internal_message(state_container, exc, "Internal error")
            ) from exc
        return CreateSubmissionResponse(
            submission_id=opened.session.id,
            upload_url=opened.credential.upload_url,
            upload_token=opened.credential.token,
            upload_headers=opened.credential.headers,
            nonce=opened.session.nonce,
            expires_at=opened.session.expires_at.isoformat(),
            bucket_path=opened.session.object_path,
        )

    @app.post("/completeSubmission")
    async def complete_submission(
        body: CompleteSubmissionRequest,
        request: Request,
        subject_id: str = Depends(require_subject),
    ) -> CompleteSubmissionResponse:
        """Verify an uploaded photo and commit its submission."""
        state_container: AppContainer = request.app.state.container
        try:
            await state_container.submission_service.complete_session(
                session_id=body.submission_id,
                nonce=body.nonce,
                claimant_id=subject_id,
            )
        except SubmissionError:
            raise
        except Exception as exc:
            logger.exception(
                "Failed to complete submission",
                extra={"session_id": body.submission_id},
            )
            raise InternalError(
                _internal_message(state_container, exc, "Internal error")
            ) from exc
        return CompleteSubmissionResponse(status="ok")

    return app


def _internal_message(
    state_container: AppContainer, exc: Exception, fallback: str
) -> str:
    """Return a client-facing internal error message with local debug info."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
