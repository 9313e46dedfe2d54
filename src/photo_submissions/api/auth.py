"""Bearer token authentication for completion requests."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from fastapi import Depends, Header, Request

from photo_submissions.domain.errors import (
    InternalError,
    SubmissionError,
    UnauthenticatedError,
)
from photo_submissions.services.identity import IdentityVerifier  # noqa: TC001

if TYPE_CHECKING:
    from photo_submissions.containers import AppContainer

logger = logging.getLogger(__name__)

_BEARER = re.compile(r"^Bearer (.+)$", re.IGNORECASE)


def _get_identity_verifier(request: Request) -> IdentityVerifier:
    container: AppContainer = request.app.state.container
    return container.identity_verifier


async def require_subject(
    authorization: str | None = Header(default=None),
    verifier: IdentityVerifier = Depends(_get_identity_verifier),
) -> str:
    """Resolve the caller's identity subject from the Authorization header."""
    match = _BEARER.match(authorization or "")
    if not match or not match.group(1).strip():
        raise UnauthenticatedError("Missing Authorization: Bearer <token>")
    try:
        return verifier.verify_token(match.group(1).strip())
    except SubmissionError:
        raise
    except Exception as exc:
        logger.exception("Identity verification failed")
        raise InternalError("Internal error") from exc
