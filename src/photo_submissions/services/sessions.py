"""Persistence interface for upload sessions."""

from typing import Protocol

from photo_submissions.domain.sessions import SessionRecord


class SessionRepository(Protocol):
    """Persistence interface for upload sessions.

    Sessions are only ever inserted here. Flipping ``used`` belongs to the
    submission committer, inside the same transaction that writes the
    submission.
    """

    def create_session(self, session: SessionRecord) -> None:
        """Persist a new, unused session."""

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
