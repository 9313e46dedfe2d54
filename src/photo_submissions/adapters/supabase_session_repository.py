"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_submissions.domain.sessions import ExpectedUpload, SessionRecord
from photo_submissions.services.sessions import SessionRepository

_COLUMNS = (
    "id, owner_id, nonce, object_path, expires_at, used, expected_json, "
    "created_at, completed_at"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for upload sessions."""

    client: Client

    def create_session(self, session: SessionRecord) -> None:
        """Insert a session row."""
        response = (
            self.client.table("submission_sessions")
            .insert(
                {
                    "id": session.id,
                    "owner_id": session.owner_id,
                    "nonce": session.nonce,
                    "object_path": session.object_path,
                    "expires_at": session.expires_at.isoformat(),
                    "used": False,
                    "expected_json": _expected_to_json(session.expected),
                    "created_at": session.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create submission session")

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("submission_sessions")
            .select(_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_session(response.data[0])


def _expected_to_json(expected: ExpectedUpload) -> dict[str, object]:
    return {
        "content_type": expected.content_type,
        "size_bytes": expected.size_bytes,
        "image_sha256": expected.image_hash,
        "lat": expected.lat,
        "lng": expected.lng,
        "taken_at": expected.taken_at,
    }


def _row_to_session(row: dict[str, object]) -> SessionRecord:
    expected = row.get("expected_json") or {}
    completed_at = row.get("completed_at")
    return SessionRecord(
        id=str(row["id"]),
        owner_id=row.get("owner_id"),
        nonce=str(row["nonce"]),
        object_path=str(row["object_path"]),
        expires_at=datetime.fromisoformat(str(row["expires_at"])),
        used=bool(row["used"]),
        expected=ExpectedUpload(
            content_type=str(expected.get("content_type", "")),
            size_bytes=int(expected.get("size_bytes", 0)),
            image_hash=expected.get("image_sha256"),
            lat=expected.get("lat"),
            lng=expected.get("lng"),
            taken_at=expected.get("taken_at"),
        ),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        completed_at=(
            datetime.fromisoformat(str(completed_at)) if completed_at else None
        ),
    )
