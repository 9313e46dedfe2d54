"""Supabase Storage implementation of the object store."""

import base64
import json
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from photo_submissions.domain.sessions import ScopedWriteCredential
from photo_submissions.domain.submissions import StoredObject
from photo_submissions.services.credentials import ObjectStore

_TIMESTAMP_KEYS = ("last_modified", "lastModified", "created_at", "createdAt")


@dataclass
class SupabaseObjectStore(ObjectStore):
    """Object store backed by a single Supabase Storage bucket."""

    client: Client
    bucket: str

    def issue_scoped_write_credential(
        self,
        object_path: str,
        content_type: str,
        metadata: dict[str, str],
        expires_in_seconds: int,
    ) -> ScopedWriteCredential:
        """Create a signed upload URL for one path.

        Storage fixes the validity of signed upload URLs itself and does not
        enforce the returned headers, so ``expires_in_seconds``, the content
        type and ``x-metadata`` are checked against ``get_object_info`` at
        completion instead.
        """
        response = self._bucket().create_signed_upload_url(object_path)
        upload_url = response.get("signed_url") or response.get("signedUrl")
        if not upload_url:
            raise RuntimeError("Failed to create signed upload URL")
        encoded = base64.b64encode(json.dumps(metadata).encode("utf-8")).decode()
        return ScopedWriteCredential(
            upload_url=upload_url,
            token=response.get("token"),
            headers={
                "content-type": content_type,
                "x-metadata": encoded,
                "x-upsert": "false",
            },
        )

    def exists(self, object_path: str) -> bool:
        """Return whether the object is present in the bucket."""
        return bool(self._bucket().exists(object_path))

    def get_object_info(self, object_path: str) -> StoredObject:
        """Return the custom metadata, content type and latest write time."""
        info = self._bucket().info(object_path)
        raw = info.get("metadata") or info.get("user_metadata") or {}
        written = [
            _parse_timestamp(info[key]) for key in _TIMESTAMP_KEYS if info.get(key)
        ]
        return StoredObject(
            metadata={
                str(key): str(value) for key, value in raw.items() if value is not None
            },
            content_type=info.get("content_type") or info.get("contentType"),
            uploaded_at=max(written) if written else None,
        )

    def create_read_url(self, object_path: str, expires_in_seconds: int) -> str:
        """Return a signed download URL for the object."""
        response = self._bucket().create_signed_url(object_path, expires_in_seconds)
        read_url = response.get("signedURL") or response.get("signedUrl")
        if not read_url:
            raise RuntimeError("Failed to create signed read URL")
        return read_url

    def _bucket(self):  # type: ignore[no-untyped-def]
        return self.client.storage.from_(self.bucket)


def _parse_timestamp(raw: object) -> datetime:
    parsed = datetime.fromisoformat(str(raw))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
