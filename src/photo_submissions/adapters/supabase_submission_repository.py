"""Supabase-backed atomic submission committer."""

import logging
from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from photo_submissions.domain.errors import ConflictError
from photo_submissions.domain.submissions import SubmissionRecord
from photo_submissions.services.submissions import SubmissionCommitter

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseSubmissionRepository(SubmissionCommitter):
    """Commits submissions through the ``commit_submission`` database function.

    The function locks the session row, refuses used sessions and existing
    submissions, inserts the submission and marks the session used, all in
    one transaction.
    """

    client: Client

    def commit(self, submission: SubmissionRecord) -> None:
        """Insert the submission and consume its session atomically."""
        try:
            self.client.rpc(
                "commit_submission",
                {
                    "p_submission_id": submission.submission_id,
                    "p_uid": submission.uid,
                    "p_document": submission.to_document(),
                },
            ).execute()
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                logger.info(
                    "Lost submission commit race",
                    extra={"session_id": submission.submission_id},
                )
                raise ConflictError("submission already exists") from exc
            raise
