"""Supabase Auth identity verifier."""

from dataclasses import dataclass

from supabase import AuthError, Client

from photo_submissions.domain.errors import UnauthenticatedError
from photo_submissions.services.identity import IdentityVerifier


@dataclass
class SupabaseIdentityVerifier(IdentityVerifier):
    """Resolves Supabase access tokens to user ids."""

    client: Client

    def verify_token(self, token: str) -> str:
        """Return the user id behind an access token."""
        try:
            response = self.client.auth.get_user(token)
        except AuthError as exc:
            raise UnauthenticatedError("Invalid or expired access token") from exc
        if response is None or response.user is None:
            raise UnauthenticatedError("Invalid or expired access token")
        return str(response.user.id)
