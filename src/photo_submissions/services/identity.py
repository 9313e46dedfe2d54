"""Identity verification interface."""

from typing import Protocol


class IdentityVerifier(Protocol):
    """Resolves bearer tokens to identity subjects."""

    def verify_token(self, token: str) -> str:
        """Return the subject id, raising UnauthenticatedError when invalid."""
