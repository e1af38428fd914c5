"""Errors raised when a caller may not perform an operation."""

from __future__ import annotations

from sitedesk.errors import ErrorOrigin, SiteDeskError


class AccessError(SiteDeskError):
    """Base class for authentication and authorization failures."""

    origin = ErrorOrigin.CLIENT


class AuthError(AccessError):
    """Raised when the request carries no authenticated principal."""

    def __init__(self) -> None:
        """Initialise with the generic unauthenticated message."""
        super().__init__("Unauthorized")


class ForbiddenError(AccessError):
    """Raised when a known principal is not a repository collaborator.

    Attributes
    ----------
    login
        The principal that was refused.

    """

    def __init__(self, login: str) -> None:
        """Initialise with the refused login."""
        self.login = login
        super().__init__(
            "You must be a collaborator on the repository to perform this action"
        )


__all__ = ["AccessError", "AuthError", "ForbiddenError"]
