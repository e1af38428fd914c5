"""Errors raised by the upstream service adapters.

The adapters classify every non-2xx response and every transport failure into
one of these classes, so callers never inspect raw HTTP status codes.
"""

from __future__ import annotations

from sitedesk.errors import ErrorOrigin, SiteDeskError


class UpstreamError(SiteDeskError):
    """Base class for failures reported by, or on the way to, an upstream API.

    Attributes
    ----------
    service
        Short upstream name (``github`` or ``vercel``).
    status_code
        HTTP status code of the failing response, when there was one.

    """

    origin = ErrorOrigin.UPSTREAM

    def __init__(
        self,
        message: str,
        *,
        service: str,
        status_code: int | None = None,
    ) -> None:
        """Initialise with a message, the upstream name and the status code."""
        self.service = service
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def from_response(
        cls,
        service: str,
        status_code: int,
        detail: str | None,
    ) -> UpstreamError:
        """Build an error of this class for a failed upstream response."""
        message = f"{service} API error {status_code}"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, service=service, status_code=status_code)


class UpstreamAuthError(UpstreamError):
    """Raised on 401/403: the configured upstream credential was rejected."""


class UpstreamNotFoundError(UpstreamError):
    """Raised on 404. Callers often treat this as an expected outcome."""


class UpstreamConflictError(UpstreamError):
    """Raised when an optimistic-concurrency precondition failed."""


class AlreadyExistsError(UpstreamError):
    """Raised when the upstream reports the entity already exists."""


class UpstreamClientError(UpstreamError):
    """Raised on any other 4xx. Never retried."""


class UpstreamServerError(UpstreamError):
    """Raised when 5xx responses or network failures outlast the retries."""

    @classmethod
    def network(cls, service: str, detail: str) -> UpstreamServerError:
        """Return an error for a transport-level failure."""
        return cls(f"{service} API unreachable: {detail}", service=service)


class UpstreamTimeoutError(UpstreamError):
    """Raised when the final retry attempt timed out."""

    @classmethod
    def exhausted(cls, service: str, attempts: int) -> UpstreamTimeoutError:
        """Return an error for a request that timed out on every attempt."""
        return cls(
            f"{service} API timed out after {attempts} attempts", service=service
        )


class UpstreamResponseShapeError(UpstreamError):
    """Raised when a successful response lacks fields the adapter needs."""

    @classmethod
    def missing(cls, service: str, field: str) -> UpstreamResponseShapeError:
        """Return an error for a missing response field."""
        return cls(
            f"{service} API response missing expected field: {field}",
            service=service,
        )


__all__ = [
    "AlreadyExistsError",
    "UpstreamAuthError",
    "UpstreamClientError",
    "UpstreamConflictError",
    "UpstreamError",
    "UpstreamNotFoundError",
    "UpstreamResponseShapeError",
    "UpstreamServerError",
    "UpstreamTimeoutError",
]
