"""Root of the SiteDesk error taxonomy.

Every error that should reach a caller as a structured response derives from
:class:`SiteDeskError` and records where the fault originated. The HTTP layer
maps these classes to status codes in one place
(:mod:`sitedesk.api.errors`).
"""

from __future__ import annotations

import enum


class ErrorOrigin(enum.StrEnum):
    """Where a failure originated."""

    CLIENT = "client"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


class SiteDeskError(Exception):
    """Base class for all SiteDesk errors.

    Attributes
    ----------
    origin
        Which party caused the failure.

    """

    origin: ErrorOrigin = ErrorOrigin.INTERNAL


class InvalidInputError(SiteDeskError):
    """Raised when caller-supplied data violates a stated constraint.

    Attributes
    ----------
    reason
        Human-readable description of the violation.
    field
        Name of the offending input field, when known.

    """

    origin = ErrorOrigin.CLIENT

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        """Initialise with a reason and optional field name."""
        self.reason = reason
        self.field = field
        super().__init__(reason)

    @classmethod
    def required(cls, field: str, label: str) -> InvalidInputError:
        """Return an error for a missing required field."""
        return cls(f"{label} is required", field=field)

    @classmethod
    def not_an_array(cls, field: str, label: str) -> InvalidInputError:
        """Return an error for a field that must hold a JSON array."""
        return cls(f"{label} must be an array", field=field)

    @classmethod
    def not_an_object(cls) -> InvalidInputError:
        """Return an error for a request body that is not a JSON object."""
        return cls("Request body must be a JSON object")


class ConfigError(SiteDeskError):
    """Raised when process configuration is missing or malformed."""

    @classmethod
    def missing(cls, variable: str) -> ConfigError:
        """Return an error for a required variable that is unset."""
        return cls(f"{variable} is required")

    @classmethod
    def invalid_integer(cls, variable: str, raw: str) -> ConfigError:
        """Return an error for a variable that must be a non-negative integer."""
        return cls(f"{variable} must be a non-negative integer, got: {raw!r}")


__all__ = ["ConfigError", "ErrorOrigin", "InvalidInputError", "SiteDeskError"]
