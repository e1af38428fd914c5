"""Errors raised by the page ownership registry."""

from __future__ import annotations

from sitedesk.errors import ErrorOrigin, SiteDeskError


class RegistryError(SiteDeskError):
    """Base class for registry errors."""


class PageNotFoundError(RegistryError):
    """Raised when no page has the requested id."""

    origin = ErrorOrigin.CLIENT

    def __init__(self, page_id: str) -> None:
        """Initialise with the missing page id."""
        self.page_id = page_id
        super().__init__("Page not found")


class DuplicatePageError(RegistryError):
    """Raised when a page with the derived id already exists."""

    origin = ErrorOrigin.CLIENT

    def __init__(self, page_id: str) -> None:
        """Initialise with the colliding page id."""
        self.page_id = page_id
        super().__init__("A page with this name already exists")


class RegistryConflictError(RegistryError):
    """Raised when concurrent writers exhausted the save retries."""

    origin = ErrorOrigin.UPSTREAM

    def __init__(self, attempts: int) -> None:
        """Initialise with the number of save attempts made."""
        self.attempts = attempts
        super().__init__(
            "The page registry was modified concurrently; "
            f"gave up after {attempts} attempts. Please retry."
        )


class RegistryCorruptError(RegistryError):
    """Raised when ``pages.json`` cannot be parsed or breaks an invariant."""

    @classmethod
    def undecodable(cls, path: str, detail: str) -> RegistryCorruptError:
        """Return an error for a document that is not valid registry JSON."""
        return cls(f"{path} is not a valid page registry: {detail}")

    @classmethod
    def invariant(cls, detail: str) -> RegistryCorruptError:
        """Return an error for a document that breaks a registry invariant."""
        return cls(f"Page registry invariant violated: {detail}")


__all__ = [
    "DuplicatePageError",
    "PageNotFoundError",
    "RegistryConflictError",
    "RegistryCorruptError",
    "RegistryError",
]
