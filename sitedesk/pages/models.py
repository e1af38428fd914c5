"""Typed records of the page ownership registry.

The registry is one JSON document, ``pages.json``, committed to the managed
repository. Records are immutable; mutations build new records with
:func:`msgspec.structs.replace`.
"""

from __future__ import annotations

import msgspec


class PageOwner(
    msgspec.Struct, frozen=True, kw_only=True, rename="camel", omit_defaults=True
):
    """A human accountable for a page.

    Attributes
    ----------
    username : str
        GitHub login; compared case-insensitively, stored as given.
    github_id : str, optional
        Numeric GitHub id when known, otherwise the username. Serialized as
        ``githubId``. Documents written by older tooling may omit it.
    avatar_url : str, optional
        Advisory avatar image URL.

    """

    username: str
    github_id: str | None = None
    avatar_url: str | None = None


class Page(
    msgspec.Struct, frozen=True, kw_only=True, rename="camel", omit_defaults=True
):
    """A named unit of the website and the people who own it.

    Attributes
    ----------
    id : str
        Slug derived from the creation name; never changes.
    name : str
        Human-readable label.
    description : str, optional
        Free text. Empty descriptions are stored as absent.
    owners : tuple[PageOwner, ...]
        Owners in display order, unique by case-insensitive username.
    created_at : str
        ISO-8601 UTC creation time (``createdAt``).
    updated_at : str
        ISO-8601 UTC time of the last mutation (``updatedAt``).

    """

    id: str
    name: str
    description: str | None = None
    owners: tuple[PageOwner, ...]
    created_at: str
    updated_at: str


class RegistryDocument(msgspec.Struct, frozen=True, kw_only=True):
    """The whole ``pages.json`` document."""

    pages: tuple[Page, ...] = ()

    def find(self, page_id: str) -> Page | None:
        """Return the page with ``page_id``, if any."""
        for page in self.pages:
            if page.id == page_id:
                return page
        return None


__all__ = ["Page", "PageOwner", "RegistryDocument"]
