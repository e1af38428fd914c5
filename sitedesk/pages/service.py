"""Domain operations over the page ownership registry.

Every mutation runs inside :meth:`RegistryStore.with_document`, so it is
re-applied to the latest committed document whenever a concurrent writer
wins the race, and the registry invariants are checked against that state.
"""

from __future__ import annotations

import typing as typ

import msgspec

from sitedesk.common.slug import page_slug
from sitedesk.common.time import advance_timestamp, format_timestamp, utcnow
from sitedesk.errors import InvalidInputError

from .errors import DuplicatePageError, PageNotFoundError
from .models import Page, RegistryDocument
from .observability import RegistryEventLogger
from .owners import canonicalize_owners
from .store import DocumentChange

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .inputs import PageCreate, PageUpdate
    from .store import RegistryStore

type Clock = cabc.Callable[[], dt.datetime]


def commit_message(verb: str, name: str, actor: str) -> str:
    """Return the audit commit message for a registry mutation."""
    return f"{verb} page: {name} (by {actor})"


def _require_name(name: object) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidInputError.required("name", "Page name")
    return name


def _require_owner_list(owners: object) -> cabc.Sequence[typ.Any]:
    if not isinstance(owners, list | tuple):
        raise InvalidInputError.not_an_array("owners", "Owners")
    return owners


def _normalize_description(description: object) -> str | None:
    if description is None or isinstance(description, str):
        return description or None
    msg = "Description must be a string"
    raise InvalidInputError(msg, field="description")


def _replace_page(document: RegistryDocument, page: Page) -> RegistryDocument:
    return RegistryDocument(
        pages=tuple(page if item.id == page.id else item for item in document.pages)
    )


def _require_page(document: RegistryDocument, page_id: str) -> Page:
    page = document.find(page_id)
    if page is None:
        raise PageNotFoundError(page_id)
    return page


class PageRegistryService:
    """List, create, update and delete registry pages.

    Parameters
    ----------
    store
        Persistence for the registry document.
    clock
        Source of the current UTC time.
    event_logger
        Receives lifecycle telemetry.

    """

    def __init__(
        self,
        store: RegistryStore,
        *,
        clock: Clock = utcnow,
        event_logger: RegistryEventLogger | None = None,
    ) -> None:
        """Configure the service."""
        self._store = store
        self._clock = clock
        self._events = event_logger or RegistryEventLogger()

    async def list_pages(self) -> tuple[Page, ...]:
        """Return every page in registry order."""
        snapshot = await self._store.load_document()
        return snapshot.document.pages

    async def create_page(self, request: PageCreate, *, actor: str) -> Page:
        """Create a page whose id is the slug of ``request.name``.

        Parameters
        ----------
        request
            Name, optional description and owners of the new page.
        actor
            Display name of the principal, recorded in the commit message.

        Returns
        -------
        Page
            The committed page.

        Raises
        ------
        InvalidInputError
            If the name is empty or owners is not a sequence.
        DuplicatePageError
            If a page with the derived id already exists.

        """
        name = _require_name(request.name)
        owners = canonicalize_owners(_require_owner_list(request.owners))
        description = _normalize_description(request.description)
        page_id = page_slug(name)

        def mutate(document: RegistryDocument) -> DocumentChange[Page]:
            if document.find(page_id) is not None:
                raise DuplicatePageError(page_id)
            now = format_timestamp(self._clock())
            page = Page(
                id=page_id,
                name=name,
                description=description,
                owners=owners,
                created_at=now,
                updated_at=now,
            )
            return DocumentChange(
                document=RegistryDocument(pages=(*document.pages, page)),
                result=page,
                message=commit_message("Add", name, actor),
            )

        change = await self._store.with_document(mutate)
        self._events.log_page_created(page_id=page_id, actor=actor)
        return change.result

    async def update_page(
        self, page_id: str, request: PageUpdate, *, actor: str
    ) -> Page:
        """Apply the fields set on ``request`` to page ``page_id``.

        The id never changes, even when the name does. ``updatedAt``
        always moves forward.

        Raises
        ------
        PageNotFoundError
            If no page has ``page_id``.
        InvalidInputError
            If a supplied name is empty or supplied owners is not a sequence.

        """
        changes: dict[str, typ.Any] = {}
        if request.name is not msgspec.UNSET:
            changes["name"] = _require_name(request.name)
        if request.description is not msgspec.UNSET:
            changes["description"] = _normalize_description(request.description)
        if request.owners is not msgspec.UNSET:
            changes["owners"] = canonicalize_owners(
                _require_owner_list(request.owners)
            )

        def mutate(document: RegistryDocument) -> DocumentChange[Page]:
            current = _require_page(document, page_id)
            updated = msgspec.structs.replace(
                current,
                **changes,
                updated_at=advance_timestamp(self._clock(), current.updated_at),
            )
            return DocumentChange(
                document=_replace_page(document, updated),
                result=updated,
                message=commit_message("Update", updated.name, actor),
            )

        change = await self._store.with_document(mutate)
        self._events.log_page_updated(page_id=page_id, actor=actor)
        return change.result

    async def delete_page(self, page_id: str, *, actor: str) -> str:
        """Remove page ``page_id`` and return its name.

        Raises
        ------
        PageNotFoundError
            If no page has ``page_id``; nothing is committed.

        """

        def mutate(document: RegistryDocument) -> DocumentChange[str]:
            page = _require_page(document, page_id)
            remaining = tuple(item for item in document.pages if item.id != page_id)
            return DocumentChange(
                document=RegistryDocument(pages=remaining),
                result=page.name,
                message=commit_message("Delete", page.name, actor),
            )

        change = await self._store.with_document(mutate)
        self._events.log_page_deleted(page_id=page_id, actor=actor)
        return change.result


__all__ = ["Clock", "PageRegistryService", "commit_message"]
