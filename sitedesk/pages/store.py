"""Optimistically concurrent persistence of ``pages.json``.

The registry lives in the managed repository rather than a database. Each
write is a commit made through the contents API with the SHA observed on the
preceding read; the host rejects the commit if another writer got there
first. :meth:`RegistryStore.with_document` wraps that in a
read-validate-mutate-write loop that retries on conflict.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import msgspec

from sitedesk.upstream.errors import UpstreamConflictError, UpstreamNotFoundError

from .errors import DuplicatePageError, RegistryConflictError, RegistryCorruptError
from .models import Page, RegistryDocument
from .observability import RegistryEventLogger
from .owners import canonicalize_owners

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sitedesk.upstream.models import FileContent

REGISTRY_PATH = "pages.json"
DEFAULT_MAX_CONFLICT_RETRIES = 5
_INDENT = 2


class RegistryFileClient(typ.Protocol):
    """The two contents operations the store needs from the code host."""

    async def get_file(self, path: str) -> FileContent:
        """Return the text and content SHA of ``path``."""
        ...

    async def put_file(
        self,
        path: str,
        content: str,
        *,
        message: str,
        expected_revision: str | None = None,
    ) -> str:
        """Write ``path`` guarded by ``expected_revision``; return the new SHA."""
        ...


@dc.dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """A document together with the revision it was read at.

    ``revision`` is ``None`` when the file does not exist yet.
    """

    document: RegistryDocument
    revision: str | None


@dc.dataclass(frozen=True, slots=True)
class DocumentChange[T]:
    """Outcome of one mutation attempt.

    Attributes
    ----------
    document
        The document to commit.
    result
        Value handed back to the caller once the commit succeeds.
    message
        Commit message recorded in the repository history.

    """

    document: RegistryDocument
    result: T
    message: str


def encode_document(document: RegistryDocument) -> str:
    """Serialize ``document`` as canonical ``pages.json`` text.

    Output is UTF-8 JSON with a two-space indent, fields in declaration order,
    absent optional fields omitted, and a trailing newline.
    """
    compact = msgspec.json.encode(document)
    return msgspec.json.format(compact, indent=_INDENT).decode("utf-8") + "\n"


def decode_document(text: str, *, path: str = REGISTRY_PATH) -> RegistryDocument:
    """Parse ``pages.json`` text, normalizing owner lists.

    Raises
    ------
    RegistryCorruptError
        If the text is not a valid registry document.

    """
    try:
        document = msgspec.json.decode(text, type=RegistryDocument)
    except msgspec.DecodeError as exc:
        raise RegistryCorruptError.undecodable(path, str(exc)) from exc
    pages = tuple(
        msgspec.structs.replace(page, owners=canonicalize_owners(page.owners))
        for page in document.pages
    )
    return RegistryDocument(pages=pages)


def _check_page(page: Page) -> None:
    if page.updated_at < page.created_at:
        raise RegistryCorruptError.invariant(
            f"page {page.id!r} updatedAt precedes createdAt"
        )
    usernames = [owner.username.lower() for owner in page.owners]
    if len(usernames) != len(set(usernames)):
        raise RegistryCorruptError.invariant(f"page {page.id!r} has duplicate owners")


def validate_document(document: RegistryDocument) -> None:
    """Check the registry invariants on ``document``.

    Raises
    ------
    DuplicatePageError
        If two pages share an id.
    RegistryCorruptError
        If a page's timestamps are out of order or its owners repeat.

    """
    seen: set[str] = set()
    for page in document.pages:
        if page.id in seen:
            raise DuplicatePageError(page.id)
        seen.add(page.id)
        _check_page(page)


class RegistryStore:
    """Load and save the registry document through the code host.

    Parameters
    ----------
    client
        Contents API client, normally a
        :class:`~sitedesk.upstream.github.GitHubRepoClient`.
    path
        Repository path of the document.
    max_conflict_retries
        Reloads allowed after a conflicting save before giving up.
    event_logger
        Receives conflict telemetry.

    """

    def __init__(
        self,
        client: RegistryFileClient,
        *,
        path: str = REGISTRY_PATH,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
        event_logger: RegistryEventLogger | None = None,
    ) -> None:
        """Configure the store."""
        self._client = client
        self._path = path
        self._max_conflict_retries = max_conflict_retries
        self._events = event_logger or RegistryEventLogger()

    @property
    def path(self) -> str:
        """Return the repository path of the document."""
        return self._path

    async def load_document(self) -> RegistrySnapshot:
        """Read the document and its revision.

        A missing file is an empty registry with no revision.
        """
        try:
            file = await self._client.get_file(self._path)
        except UpstreamNotFoundError:
            return RegistrySnapshot(document=RegistryDocument(), revision=None)
        return RegistrySnapshot(
            document=decode_document(file.content, path=self._path),
            revision=file.revision,
        )

    async def save_document(
        self,
        document: RegistryDocument,
        revision: str | None,
        message: str,
    ) -> str:
        """Commit ``document`` if the file is still at ``revision``.

        Returns the new revision.

        Raises
        ------
        UpstreamConflictError
            If the file changed since ``revision`` was read, or was created
            when ``revision`` is ``None``.

        """
        return await self._client.put_file(
            self._path,
            encode_document(document),
            message=message,
            expected_revision=revision,
        )

    async def with_document[T](
        self,
        mutate: cabc.Callable[[RegistryDocument], DocumentChange[T]],
    ) -> DocumentChange[T]:
        """Apply ``mutate`` to the latest document and commit the result.

        Each attempt loads the document, calls ``mutate``, validates the
        returned document and saves it against the loaded revision. A
        conflicting save restarts the attempt from a fresh load, so the
        mutation and its checks always run against the state it will
        replace. Errors raised by ``mutate`` or validation abort without
        committing.

        Raises
        ------
        RegistryConflictError
            If every attempt lost the race to another writer.

        """
        attempts = self._max_conflict_retries + 1
        for attempt in range(1, attempts + 1):
            snapshot = await self.load_document()
            change = mutate(snapshot.document)
            validate_document(change.document)
            try:
                await self.save_document(
                    change.document, snapshot.revision, change.message
                )
            except UpstreamConflictError:
                self._events.log_save_conflict(
                    path=self._path, attempt=attempt, max_attempts=attempts
                )
                continue
            return change

        self._events.log_save_exhausted(path=self._path, attempts=attempts)
        raise RegistryConflictError(attempts)


__all__ = [
    "DEFAULT_MAX_CONFLICT_RETRIES",
    "REGISTRY_PATH",
    "DocumentChange",
    "RegistryFileClient",
    "RegistrySnapshot",
    "RegistryStore",
    "decode_document",
    "encode_document",
    "validate_document",
]
