"""Page ownership registry.

The registry maps pages of the website to the people accountable for them.
It is stored as ``pages.json`` in the managed repository and edited through
optimistic read-modify-write commits.

Usage
-----
Create a page::

    from sitedesk.pages import PageCreate, PageRegistryService, RegistryStore

    service = PageRegistryService(RegistryStore(github_client))
    page = await service.create_page(
        PageCreate(name="Landing Page", owners=[]), actor="Alice"
    )

"""

from .errors import (
    DuplicatePageError,
    PageNotFoundError,
    RegistryConflictError,
    RegistryCorruptError,
    RegistryError,
)
from .inputs import (
    OwnerInput,
    PageCreate,
    PageUpdate,
    parse_page_create,
    parse_page_update,
)
from .models import Page, PageOwner, RegistryDocument
from .owners import canonicalize_owners
from .service import PageRegistryService
from .store import (
    REGISTRY_PATH,
    DocumentChange,
    RegistrySnapshot,
    RegistryStore,
    decode_document,
    encode_document,
    validate_document,
)

__all__ = [
    "REGISTRY_PATH",
    "DocumentChange",
    "DuplicatePageError",
    "OwnerInput",
    "Page",
    "PageCreate",
    "PageNotFoundError",
    "PageOwner",
    "PageRegistryService",
    "PageUpdate",
    "RegistryConflictError",
    "RegistryCorruptError",
    "RegistryDocument",
    "RegistryError",
    "RegistrySnapshot",
    "RegistryStore",
    "canonicalize_owners",
    "decode_document",
    "encode_document",
    "parse_page_create",
    "parse_page_update",
    "validate_document",
]
