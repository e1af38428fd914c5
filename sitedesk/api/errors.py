"""Falcon error handlers translating the SiteDesk error taxonomy to HTTP.

Every failure response carries ``{"error": <message>}``; 409 responses add
``"code": "duplicate" | "conflict"`` so clients can tell an id collision
from a lost concurrency race.

Usage
-----
Register the handlers on the Falcon app::

    from sitedesk.api.errors import handle_sitedesk_error, handle_unexpected_error

    app.add_error_handler(SiteDeskError, handle_sitedesk_error)
    app.add_error_handler(Exception, handle_unexpected_error)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon

from sitedesk.access.errors import AuthError, ForbiddenError
from sitedesk.errors import InvalidInputError, SiteDeskError
from sitedesk.logging import get_logger, log_error, log_exception
from sitedesk.pages.errors import (
    DuplicatePageError,
    PageNotFoundError,
    RegistryConflictError,
)
from sitedesk.upstream.errors import (
    UpstreamAuthError,
    UpstreamConflictError,
    UpstreamError,
    UpstreamNotFoundError,
    UpstreamTimeoutError,
)

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "ErrorMapping",
    "handle_sitedesk_error",
    "handle_unexpected_error",
    "mapping_for",
]

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


@dc.dataclass(frozen=True, slots=True)
class ErrorMapping:
    """HTTP rendering of an error class.

    Attributes
    ----------
    status
        Falcon status line.
    code
        Machine-readable discriminator for 409 responses.
    expose
        Whether the error message is safe to return to the caller.

    """

    status: str
    code: str | None = None
    expose: bool = True


_INTERNAL = ErrorMapping(falcon.HTTP_500, expose=False)

# First match wins; subclasses precede their bases.
_MAPPINGS: tuple[tuple[type[SiteDeskError], ErrorMapping], ...] = (
    (InvalidInputError, ErrorMapping(falcon.HTTP_400)),
    (AuthError, ErrorMapping(falcon.HTTP_401)),
    (ForbiddenError, ErrorMapping(falcon.HTTP_403)),
    (PageNotFoundError, ErrorMapping(falcon.HTTP_404)),
    (UpstreamNotFoundError, ErrorMapping(falcon.HTTP_404)),
    (DuplicatePageError, ErrorMapping(falcon.HTTP_409, code="duplicate")),
    (RegistryConflictError, ErrorMapping(falcon.HTTP_409, code="conflict")),
    (UpstreamConflictError, ErrorMapping(falcon.HTTP_409, code="conflict")),
    (UpstreamAuthError, ErrorMapping(falcon.HTTP_403)),
    (UpstreamTimeoutError, ErrorMapping(falcon.HTTP_504)),
    (UpstreamError, ErrorMapping(falcon.HTTP_502)),
)


def mapping_for(ex: SiteDeskError) -> ErrorMapping:
    """Return the HTTP rendering for ``ex``."""
    for error_type, mapping in _MAPPINGS:
        if isinstance(ex, error_type):
            return mapping
    return _INTERNAL


async def handle_sitedesk_error(
    _req: Request,
    resp: Response,
    ex: SiteDeskError,
    _params: dict[str, typ.Any],
) -> None:
    """Render a ``SiteDeskError`` as a JSON error envelope.

    Upstream failures are logged at ERROR; internal errors are logged with
    their traceback and reported to the caller generically.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The raised error.
    _params
        URI template parameters (unused).

    """
    mapping = mapping_for(ex)
    if not mapping.expose:
        log_exception(logger, f"Unhandled {type(ex).__name__}", ex)
    elif isinstance(ex, UpstreamError) and mapping.status != falcon.HTTP_404:
        log_error(
            logger,
            "Upstream %s failure (%s): %s",
            ex.service,
            type(ex).__name__,
            ex,
        )

    media: dict[str, str] = {
        "error": str(ex) if mapping.expose else INTERNAL_ERROR_MESSAGE
    }
    if mapping.code is not None:
        media["code"] = mapping.code
    resp.status = mapping.status
    resp.media = media


async def handle_unexpected_error(
    _req: Request,
    resp: Response,
    ex: Exception,
    _params: dict[str, typ.Any],
) -> None:
    """Log an unexpected exception and return a generic 500.

    Falcon resolves handlers by the most specific registered class, so
    ``falcon.HTTPError`` keeps its built-in rendering.
    """
    log_exception(logger, "Unhandled exception while serving request", ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": INTERNAL_ERROR_MESSAGE}
