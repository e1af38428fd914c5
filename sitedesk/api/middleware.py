"""Falcon middleware for caller identity and upstream client lifetime.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(
        middleware=[PrincipalMiddleware(), UpstreamLifespanManager([github])]
    )

"""

from __future__ import annotations

import typing as typ

from sitedesk.access.principal import principal_from_request
from sitedesk.logging import get_logger, log_exception, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

__all__ = ["AsyncCloseable", "PrincipalMiddleware", "UpstreamLifespanManager"]

logger = get_logger(__name__)


class AsyncCloseable(typ.Protocol):
    """An object holding connections released by ``aclose``."""

    async def aclose(self) -> None:
        """Release held resources."""
        ...


class PrincipalMiddleware:
    """Attach the proxy-asserted principal to ``req.context.principal``.

    The attribute is ``None`` for anonymous requests; resources decide
    whether that is acceptable.
    """

    async def process_request(self, req: Request, _resp: Response) -> None:
        """Resolve the principal for ``req``.

        Parameters
        ----------
        req
            Falcon request whose context receives the principal.
        _resp
            Falcon response (unused during request phase).

        """
        req.context.principal = principal_from_request(req)


class UpstreamLifespanManager:
    """Close upstream HTTP clients when the ASGI server shuts down.

    Parameters
    ----------
    clients
        Adapters whose connection pools outlive individual requests.

    """

    def __init__(self, clients: cabc.Iterable[AsyncCloseable]) -> None:
        """Record the clients to close on shutdown."""
        self._clients = tuple(clients)

    async def process_shutdown(
        self,
        _scope: dict[str, typ.Any],
        _event: dict[str, typ.Any],
    ) -> None:
        """Close every client, logging failures so the rest still close."""
        for client in self._clients:
            try:
                await client.aclose()
            except Exception as exc:  # noqa: BLE001 - shutdown must reach every client
                log_exception(
                    logger, f"Failed to close {type(client).__name__}", exc
                )
        log_info(logger, "Closed %d upstream client(s)", len(self._clients))
