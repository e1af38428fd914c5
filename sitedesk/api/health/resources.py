"""Health probe resources for container liveness and readiness checks.

Neither probe calls an upstream API: a slow code host must not make the
orchestrator restart a healthy process.

Usage
-----
Register health endpoints on the Falcon app::

    from sitedesk.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(configured=True))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource.

    Reports ready only when the app was built with its upstream adapters;
    a health-only app answers 503 so it never receives management traffic.

    Parameters
    ----------
    configured
        Whether the domain endpoints are registered.

    """

    def __init__(self, *, configured: bool) -> None:
        """Record whether the domain endpoints are available."""
        self._configured = configured

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        if self._configured:
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
        else:
            resp.media = {"status": "unconfigured"}
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
