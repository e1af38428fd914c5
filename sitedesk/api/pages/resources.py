"""Registry resources for ``/pages`` and ``/pages/{page_id}``.

Every operation, reads included, requires a collaborator principal. The
principal's display name is recorded in the commit message of each
mutation.

Usage
-----
Register the resources on the Falcon app::

    deps = PagesResourceDependencies(service=service, gate=gate)
    app.add_route("/pages", PagesResource(deps))
    app.add_route("/pages/{page_id}", PageResource(deps))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon

from sitedesk.api.support import read_json_object, to_media
from sitedesk.pages.inputs import parse_page_create, parse_page_update

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from sitedesk.access.gate import AuthorizationGate
    from sitedesk.pages.service import PageRegistryService

__all__ = ["PageResource", "PagesResource", "PagesResourceDependencies"]


@dc.dataclass(frozen=True, slots=True)
class PagesResourceDependencies:
    """Collaborators shared by the registry resources.

    Attributes
    ----------
    service
        Registry domain operations.
    gate
        Collaborator check applied before every operation.

    """

    service: PageRegistryService
    gate: AuthorizationGate


class PagesResource:
    """``GET`` lists and ``POST`` creates registry pages."""

    def __init__(self, dependencies: PagesResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._service = dependencies.service
        self._gate = dependencies.gate

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{"pages": [...]}`` in registry order."""
        await self._gate.require_collaborator(req.context.principal)
        pages = await self._service.list_pages()
        resp.media = {"pages": to_media(pages)}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: Request, resp: Response) -> None:
        """Create a page from ``{name, description?, owners}``.

        Parameters
        ----------
        req
            Falcon request carrying the JSON body.
        resp
            Falcon response populated with ``{"page": {...}}``.

        """
        principal = await self._gate.require_collaborator(req.context.principal)
        request = parse_page_create(await read_json_object(req))
        page = await self._service.create_page(request, actor=principal.display)
        resp.media = {"page": to_media(page)}
        resp.status = falcon.HTTP_200


class PageResource:
    """``PATCH`` updates and ``DELETE`` removes a single page."""

    def __init__(self, dependencies: PagesResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._service = dependencies.service
        self._gate = dependencies.gate

    async def on_patch(self, req: Request, resp: Response, *, page_id: str) -> None:
        """Apply ``{name?, description?, owners?}`` to ``page_id``."""
        principal = await self._gate.require_collaborator(req.context.principal)
        request = parse_page_update(await read_json_object(req))
        page = await self._service.update_page(
            page_id, request, actor=principal.display
        )
        resp.media = {"page": to_media(page)}
        resp.status = falcon.HTTP_200

    async def on_delete(self, req: Request, resp: Response, *, page_id: str) -> None:
        """Remove ``page_id`` and confirm with its name."""
        principal = await self._gate.require_collaborator(req.context.principal)
        name = await self._service.delete_page(page_id, actor=principal.display)
        resp.media = {"message": f'Page "{name}" deleted successfully'}
        resp.status = falcon.HTTP_200
