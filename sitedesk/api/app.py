"""Application factory for the SiteDesk Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when upstream dependencies are
supplied, the registry and pass-through endpoints.

Usage
-----
Create a health-only app (no upstream adapters)::

    app = create_app()

Create a full app::

    from sitedesk.api.app import AppDependencies, create_app

    deps = AppDependencies(
        github=github, vercel=vercel, registry=registry, gate=gate
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from sitedesk.api.errors import handle_sitedesk_error, handle_unexpected_error
from sitedesk.api.health.resources import HealthResource, ReadyResource
from sitedesk.api.middleware import PrincipalMiddleware, UpstreamLifespanManager
from sitedesk.errors import SiteDeskError
from sitedesk.upstream.probe import probe_site

if typ.TYPE_CHECKING:
    from sitedesk.access.gate import AuthorizationGate
    from sitedesk.api.repository.resources import SiteProbe
    from sitedesk.pages.service import PageRegistryService
    from sitedesk.upstream.github import GitHubRepoClient
    from sitedesk.upstream.vercel import VercelDeployClient

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    github
        Adapter for the managed repository.
    vercel
        Adapter for the deployment provider.
    registry
        Page registry domain service.
    gate
        Collaborator checks.
    site_url
        Production URL probed by ``/stats``.
    probe
        Reachability check used by ``/stats``.
    close_clients
        Close ``github`` and ``vercel`` on ASGI lifespan shutdown.

    """

    github: GitHubRepoClient
    vercel: VercelDeployClient
    registry: PageRegistryService
    gate: AuthorizationGate
    site_url: str | None = None
    probe: SiteProbe = probe_site
    close_clients: bool = True


def _add_domain_routes(app: falcon.asgi.App, deps: AppDependencies) -> None:
    from sitedesk.api.deployments.resources import (
        DeploymentCancelResource,
        DeploymentLogsResource,
        DeploymentResourceDependencies,
        DeploymentsResource,
        PreviewDeployResource,
        ProjectsResource,
        RedeployResource,
        RollbackResource,
    )
    from sitedesk.api.environment.resources import (
        EnvironmentResourceDependencies,
        EnvVariableResource,
        EnvVariablesResource,
    )
    from sitedesk.api.pages.resources import (
        PageResource,
        PagesResource,
        PagesResourceDependencies,
    )
    from sitedesk.api.repository.resources import (
        BranchesResource,
        CollaboratorsResource,
        CommitsResource,
        MembershipResource,
        RedeployCommitResource,
        RepositoryResourceDependencies,
        StatsResource,
    )

    pages = PagesResourceDependencies(service=deps.registry, gate=deps.gate)
    app.add_route("/pages", PagesResource(pages))
    app.add_route("/pages/{page_id}", PageResource(pages))

    repository = RepositoryResourceDependencies(
        github=deps.github,
        vercel=deps.vercel,
        gate=deps.gate,
        site_url=deps.site_url,
        probe=deps.probe,
    )
    app.add_route("/collaborators", CollaboratorsResource(repository))
    app.add_route("/collaborators/me", MembershipResource(repository))
    app.add_route("/branches", BranchesResource(repository))
    app.add_route("/commits", CommitsResource(repository))
    app.add_route("/redeploy", RedeployCommitResource(repository))
    app.add_route("/stats", StatsResource(repository))

    deployments = DeploymentResourceDependencies(
        vercel=deps.vercel, github=deps.github, gate=deps.gate
    )
    app.add_route("/deployments", DeploymentsResource(deployments))
    app.add_route("/deployments/redeploy", RedeployResource(deployments))
    app.add_route("/deployments/rollback", RollbackResource(deployments))
    app.add_route("/deployments/preview", PreviewDeployResource(deployments))
    app.add_route(
        "/deployments/{deployment_id}/logs", DeploymentLogsResource(deployments)
    )
    app.add_route(
        "/deployments/{deployment_id}/cancel", DeploymentCancelResource(deployments)
    )
    app.add_route("/projects", ProjectsResource(deployments))

    environment = EnvironmentResourceDependencies(vercel=deps.vercel, gate=deps.gate)
    app.add_route("/env", EnvVariablesResource(environment))
    app.add_route("/env/{env_id}", EnvVariableResource(environment))


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only ``/health``
        and ``/ready`` are registered and ``/ready`` reports the app as
        unconfigured.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = [PrincipalMiddleware()]
    if dependencies is not None and dependencies.close_clients:
        middleware.append(
            UpstreamLifespanManager([dependencies.github, dependencies.vercel])
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    # Health endpoints are always available
    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(configured=dependencies is not None))

    if dependencies is not None:
        _add_domain_routes(app, dependencies)

    # Falcon picks the most specific handler, so Exception only sees the rest.
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(SiteDeskError, handle_sitedesk_error)

    return app
