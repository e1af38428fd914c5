"""Pass-through resources over the Vercel project.

Listing deployments, logs and projects needs an authenticated principal.
Anything that starts or stops a build needs a collaborator.

Usage
-----
Register the resources on the Falcon app::

    deps = DeploymentResourceDependencies(vercel=vercel, github=github, gate=gate)
    app.add_route("/deployments", DeploymentsResource(deps))
    app.add_route("/deployments/{deployment_id}/logs", DeploymentLogsResource(deps))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon

from sitedesk.api.support import read_json_object, require_principal, required_string
from sitedesk.common.slug import short_sha
from sitedesk.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from sitedesk.access.gate import AuthorizationGate
    from sitedesk.upstream.github import GitHubRepoClient
    from sitedesk.upstream.models import Deployment, DeploymentEvent
    from sitedesk.upstream.vercel import VercelDeployClient

__all__ = [
    "DeploymentCancelResource",
    "DeploymentLogsResource",
    "DeploymentResourceDependencies",
    "DeploymentsResource",
    "PreviewDeployResource",
    "ProjectsResource",
    "RedeployResource",
    "RollbackResource",
]

logger = get_logger(__name__)

DEPLOYMENT_LIST_LIMIT = 20


@dc.dataclass(frozen=True, slots=True)
class DeploymentResourceDependencies:
    """Collaborators for the deployment resources.

    Attributes
    ----------
    vercel
        Adapter for the deployment provider.
    github
        Adapter used to resolve the repository id for branch previews.
    gate
        Collaborator check applied to build-changing operations.

    """

    vercel: VercelDeployClient
    github: GitHubRepoClient
    gate: AuthorizationGate


def _serialize_deployment(deployment: Deployment) -> dict[str, typ.Any]:
    meta = deployment.meta
    commit_sha = meta.github_commit_sha if meta is not None else None
    return {
        "id": deployment.deployment_id,
        "url": deployment.url,
        "state": deployment.status,
        "created": deployment.created_ms,
        "target": deployment.target,
        "branch": meta.github_commit_ref if meta is not None else None,
        "commitSha": short_sha(commit_sha) if commit_sha else None,
        "commitMessage": meta.github_commit_message if meta is not None else None,
        "creator": deployment.creator.username if deployment.creator else None,
    }


def _deployment_summary(deployment: Deployment) -> dict[str, typ.Any]:
    return {
        "id": deployment.deployment_id,
        "url": deployment.url,
        "state": deployment.status,
    }


def _log_lines(events: list[DeploymentEvent]) -> list[dict[str, typ.Any]]:
    """Keep the events that carry build output text."""
    return [
        {"timestamp": event.created, "text": event.payload.text, "type": event.type}
        for event in events
        if event.payload is not None and event.payload.text
    ]


class DeploymentsResource:
    """``GET /deployments`` lists the newest deployments of the project."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{"deployments": [...]}``, newest first."""
        require_principal(req)
        deployments = await self._vercel.list_deployments(limit=DEPLOYMENT_LIST_LIMIT)
        resp.media = {"deployments": [_serialize_deployment(d) for d in deployments]}
        resp.status = falcon.HTTP_200


class DeploymentLogsResource:
    """``GET /deployments/{deployment_id}/logs`` returns build output."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel

    async def on_get(
        self, req: Request, resp: Response, *, deployment_id: str
    ) -> None:
        """Return ``{"logs": [{timestamp, text, type}]}``."""
        require_principal(req)
        events = await self._vercel.list_deployment_events(deployment_id)
        resp.media = {"logs": _log_lines(events)}
        resp.status = falcon.HTTP_200


class RedeployResource:
    """``POST /deployments/redeploy`` rebuilds the latest production deployment."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel
        self._gate = dependencies.gate

    async def on_post(self, req: Request, resp: Response) -> None:
        """Redeploy and summarize the new deployment."""
        principal = await self._gate.require_collaborator(req.context.principal)
        latest = await self._vercel.latest_production_deployment()
        deployment = await self._vercel.redeploy(latest.deployment_id)
        log_info(
            logger,
            "Redeploy of %s requested by %s",
            latest.deployment_id,
            principal.login,
        )
        resp.media = {
            "message": "Redeploy triggered successfully!",
            "deployment": _deployment_summary(deployment),
        }
        resp.status = falcon.HTTP_200


class RollbackResource:
    """``POST /deployments/rollback`` promotes an earlier build to production."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel
        self._gate = dependencies.gate

    async def on_post(self, req: Request, resp: Response) -> None:
        """Roll back to the deployment named by ``{deploymentId}``."""
        principal = await self._gate.require_collaborator(req.context.principal)
        body = await read_json_object(req)
        target_id = required_string(body, "deploymentId", "deploymentId")
        deployment = await self._vercel.redeploy(target_id)
        log_info(
            logger, "Rollback to %s requested by %s", target_id, principal.login
        )
        resp.media = {
            "message": "Rollback initiated successfully!",
            "deployment": _deployment_summary(deployment),
        }
        resp.status = falcon.HTTP_200


class PreviewDeployResource:
    """``POST /deployments/preview`` builds a preview of ``{branch}``."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel
        self._github = dependencies.github
        self._gate = dependencies.gate

    async def on_post(self, req: Request, resp: Response) -> None:
        """Start a preview deployment from the head of the branch."""
        principal = await self._gate.require_collaborator(req.context.principal)
        body = await read_json_object(req)
        branch = required_string(body, "branch", "Branch name")
        repository = await self._github.get_repository()
        deployment = await self._vercel.deploy_branch(branch, repository.id)
        log_info(
            logger, "Preview of %s requested by %s", branch, principal.login
        )
        resp.media = {
            "message": f'Preview deployment for branch "{branch}" triggered!',
            "deployment": _deployment_summary(deployment),
        }
        resp.status = falcon.HTTP_200


class DeploymentCancelResource:
    """``POST /deployments/{deployment_id}/cancel`` stops a queued or running build."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel
        self._gate = dependencies.gate

    async def on_post(
        self, req: Request, resp: Response, *, deployment_id: str
    ) -> None:
        """Cancel the deployment."""
        principal = await self._gate.require_collaborator(req.context.principal)
        await self._vercel.cancel_deployment(deployment_id)
        log_info(
            logger, "Cancel of %s requested by %s", deployment_id, principal.login
        )
        resp.media = {"message": "Deployment cancelled"}
        resp.status = falcon.HTTP_200


class ProjectsResource:
    """``GET /projects`` lists projects visible to the deploy token."""

    def __init__(self, dependencies: DeploymentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return the configured project and every visible project."""
        require_principal(req)
        projects = await self._vercel.list_projects()
        resp.media = {
            "targetProject": self._vercel.project,
            "projects": [
                {"id": p.id, "name": p.name, "framework": p.framework}
                for p in projects
            ],
        }
        resp.status = falcon.HTTP_200
