"""Vercel REST adapter for the hosting project.

All calls target the project named by ``DEPLOY_PROJECT_ID``. Redeploy and
rollback are the same upstream operation: a new production deployment that
reuses the build source of an earlier one.
"""

from __future__ import annotations

import typing as typ

import msgspec

from .errors import UpstreamNotFoundError, UpstreamResponseShapeError
from .models import Deployment, DeploymentEvent, EnvTarget, EnvVariable, Project
from .transport import RetryPolicy, Sleep, UpstreamTransport

if typ.TYPE_CHECKING:
    import httpx

    from sitedesk.config import SiteDeskConfig

_SERVICE = "vercel"

ALL_ENV_TARGETS: tuple[EnvTarget, ...] = ("production", "preview", "development")


def _decode[T](payload: object, target: type[T], field: str) -> T:
    try:
        return msgspec.convert(payload, target)
    except msgspec.ValidationError as exc:
        raise UpstreamResponseShapeError.missing(_SERVICE, f"{field}: {exc}") from exc


def _field(payload: object, key: str) -> object:
    if not isinstance(payload, dict) or key not in payload:
        raise UpstreamResponseShapeError.missing(_SERVICE, key)
    return payload[key]


class VercelDeployClient:
    """Typed access to the Vercel REST API for one project.

    Parameters
    ----------
    config
        Process configuration holding the token and project identifier.
    http_client
        Optional pre-built ``httpx.AsyncClient``.
    sleep
        Awaitable used between retries.

    """

    def __init__(
        self,
        config: SiteDeskConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """Build the underlying transport from ``config``."""
        self._project = config.deploy_project_id
        self._transport = UpstreamTransport(
            service=_SERVICE,
            base_url=config.deploy_api_base,
            token=config.deploy_token,
            timeout_s=config.http_timeout_s,
            retry=RetryPolicy(config.retry_max, config.retry_base_ms),
            headers={"Content-Type": "application/json"},
            http_client=http_client,
            sleep=sleep,
        )

    @property
    def project(self) -> str:
        """Return the configured project identifier."""
        return self._project

    async def aclose(self) -> None:
        """Close owned HTTP resources."""
        await self._transport.aclose()

    async def list_projects(self) -> list[Project]:
        """Return up to 100 projects visible to the token."""
        payload = await self._transport.request(
            "GET", "/v9/projects", params={"limit": 100}
        )
        return _decode(_field(payload, "projects"), list[Project], "projects")

    async def list_deployments(self, limit: int = 10) -> list[Deployment]:
        """Return the newest ``limit`` deployments of the project."""
        payload = await self._transport.request(
            "GET",
            "/v6/deployments",
            params={"projectId": self._project, "limit": limit},
        )
        return _decode(_field(payload, "deployments"), list[Deployment], "deployments")

    async def get_deployment(self, deployment_id: str) -> Deployment:
        """Return one deployment."""
        payload = await self._transport.request(
            "GET", f"/v13/deployments/{deployment_id}"
        )
        return _decode(payload, Deployment, "deployment")

    async def list_deployment_events(self, deployment_id: str) -> list[DeploymentEvent]:
        """Return the build event stream of a deployment."""
        payload = await self._transport.request(
            "GET", f"/v3/deployments/{deployment_id}/events"
        )
        return _decode(payload, list[DeploymentEvent], "events")

    async def deploy_branch(self, branch: str, repo_id: int) -> Deployment:
        """Create a preview deployment from the head of ``branch``."""
        payload = await self._transport.request(
            "POST",
            "/v13/deployments",
            json={
                "name": self._project,
                "gitSource": {"type": "github", "ref": branch, "repoId": repo_id},
                "target": "preview",
            },
            retry=False,
        )
        return _decode(payload, Deployment, "deployment")

    async def redeploy(self, deployment_id: str) -> Deployment:
        """Create a production deployment from an earlier deployment's source.

        Used both for "redeploy latest" and for rollback to an older build.
        """
        payload = await self._transport.request(
            "POST",
            "/v13/deployments",
            json={
                "name": self._project,
                "deploymentId": deployment_id,
                "target": "production",
            },
            retry=False,
        )
        return _decode(payload, Deployment, "deployment")

    async def latest_production_deployment(self) -> Deployment:
        """Return the newest production deployment, else the newest of any kind.

        Raises
        ------
        UpstreamNotFoundError
            If the project has no deployments.

        """
        deployments = await self.list_deployments(limit=20)
        for deployment in deployments:
            if deployment.target == "production":
                return deployment
        if deployments:
            return deployments[0]
        msg = "No deployments found to redeploy"
        raise UpstreamNotFoundError(msg, service=_SERVICE)

    async def cancel_deployment(self, deployment_id: str) -> None:
        """Cancel a queued or building deployment."""
        await self._transport.request(
            "PATCH", f"/v12/deployments/{deployment_id}/cancel"
        )

    async def list_env_vars(self) -> list[EnvVariable]:
        """Return the project's environment variables."""
        payload = await self._transport.request(
            "GET", f"/v10/projects/{self._project}/env"
        )
        return _decode(_field(payload, "envs"), list[EnvVariable], "envs")

    async def create_env_var(
        self,
        key: str,
        value: str,
        *,
        target: typ.Sequence[str] = ALL_ENV_TARGETS,
        var_type: str = "encrypted",
    ) -> EnvVariable:
        """Create an environment variable."""
        payload = await self._transport.request(
            "POST",
            f"/v10/projects/{self._project}/env",
            json={"key": key, "value": value, "target": list(target), "type": var_type},
        )
        # Newer API versions wrap the record as ``{"created": {...}}``.
        if isinstance(payload, dict) and isinstance(payload.get("created"), dict):
            payload = payload["created"]
        return _decode(payload, EnvVariable, "env")

    async def update_env_var(
        self,
        env_id: str,
        value: str,
        *,
        target: typ.Sequence[str] | None = None,
    ) -> EnvVariable:
        """Replace the value (and optionally the targets) of a variable."""
        body: dict[str, object] = {"value": value}
        if target is not None:
            body["target"] = list(target)
        payload = await self._transport.request(
            "PATCH", f"/v9/projects/{self._project}/env/{env_id}", json=body
        )
        return _decode(payload, EnvVariable, "env")

    async def delete_env_var(self, env_id: str) -> None:
        """Delete an environment variable."""
        await self._transport.request(
            "DELETE", f"/v9/projects/{self._project}/env/{env_id}"
        )


__all__ = ["ALL_ENV_TARGETS", "VercelDeployClient"]
