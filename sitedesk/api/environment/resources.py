"""Environment variable management for the Vercel project.

Every operation needs a collaborator. Values are write-only: listings and
responses never include them.

Usage
-----
Register the resources on the Falcon app::

    deps = EnvironmentResourceDependencies(vercel=vercel, gate=gate)
    app.add_route("/env", EnvVariablesResource(deps))
    app.add_route("/env/{env_id}", EnvVariableResource(deps))

"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

import falcon
import msgspec

from sitedesk.api.support import read_json_object
from sitedesk.errors import InvalidInputError
from sitedesk.logging import get_logger, log_info
from sitedesk.upstream.models import EnvTarget
from sitedesk.upstream.vercel import ALL_ENV_TARGETS

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from sitedesk.access.gate import AuthorizationGate
    from sitedesk.upstream.models import EnvVariable
    from sitedesk.upstream.vercel import VercelDeployClient

__all__ = [
    "ENV_KEY_PATTERN",
    "EnvCreate",
    "EnvUpdate",
    "EnvVariableResource",
    "EnvVariablesResource",
    "EnvironmentResourceDependencies",
    "parse_env_create",
    "parse_env_update",
]

logger = get_logger(__name__)

ENV_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")
INVALID_KEY_MESSAGE = (
    "Invalid key format. Use uppercase letters, numbers, and underscores. "
    "Must start with a letter."
)

type EnvVarType = typ.Literal["plain", "encrypted", "sensitive", "secret"]


class EnvCreate(msgspec.Struct, kw_only=True):
    """Body of ``POST /env``."""

    key: str = ""
    value: str = ""
    target: list[EnvTarget] | None = None
    type: EnvVarType = "encrypted"


class EnvUpdate(msgspec.Struct, kw_only=True):
    """Body of ``PATCH /env/{env_id}``."""

    value: str = ""
    target: list[EnvTarget] | None = None


def _convert[T](body: dict[str, typ.Any], target: type[T]) -> T:
    try:
        return msgspec.convert(body, target)
    except msgspec.ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc


def parse_env_create(body: dict[str, typ.Any]) -> EnvCreate:
    """Validate a ``POST /env`` body.

    Raises
    ------
    InvalidInputError
        If ``key`` or ``value`` is missing, the key is not an upper-case
        identifier, or a field has the wrong type.

    """
    request = _convert(body, EnvCreate)
    if not request.key or not request.value:
        msg = "key and value are required"
        raise InvalidInputError(msg)
    if ENV_KEY_PATTERN.match(request.key) is None:
        raise InvalidInputError(INVALID_KEY_MESSAGE, field="key")
    return request


def parse_env_update(body: dict[str, typ.Any]) -> EnvUpdate:
    """Validate a ``PATCH /env/{env_id}`` body; ``value`` is required."""
    request = _convert(body, EnvUpdate)
    if not request.value:
        raise InvalidInputError.required("value", "value")
    return request


def _serialize_env(env: EnvVariable) -> dict[str, typ.Any]:
    return {
        "id": env.id,
        "key": env.key,
        "target": env.target,
        "type": env.type,
        "createdAt": env.created_at,
        "updatedAt": env.updated_at,
    }


@dc.dataclass(frozen=True, slots=True)
class EnvironmentResourceDependencies:
    """Collaborators for the environment resources."""

    vercel: VercelDeployClient
    gate: AuthorizationGate


class EnvVariablesResource:
    """``GET`` lists and ``POST`` creates environment variables."""

    def __init__(self, dependencies: EnvironmentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel
        self._gate = dependencies.gate

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{"envs": [...]}`` without values."""
        await self._gate.require_collaborator(req.context.principal)
        envs = await self._vercel.list_env_vars()
        resp.media = {"envs": [_serialize_env(env) for env in envs]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: Request, resp: Response) -> None:
        """Create a variable; targets default to every environment."""
        principal = await self._gate.require_collaborator(req.context.principal)
        request = parse_env_create(await read_json_object(req))
        env = await self._vercel.create_env_var(
            request.key,
            request.value,
            target=request.target or ALL_ENV_TARGETS,
            var_type=request.type,
        )
        log_info(logger, "Env var %s created by %s", request.key, principal.login)
        resp.media = {
            "message": f"Environment variable {request.key} created successfully!",
            "env": _serialize_env(env),
        }
        resp.status = falcon.HTTP_200


class EnvVariableResource:
    """``PATCH`` replaces and ``DELETE`` removes one environment variable."""

    def __init__(self, dependencies: EnvironmentResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._vercel = dependencies.vercel
        self._gate = dependencies.gate

    async def on_patch(self, req: Request, resp: Response, *, env_id: str) -> None:
        """Replace the value and, when given, the targets of ``env_id``."""
        principal = await self._gate.require_collaborator(req.context.principal)
        request = parse_env_update(await read_json_object(req))
        env = await self._vercel.update_env_var(
            env_id, request.value, target=request.target
        )
        log_info(logger, "Env var %s updated by %s", env.key, principal.login)
        resp.media = {
            "message": "Environment variable updated successfully!",
            "env": _serialize_env(env),
        }
        resp.status = falcon.HTTP_200

    async def on_delete(self, req: Request, resp: Response, *, env_id: str) -> None:
        """Delete ``env_id``."""
        principal = await self._gate.require_collaborator(req.context.principal)
        await self._vercel.delete_env_var(env_id)
        log_info(logger, "Env var %s deleted by %s", env_id, principal.login)
        resp.media = {"message": "Environment variable deleted successfully!"}
        resp.status = falcon.HTTP_200
