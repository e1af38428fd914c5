"""Request helpers shared by the API resources."""

from __future__ import annotations

import typing as typ

import falcon
import msgspec

from sitedesk.access.errors import AuthError
from sitedesk.errors import InvalidInputError

if typ.TYPE_CHECKING:
    from falcon.asgi import Request

    from sitedesk.access.principal import Principal

__all__ = [
    "optional_string",
    "read_json_object",
    "require_principal",
    "required_string",
    "to_media",
]


def require_principal(req: Request) -> Principal:
    """Return the authenticated principal of ``req``.

    Raises
    ------
    AuthError
        If the request carries no principal.

    """
    principal: Principal | None = getattr(req.context, "principal", None)
    if principal is None:
        raise AuthError()
    return principal


async def read_json_object(req: Request) -> dict[str, typ.Any]:
    """Return the request body as a JSON object.

    Raises
    ------
    InvalidInputError
        If the body is empty, malformed or not an object.

    """
    try:
        media = await req.get_media()
    except (falcon.MediaNotFoundError, falcon.MediaMalformedError) as exc:
        raise InvalidInputError.not_an_object() from exc
    if not isinstance(media, dict):
        raise InvalidInputError.not_an_object()
    return media


def required_string(body: dict[str, typ.Any], field: str, label: str) -> str:
    """Return ``body[field]`` if it is a non-blank string."""
    value = body.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError.required(field, label)
    return value


def optional_string(body: dict[str, typ.Any], field: str) -> str | None:
    """Return ``body[field]`` if present and a string, ``None`` when absent."""
    value = body.get(field)
    if value is None or isinstance(value, str):
        return value or None
    msg = f"{field} must be a string"
    raise InvalidInputError(msg, field=field)


def to_media(value: object) -> typ.Any:  # noqa: ANN401 - JSON-compatible builtins
    """Convert msgspec structs to JSON-compatible builtins for ``resp.media``."""
    return msgspec.to_builtins(value)
