"""The authenticated caller as asserted by the fronting OAuth proxy.

Sign-in happens in an OAuth proxy in front of the service. The proxy
forwards the identity it established in ``X-Auth-Request-*`` headers, which
:func:`principal_from_request` turns into a :class:`Principal`.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from falcon.asgi import Request

USER_HEADER = "X-Auth-Request-User"
DISPLAY_NAME_HEADER = "X-Auth-Request-Preferred-Username"
EMAIL_HEADER = "X-Auth-Request-Email"


@dc.dataclass(frozen=True, slots=True)
class Principal:
    """The human initiating a request.

    Attributes
    ----------
    login
        Code-host login used for collaborator checks.
    display_name
        Human-readable name, when the proxy supplies one.
    email
        Email address, when the proxy supplies one.

    """

    login: str
    display_name: str | None = None
    email: str | None = None

    @property
    def display(self) -> str:
        """Return the name recorded in commit messages."""
        return self.display_name or self.email or self.login


def _header(req: Request, name: str) -> str | None:
    value = req.get_header(name)
    if value is None:
        return None
    return value.strip() or None


def principal_from_request(req: Request) -> Principal | None:
    """Return the principal asserted by the proxy headers, if any."""
    login = _header(req, USER_HEADER)
    if login is None:
        return None
    return Principal(
        login=login,
        display_name=_header(req, DISPLAY_NAME_HEADER),
        email=_header(req, EMAIL_HEADER),
    )


__all__ = [
    "DISPLAY_NAME_HEADER",
    "EMAIL_HEADER",
    "USER_HEADER",
    "Principal",
    "principal_from_request",
]
