"""Collaborator checks guarding every management operation.

Usage
-----
>>> gate = AuthorizationGate(github_client)
>>> await gate.require_collaborator(principal)

"""

from __future__ import annotations

import dataclasses as dc
import time
import typing as typ

from sitedesk.logging import get_logger, log_info
from sitedesk.upstream.errors import AlreadyExistsError

from .errors import AuthError, ForbiddenError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .principal import Principal

logger = get_logger(__name__)

DEFAULT_CACHE_TTL_S = 60.0
ADDED_MESSAGE = (
    "Successfully added {login} as a collaborator. Check your email for the "
    "invitation!"
)
ALREADY_COLLABORATOR_MESSAGE = "You are already a collaborator on this repository!"


class CollaboratorClient(typ.Protocol):
    """The collaborator operations the gate needs from the code host."""

    async def check_collaborator(self, login: str) -> bool:
        """Return whether ``login`` is a collaborator."""
        ...

    async def add_collaborator(self, login: str, *, permission: str = "push") -> None:
        """Invite ``login`` with ``permission``."""
        ...


@dc.dataclass(frozen=True, slots=True)
class CollaboratorStatus:
    """Outcome of a collaborator check."""

    login: str
    is_collaborator: bool


@dc.dataclass(frozen=True, slots=True)
class AddSelfResult:
    """Outcome of a self-service collaborator request.

    ``added`` is ``False`` when the caller was already a collaborator; both
    outcomes are successes.
    """

    added: bool
    message: str


class AuthorizationGate:
    """Decide whether a principal may manage the site.

    Positive answers are cached per login for ``ttl_s`` seconds. Negative
    answers always go back to the code host so a user who has just accepted
    an invitation is let in straight away.

    Parameters
    ----------
    client
        Collaborator API, normally a
        :class:`~sitedesk.upstream.github.GitHubRepoClient`.
    ttl_s
        Lifetime of a cached positive answer; ``0`` disables caching.
    clock
        Monotonic clock returning seconds.

    """

    def __init__(
        self,
        client: CollaboratorClient,
        *,
        ttl_s: float = DEFAULT_CACHE_TTL_S,
        clock: cabc.Callable[[], float] = time.monotonic,
    ) -> None:
        """Configure the gate."""
        self._client = client
        self._ttl_s = ttl_s
        self._clock = clock
        self._expiry: dict[str, float] = {}

    def _cached(self, key: str) -> bool:
        expires_at = self._expiry.get(key)
        if expires_at is None:
            return False
        if self._clock() < expires_at:
            return True
        del self._expiry[key]
        return False

    async def check_principal(self, login: str) -> CollaboratorStatus:
        """Return whether ``login`` is a collaborator on the managed repo.

        Raises
        ------
        UpstreamError
            If the code host fails for a reason other than "not found".

        """
        key = login.lower()
        if self._cached(key):
            return CollaboratorStatus(login=login, is_collaborator=True)

        is_collaborator = await self._client.check_collaborator(login)
        if is_collaborator and self._ttl_s > 0:
            self._expiry[key] = self._clock() + self._ttl_s
        return CollaboratorStatus(login=login, is_collaborator=is_collaborator)

    async def require_collaborator(self, principal: Principal | None) -> Principal:
        """Return ``principal`` if it may manage the site.

        Raises
        ------
        AuthError
            If ``principal`` is ``None``.
        ForbiddenError
            If the principal is not a collaborator.

        """
        if principal is None:
            raise AuthError()
        status = await self.check_principal(principal.login)
        if not status.is_collaborator:
            raise ForbiddenError(principal.login)
        return principal

    async def add_self(self, login: str) -> AddSelfResult:
        """Invite ``login`` as a collaborator with push permission.

        Inviting an existing collaborator succeeds with a distinct message.
        """
        try:
            await self._client.add_collaborator(login, permission="push")
        except AlreadyExistsError:
            log_info(logger, "Collaborator %s already present", login)
            return AddSelfResult(added=False, message=ALREADY_COLLABORATOR_MESSAGE)
        log_info(logger, "Invited %s as a collaborator", login)
        return AddSelfResult(added=True, message=ADDED_MESSAGE.format(login=login))


__all__ = [
    "ADDED_MESSAGE",
    "ALREADY_COLLABORATOR_MESSAGE",
    "AddSelfResult",
    "AuthorizationGate",
    "CollaboratorClient",
    "CollaboratorStatus",
]
