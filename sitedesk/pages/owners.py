"""Owner list canonicalization."""

from __future__ import annotations

import typing as typ

from .models import PageOwner

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class OwnerLike(typ.Protocol):
    """Anything carrying the owner fields: request input or stored owners."""

    @property
    def username(self) -> str: ...

    @property
    def github_id(self) -> str | int | None: ...

    @property
    def avatar_url(self) -> str | None: ...


def canonicalize_owners(owners: cabc.Iterable[OwnerLike]) -> tuple[PageOwner, ...]:
    """Return ``owners`` trimmed, de-duplicated and completed.

    Usernames are stripped and entries left empty are dropped. Duplicates are
    detected case-insensitively and the first occurrence wins. A missing
    ``github_id`` is filled with the username.

    Examples
    --------
    >>> [o.username for o in canonicalize_owners(
    ...     [PageOwner(username="BOB"), PageOwner(username="bob ")]
    ... )]
    ['BOB']

    """
    seen: set[str] = set()
    result: list[PageOwner] = []
    for owner in owners:
        username = owner.username.strip()
        key = username.lower()
        if not username or key in seen:
            continue
        seen.add(key)
        github_id = owner.github_id
        result.append(
            PageOwner(
                username=username,
                github_id=username if github_id in (None, "") else str(github_id),
                avatar_url=owner.avatar_url or None,
            )
        )
    return tuple(result)


__all__ = ["OwnerLike", "canonicalize_owners"]
