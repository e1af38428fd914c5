"""Request payloads for registry mutations.

HTTP bodies arrive as untyped JSON. The parsers here turn them into
:class:`PageCreate` and :class:`PageUpdate` or raise
:class:`~sitedesk.errors.InvalidInputError` with a message fit for the caller.
"""

from __future__ import annotations

import typing as typ

import msgspec

from sitedesk.errors import InvalidInputError


class OwnerInput(msgspec.Struct, kw_only=True, rename="camel"):
    """An owner as submitted by a client; only ``username`` matters."""

    username: str = ""
    github_id: str | int | None = None
    avatar_url: str | None = None


class PageCreate(msgspec.Struct, kw_only=True):
    """Fields accepted when creating a page."""

    name: str
    owners: list[OwnerInput] = msgspec.field(default_factory=list)
    description: str | None = None


class PageUpdate(msgspec.Struct, kw_only=True):
    """Fields accepted when updating a page.

    ``UNSET`` leaves a field unchanged. For ``description``, ``None`` and
    ``""`` both clear the stored value.
    """

    name: str | msgspec.UnsetType = msgspec.UNSET
    description: str | None | msgspec.UnsetType = msgspec.UNSET
    owners: list[OwnerInput] | msgspec.UnsetType = msgspec.UNSET


def _as_mapping(media: object) -> dict[str, typ.Any]:
    if not isinstance(media, dict):
        raise InvalidInputError.not_an_object()
    return media


def _parse_name(raw: object) -> str:
    if not isinstance(raw, str) or not raw:
        raise InvalidInputError.required("name", "Page name")
    return raw


def _parse_description(raw: object) -> str | None:
    if raw is None or isinstance(raw, str):
        return raw
    msg = "Description must be a string"
    raise InvalidInputError(msg, field="description")


def _parse_owners(raw: object) -> list[OwnerInput]:
    if not isinstance(raw, list):
        raise InvalidInputError.not_an_array("owners", "Owners")
    try:
        return msgspec.convert(raw, list[OwnerInput])
    except msgspec.ValidationError as exc:
        msg = f"Invalid owner entry: {exc}"
        raise InvalidInputError(msg, field="owners") from exc


def parse_page_create(media: object) -> PageCreate:
    """Validate a ``POST /pages`` body.

    Raises
    ------
    InvalidInputError
        If the body is not an object, ``name`` is missing or empty, or
        ``owners`` is not an array of owner objects.

    """
    body = _as_mapping(media)
    return PageCreate(
        name=_parse_name(body.get("name")),
        owners=_parse_owners(body.get("owners")),
        description=_parse_description(body.get("description")),
    )


def parse_page_update(media: object) -> PageUpdate:
    """Validate a ``PATCH /pages/{id}`` body; absent keys stay ``UNSET``."""
    body = _as_mapping(media)
    update = PageUpdate()
    if "name" in body:
        update.name = _parse_name(body["name"])
    if "description" in body:
        update.description = _parse_description(body["description"])
    if "owners" in body:
        update.owners = _parse_owners(body["owners"])
    return update


__all__ = [
    "OwnerInput",
    "PageCreate",
    "PageUpdate",
    "parse_page_create",
    "parse_page_update",
]
