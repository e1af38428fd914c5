"""Unit tests for sitedesk.api.errors error handlers.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_errors.py

"""

from __future__ import annotations

import falcon.asgi
import falcon.testing
import pytest

from sitedesk.access.errors import AuthError, ForbiddenError
from sitedesk.api.errors import (
    handle_sitedesk_error,
    handle_unexpected_error,
    mapping_for,
)
from sitedesk.errors import ConfigError, InvalidInputError, SiteDeskError
from sitedesk.pages.errors import (
    DuplicatePageError,
    PageNotFoundError,
    RegistryConflictError,
    RegistryCorruptError,
)
from sitedesk.upstream.errors import (
    AlreadyExistsError,
    UpstreamAuthError,
    UpstreamConflictError,
    UpstreamNotFoundError,
    UpstreamServerError,
    UpstreamTimeoutError,
)


class _RaisingResource:
    """Resource that raises whatever exception it was built with."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        raise self._exc


def _client_raising(exc: Exception) -> falcon.testing.TestClient:
    app = falcon.asgi.App()
    app.add_route("/boom", _RaisingResource(exc))
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(SiteDeskError, handle_sitedesk_error)
    return falcon.testing.TestClient(app)


@pytest.mark.parametrize(
    ("exc", "status", "body"),
    [
        (
            InvalidInputError("Page name is required", field="name"),
            falcon.HTTP_400,
            {"error": "Page name is required"},
        ),
        (AuthError(), falcon.HTTP_401, {"error": "Unauthorized"}),
        (
            ForbiddenError("mallory"),
            falcon.HTTP_403,
            {
                "error": "You must be a collaborator on the repository "
                "to perform this action"
            },
        ),
        (PageNotFoundError("ghost"), falcon.HTTP_404, {"error": "Page not found"}),
        (
            DuplicatePageError("nav"),
            falcon.HTTP_409,
            {"error": "A page with this name already exists", "code": "duplicate"},
        ),
        (
            UpstreamConflictError("stale", service="github", status_code=409),
            falcon.HTTP_409,
            {"error": "stale", "code": "conflict"},
        ),
        (
            UpstreamTimeoutError("slow", service="vercel"),
            falcon.HTTP_504,
            {"error": "slow"},
        ),
        (
            UpstreamAuthError("Bad credentials", service="github", status_code=401),
            falcon.HTTP_403,
            {"error": "Bad credentials"},
        ),
    ],
)
def test_error_is_rendered(
    exc: Exception, status: str, body: dict[str, str]
) -> None:
    """Each error class maps to its status and envelope."""
    result = _client_raising(exc).simulate_get("/boom")

    assert result.status == status
    assert result.json == body


def test_registry_conflict_names_attempts() -> None:
    """Lost races are 409 conflicts telling the caller to retry."""
    result = _client_raising(RegistryConflictError(6)).simulate_get("/boom")

    assert result.status == falcon.HTTP_409
    assert result.json["code"] == "conflict"
    assert "6 attempts" in result.json["error"]


@pytest.mark.parametrize(
    "exc",
    [
        RegistryCorruptError.invariant("page 'nav' has duplicate owners"),
        ConfigError.missing("HOST_TOKEN"),
        RuntimeError("database password is hunter2"),
    ],
)
def test_internal_errors_are_not_exposed(exc: Exception) -> None:
    """Unmapped failures are a generic 500."""
    result = _client_raising(exc).simulate_get("/boom")

    assert result.status == falcon.HTTP_500
    assert result.json == {"error": "Internal server error"}


def test_falcon_http_errors_keep_their_rendering() -> None:
    """Falcon's own errors are not turned into 500s."""
    result = _client_raising(falcon.HTTPNotFound()).simulate_get("/boom")
    assert result.status == falcon.HTTP_404


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (UpstreamNotFoundError("gone", service="vercel"), falcon.HTTP_404),
        (UpstreamServerError("down", service="github"), falcon.HTTP_502),
        (AlreadyExistsError("dup", service="github"), falcon.HTTP_502),
    ],
)
def test_mapping_for_upstream_errors(exc: SiteDeskError, status: str) -> None:
    """Upstream failures map by class."""
    assert mapping_for(exc).status == status
