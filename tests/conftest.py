"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import falcon.testing
import httpx
import pytest

from sitedesk.access.gate import AuthorizationGate
from sitedesk.api.app import AppDependencies, create_app
from sitedesk.config import SiteDeskConfig
from sitedesk.pages.service import PageRegistryService
from sitedesk.pages.store import RegistryStore
from sitedesk.upstream.github import GitHubRepoClient
from sitedesk.upstream.vercel import VercelDeployClient
from tests.helpers.builders import COLLABORATOR, SITE_URL, make_config, no_sleep
from tests.helpers.fake_github import FakeGitHub

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _vercel_not_found(_request: httpx.Request) -> httpx.Response:
    return httpx.Response(status_code=404, json={"error": {"message": "Not Found"}})


@pytest.fixture
def config() -> SiteDeskConfig:
    """Return a configuration pointing at the fake upstreams."""
    return make_config()


@pytest.fixture
def fake_github() -> FakeGitHub:
    """Return a fake GitHub with ``alice`` as the only collaborator."""
    fake = FakeGitHub()
    fake.collaborators.add(COLLABORATOR)
    return fake


@pytest.fixture
def github(config: SiteDeskConfig, fake_github: FakeGitHub) -> GitHubRepoClient:
    """Return a GitHub adapter routed to the fake."""
    return GitHubRepoClient(config, http_client=fake_github.client(), sleep=no_sleep)


@pytest.fixture
def vercel_handler() -> cabc.Callable[[httpx.Request], httpx.Response]:
    """Return the handler serving Vercel requests; override per test."""
    return _vercel_not_found


@pytest.fixture
def vercel(
    config: SiteDeskConfig,
    vercel_handler: cabc.Callable[[httpx.Request], httpx.Response],
) -> VercelDeployClient:
    """Return a Vercel adapter routed to ``vercel_handler``."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(vercel_handler))
    return VercelDeployClient(config, http_client=http_client, sleep=no_sleep)


@pytest.fixture
def store(github: GitHubRepoClient) -> RegistryStore:
    """Return a registry store over the fake repository."""
    return RegistryStore(github)


@pytest.fixture
def registry(store: RegistryStore) -> PageRegistryService:
    """Return a registry service over the fake repository."""
    return PageRegistryService(store)


@pytest.fixture
def gate(github: GitHubRepoClient) -> AuthorizationGate:
    """Return a collaborator gate over the fake repository."""
    return AuthorizationGate(github)


@pytest.fixture
def site_online() -> bool:
    """Return the result reported by the stubbed site probe."""
    return True


@pytest.fixture
def app_dependencies(
    github: GitHubRepoClient,
    vercel: VercelDeployClient,
    registry: PageRegistryService,
    gate: AuthorizationGate,
    site_online: bool,  # noqa: FBT001 - fixture value
) -> AppDependencies:
    """Return application dependencies over the fakes."""

    async def probe(_url: str | None) -> bool:
        return site_online

    return AppDependencies(
        github=github,
        vercel=vercel,
        registry=registry,
        gate=gate,
        site_url=SITE_URL,
        probe=probe,
    )


@pytest.fixture
def client(app_dependencies: AppDependencies) -> falcon.testing.TestClient:
    """Return a test client for the full application."""
    return falcon.testing.TestClient(create_app(app_dependencies))
