"""Factory for building application dependencies from configuration.

This module provides ``build_dependencies()`` which wires the upstream
adapters, the registry store and service, and the authorization gate from
a :class:`~sitedesk.config.SiteDeskConfig`.

Usage
-----
Build dependencies for the API layer::

    from sitedesk.api.factory import build_dependencies

    deps = build_dependencies(SiteDeskConfig.from_env())

"""

from __future__ import annotations

import typing as typ

from sitedesk.access.gate import AuthorizationGate
from sitedesk.api.app import AppDependencies
from sitedesk.pages.observability import RegistryEventLogger
from sitedesk.pages.service import PageRegistryService
from sitedesk.pages.store import RegistryStore
from sitedesk.upstream.github import GitHubRepoClient
from sitedesk.upstream.vercel import VercelDeployClient

if typ.TYPE_CHECKING:
    import httpx

    from sitedesk.config import SiteDeskConfig

__all__ = ["build_dependencies"]


def build_dependencies(
    config: SiteDeskConfig,
    *,
    github_http_client: httpx.AsyncClient | None = None,
    vercel_http_client: httpx.AsyncClient | None = None,
) -> AppDependencies:
    """Build ``AppDependencies`` from ``config``.

    Parameters
    ----------
    config
        Process configuration.
    github_http_client, vercel_http_client
        Optional pre-built clients, used by tests to route upstream calls to
        in-memory fakes.

    Returns
    -------
    AppDependencies
        Dependencies ready for :func:`~sitedesk.api.app.create_app`.

    """
    github = GitHubRepoClient(config, http_client=github_http_client)
    vercel = VercelDeployClient(config, http_client=vercel_http_client)
    events = RegistryEventLogger()
    registry = PageRegistryService(
        RegistryStore(github, event_logger=events), event_logger=events
    )
    gate = AuthorizationGate(github, ttl_s=float(config.collaborator_cache_ttl_s))
    return AppDependencies(
        github=github,
        vercel=vercel,
        registry=registry,
        gate=gate,
        site_url=config.site_url,
    )
