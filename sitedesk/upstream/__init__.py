"""Adapters for the code host (GitHub) and the deployment provider (Vercel).

All outbound HTTP goes through :class:`~sitedesk.upstream.transport.UpstreamTransport`,
which injects credentials, applies timeouts, retries transient failures and
classifies errors.

Usage
-----
Build both adapters from configuration::

    from sitedesk.config import SiteDeskConfig
    from sitedesk.upstream import GitHubRepoClient, VercelDeployClient

    config = SiteDeskConfig.from_env()
    github = GitHubRepoClient(config)
    vercel = VercelDeployClient(config)

"""

from .errors import (
    AlreadyExistsError,
    UpstreamAuthError,
    UpstreamClientError,
    UpstreamConflictError,
    UpstreamError,
    UpstreamNotFoundError,
    UpstreamResponseShapeError,
    UpstreamServerError,
    UpstreamTimeoutError,
)
from .github import GitHubRepoClient
from .probe import probe_site
from .transport import RetryPolicy, UpstreamTransport, classify_failure
from .vercel import ALL_ENV_TARGETS, VercelDeployClient

__all__ = [
    "ALL_ENV_TARGETS",
    "AlreadyExistsError",
    "GitHubRepoClient",
    "RetryPolicy",
    "UpstreamAuthError",
    "UpstreamClientError",
    "UpstreamConflictError",
    "UpstreamError",
    "UpstreamNotFoundError",
    "UpstreamResponseShapeError",
    "UpstreamServerError",
    "UpstreamTimeoutError",
    "UpstreamTransport",
    "VercelDeployClient",
    "classify_failure",
    "probe_site",
]
