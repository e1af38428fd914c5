"""Process-wide configuration for SiteDesk.

The configuration is read once at startup and handed to the upstream
adapters explicitly; nothing resolves environment variables per call.

Usage
-----
Load from the environment:

>>> config = SiteDeskConfig.from_env()
>>> config.repo_slug
'acme/website'

"""

from __future__ import annotations

import dataclasses as dc
import os

from sitedesk.errors import ConfigError

_DEFAULT_HOST_API_BASE = "https://api.github.com"
_DEFAULT_DEPLOY_API_BASE = "https://api.vercel.com"
_DEFAULT_HTTP_TIMEOUT_MS = 10_000
_DEFAULT_RETRY_MAX = 3
_DEFAULT_RETRY_BASE_MS = 200
_DEFAULT_CACHE_TTL_S = 60


@dc.dataclass(frozen=True, slots=True)
class SiteDeskConfig:
    """Immutable configuration record for the upstream adapters.

    Attributes
    ----------
    host_token
        Code-host personal access token (repo and collaborator scopes).
    repo_owner, repo_name
        Coordinates of the managed repository.
    deploy_token
        Deployment-provider API token.
    deploy_project_id
        Deployment-provider project identifier or name.
    host_api_base, deploy_api_base
        API roots, overridable for testing and enterprise installs.
    site_url
        Production URL probed by the stats endpoint. ``None`` disables the
        probe.
    http_timeout_ms
        Per-request timeout for upstream calls.
    retry_max
        Retries allowed for transient upstream failures.
    retry_base_ms
        Base delay of the exponential retry backoff.
    collaborator_cache_ttl_s
        Lifetime of positive collaborator checks.

    """

    host_token: str
    repo_owner: str
    repo_name: str
    deploy_token: str
    deploy_project_id: str
    host_api_base: str = _DEFAULT_HOST_API_BASE
    deploy_api_base: str = _DEFAULT_DEPLOY_API_BASE
    site_url: str | None = None
    http_timeout_ms: int = _DEFAULT_HTTP_TIMEOUT_MS
    retry_max: int = _DEFAULT_RETRY_MAX
    retry_base_ms: int = _DEFAULT_RETRY_BASE_MS
    collaborator_cache_ttl_s: int = _DEFAULT_CACHE_TTL_S

    @property
    def repo_slug(self) -> str:
        """Return the managed repository as ``owner/name``."""
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def http_timeout_s(self) -> float:
        """Return the request timeout in seconds for httpx."""
        return self.http_timeout_ms / 1000

    @staticmethod
    def _required(variable: str) -> str:
        value = os.environ.get(variable, "").strip()
        if not value:
            raise ConfigError.missing(variable)
        return value

    @staticmethod
    def _optional(variable: str) -> str | None:
        value = os.environ.get(variable, "").strip()
        return value or None

    @staticmethod
    def _non_negative_int(variable: str, default: int) -> int:
        raw = os.environ.get(variable, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigError.invalid_integer(variable, raw) from exc
        if value < 0:
            raise ConfigError.invalid_integer(variable, raw)
        return value

    @classmethod
    def from_env(cls) -> SiteDeskConfig:
        """Build configuration from environment variables.

        Reads ``HOST_TOKEN``, ``HOST_REPO_OWNER``, ``HOST_REPO_NAME``,
        ``DEPLOY_TOKEN`` and ``DEPLOY_PROJECT_ID`` (all required), plus the
        optional ``HOST_API_BASE``, ``DEPLOY_API_BASE``, ``SITE_URL``,
        ``HTTP_TIMEOUT_MS``, ``RETRY_MAX``, ``RETRY_BASE_MS`` and
        ``COLLABORATOR_CACHE_TTL_S``.

        Raises
        ------
        ConfigError
            If a required variable is unset or an integer is malformed.

        """
        return cls(
            host_token=cls._required("HOST_TOKEN"),
            repo_owner=cls._required("HOST_REPO_OWNER"),
            repo_name=cls._required("HOST_REPO_NAME"),
            deploy_token=cls._required("DEPLOY_TOKEN"),
            deploy_project_id=cls._required("DEPLOY_PROJECT_ID"),
            host_api_base=cls._optional("HOST_API_BASE") or _DEFAULT_HOST_API_BASE,
            deploy_api_base=(
                cls._optional("DEPLOY_API_BASE") or _DEFAULT_DEPLOY_API_BASE
            ),
            site_url=cls._optional("SITE_URL"),
            http_timeout_ms=cls._non_negative_int(
                "HTTP_TIMEOUT_MS", _DEFAULT_HTTP_TIMEOUT_MS
            ),
            retry_max=cls._non_negative_int("RETRY_MAX", _DEFAULT_RETRY_MAX),
            retry_base_ms=cls._non_negative_int(
                "RETRY_BASE_MS", _DEFAULT_RETRY_BASE_MS
            ),
            collaborator_cache_ttl_s=cls._non_negative_int(
                "COLLABORATOR_CACHE_TTL_S", _DEFAULT_CACHE_TTL_S
            ),
        )


__all__ = ["SiteDeskConfig"]
