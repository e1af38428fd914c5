"""SiteDesk runtime entrypoint.

This module provides the ASGI application factory used by Granian. It
reads :class:`~sitedesk.config.SiteDeskConfig` from the environment, wires
the upstream adapters and delegates to :func:`sitedesk.api.app.create_app`,
keeping the ``sitedesk.runtime:create_app`` entrypoint stable.

Configuration is driven by environment variables:

- ``SITEDESK_HOST``: Bind address (default ``0.0.0.0``)
- ``SITEDESK_PORT``: Listen port (default ``8080``)
- ``SITEDESK_LOG_LEVEL``: Log level (default ``INFO``)
- the upstream variables documented on :meth:`SiteDeskConfig.from_env`

Run the service directly with ``python -m sitedesk.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from sitedesk.config import SiteDeskConfig
from sitedesk.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid SITEDESK_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Application serving health, registry and pass-through endpoints.

    Raises
    ------
    ConfigError
        If a required upstream variable is missing or malformed.

    """
    from sitedesk.api.app import create_app as _create_api_app
    from sitedesk.api.factory import build_dependencies

    config = SiteDeskConfig.from_env()
    log_info(
        logger,
        "Managing %s with deployment project %s",
        config.repo_slug,
        config.deploy_project_id,
    )
    return _create_api_app(build_dependencies(config))


def main() -> None:
    """Start the SiteDesk server using Granian.

    Reads ``SITEDESK_HOST``, ``SITEDESK_PORT`` and ``SITEDESK_LOG_LEVEL``
    from the environment. Upstream configuration is validated before the
    server starts so a misconfigured deployment fails fast.
    """
    from granian import Granian
    from granian.constants import Interfaces

    from sitedesk.errors import ConfigError

    host = os.environ.get("SITEDESK_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("SITEDESK_PORT", "8080")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("SITEDESK_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid SITEDESK_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    try:
        SiteDeskConfig.from_env()
    except ConfigError as exc:
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    log_info(
        logger,
        "Starting SiteDesk runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "sitedesk.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
