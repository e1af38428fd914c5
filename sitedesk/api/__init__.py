"""HTTP surface of SiteDesk: the Falcon ASGI app, its resources and error mapping."""

from sitedesk.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
