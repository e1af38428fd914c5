"""Small helpers shared across SiteDesk packages."""
