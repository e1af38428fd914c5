"""Endpoints over the deployment provider's environment variables."""
