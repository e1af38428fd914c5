"""Endpoints over the deployment provider."""
