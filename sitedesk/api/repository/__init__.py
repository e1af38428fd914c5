"""Endpoints over the managed source repository."""
