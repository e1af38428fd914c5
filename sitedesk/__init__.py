"""SiteDesk: a self-service administrative console for one web property.

SiteDesk lets repository collaborators manage deployments, environment
variables and the page ownership registry of a single website through a
small HTTP API.
"""
