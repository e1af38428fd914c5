"""Caller identity and the collaborator gate for management operations."""

from .errors import AccessError, AuthError, ForbiddenError
from .gate import AddSelfResult, AuthorizationGate, CollaboratorStatus
from .principal import Principal, principal_from_request

__all__ = [
    "AccessError",
    "AddSelfResult",
    "AuthError",
    "AuthorizationGate",
    "CollaboratorStatus",
    "ForbiddenError",
    "Principal",
    "principal_from_request",
]
