"""Typed records returned by the upstream adapters.

GitHub records use the REST API's snake_case field names; Vercel records use
its camelCase names. Unknown fields are ignored when decoding.
"""

from __future__ import annotations

import typing as typ

import msgspec

# -- GitHub -----------------------------------------------------------------


class RepositoryMetadata(msgspec.Struct, kw_only=True):
    """Subset of ``GET /repos/{owner}/{repo}``."""

    id: int
    full_name: str
    default_branch: str
    html_url: str | None = None


class GitObject(msgspec.Struct, kw_only=True):
    """A ``{sha}`` pointer to a git object."""

    sha: str


class BranchRef(msgspec.Struct, kw_only=True):
    """A git reference such as ``refs/heads/main``."""

    ref: str
    object: GitObject


class GitCommit(msgspec.Struct, kw_only=True):
    """A commit from the git data API."""

    sha: str
    tree: GitObject
    message: str = ""
    parents: list[GitObject] = msgspec.field(default_factory=list)


class BranchCommit(msgspec.Struct, kw_only=True):
    """Commit pointer embedded in a branch listing."""

    sha: str


class Branch(msgspec.Struct, kw_only=True):
    """An entry of ``GET /repos/{owner}/{repo}/branches``."""

    name: str
    commit: BranchCommit
    protected: bool = False


class GitHubUser(msgspec.Struct, kw_only=True):
    """A GitHub account as embedded in other resources."""

    login: str
    id: int | None = None
    avatar_url: str | None = None
    html_url: str | None = None


class CommitAuthor(msgspec.Struct, kw_only=True):
    """Git author metadata of a commit."""

    name: str | None = None
    email: str | None = None
    date: str | None = None


class CommitDetail(msgspec.Struct, kw_only=True):
    """The ``commit`` object of a commit listing entry."""

    message: str
    author: CommitAuthor | None = None


class CommitSummary(msgspec.Struct, kw_only=True):
    """An entry of ``GET /repos/{owner}/{repo}/commits``."""

    sha: str
    commit: CommitDetail
    html_url: str | None = None
    author: GitHubUser | None = None


class CollaboratorPermissions(msgspec.Struct, kw_only=True):
    """Permission flags of a collaborator."""

    admin: bool = False
    push: bool = False
    pull: bool = False


class Collaborator(msgspec.Struct, kw_only=True):
    """An entry of ``GET /repos/{owner}/{repo}/collaborators``."""

    login: str
    id: int
    avatar_url: str | None = None
    html_url: str | None = None
    role_name: str | None = None
    permissions: CollaboratorPermissions | None = None

    @property
    def role(self) -> str:
        """Return the role name, falling back to the admin flag."""
        if self.role_name:
            return self.role_name
        if self.permissions is not None and self.permissions.admin:
            return "admin"
        return "collaborator"


class FileContent(msgspec.Struct, frozen=True, kw_only=True):
    """Decoded file text together with its content SHA."""

    path: str
    content: str
    revision: str


# -- Vercel -----------------------------------------------------------------

type EnvTarget = typ.Literal["production", "preview", "development"]


class DeploymentMeta(msgspec.Struct, kw_only=True, rename="camel"):
    """Git metadata attached to a deployment."""

    github_commit_ref: str | None = None
    github_commit_sha: str | None = None
    github_commit_message: str | None = None


class DeploymentCreator(msgspec.Struct, kw_only=True):
    """The account that created a deployment."""

    username: str | None = None


class Deployment(msgspec.Struct, kw_only=True, rename="camel"):
    """A Vercel deployment.

    The list endpoint names the identifier ``uid`` while the single-item and
    create endpoints name it ``id``; :attr:`deployment_id` reads either.
    """

    uid: str | None = None
    id: str | None = None
    name: str | None = None
    url: str | None = None
    created: int | None = None
    created_at: int | None = None
    state: str | None = None
    ready_state: str | None = None
    target: str | None = None
    meta: DeploymentMeta | None = None
    creator: DeploymentCreator | None = None

    @property
    def deployment_id(self) -> str:
        """Return the deployment identifier regardless of endpoint."""
        return self.uid or self.id or ""

    @property
    def status(self) -> str | None:
        """Return the deployment state regardless of endpoint."""
        return self.state or self.ready_state

    @property
    def created_ms(self) -> int | None:
        """Return the creation time in epoch milliseconds."""
        return self.created if self.created is not None else self.created_at


class DeploymentEventPayload(msgspec.Struct, kw_only=True, rename="camel"):
    """Payload of a deployment build event."""

    text: str | None = None
    status_code: int | None = None
    deployment_id: str | None = None


class DeploymentEvent(msgspec.Struct, kw_only=True):
    """An entry of the deployment events stream."""

    type: str
    created: int | None = None
    payload: DeploymentEventPayload | None = None


class EnvVariable(msgspec.Struct, kw_only=True, rename="camel"):
    """A project environment variable. ``value`` is never forwarded to callers."""

    id: str
    key: str
    target: list[str] | str = msgspec.field(default_factory=list)
    type: str | None = None
    value: str | None = None
    created_at: int | None = None
    updated_at: int | None = None


class Project(msgspec.Struct, kw_only=True):
    """A Vercel project."""

    id: str
    name: str
    framework: str | None = None


__all__ = [
    "Branch",
    "BranchCommit",
    "BranchRef",
    "Collaborator",
    "CollaboratorPermissions",
    "CommitAuthor",
    "CommitDetail",
    "CommitSummary",
    "Deployment",
    "DeploymentCreator",
    "DeploymentEvent",
    "DeploymentEventPayload",
    "DeploymentMeta",
    "EnvTarget",
    "EnvVariable",
    "FileContent",
    "GitCommit",
    "GitHubUser",
    "GitObject",
    "Project",
    "RepositoryMetadata",
]
