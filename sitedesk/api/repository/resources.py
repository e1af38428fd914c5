"""Pass-through resources over the managed GitHub repository.

These resources reshape adapter records into the payloads the console
front end consumes. Reads need an authenticated principal; pushing a
redeploy commit needs a collaborator.

Usage
-----
Register the resources on the Falcon app::

    deps = RepositoryResourceDependencies(github=github, gate=gate, ...)
    app.add_route("/collaborators", CollaboratorsResource(deps))
    app.add_route("/collaborators/me", MembershipResource(deps))
    app.add_route("/branches", BranchesResource(deps))
    app.add_route("/commits", CommitsResource(deps))
    app.add_route("/redeploy", RedeployCommitResource(deps))
    app.add_route("/stats", StatsResource(deps))

"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import typing as typ

import falcon

from sitedesk.api.support import require_principal
from sitedesk.common.slug import short_sha
from sitedesk.common.time import format_timestamp, utcnow
from sitedesk.logging import get_logger, log_info, log_warning
from sitedesk.upstream.errors import UpstreamError
from sitedesk.upstream.probe import probe_site

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from sitedesk.access.gate import AuthorizationGate
    from sitedesk.upstream.github import GitHubRepoClient
    from sitedesk.upstream.models import Branch, Collaborator, CommitSummary
    from sitedesk.upstream.vercel import VercelDeployClient

__all__ = [
    "BranchesResource",
    "CollaboratorsResource",
    "CommitsResource",
    "MembershipResource",
    "RedeployCommitResource",
    "RepositoryResourceDependencies",
    "StatsResource",
]

logger = get_logger(__name__)

COMMIT_LIMIT = 15
REDEPLOY_COMMIT_TITLE = "chore: trigger redeploy [skip ci]"

type SiteProbe = cabc.Callable[[str | None], cabc.Awaitable[bool]]


@dc.dataclass(frozen=True, slots=True)
class RepositoryResourceDependencies:
    """Collaborators for the repository resources.

    Attributes
    ----------
    github
        Adapter for the managed repository.
    vercel
        Adapter used for the latest deployment shown by ``/stats``.
    gate
        Collaborator checks and self-service invitations.
    site_url
        Production URL probed by ``/stats``.
    probe
        Reachability check for ``site_url``.

    """

    github: GitHubRepoClient
    vercel: VercelDeployClient
    gate: AuthorizationGate
    site_url: str | None = None
    probe: SiteProbe = probe_site


def _serialize_collaborator(collaborator: Collaborator) -> dict[str, typ.Any]:
    return {
        "id": collaborator.id,
        "username": collaborator.login,
        "avatarUrl": collaborator.avatar_url,
        "profileUrl": collaborator.html_url,
        "role": collaborator.role,
    }


def _serialize_branch(branch: Branch) -> dict[str, typ.Any]:
    return {
        "name": branch.name,
        "sha": short_sha(branch.commit.sha),
        "protected": branch.protected,
    }


def _serialize_commit(commit: CommitSummary) -> dict[str, typ.Any]:
    """Flatten a commit listing entry to its first message line."""
    detail = commit.commit
    author = detail.author
    return {
        "sha": short_sha(commit.sha),
        "fullSha": commit.sha,
        "message": detail.message.split("\n", 1)[0],
        "author": {
            "name": (author.name if author is not None else None) or "Unknown",
            "username": commit.author.login if commit.author else None,
            "avatarUrl": commit.author.avatar_url if commit.author else None,
        },
        "date": author.date if author is not None else None,
        "url": commit.html_url,
    }


class CollaboratorsResource:
    """``GET /collaborators`` lists repository collaborators."""

    def __init__(self, dependencies: RepositoryResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._github = dependencies.github

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{"collaborators": [...]}``."""
        require_principal(req)
        collaborators = await self._github.list_collaborators()
        resp.media = {
            "collaborators": [_serialize_collaborator(c) for c in collaborators]
        }
        resp.status = falcon.HTTP_200


class MembershipResource:
    """The caller's own collaborator status.

    ``GET`` reports whether the caller is a collaborator; ``POST`` invites
    the caller with push permission.
    """

    def __init__(self, dependencies: RepositoryResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._gate = dependencies.gate
        self._repo_slug = dependencies.github.repo_slug

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{isCollaborator, username, repo}`` for the caller."""
        principal = require_principal(req)
        status = await self._gate.check_principal(principal.login)
        resp.media = {
            "isCollaborator": status.is_collaborator,
            "username": principal.login,
            "repo": self._repo_slug,
        }
        resp.status = falcon.HTTP_200

    async def on_post(self, req: Request, resp: Response) -> None:
        """Invite the caller; inviting an existing collaborator succeeds too."""
        principal = require_principal(req)
        result = await self._gate.add_self(principal.login)
        resp.media = {"message": result.message, "added": result.added}
        resp.status = falcon.HTTP_200


class BranchesResource:
    """``GET /branches`` lists branches with abbreviated tip SHAs."""

    def __init__(self, dependencies: RepositoryResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._github = dependencies.github

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{"branches": [...]}``."""
        require_principal(req)
        branches = await self._github.list_branches()
        resp.media = {"branches": [_serialize_branch(b) for b in branches]}
        resp.status = falcon.HTTP_200


class CommitsResource:
    """``GET /commits?branch=`` lists the newest commits of a branch."""

    def __init__(self, dependencies: RepositoryResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._github = dependencies.github

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return the newest commits; the default branch when none is given."""
        require_principal(req)
        branch = req.get_param("branch") or None
        commits = await self._github.list_commits(branch, limit=COMMIT_LIMIT)
        resp.media = {"commits": [_serialize_commit(c) for c in commits]}
        resp.status = falcon.HTTP_200


class RedeployCommitResource:
    """``POST /redeploy`` pushes an empty commit to the default branch.

    The deployment provider builds every push, so a commit that reuses the
    tip's tree rebuilds the site without changing it.
    """

    def __init__(self, dependencies: RepositoryResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._github = dependencies.github
        self._gate = dependencies.gate

    async def on_post(self, req: Request, resp: Response) -> None:
        """Create the commit and return its URL."""
        principal = await self._gate.require_collaborator(req.context.principal)
        repository = await self._github.get_repository()
        branch = repository.default_branch
        message = (
            f"{REDEPLOY_COMMIT_TITLE}\n\n"
            f"Triggered by {principal.display} at {format_timestamp(utcnow())}"
        )
        commit = await self._github.trigger_empty_commit(branch, message)
        repo_url = (
            repository.html_url or f"https://github.com/{repository.full_name}"
        )
        log_info(
            logger,
            "Redeploy commit %s pushed to %s by %s",
            short_sha(commit.sha),
            branch,
            principal.login,
        )
        resp.media = {
            "message": (
                f"Redeploy triggered! Created commit {short_sha(commit.sha)} "
                f"on {branch}"
            ),
            "commitUrl": f"{repo_url}/commit/{commit.sha}",
        }
        resp.status = falcon.HTTP_200


class StatsResource:
    """``GET /stats`` summarizes repository and site health.

    The latest deployment and the site probe are best effort: their
    failures show up as ``null`` and ``false`` instead of failing the
    request.
    """

    def __init__(self, dependencies: RepositoryResourceDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._github = dependencies.github
        self._vercel = dependencies.vercel
        self._site_url = dependencies.site_url
        self._probe = dependencies.probe

    async def _last_deployment(self) -> dict[str, typ.Any] | None:
        try:
            deployments = await self._vercel.list_deployments(limit=1)
        except UpstreamError as exc:
            log_warning(logger, "Latest deployment unavailable for stats: %s", exc)
            return None
        if not deployments:
            return None
        latest = deployments[0]
        return {"time": latest.created_ms, "state": latest.status, "url": latest.url}

    async def on_get(self, req: Request, resp: Response) -> None:
        """Return ``{"stats": {openIssues, openPRs, lastDeployment, siteOnline}}``."""
        require_principal(req)
        slug = self._github.repo_slug
        open_issues, open_prs, last_deployment, site_online = await asyncio.gather(
            self._github.count_search_results(f"repo:{slug} is:issue is:open"),
            self._github.count_search_results(f"repo:{slug} is:pr is:open"),
            self._last_deployment(),
            self._probe(self._site_url),
        )
        resp.media = {
            "stats": {
                "openIssues": open_issues,
                "openPRs": open_prs,
                "lastDeployment": last_deployment,
                "siteOnline": site_online,
            }
        }
        resp.status = falcon.HTTP_200
