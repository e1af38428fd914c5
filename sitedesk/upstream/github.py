"""GitHub REST adapter for the managed repository.

Every call is scoped to the repository named in :class:`SiteDeskConfig`.
File content is exchanged as text: the adapter performs the base64 round trip
and pairs the text with the content SHA used for optimistic concurrency.
"""

from __future__ import annotations

import base64
import binascii
import typing as typ

import msgspec

from .errors import (
    AlreadyExistsError,
    UpstreamNotFoundError,
    UpstreamResponseShapeError,
)
from .models import (
    Branch,
    BranchRef,
    Collaborator,
    CommitSummary,
    FileContent,
    GitCommit,
    RepositoryMetadata,
)
from .transport import RetryPolicy, Sleep, UpstreamTransport

if typ.TYPE_CHECKING:
    import httpx

    from sitedesk.config import SiteDeskConfig

_SERVICE = "github"
_API_VERSION = "2022-11-28"
_PAGE_SIZE = 100


def _decode[T](payload: object, target: type[T], field: str) -> T:
    try:
        return msgspec.convert(payload, target)
    except msgspec.ValidationError as exc:
        raise UpstreamResponseShapeError.missing(_SERVICE, f"{field}: {exc}") from exc


def _decode_base64(encoded: str, path: str) -> str:
    try:
        # The contents API wraps base64 at 60 columns.
        raw = base64.b64decode("".join(encoded.split()), validate=True)
    except binascii.Error as exc:
        raise UpstreamResponseShapeError.missing(_SERVICE, f"{path}.content") from exc
    return raw.decode("utf-8")


class GitHubRepoClient:
    """Typed access to the GitHub REST API for one repository.

    Parameters
    ----------
    config
        Process configuration holding the token and repository coordinates.
    http_client
        Optional pre-built ``httpx.AsyncClient`` (tests use a mock transport).
    sleep
        Awaitable used between retries.

    """

    def __init__(
        self,
        config: SiteDeskConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """Build the underlying transport from ``config``."""
        self._owner = config.repo_owner
        self._repo = config.repo_name
        self._transport = UpstreamTransport(
            service=_SERVICE,
            base_url=config.host_api_base,
            token=config.host_token,
            timeout_s=config.http_timeout_s,
            retry=RetryPolicy(config.retry_max, config.retry_base_ms),
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": _API_VERSION,
            },
            http_client=http_client,
            sleep=sleep,
        )

    @property
    def repo_slug(self) -> str:
        """Return ``owner/name`` of the managed repository."""
        return f"{self._owner}/{self._repo}"

    @property
    def _prefix(self) -> str:
        return f"/repos/{self._owner}/{self._repo}"

    async def aclose(self) -> None:
        """Close owned HTTP resources."""
        await self._transport.aclose()

    # -- repository and git data ---------------------------------------------

    async def get_repository(self) -> RepositoryMetadata:
        """Return metadata of the managed repository."""
        payload = await self._transport.request("GET", self._prefix)
        return _decode(payload, RepositoryMetadata, "repository")

    async def get_branch_ref(self, branch: str) -> BranchRef:
        """Return the reference ``heads/<branch>``."""
        payload = await self._transport.request(
            "GET", f"{self._prefix}/git/ref/heads/{branch}"
        )
        return _decode(payload, BranchRef, "ref")

    async def get_commit(self, sha: str) -> GitCommit:
        """Return the git commit object ``sha``."""
        payload = await self._transport.request(
            "GET", f"{self._prefix}/git/commits/{sha}"
        )
        return _decode(payload, GitCommit, "commit")

    async def create_commit(
        self, *, message: str, tree_sha: str, parents: typ.Sequence[str]
    ) -> GitCommit:
        """Create a commit object pointing at an existing tree."""
        payload = await self._transport.request(
            "POST",
            f"{self._prefix}/git/commits",
            json={"message": message, "tree": tree_sha, "parents": list(parents)},
        )
        return _decode(payload, GitCommit, "commit")

    async def update_ref(self, branch: str, sha: str) -> BranchRef:
        """Move ``heads/<branch>`` to ``sha`` (fast-forward only)."""
        payload = await self._transport.request(
            "PATCH",
            f"{self._prefix}/git/refs/heads/{branch}",
            json={"sha": sha, "force": False},
        )
        return _decode(payload, BranchRef, "ref")

    async def trigger_empty_commit(self, branch: str, message: str) -> GitCommit:
        """Push a commit that reuses the tip's tree, forcing a rebuild.

        Reads the branch tip, creates a commit with the same tree and the tip
        as its parent, and advances the branch to it.
        """
        ref = await self.get_branch_ref(branch)
        tip = await self.get_commit(ref.object.sha)
        commit = await self.create_commit(
            message=message, tree_sha=tip.tree.sha, parents=[tip.sha]
        )
        await self.update_ref(branch, commit.sha)
        return commit

    async def list_branches(self) -> list[Branch]:
        """Return up to 100 branches."""
        payload = await self._transport.request(
            "GET", f"{self._prefix}/branches", params={"per_page": _PAGE_SIZE}
        )
        return _decode(payload, list[Branch], "branches")

    async def list_commits(
        self, branch: str | None = None, *, limit: int = 15
    ) -> list[CommitSummary]:
        """Return the newest commits of ``branch`` (default branch if ``None``)."""
        params: dict[str, str | int] = {"per_page": limit}
        if branch:
            params["sha"] = branch
        payload = await self._transport.request(
            "GET", f"{self._prefix}/commits", params=params
        )
        return _decode(payload, list[CommitSummary], "commits")

    async def count_search_results(self, query: str) -> int:
        """Return ``total_count`` of an issue/pull-request search."""
        payload = await self._transport.request(
            "GET", "/search/issues", params={"q": query, "per_page": 1}
        )
        total = payload.get("total_count") if isinstance(payload, dict) else None
        if not isinstance(total, int):
            raise UpstreamResponseShapeError.missing(_SERVICE, "total_count")
        return total

    # -- collaborators -------------------------------------------------------

    async def list_collaborators(self) -> list[Collaborator]:
        """Return up to 100 repository collaborators."""
        payload = await self._transport.request(
            "GET", f"{self._prefix}/collaborators", params={"per_page": _PAGE_SIZE}
        )
        return _decode(payload, list[Collaborator], "collaborators")

    async def check_collaborator(self, login: str) -> bool:
        """Return whether ``login`` is a collaborator.

        GitHub answers 204 for collaborators and 404 otherwise; any other
        failure propagates.
        """
        try:
            await self._transport.request(
                "GET", f"{self._prefix}/collaborators/{login}"
            )
        except UpstreamNotFoundError:
            return False
        return True

    async def add_collaborator(self, login: str, *, permission: str = "push") -> None:
        """Invite ``login`` as a collaborator.

        GitHub answers 201 with the invitation it created, and 204 with no
        body when ``login`` already has access.

        Raises
        ------
        AlreadyExistsError
            If ``login`` is already a collaborator.

        """
        invitation = await self._transport.request(
            "PUT",
            f"{self._prefix}/collaborators/{login}",
            json={"permission": permission},
        )
        if not invitation:
            msg = f"{login} is already a collaborator"
            raise AlreadyExistsError(msg, service=_SERVICE, status_code=204)

    # -- contents ------------------------------------------------------------

    async def get_file(self, path: str) -> FileContent:
        """Return the text of ``path`` on the default branch with its SHA.

        Raises
        ------
        UpstreamNotFoundError
            If the file does not exist.

        """
        payload = await self._transport.request(
            "GET", f"{self._prefix}/contents/{path}"
        )
        if not isinstance(payload, dict):
            # A directory listing comes back as an array.
            raise UpstreamResponseShapeError.missing(_SERVICE, f"{path}.content")
        encoded = payload.get("content")
        sha = payload.get("sha")
        if not isinstance(encoded, str) or not isinstance(sha, str):
            raise UpstreamResponseShapeError.missing(_SERVICE, f"{path}.content")
        return FileContent(
            path=path, content=_decode_base64(encoded, path), revision=sha
        )

    async def put_file(
        self,
        path: str,
        content: str,
        *,
        message: str,
        expected_revision: str | None = None,
    ) -> str:
        """Create or replace ``path`` and return the new content SHA.

        When ``expected_revision`` is given the host rejects the write unless
        it matches the current SHA; when omitted the host rejects the write if
        the file already exists. Both rejections raise
        :class:`~sitedesk.upstream.errors.UpstreamConflictError`.
        """
        body: dict[str, str] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if expected_revision is not None:
            body["sha"] = expected_revision
        payload = await self._transport.request(
            "PUT", f"{self._prefix}/contents/{path}", json=body
        )
        content_meta = payload.get("content") if isinstance(payload, dict) else None
        sha = content_meta.get("sha") if isinstance(content_meta, dict) else None
        if not isinstance(sha, str):
            raise UpstreamResponseShapeError.missing(_SERVICE, "content.sha")
        return sha


__all__ = ["GitHubRepoClient"]
