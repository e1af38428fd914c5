"""In-memory GitHub REST API served through ``httpx.MockTransport``.

The fake implements the endpoints SiteDesk uses for the page registry and
the collaborator gate with GitHub's status codes and messages, including
the content-SHA preconditions on ``PUT /contents``.
"""

from __future__ import annotations

import base64
import dataclasses
import hashlib
import json
import re
import typing as typ

import httpx

if typ.TYPE_CHECKING:
    import collections.abc as cabc

OWNER = "acme"
REPO = "website"
API_BASE = "https://api.github.test"

_REPO_PREFIX = f"/repos/{OWNER}/{REPO}"
_CONTENTS = re.compile(rf"^{_REPO_PREFIX}/contents/(?P<path>.+)$")
_COLLABORATOR = re.compile(rf"^{_REPO_PREFIX}/collaborators/(?P<login>[^/]+)$")


@dataclasses.dataclass(slots=True)
class StoredFile:
    """A file held by the fake repository."""

    content: str
    sha: str


@dataclasses.dataclass(slots=True)
class PutCall:
    """A recorded ``PUT /contents`` request."""

    path: str
    message: str
    content: str
    sha: str | None
    status: int


def _json(status: int, payload: object) -> httpx.Response:
    return httpx.Response(status_code=status, json=payload)


def _not_found() -> httpx.Response:
    return _json(404, {"message": "Not Found"})


class FakeGitHub:
    """Stateful fake of the GitHub endpoints used by SiteDesk.

    Attributes
    ----------
    files
        Repository files by path.
    collaborators
        Lower-cased logins with collaborator access.
    put_calls
        Every contents write, accepted or rejected.
    before_put
        Hook run before a write is evaluated; used to simulate another
        client committing first.
    forced_conflicts
        Number of upcoming writes rejected with 409 regardless of SHA.
    routes
        Extra handlers keyed by ``(method, path)`` for endpoints the fake
        does not model.

    """

    def __init__(self) -> None:
        """Start with an empty repository and no collaborators."""
        self.files: dict[str, StoredFile] = {}
        self.collaborators: set[str] = set()
        self.invitations: list[str] = []
        self.put_calls: list[PutCall] = []
        self.requests: list[httpx.Request] = []
        self.before_put: cabc.Callable[[FakeGitHub, str], None] | None = None
        self.forced_conflicts = 0
        self.routes: dict[
            tuple[str, str], cabc.Callable[[httpx.Request], httpx.Response]
        ] = {}
        self._revision = 0

    # -- state helpers -------------------------------------------------------

    def commit_file(self, path: str, content: str) -> str:
        """Write ``path`` directly, as another client would, and return its SHA."""
        self._revision += 1
        digest = hashlib.sha1(  # noqa: S324 - mirrors git blob ids, not security
            f"{self._revision}:{content}".encode()
        ).hexdigest()
        self.files[path] = StoredFile(content=content, sha=digest)
        return digest

    def read_json(self, path: str) -> typ.Any:  # noqa: ANN401 - arbitrary JSON
        """Return the parsed JSON content of ``path``."""
        return json.loads(self.files[path].content)

    @property
    def accepted_puts(self) -> list[PutCall]:
        """Return the writes that were committed."""
        return [call for call in self.put_calls if call.status < 300]

    # -- transport -----------------------------------------------------------

    def client(self) -> httpx.AsyncClient:
        """Return an ``httpx.AsyncClient`` routed to this fake."""
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    def handle(self, request: httpx.Request) -> httpx.Response:
        """Serve one request."""
        self.requests.append(request)
        path = request.url.path
        if match := _CONTENTS.match(path):
            if request.method == "GET":
                return self._get_contents(match["path"])
            if request.method == "PUT":
                return self._put_contents(match["path"], request)
        if match := _COLLABORATOR.match(path):
            if request.method == "GET":
                return self._check_collaborator(match["login"])
            if request.method == "PUT":
                return self._add_collaborator(match["login"])
        if path == _REPO_PREFIX and request.method == "GET":
            return _json(
                200,
                {
                    "id": 4242,
                    "full_name": f"{OWNER}/{REPO}",
                    "default_branch": "main",
                    "html_url": f"https://github.com/{OWNER}/{REPO}",
                },
            )
        if route := self.routes.get((request.method, path)):
            return route(request)
        return _not_found()

    def _get_contents(self, path: str) -> httpx.Response:
        stored = self.files.get(path)
        if stored is None:
            return _not_found()
        encoded = base64.encodebytes(stored.content.encode("utf-8")).decode("ascii")
        return _json(
            200,
            {"type": "file", "path": path, "sha": stored.sha, "content": encoded},
        )

    def _put_contents(self, path: str, request: httpx.Request) -> httpx.Response:
        if self.before_put is not None:
            hook, self.before_put = self.before_put, None
            hook(self, path)

        body = json.loads(request.content.decode("utf-8"))
        content = base64.b64decode(body["content"]).decode("utf-8")
        sha = body.get("sha")
        stored = self.files.get(path)

        response = self._precondition_failure(path, stored, sha)
        if response is None:
            new_sha = self.commit_file(path, content)
            response = _json(
                201 if stored is None else 200,
                {"content": {"path": path, "sha": new_sha}, "commit": {"sha": new_sha}},
            )
        self.put_calls.append(
            PutCall(
                path=path,
                message=body["message"],
                content=content,
                sha=sha,
                status=response.status_code,
            )
        )
        return response

    def _precondition_failure(
        self, path: str, stored: StoredFile | None, sha: str | None
    ) -> httpx.Response | None:
        if self.forced_conflicts > 0:
            self.forced_conflicts -= 1
            return _json(409, {"message": f"{path} does not match {sha}"})
        if stored is None and sha is not None:
            return _json(409, {"message": f"{path} does not match {sha}"})
        if stored is not None and sha is None:
            return _json(
                422, {"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'}
            )
        if stored is not None and sha != stored.sha:
            return _json(409, {"message": f"{path} does not match {sha}"})
        return None

    def _check_collaborator(self, login: str) -> httpx.Response:
        if login.lower() in self.collaborators:
            return httpx.Response(status_code=204)
        return _not_found()

    def _add_collaborator(self, login: str) -> httpx.Response:
        if login.lower() in self.collaborators:
            return httpx.Response(status_code=204)
        self.invitations.append(login)
        self.collaborators.add(login.lower())
        return _json(201, {"id": len(self.invitations), "permissions": "write"})


__all__ = ["API_BASE", "OWNER", "REPO", "FakeGitHub", "PutCall", "StoredFile"]
