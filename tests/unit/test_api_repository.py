"""HTTP tests for the repository pass-through endpoints."""

from __future__ import annotations

import json
import typing as typ

import falcon
import httpx
import pytest

from sitedesk.access.gate import ALREADY_COLLABORATOR_MESSAGE
from tests.helpers.builders import as_user
from tests.helpers.fake_vercel import FakeVercel

if typ.TYPE_CHECKING:
    import falcon.testing

    from tests.helpers.fake_github import FakeGitHub

ALICE = as_user("alice", "Alice Liddell")
_PREFIX = "/repos/acme/website"


def _json_route(payload: object) -> typ.Callable[[httpx.Request], httpx.Response]:
    return lambda _request: httpx.Response(200, json=payload)


@pytest.fixture
def fake_vercel() -> FakeVercel:
    """Return a scripted Vercel API."""
    return FakeVercel()


@pytest.fixture
def vercel_handler(fake_vercel: FakeVercel) -> FakeVercel:
    """Route the Vercel adapter to the scripted API."""
    return fake_vercel


class TestMembership:
    """Tests for ``/collaborators/me``."""

    def test_reports_membership(self, client: falcon.testing.TestClient) -> None:
        """Callers learn whether they are collaborators."""
        member = client.simulate_get("/collaborators/me", headers=ALICE)
        outsider = client.simulate_get("/collaborators/me", headers=as_user("bob"))

        assert member.json == {
            "isCollaborator": True,
            "username": "alice",
            "repo": "acme/website",
        }
        assert outsider.json["isCollaborator"] is False

    def test_requires_principal(self, client: falcon.testing.TestClient) -> None:
        """Anonymous callers are unauthorized."""
        assert client.simulate_get("/collaborators/me").status == falcon.HTTP_401

    def test_add_self_twice(
        self, client: falcon.testing.TestClient, fake_github: FakeGitHub
    ) -> None:
        """A repeated request reports the existing membership."""
        bob = as_user("bob")

        first = client.simulate_post("/collaborators/me", headers=bob)
        second = client.simulate_post("/collaborators/me", headers=bob)

        assert first.status == second.status == falcon.HTTP_200
        assert first.json["added"] is True
        assert "bob" in first.json["message"]
        assert second.json == {
            "message": ALREADY_COLLABORATOR_MESSAGE,
            "added": False,
        }
        assert fake_github.invitations == ["bob"]


class TestListings:
    """Tests for collaborator, branch and commit listings."""

    def test_collaborators(
        self, client: falcon.testing.TestClient, fake_github: FakeGitHub
    ) -> None:
        """Collaborators are reshaped with their role."""
        fake_github.routes[("GET", f"{_PREFIX}/collaborators")] = _json_route(
            [
                {
                    "login": "alice",
                    "id": 1,
                    "avatar_url": "https://avatars.test/1",
                    "html_url": "https://github.com/alice",
                    "role_name": "admin",
                }
            ]
        )

        result = client.simulate_get("/collaborators", headers=ALICE)

        assert result.json == {
            "collaborators": [
                {
                    "id": 1,
                    "username": "alice",
                    "avatarUrl": "https://avatars.test/1",
                    "profileUrl": "https://github.com/alice",
                    "role": "admin",
                }
            ]
        }

    def test_branches(
        self, client: falcon.testing.TestClient, fake_github: FakeGitHub
    ) -> None:
        """Branch tips are abbreviated."""
        fake_github.routes[("GET", f"{_PREFIX}/branches")] = _json_route(
            [{"name": "main", "commit": {"sha": "abcdef0123456"}, "protected": True}]
        )

        result = client.simulate_get("/branches", headers=ALICE)

        assert result.json == {
            "branches": [{"name": "main", "sha": "abcdef0", "protected": True}]
        }

    def test_commits_use_first_message_line(
        self, client: falcon.testing.TestClient, fake_github: FakeGitHub
    ) -> None:
        """Commit messages are cut to their title."""
        seen: list[httpx.Request] = []

        def commits(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json=[
                    {
                        "sha": "0123456789",
                        "html_url": "https://github.com/acme/website/commit/0123456789",
                        "commit": {
                            "message": "Fix nav\n\nLonger body",
                            "author": {"name": "Alice", "date": "2024-05-01T10:00:00Z"},
                        },
                        "author": {"login": "alice", "avatar_url": "a.png"},
                    },
                    {"sha": "fedcba9876", "commit": {"message": "Initial"}},
                ],
            )

        fake_github.routes[("GET", f"{_PREFIX}/commits")] = commits

        result = client.simulate_get(
            "/commits", headers=ALICE, params={"branch": "develop"}
        )

        first, second = result.json["commits"]
        assert first == {
            "sha": "0123456",
            "fullSha": "0123456789",
            "message": "Fix nav",
            "author": {"name": "Alice", "username": "alice", "avatarUrl": "a.png"},
            "date": "2024-05-01T10:00:00Z",
            "url": "https://github.com/acme/website/commit/0123456789",
        }
        assert second["author"] == {
            "name": "Unknown",
            "username": None,
            "avatarUrl": None,
        }
        assert seen[0].url.params["sha"] == "develop"


class TestRedeployCommit:
    """Tests for ``POST /redeploy``."""

    def test_pushes_empty_commit_to_default_branch(
        self, client: falcon.testing.TestClient, fake_github: FakeGitHub
    ) -> None:
        """The commit reuses the tip tree and is attributed to the caller."""
        created: list[dict[str, typ.Any]] = []

        def create_commit(request: httpx.Request) -> httpx.Response:
            created.append(json.loads(request.content))
            return httpx.Response(
                201, json={"sha": "feedface99", "tree": {"sha": "tree1"}}
            )

        ref = {"ref": "refs/heads/main", "object": {"sha": "cafe"}}
        fake_github.routes.update(
            {
                ("GET", f"{_PREFIX}/git/ref/heads/main"): _json_route(ref),
                ("GET", f"{_PREFIX}/git/commits/cafe"): _json_route(
                    {"sha": "cafe", "tree": {"sha": "tree1"}}
                ),
                ("POST", f"{_PREFIX}/git/commits"): create_commit,
                ("PATCH", f"{_PREFIX}/git/refs/heads/main"): _json_route(ref),
            }
        )

        result = client.simulate_post("/redeploy", headers=ALICE)

        assert result.status == falcon.HTTP_200
        assert result.json == {
            "message": "Redeploy triggered! Created commit feedfac on main",
            "commitUrl": "https://github.com/acme/website/commit/feedface99",
        }
        assert created[0]["parents"] == ["cafe"]
        assert created[0]["message"].startswith(
            "chore: trigger redeploy [skip ci]\n\nTriggered by Alice Liddell at "
        )

    def test_requires_collaborator(self, client: falcon.testing.TestClient) -> None:
        """Outsiders cannot push commits."""
        result = client.simulate_post("/redeploy", headers=as_user("mallory"))
        assert result.status == falcon.HTTP_403


class TestStats:
    """Tests for ``GET /stats``."""

    @staticmethod
    def _search(request: httpx.Request) -> httpx.Response:
        total = 3 if "is:issue" in request.url.params["q"] else 2
        return httpx.Response(200, json={"total_count": total, "items": []})

    def test_stats_combine_sources(
        self,
        client: falcon.testing.TestClient,
        fake_github: FakeGitHub,
        fake_vercel: FakeVercel,
    ) -> None:
        """Counts, the latest deployment and reachability are combined."""
        fake_github.routes[("GET", "/search/issues")] = self._search
        fake_vercel.respond(
            "GET",
            "/v6/deployments",
            {
                "deployments": [
                    {
                        "uid": "dpl_1",
                        "url": "website-abc.vercel.app",
                        "state": "READY",
                        "created": 1000,
                    }
                ]
            },
        )

        result = client.simulate_get("/stats", headers=ALICE)

        assert result.json == {
            "stats": {
                "openIssues": 3,
                "openPRs": 2,
                "lastDeployment": {
                    "time": 1000,
                    "state": "READY",
                    "url": "website-abc.vercel.app",
                },
                "siteOnline": True,
            }
        }

    @pytest.mark.parametrize("site_online", [False])
    def test_deployment_failures_degrade_to_null(
        self,
        client: falcon.testing.TestClient,
        fake_github: FakeGitHub,
    ) -> None:
        """A failing deployment lookup does not fail the request."""
        fake_github.routes[("GET", "/search/issues")] = self._search

        result = client.simulate_get("/stats", headers=ALICE)

        assert result.status == falcon.HTTP_200
        assert result.json["stats"]["lastDeployment"] is None
        assert result.json["stats"]["siteOnline"] is False
