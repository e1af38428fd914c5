"""HTTP tests for environment variable management."""

from __future__ import annotations

import typing as typ

import falcon
import pytest

from sitedesk.api.environment.resources import INVALID_KEY_MESSAGE
from tests.helpers.builders import as_user
from tests.helpers.fake_vercel import FakeVercel

if typ.TYPE_CHECKING:
    import falcon.testing

ALICE = as_user("alice")
_ENV_PATH = "/v10/projects/website/env"
_ENV = {
    "id": "env_1",
    "key": "API_URL",
    "value": "https://secret.example",
    "target": ["production", "preview"],
    "type": "encrypted",
    "createdAt": 1,
    "updatedAt": 2,
}


@pytest.fixture
def fake_vercel() -> FakeVercel:
    """Return a scripted Vercel API."""
    return FakeVercel()


@pytest.fixture
def vercel_handler(fake_vercel: FakeVercel) -> FakeVercel:
    """Route the Vercel adapter to the scripted API."""
    return fake_vercel


def test_listing_never_includes_values(
    client: falcon.testing.TestClient, fake_vercel: FakeVercel
) -> None:
    """Values stay write-only."""
    fake_vercel.respond("GET", _ENV_PATH, {"envs": [_ENV]})

    result = client.simulate_get("/env", headers=ALICE)

    assert result.json == {
        "envs": [
            {
                "id": "env_1",
                "key": "API_URL",
                "target": ["production", "preview"],
                "type": "encrypted",
                "createdAt": 1,
                "updatedAt": 2,
            }
        ]
    }


def test_listing_requires_collaborator(client: falcon.testing.TestClient) -> None:
    """Even reads need collaborator access."""
    result = client.simulate_get("/env", headers=as_user("mallory"))
    assert result.status == falcon.HTTP_403


def test_create_defaults_to_all_targets(
    client: falcon.testing.TestClient, fake_vercel: FakeVercel
) -> None:
    """Targets default to every environment."""
    fake_vercel.respond("POST", _ENV_PATH, {"created": _ENV})

    result = client.simulate_post(
        "/env", headers=ALICE, json={"key": "API_URL", "value": "https://x"}
    )

    assert result.status == falcon.HTTP_200
    assert result.json["message"] == "Environment variable API_URL created successfully!"
    assert "value" not in result.json["env"]
    assert fake_vercel.bodies("POST", _ENV_PATH) == [
        {
            "key": "API_URL",
            "value": "https://x",
            "target": ["production", "preview", "development"],
            "type": "encrypted",
        }
    ]


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"key": "API_URL"}, "key and value are required"),
        ({"value": "x"}, "key and value are required"),
        ({"key": "api_url", "value": "x"}, INVALID_KEY_MESSAGE),
        ({"key": "1API", "value": "x"}, INVALID_KEY_MESSAGE),
    ],
)
def test_create_validation(
    client: falcon.testing.TestClient,
    fake_vercel: FakeVercel,
    body: dict[str, str],
    message: str,
) -> None:
    """Keys must be upper-case identifiers and values non-empty."""
    result = client.simulate_post("/env", headers=ALICE, json=body)

    assert result.status == falcon.HTTP_400
    assert result.json == {"error": message}
    assert fake_vercel.requests == []


def test_create_rejects_unknown_target(
    client: falcon.testing.TestClient, fake_vercel: FakeVercel
) -> None:
    """Targets are limited to the three environments."""
    result = client.simulate_post(
        "/env",
        headers=ALICE,
        json={"key": "API_URL", "value": "x", "target": ["staging"]},
    )

    assert result.status == falcon.HTTP_400
    assert fake_vercel.requests == []


def test_update_requires_value(client: falcon.testing.TestClient) -> None:
    """Updates must carry a value."""
    result = client.simulate_patch("/env/env_1", headers=ALICE, json={})

    assert result.status == falcon.HTTP_400
    assert result.json == {"error": "value is required"}


def test_update_and_delete(
    client: falcon.testing.TestClient, fake_vercel: FakeVercel
) -> None:
    """Updates and deletes address the variable by id."""
    path = "/v9/projects/website/env/env_1"
    fake_vercel.respond("PATCH", path, _ENV)
    fake_vercel.respond("DELETE", path, {})

    updated = client.simulate_patch(
        "/env/env_1", headers=ALICE, json={"value": "new", "target": ["preview"]}
    )
    deleted = client.simulate_delete("/env/env_1", headers=ALICE)

    assert updated.json["message"] == "Environment variable updated successfully!"
    assert fake_vercel.bodies("PATCH", path) == [
        {"value": "new", "target": ["preview"]}
    ]
    assert deleted.json == {"message": "Environment variable deleted successfully!"}
