import pytest
from fastapi.testclient import TestClient

from prepdeck.main import create_app
from prepdeck.middleware import is_public


@pytest.mark.parametrize(
    "method, path",
    [
        ("POST", "/api/auth/session"),
        ("DELETE", "/api/auth/session"),
        ("GET", "/api/problems"),
        ("GET", "/api/problems/get-all"),
        ("GET", "/api/problems/2f1b6c1e-8d6f-4c55-9a86-0b4f3f0f9a11"),
        ("GET", "/api/companies/get-all"),
        ("GET", "/api/companies"),
    ],
)
def test_public_routes(method, path):
    assert is_public(method, path)


@pytest.mark.parametrize(
    "method, path",
    [
        ("POST", "/api/problems"),
        ("GET", "/api/problems/get-by-user-id"),
        ("POST", "/api/companies"),
        ("GET", "/api/user-profile/get"),
        ("GET", "/api/problems/not-a-uuid"),
    ],
)
def test_protected_routes(method, path):
    assert not is_public(method, path)


def test_gate_rejects_without_credential(client):
    response = client.get("/api/user-profile/get")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}
    assert response.headers["cache-control"] == "no-store"


def test_gate_passes_any_credential_to_handlers(client):
    # Presence is enough for the gate; the handler still verifies it
    response = client.get("/api/user-profile/get", headers={"Authorization": "Bearer forged"})
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHENTICATED"


def test_api_responses_are_not_cached(client, auth_headers):
    response = client.get("/api/user-profile/get", headers=auth_headers("alice"))
    assert response.headers["cache-control"] == "no-store"


def test_catalogue_keeps_its_own_cache_policy(client):
    response = client.get("/api/problems/get-stats")
    assert response.headers["cache-control"].startswith("public")


def test_health_check_is_outside_the_gate(client):
    assert client.get("/").json() == {"message": "PrepDeck API is running"}


def test_gate_can_be_disabled(store, provider, generator):
    client = TestClient(create_app(store=store, identity_provider=provider, generator=generator, edge_auth_enabled=False))
    response = client.get("/api/user-profile/get")
    # Handler-level auth still applies
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHENTICATED"
