import pytest

from prepdeck.repos import CompanyRepo
from prepdeck.repos.companies import DEFAULT_DESIGNATIONS


@pytest.fixture
def acme(store):
    return CompanyRepo(store).create({
        "name": "Acme",
        "logo": "https://acme.example.com/logo.png",
        "description": "Rockets and anvils",
        "difficulty": "medium",
        "industry": "Manufacturing",
    })


def test_public_listing_and_search(client, acme, store):
    CompanyRepo(store).create({"name": "Beta", "logo": "b", "description": "Search engine", "difficulty": "hard"})

    names = [c["name"] for c in client.get("/api/companies/get-all").json()]
    assert names == ["Acme", "Beta"]

    found = client.get("/api/companies/search?searchQuery=manufact").json()
    assert [c["name"] for c in found] == ["Acme"]

    assert client.get(f"/api/companies/{acme.id}").json()["name"] == "Acme"
    assert client.get("/api/companies/nope").status_code == 404


def test_designations_fall_back_to_defaults(client, acme):
    response = client.get(f"/api/companies/designation?companyId={acme.id}")
    assert response.json() == DEFAULT_DESIGNATIONS


def test_add_designations_is_a_union(client, acme, auth_headers):
    headers = auth_headers("alice")
    client.post("/api/companies/designation", json={"companyId": acme.id, "designations": ["SDE 1"]}, headers=headers)
    response = client.post(
        "/api/companies/designation",
        json={"companyId": acme.id, "designations": ["SDE 1", " SDE 2 "]},
        headers=headers,
    )
    assert response.json()["designations"] == ["SDE 1", "SDE 2"]
    assert client.get(f"/api/companies/designation?companyId={acme.id}").json() == ["SDE 1", "SDE 2"]


def test_add_designations_requires_login(client, acme):
    response = client.post("/api/companies/designation", json={"companyId": acme.id, "designations": ["x"]})
    assert response.status_code == 401


def test_only_admins_create_companies(client, auth_headers):
    body = {"name": "Gamma", "logo": "g", "description": "d", "difficulty": "easy", "website": "https://gamma.io"}
    assert client.post("/api/companies", json=body, headers=auth_headers("alice")).status_code == 403

    created = client.post("/api/companies", json=body, headers=auth_headers("root", role="admin"))
    assert created.status_code == 201
    assert created.json()["website"] == "https://gamma.io"


def test_company_website_must_be_http(client, auth_headers):
    body = {"name": "Gamma", "logo": "g", "description": "d", "difficulty": "easy", "website": "ftp://gamma.io"}
    assert client.post("/api/companies", json=body, headers=auth_headers("root", role="admin")).status_code == 400
