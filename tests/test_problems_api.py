import asyncio
from datetime import timedelta

import pytest

from prepdeck.errors import Conflict
from prepdeck.repos import ProblemRepo
from tests.factories import dsa_problem


def post_problem(client, headers, **overrides):
    response = client.post("/api/problems", json=dsa_problem(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_forces_owner_source_and_visibility(client, auth_headers):
    created = post_problem(client, auth_headers("bob"), ownerId="mallory", source="admin", visibility="public")
    assert created["ownerId"] == "bob"
    assert created["source"] == "direct"
    assert created["visibility"] == "private"
    assert created["schemaVersion"] == "1.0.0"


def test_admin_can_publish(client, auth_headers):
    body = dsa_problem(visibility="public")
    del body["ownerId"], body["source"]
    response = client.post("/api/problems", json=body, headers=auth_headers("root", role="admin"))
    assert response.status_code == 201
    created = response.json()
    assert created["visibility"] == "public"
    assert created["source"] == "admin"
    assert created["ownerId"] == "root"


def publish(client, auth_headers, visibility="public"):
    body = dsa_problem(visibility=visibility, title="Catalogue Two Sum")
    del body["ownerId"], body["source"]
    response = client.post("/api/problems", json=body, headers=auth_headers("root", role="admin"))
    assert response.status_code == 201, response.text
    return response.json()


def test_reused_id_cannot_take_over_a_problem(client, auth_headers):
    published = publish(client, auth_headers)

    hijack = client.post(
        "/api/problems", json=dsa_problem(id=published["id"], title="Owned"), headers=auth_headers("mallory")
    )
    assert hijack.status_code == 201
    assert hijack.json()["id"] != published["id"]
    assert hijack.json()["ownerId"] == "mallory"

    original = client.get(f"/api/problems/{published['id']}").json()
    assert original["title"] == "Catalogue Two Sum"
    assert original["ownerId"] == "root"
    assert original["visibility"] == "public"


def test_reused_id_on_legacy_save_is_ignored(client, auth_headers):
    published = publish(client, auth_headers)
    response = client.post(
        "/api/problems/save-interview-problem",
        json={"problemData": dsa_problem(id=published["id"], title="Owned")},
        headers=auth_headers("mallory"),
    )
    assert response.status_code == 200
    assert response.json()["data"]["id"] != published["id"]
    assert client.get(f"/api/problems/{published['id']}").json()["ownerId"] == "root"


def test_client_created_at_is_ignored(client, auth_headers):
    created = post_problem(client, auth_headers("bob"), createdAt=1)
    assert created["createdAt"] > 1
    assert created["createdAt"] == created["updatedAt"]


def test_admin_cannot_overwrite_with_an_existing_id(client, auth_headers):
    published = publish(client, auth_headers)
    body = dsa_problem(id=published["id"], visibility="public", title="Replaced")
    response = client.post("/api/problems", json=body, headers=auth_headers("root", role="admin"))
    assert response.status_code == 409
    assert response.json()["error"] == "CONFLICT"
    assert client.get(f"/api/problems/{published['id']}").json()["title"] == "Catalogue Two Sum"


def test_repo_create_refuses_duplicates(store):
    repo = ProblemRepo(store)
    problem = dsa_problem()
    repo.create(problem)
    with pytest.raises(Conflict):
        repo.create({**problem, "ownerId": "mallory"})
    assert repo.get_by_id("alice", problem["id"]).owner_id == "alice"


def test_shared_problems_are_readable_by_anyone(client, auth_headers):
    for visibility in ("public", "admin"):
        published = publish(client, auth_headers, visibility=visibility)
        assert client.get(f"/api/problems/{published['id']}", headers=auth_headers("bob")).status_code == 200
        assert client.get(f"/api/problems/get-by-id?id={published['id']}", headers=auth_headers("bob")).status_code == 200
        assert client.get(f"/api/problems/{published['id']}").status_code == 200


def test_admin_can_edit_and_delete_shared_problems_of_others(client, auth_headers, store):
    repo = ProblemRepo(store)
    for visibility in ("public", "admin"):
        shared = repo.create(dsa_problem(ownerId="other-admin", visibility=visibility, source="admin"))
        response = client.patch(
            f"/api/problems/{shared.id}", json={"title": "Edited"}, headers=auth_headers("root", role="admin")
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Edited"
        assert response.json()["ownerId"] == "other-admin"

        assert client.delete(f"/api/problems/{shared.id}", headers=auth_headers("root", role="admin")).status_code == 204
        assert store.get("problems", shared.id) is None


def test_plain_users_cannot_edit_shared_problems(client, auth_headers, store):
    repo = ProblemRepo(store)
    for visibility in ("public", "admin"):
        shared = repo.create(dsa_problem(ownerId="root", visibility=visibility, source="admin"))
        assert client.patch(
            f"/api/problems/{shared.id}", json={"title": "Edited"}, headers=auth_headers("bob")
        ).status_code == 403
        assert client.delete(f"/api/problems/{shared.id}", headers=auth_headers("bob")).status_code == 403
        assert repo.get_by_id("bob", shared.id).title == "Two Sum"


def test_create_rejects_invalid_body(client, auth_headers):
    body = dsa_problem()
    del body["content"]["inputFormat"]
    response = client.post("/api/problems", json=body, headers=auth_headers("bob"))
    assert response.status_code == 400
    assert response.json()["error"] == "BAD_REQUEST"


def test_private_problem_is_forbidden_to_others(client, auth_headers):
    created = post_problem(client, auth_headers("alice"))

    assert client.get(f"/api/problems/{created['id']}", headers=auth_headers("alice")).status_code == 200
    assert client.get(f"/api/problems/{created['id']}", headers=auth_headers("bob")).status_code == 403
    assert client.get(f"/api/problems/{created['id']}").status_code == 403
    # Admin role does not open private problems
    assert client.get(f"/api/problems/{created['id']}", headers=auth_headers("root", role="admin")).status_code == 403


def test_missing_problem_is_404(client, auth_headers):
    response = client.get("/api/problems/00000000-0000-4000-8000-000000000000", headers=auth_headers("bob"))
    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_session_cookie_only_request(client, provider):
    cookie = asyncio.run(provider.create_session_cookie(provider.create_id_token("carol"), timedelta(days=1)))
    client.cookies.set("session", cookie)
    response = client.post("/api/problems", json=dsa_problem())
    assert response.status_code == 201
    assert response.json()["ownerId"] == "carol"


def test_patch_keeps_identity_fields(client, auth_headers):
    created = post_problem(client, auth_headers("alice"))
    response = client.patch(
        f"/api/problems/{created['id']}",
        json={"title": "Three Sum", "ownerId": "bob", "createdAt": 1},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Three Sum"
    assert body["ownerId"] == "alice"
    assert body["createdAt"] == created["createdAt"]
    assert body["updatedAt"] >= created["updatedAt"]


def test_patch_by_non_owner_is_forbidden(client, auth_headers):
    created = post_problem(client, auth_headers("alice"))
    response = client.patch(f"/api/problems/{created['id']}", json={"title": "x"}, headers=auth_headers("bob"))
    assert response.status_code == 403


def test_patch_that_breaks_schema_is_rejected(client, auth_headers):
    created = post_problem(client, auth_headers("alice"))
    response = client.patch(f"/api/problems/{created['id']}", json={"kind": "theory2"}, headers=auth_headers("alice"))
    assert response.status_code == 400
    assert client.get(f"/api/problems/{created['id']}", headers=auth_headers("alice")).json()["kind"] == "dsa"


def test_delete(client, auth_headers):
    created = post_problem(client, auth_headers("alice"))
    assert client.delete(f"/api/problems/{created['id']}", headers=auth_headers("bob")).status_code == 403
    assert client.delete(f"/api/problems/{created['id']}", headers=auth_headers("alice")).status_code == 204
    assert client.get(f"/api/problems/{created['id']}", headers=auth_headers("alice")).status_code == 404
    # Deleting again is a no-op
    assert client.delete(f"/api/problems/{created['id']}", headers=auth_headers("alice")).status_code == 204


def test_list_mine_and_catalogue(client, auth_headers, store):
    repo = ProblemRepo(store)
    repo.create(dsa_problem(ownerId="alice", createdAt=1))
    repo.create(dsa_problem(ownerId="alice", createdAt=2))
    repo.create(dsa_problem(ownerId="root", visibility="public", source="admin", createdAt=3))

    mine = client.get("/api/problems?mine=true", headers=auth_headers("alice")).json()
    assert [p["createdAt"] for p in mine] == [2, 1]

    catalogue = client.get("/api/problems").json()
    assert [p["visibility"] for p in catalogue] == ["public"]

    assert client.get("/api/problems?mine=true").status_code == 401


def test_legacy_get_all_paginates(client, store):
    repo = ProblemRepo(store)
    for i in range(5):
        repo.create(dsa_problem(ownerId="root", visibility="public", source="admin", createdAt=i))
    repo.create(dsa_problem(ownerId="alice", createdAt=99))

    first = client.get("/api/problems/get-all?page=1&limit=2").json()
    assert [p["createdAt"] for p in first["problems"]] == [4, 3]
    assert first["pagination"]["hasNextPage"] is True
    assert first["pagination"]["hasPrevPage"] is False

    last = client.get("/api/problems/get-all?page=3&limit=2").json()
    assert [p["createdAt"] for p in last["problems"]] == [0]
    assert last["pagination"]["hasNextPage"] is False

    assert client.get("/api/problems/get-all?page=0").status_code == 400


def test_legacy_get_stats(client, store):
    repo = ProblemRepo(store)
    repo.create(dsa_problem(ownerId="root", visibility="public", source="admin"))
    repo.create(dsa_problem(
        ownerId="root", visibility="admin", source="admin", kind="theory",
        content={"prompt": "Closures", "difficulty": "hard"},
    ))
    repo.create(dsa_problem(ownerId="alice"))

    stats = client.get("/api/problems/get-stats").json()
    assert stats["total"] == 2
    assert stats["dsa"] == 1
    assert stats["theory"] == 1
    assert stats["byDifficulty"] == {"easy": 1, "medium": 0, "hard": 1}


def test_legacy_create_generates_when_no_problem_given(client, auth_headers, generator):
    response = client.post(
        "/api/problems/create",
        json={"designation": "Frontend", "companies": "Acme", "round": "Round 1", "interviewType": "dsa"},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 200, response.text
    problem = response.json()["problem"]
    assert problem["ownerId"] == "alice"
    assert problem["source"] == "simulation"
    assert problem["visibility"] == "private"
    assert generator.calls[0][0] == "dsa"


def test_progress_endpoints(client, auth_headers):
    headers = auth_headers("alice")
    attempted = client.post(
        "/api/problems/mark-attempted",
        json={"problemId": "p1", "problemType": "dsa", "difficulty": "easy"},
        headers=headers,
    ).json()["attempt"]
    assert attempted["status"] == "attempted"

    completed = client.post(
        "/api/problems/mark-completed", json={"problemId": "p1", "score": 80, "timeSpent": 12}, headers=headers
    ).json()["attempt"]
    assert completed["status"] == "completed"
    assert completed["problemType"] == "dsa"

    again = client.post("/api/problems/mark-attempted", json={"problemId": "p1"}, headers=headers).json()["attempt"]
    assert again["status"] == "completed"

    assert client.post(
        "/api/problems/mark-completed", json={"problemId": "p1", "score": 80, "timeSpent": -1}, headers=headers
    ).status_code == 400


def test_submissions_overwrite_latest(client, auth_headers):
    headers = auth_headers("alice")
    first = client.post("/api/problems/save-submission", json={"problemId": "p1", "data": {"code": "a"}}, headers=headers)
    second = client.post("/api/problems/save-submission", json={"problemId": "p1", "data": {"code": "b"}}, headers=headers)
    assert second.json()["submission"]["createdAt"] == first.json()["submission"]["createdAt"]

    listed = client.get("/api/problems/get-submissions-by-user", headers=headers).json()["submissions"]
    assert len(listed) == 1
    assert listed[0]["data"] == {"code": "b"}
