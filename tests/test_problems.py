import pytest

from app.core.errors import AppError, ErrorKind
from app.services.problem_service import ProblemService

PROBLEM = {
    "name": "Two Sum",
    "difficulty": "Easy",
    "level": "basic",
    "link": "https://leetcode.com/problems/two-sum/",
    "tags": ["array", "hash-table", "array"],
}


def create(client, headers, **overrides):
    return client.post("/api/dsa", json={**PROBLEM, **overrides}, headers=headers)


def test_create_requires_admin(client, user_headers):
    assert client.post("/api/dsa", json=PROBLEM).status_code == 401
    assert create(client, user_headers).status_code == 403


def test_create_and_get(client, admin_headers):
    resp = create(client, admin_headers)
    assert resp.status_code == 201
    problem = resp.json()["problem"]
    assert problem["problemId"].startswith("problem_")
    assert problem["tags"] == ["array", "hash-table"]
    assert problem["description"] == ""

    fetched = client.get(f"/api/dsa/{problem['problemId']}")
    assert fetched.status_code == 200
    assert fetched.json()["problem"] == problem


def test_create_validates_level(client, admin_headers):
    resp = create(client, admin_headers, level="expert")
    assert resp.status_code == 400


def test_list_and_filter_by_level(client, admin_headers):
    create(client, admin_headers)
    create(client, admin_headers, name="LRU Cache", level="medium", difficulty="Medium")
    create(client, admin_headers, name="Median of Two Arrays", level="advanced", difficulty="Hard")

    everything = client.get("/api/dsa").json()
    assert everything["count"] == 3

    medium = client.get("/api/dsa/level/medium").json()
    assert medium["count"] == 1
    assert medium["problems"][0]["name"] == "LRU Cache"


def test_invalid_level_filter(client):
    resp = client.get("/api/dsa/level/expert")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid level. Must be: basic, medium, or advanced"


def test_get_missing_problem(client):
    resp = client.get("/api/dsa/problem_0_missing")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Problem not found"}


def test_update_merges_fields(client, admin_headers):
    problem = create(client, admin_headers).json()["problem"]
    resp = client.put(
        f"/api/dsa/{problem['problemId']}",
        json={"description": "Find two numbers", "level": "medium"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    updated = resp.json()["problem"]
    assert updated["description"] == "Find two numbers"
    assert updated["level"] == "medium"
    assert updated["name"] == "Two Sum"
    assert updated["createdAt"] == problem["createdAt"]


def test_update_missing_problem_does_not_create(client, admin_headers, tables):
    resp = client.put("/api/dsa/problem_0_missing", json={"name": "X"}, headers=admin_headers)
    assert resp.status_code == 404
    assert tables.problems.get("problem_0_missing") is None


def test_delete(client, admin_headers, user_headers):
    problem_id = create(client, admin_headers).json()["problem"]["problemId"]

    assert client.delete(f"/api/dsa/{problem_id}", headers=user_headers).status_code == 403
    assert client.delete(f"/api/dsa/{problem_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/dsa/{problem_id}", headers=admin_headers).status_code == 404


def test_service_update_ignores_identity_fields(tables):
    service = ProblemService(tables.problems)
    problem = service.create("Two Sum", "Easy", "basic", "https://x")
    updated = service.update(problem.problem_id, {"problem_id": "other", "name": "Renamed"})
    assert updated.problem_id == problem.problem_id
    assert updated.name == "Renamed"


def test_service_delete_missing(tables):
    with pytest.raises(AppError) as exc:
        ProblemService(tables.problems).delete("nope")
    assert exc.value.kind == ErrorKind.NOT_FOUND
