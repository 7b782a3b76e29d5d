"""HTTP API tests using FastAPI's TestClient."""

from __future__ import annotations

from pathlib import Path


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert ".tsx" in data["extensions"]


def test_decision_points(client):
    response = client.post(
        "/api/decision-points",
        json={
            "source_code": "function f() { if (a && b) { return 1; } }",
            "boundaries": {"1": {"start": 1, "end": 1}},
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert [(p["type"], p["functionLine"]) for p in data["decisionPoints"]] == [("if", 1), ("&&", 1)]
    assert data["functions"][0]["calculatedTotal"] == 3
    assert data["functions"][0]["breakdown"]["if"] == 1


def test_decision_points_without_boundaries(client):
    response = client.post("/api/decision-points", json={"source_code": "if (a) {}"})
    assert response.status_code == 200
    assert response.json() == {"decisionPoints": [], "functions": []}


def test_inverted_boundary_is_rejected(client):
    response = client.post(
        "/api/decision-points",
        json={"source_code": "x", "boundaries": {"1": {"start": 5, "end": 2}}},
    )
    assert response.status_code == 422


def test_mismatches(client, project_dir: Path, eslint_results):
    response = client.post(
        "/api/mismatches",
        json={"project_root": str(project_dir), "eslint_results": eslint_results},
    )
    assert response.status_code == 200
    assert response.json()["summary"] == {
        "totalProcessed": 1,
        "totalMismatches": 0,
        "accuracy": "100.00%",
    }


def test_mismatches_top_limits_list(client, project_dir: Path, eslint_results):
    eslint_results[0]["messages"][0]["message"] = "Function 'check' has a complexity of 9."
    response = client.post(
        "/api/mismatches",
        json={"project_root": str(project_dir), "eslint_results": eslint_results, "top": 0},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["totalMismatches"] == 1
    assert data["mismatches"] == []


def test_mismatches_bad_project_root(client, tmp_path: Path):
    response = client.post("/api/mismatches", json={"project_root": str(tmp_path / "missing")})
    assert response.status_code == 400
