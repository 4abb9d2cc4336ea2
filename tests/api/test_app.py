"""Tests for FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from gitsheets.api.app import app

CSV_V1 = "ID,Name,Amount\n1,Alice,100\n2,Bob,200\n"
CSV_V2 = "ID,Name,Amount\n1,Alice,100\n2,Bob,250\n3,Carol,300\n"


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def _snapshot(client, csv_text, **extra):
    response = client.post("/snapshots", json={"csv_text": csv_text, **extra})
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    return body["data"]


class TestMetaEndpoints:
    """Test metadata endpoints."""

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "gitsheets API"
        assert "version" in data
        assert "diff" in data["endpoints"]

    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "git_available" in data

    def test_version_endpoint(self, client):
        response = client.get("/version")
        assert response.status_code == 200
        data = response.json()
        assert data["api_version"] == "v1"
        assert "key_diff" in data["supported_features"]


class TestSheetsEndpoints:
    """Test snapshot, verify and diff endpoints."""

    def test_create_snapshot(self, client):
        data = _snapshot(client, CSV_V1, message="Initial import", primary_key=[0])

        assert data["message"] == "Initial import"
        assert data["table"]["headers"] == ["ID", "Name", "Amount"]
        assert data["table"]["primary_key"] == [0]
        assert data["id"].endswith(data["hashes"]["table_hash"][:8])
        assert data["dependencies"] == []

    def test_snapshot_validation(self, client):
        assert client.post("/snapshots", json={}).status_code == 422
        assert client.post(
            "/snapshots", json={"csv_text": CSV_V1, "primary_key": [-1]}
        ).status_code == 422
        assert client.post(
            "/snapshots", json={"csv_text": CSV_V1, "delimiter": ";;"}
        ).status_code == 422

    def test_snapshot_parse_error(self, client):
        response = client.post("/snapshots", json={"csv_text": 'A,B\n"1"x,2\n'})

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert body["error"]["code"] == "PARSE_ERROR"

    def test_verify_valid(self, client):
        snapshot = _snapshot(client, CSV_V1)

        response = client.post("/verify", json={"snapshot": snapshot})

        body = response.json()
        assert body["ok"] is True
        assert body["data"] == {
            "id": snapshot["id"],
            "valid": True,
            "table_hash": snapshot["hashes"]["table_hash"],
        }

    def test_verify_tampered(self, client):
        snapshot = _snapshot(client, CSV_V1)
        snapshot["table"]["rows"][1][2] = "999"

        body = client.post("/verify", json={"snapshot": snapshot}).json()

        assert body["ok"] is True
        assert body["data"]["valid"] is False

    def test_verify_malformed_snapshot(self, client):
        snapshot = _snapshot(client, CSV_V1)
        del snapshot["hashes"]

        body = client.post("/verify", json={"snapshot": snapshot}).json()

        assert body["ok"] is False
        assert body["error"]["code"] == "DESERIALIZATION_ERROR"
        assert body["error"]["details"]["source"] == "snapshot"

    def test_diff(self, client):
        source = _snapshot(client, CSV_V1)
        target = _snapshot(client, CSV_V2)

        body = client.post("/diff", json={"source": source, "target": target}).json()

        assert body["ok"] is True
        data = body["data"]
        assert data["from_id"] == source["id"]
        assert data["to_id"] == target["id"]
        assert data["summary"]["rows_added"] == 1
        assert data["summary"]["rows_modified"] == 1
        assert data["changes"] == [
            {"CellChanged": {"row": 1, "col": 2, "old": "200", "new": "250"}},
            {"RowAdded": {"index": 2, "data": ["3", "Carol", "300"]}},
        ]

    def test_diff_by_key(self, client):
        source = _snapshot(client, "ID,Name\n1,Alice\n2,Bob\n", primary_key=[0])
        target = _snapshot(client, "ID,Name\n2,Bob\n1,Alice\n", primary_key=[0])

        body = client.post(
            "/diff", json={"source": source, "target": target, "match": "key"}
        ).json()

        assert body["ok"] is True
        assert body["data"]["changes"] == []

    def test_diff_validation(self, client):
        response = client.post("/diff", json={})
        assert response.status_code == 422
        body = response.json()
        assert body["ok"] is False
        assert body["error"]["code"] == "INVALID_REQUEST"
        assert {error["loc"] for error in body["error"]["details"]["errors"]} == {
            "body.source",
            "body.target",
        }

        assert client.post(
            "/diff", json={"source": {}, "target": {}, "match": "fuzzy"}
        ).status_code == 422

    def test_diff_malformed_target(self, client):
        source = _snapshot(client, CSV_V1)

        body = client.post("/diff", json={"source": source, "target": {"id": "x"}}).json()

        assert body["ok"] is False
        assert body["error"]["code"] == "DESERIALIZATION_ERROR"
        assert body["error"]["details"]["source"] == "target"
