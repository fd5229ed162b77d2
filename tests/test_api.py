"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from votematch import api


@pytest.fixture
def client(monkeypatch, make_position, make_question):
    monkeypatch.setattr(api, "_questions", [make_question("q1", "economy")])
    monkeypatch.setattr(
        api,
        "_positions",
        [make_position("a", "economy", 0.95), make_position("b", "economy", 0.10)],
    )
    monkeypatch.setattr(api, "_rng", None)
    # no startup event: the snapshots above stay in place
    return TestClient(api.app)


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "healthy"}


class TestMatch:
    def test_match(self, client, raw_answer):
        r = client.post("/match", json={"answers": [raw_answer]})
        assert r.status_code == 200
        body = r.json()
        assert body["totalCandidates"] == 2
        assert body["questionsAnswered"] == 1
        top = body["matches"][0]
        assert top["candidateId"] == "a"
        assert top["matchedPositions"] == 1
        assert top["score"] == pytest.approx(100.0)

    def test_missing_answers(self, client):
        r = client.post("/match", json={})
        assert r.status_code == 400
        assert "Invalid request body" in r.json()["detail"]

    def test_no_valid_answers(self, client):
        r = client.post("/match", json={"answers": [{"questionId": "q1"}]})
        assert r.status_code == 400
        assert r.json()["detail"] == "No valid answers provided"

    def test_too_many_answers(self, client, raw_answer):
        r = client.post("/match", json={"answers": [raw_answer] * 101})
        assert r.status_code == 400

    def test_no_candidates(self, client, raw_answer, monkeypatch):
        monkeypatch.setattr(api, "_positions", [])
        r = client.post("/match", json={"answers": [raw_answer]})
        assert r.status_code == 404

    def test_unexpected_error(self, client, raw_answer, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(api, "run_match", boom)
        r = client.post("/match", json={"answers": [raw_answer]})
        assert r.status_code == 500
        assert r.json()["detail"] == "Failed to calculate matches"
