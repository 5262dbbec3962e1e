"""Tests for the FastAPI decode service."""

import json

import pytest
from fastapi.testclient import TestClient

import usi_service


@pytest.fixture()
def client() -> TestClient:
    return TestClient(usi_service.app)


def _events(body: str):
    return [json.loads(chunk[len("data: "):]) for chunk in body.split("\n\n") if chunk.startswith("data: ")]


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_decode(client: TestClient) -> None:
    resp = client.post("/decode", json={"line": "bestmove 7g7f ponder 8c8d"})
    assert resp.status_code == 200
    assert resp.json() == {
        "command": {"type": "bestmove", "result": {"type": "move", "move": "7g7f", "ponder": "8c8d"}}
    }


def test_decode_unknown_is_not_an_error(client: TestClient) -> None:
    resp = client.post("/decode", json={"line": "foobar 1 2"})
    assert resp.status_code == 200
    assert resp.json()["command"] == {"type": "unknown", "keyword": "foobar"}


def test_decode_illegal_syntax(client: TestClient) -> None:
    resp = client.post("/decode", json={"line": "bestmove"})
    assert resp.status_code == 400
    assert "Illegal syntax" in resp.json()["detail"]


def test_decode_rejects_extra_fields(client: TestClient) -> None:
    resp = client.post("/decode", json={"line": "usiok", "strict": True})
    assert resp.status_code == 422


def test_decode_rejects_long_line(client: TestClient) -> None:
    resp = client.post("/decode", json={"line": "info string " + "x" * usi_service.SETTINGS.max_line})
    assert resp.status_code == 422


def test_batch_report(client: TestClient) -> None:
    resp = client.post("/decode/batch", json={"lines": ["usiok", "info depth x"], "on_error": "report"})
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results[0] == {"line": 1, "command": {"type": "usiok"}}
    assert results[1]["line"] == 2 and "depth" in results[1]["error"]


def test_batch_skip(client: TestClient) -> None:
    resp = client.post("/decode/batch", json={"lines": ["", "readyok"], "on_error": "skip"})
    assert resp.json() == {"results": [{"line": 2, "command": {"type": "readyok"}}]}


def test_batch_abort(client: TestClient) -> None:
    resp = client.post("/decode/batch", json={"lines": ["usiok", "checkmate"], "on_error": "abort"})
    assert resp.status_code == 400
    assert "line 2" in resp.json()["detail"]


def test_batch_bad_policy(client: TestClient) -> None:
    resp = client.post("/decode/batch", json={"lines": ["usiok"], "on_error": "ignore"})
    assert resp.status_code == 422


def test_stream(client: TestClient) -> None:
    resp = client.post("/decode/stream", json={"lines": ["usiok", "checkmate nomate"]})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert _events(resp.text) == [
        {"line": 1, "command": {"type": "usiok"}},
        {"line": 2, "command": {"type": "checkmate", "result": {"type": "nomate"}}},
        {"type": "done"},
    ]


def test_stream_abort(client: TestClient) -> None:
    resp = client.post("/decode/stream", json={"lines": ["id", "usiok"], "on_error": "abort"})
    events = _events(resp.text)
    assert events[0]["type"] == "error" and events[0]["line"] == 1
    assert events[-1] == {"type": "done"}
    assert len(events) == 2
