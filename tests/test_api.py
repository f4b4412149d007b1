"""Tests for the HTTP surface."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient

from threshold_tracker.api import create_app
from threshold_tracker.history import JsonHistoryStore
from threshold_tracker.models import ProposalSnapshot
from threshold_tracker.orchestrator import FetchOrchestrator, Tracker
from threshold_tracker.report.formatting import UNAVAILABLE_MESSAGE

NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def _snapshot(threshold: float = 5.0) -> ProposalSnapshot:
    return ProposalSnapshot(
        proposal_pubkey="Prop1",
        pass_price=1.05,
        fail_price=1.0,
        pass_twap=1.05,
        fail_twap=1.0,
        threshold=threshold,
        status="pending",
        timestamp=NOW,
        source="fixed",
    )


class FixedSource:
    name = "fixed"

    def __init__(self, result: ProposalSnapshot | None):
        self.result = result

    def is_available(self) -> bool:
        return True

    async def fetch(self) -> ProposalSnapshot | None:
        return self.result


class RecordingNotifier:
    def __init__(self):
        self.messages: list[str] = []

    async def send(self, text: str) -> bool:
        self.messages.append(text)
        return True


class BrokenStore(JsonHistoryStore):
    def append(self, snapshot):
        raise RuntimeError("disk full")


def _client(tmp_path, result: ProposalSnapshot | None = None, store=None, notifier=None) -> TestClient:
    tracker = Tracker(
        orchestrator=FetchOrchestrator([FixedSource(result)]),
        store=store or JsonHistoryStore(tmp_path / "history.json"),
        notifier=notifier,
    )
    return TestClient(create_app(tracker))


class TestBasicEndpoints:
    def test_root(self, tmp_path):
        resp = _client(tmp_path).get("/")
        assert resp.status_code == 200
        assert resp.text == "MetaDAO Threshold Tracker"

    def test_health(self, tmp_path):
        resp = _client(tmp_path).get("/health")
        assert resp.status_code == 200
        assert resp.text == "OK"


class TestTrigger:
    def test_success(self, tmp_path):
        notifier = RecordingNotifier()
        client = _client(tmp_path, _snapshot(), notifier=notifier)
        resp = client.post("/trigger")

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Update sent"
        assert body["delivered"] is True
        assert body["report"]["current"] == 5.0
        assert len(notifier.messages) == 1

    def test_no_data(self, tmp_path):
        notifier = RecordingNotifier()
        resp = _client(tmp_path, None, notifier=notifier).post("/trigger")

        assert resp.status_code == 500
        assert resp.json()["message"] == "Update failed"
        assert notifier.messages == [UNAVAILABLE_MESSAGE]

    def test_unexpected_error(self, tmp_path):
        store = BrokenStore(tmp_path / "history.json")
        resp = _client(tmp_path, _snapshot(), store=store).post("/trigger")
        assert resp.status_code == 500
        assert resp.json() == {"error": "disk full"}


class TestHistory:
    def test_empty(self, tmp_path):
        assert _client(tmp_path).get("/history").status_code == 404

    def test_after_trigger(self, tmp_path):
        client = _client(tmp_path, _snapshot(4.5))
        client.post("/trigger")
        resp = client.get("/history")

        assert resp.status_code == 200
        body = resp.json()
        assert body["proposalIdentity"] == "Prop1"
        assert body["entries"][0]["threshold"] == 4.5
        assert "passPrice" in body["entries"][0]


class TestSnapshot:
    def test_snapshot(self, tmp_path):
        resp = _client(tmp_path, _snapshot(6.0)).get("/snapshot")
        assert resp.status_code == 200
        assert resp.json()["threshold"] == 6.0
        assert resp.json()["source"] == "fixed"

    def test_unavailable(self, tmp_path):
        resp = _client(tmp_path, None).get("/snapshot")
        assert resp.status_code == 503
        assert resp.json()["attempted"] == ["fixed"]
