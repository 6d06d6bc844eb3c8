"""HTTP surface tests — the engine is replaced with an in-memory one per test."""
import pytest
from fastapi.testclient import TestClient

from stepquest.infrastructure.pedometer.errors import PersistenceReadFailure
from stepquest.infrastructure.pedometer.router import get_pedometer_engine
from stepquest.infrastructure.pedometer.store import InMemoryKeyValueStore
from stepquest.main import app
from tests.conftest import NOW, persisted


@pytest.fixture
def engine(make_engine):
    return make_engine(InMemoryKeyValueStore(persisted(NOW, daily=99, weekly=34999)))


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_pedometer_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestSessionRoutes:
    def test_start_refused_without_sensor(self, client, engine):
        response = client.post("/pedometer/session/start", json={"sensor_available": False})
        assert response.status_code == 400
        assert not engine.is_counting

    def test_start_refused_without_permission(self, client, engine):
        response = client.post("/pedometer/session/start", json={"permission_granted": False})
        assert response.status_code == 403
        assert "permission" in response.json()["detail"].lower()

    def test_start_returns_state(self, client):
        response = client.post("/pedometer/session/start", json={})
        assert response.status_code == 200
        body = response.json()
        assert body["is_counting"] is True
        assert body["ledger"]["daily_steps"] == 99
        assert body["current_mission"]["id"] == 1
        assert body["current_mission"]["progress_percent"] == pytest.approx(99.0)
        assert body["all_missions_complete"] is False
        assert [b["id"] for b in body["bonus_missions"]] == [101, 102, 103]
        secret = body["bonus_missions"][2]
        assert secret["unlocked"] is False
        assert secret["current"] == 34999

    def test_stop(self, client):
        client.post("/pedometer/session/start", json={})
        response = client.post("/pedometer/session/stop")
        assert response.status_code == 200
        assert response.json()["is_counting"] is False

    def test_reset(self, client):
        client.post("/pedometer/session/start", json={})
        body = client.post("/pedometer/reset").json()
        assert body["ledger"] == {"daily_steps": 0, "weekly_steps": 0, "consecutive_days": 0, "mission_index": 0}


class TestSampleRoutes:
    def test_step_with_achievements(self, client, engine):
        client.post("/pedometer/session/start", json={})
        response = client.post("/pedometer/samples", json={"x": 0.0, "y": 0.0, "z": 20.0, "timestamp_ms": 1000})
        assert response.status_code == 200
        body = response.json()
        assert body["step_counted"] is True
        assert body["ledger"]["daily_steps"] == 100
        assert body["ledger"]["weekly_steps"] == 35000
        assert [(a["mission_id"], a["is_bonus"]) for a in body["achievements"]] == [(1, False), (102, True)]

        state = client.get("/pedometer/state", params={"now_ms": 2499}).json()
        assert state["transition_pending"] is True
        assert state["ledger"]["mission_index"] == 0

        state = client.get("/pedometer/state", params={"now_ms": 2500}).json()
        assert state["transition_pending"] is False
        assert state["ledger"]["mission_index"] == 1
        assert state["bonus_missions"][1]["completed"] is True
        assert state["bonus_missions"][2]["unlocked"] is True

    def test_null_axis_is_dropped(self, client):
        client.post("/pedometer/session/start", json={})
        response = client.post("/pedometer/samples", json={"x": 1.0, "y": None, "z": 20.0})
        assert response.status_code == 200
        assert response.json()["step_counted"] is False

    def test_wrong_type_is_rejected(self, client):
        response = client.post("/pedometer/samples", json={"x": "fast", "y": 0, "z": 0})
        assert response.status_code == 422


class TestLifecycleRoutes:
    def test_pagehide_flushes(self, client, engine):
        client.post("/pedometer/session/start", json={})
        engine.repository.store.data.clear()
        response = client.post("/pedometer/lifecycle", json={"event_type": "pagehide"})
        assert response.status_code == 204
        assert engine.repository.store.data["pedometerSteps"] == "99"

    def test_unknown_event(self, client):
        response = client.post("/pedometer/lifecycle", json={"event_type": "blur"})
        assert response.status_code == 422

    def test_visibility_visible_does_not_flush(self, client, engine):
        client.post("/pedometer/session/start", json={})
        engine.repository.store.data.clear()
        response = client.post("/pedometer/lifecycle", json={"event_type": "visibility_visible"})
        assert response.status_code == 204
        assert engine.repository.store.data == {}


class TestMissionRoutes:
    def test_catalog(self, client):
        body = client.get("/pedometer/missions").json()
        assert [m["goal"] for m in body["missions"]] == [100, 500, 1000]
        assert body["bonus_missions"][0]["type"] == "consecutive"
        assert body["bonus_missions"][2]["unlock_threshold"] == 35000


class UnreadableStore(InMemoryKeyValueStore):
    def get(self, key):
        raise PersistenceReadFailure(f"failed to read key {key}")


class TestStorageUnavailable:
    def test_start_refused_when_progress_cannot_be_read(self, make_engine):
        engine = make_engine(UnreadableStore())
        app.dependency_overrides[get_pedometer_engine] = lambda: engine
        try:
            response = TestClient(app).post("/pedometer/session/start", json={})
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 503
        assert not engine.is_counting
        assert engine.repository.store.data == {}
