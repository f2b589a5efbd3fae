import asyncio

import pytest
from fastapi.testclient import TestClient

from qkd_simulator import main
from qkd_simulator.core.config import settings

client = TestClient(main.app)

PARAMS = {
    "numQubits": 400,
    "qberSampleSize": 20,
    "errorCorrectionBlockSize": 16,
    "privacyAmplificationLength": 64,
    "enableEve": False,
    "enableSecureMode": False,
}


def test_root_and_health():
    assert client.get("/").json()["websocket"] == "/socket.io/"
    assert client.get("/health").json()["status"] == "healthy"


def test_defaults():
    data = client.get("/api/simulation/defaults").json()
    assert data["parameters"]["numQubits"] == 800
    assert data["ranges"]["privacyAmplificationLength"]["step"] == 4


def test_run_simulation():
    response = client.post("/api/simulation/run", params={"seed": 21}, json=PARAMS)
    assert response.status_code == 200

    data = response.json()
    assert data["outcome"] == "completed"
    assert data["initialQubits"] == 400
    assert data["qberResult"]["qber"] == 0
    assert len(data["finalKeyAlice"]) == 16
    assert data["finalKeyAlice"] == data["finalKeyBob"]
    assert data["log"][0] == "Starting BB84 Simulation..."


def test_seeded_runs_are_identical():
    first = client.post("/api/simulation/run", params={"seed": 5}, json={**PARAMS, "enableEve": True})
    second = client.post("/api/simulation/run", params={"seed": 5}, json={**PARAMS, "enableEve": True})
    assert first.json() == second.json()


def test_secure_mode_with_eve():
    body = {**PARAMS, "numQubits": 2000, "enableEve": True, "enableSecureMode": True}
    data = client.post("/api/simulation/run", params={"seed": 3}, json=body).json()

    assert data["eveDetected"] is True
    assert data["outcome"] == "eve_detected"
    assert data["finalKeyAlice"] == data["finalKeyBob"] == ""


@pytest.mark.parametrize("override", [
    {"numQubits": 0},
    {"qberSampleSize": 150},
    {"errorCorrectionBlockSize": -1},
    {"privacyAmplificationLength": 0},
])
def test_invalid_parameters(override):
    response = client.post("/api/simulation/run", json={**PARAMS, **override})
    assert response.status_code == 422


def test_missing_parameter():
    body = dict(PARAMS)
    del body["enableSecureMode"]
    assert client.post("/api/simulation/run", json=body).status_code == 422


def test_qubit_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_NUM_QUBITS", 100)
    response = client.post("/api/simulation/run", json=PARAMS)
    assert response.status_code == 422


def test_digest_failure(monkeypatch):
    monkeypatch.setattr(settings, "DIGEST_ALGORITHM", "md4")
    response = client.post("/api/simulation/run", json=PARAMS)
    assert response.status_code == 500
    assert "md4" in response.json()["detail"]


def test_batch():
    body = {"parameters": PARAMS, "trials": 5, "seed": 1}
    data = client.post("/api/simulation/batch", json=body).json()

    assert data["trials"] == 5
    assert data["successRate"] == 1
    assert data["outcomes"] == {"completed": 5}


def test_batch_trial_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_BATCH_TRIALS", 2)
    response = client.post("/api/simulation/batch", json={"parameters": PARAMS, "trials": 5})
    assert response.status_code == 422


def test_batch_total_qubit_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_BATCH_QUBITS", 1000)
    # 5 trials of 400 qubits each exceed the combined bound
    response = client.post("/api/simulation/batch", json={"parameters": PARAMS, "trials": 5})
    assert response.status_code == 422
    assert "trials * numQubits" in response.json()["detail"]

    # 2 trials of 400 qubits stay within it
    response = client.post("/api/simulation/batch", json={"parameters": PARAMS, "trials": 2, "seed": 1})
    assert response.status_code == 200


def test_negative_seed_rejected():
    assert client.post("/api/simulation/run", params={"seed": -1}, json=PARAMS).status_code == 422
    assert client.post("/api/simulation/run", params={"seed": "abc"}, json=PARAMS).status_code == 422

    body = {"parameters": PARAMS, "trials": 2, "seed": -5}
    assert client.post("/api/simulation/batch", json=body).status_code == 422
    assert client.post("/api/qkd/eavesdropper-comparison", json=body).status_code == 422


def test_eavesdropper_comparison():
    body = {"parameters": {**PARAMS, "numQubits": 2000}, "trials": 4, "seed": 9}
    data = client.post("/api/qkd/eavesdropper-comparison", json=body).json()

    assert data["withoutEve"]["meanQber"] == 0
    assert data["withEve"]["meanQber"] > 0.15
    assert data["theoreticalQberWithEve"] == 0.25


def test_security_analysis():
    data = client.get("/api/qkd/security-analysis", params={"qber": 0.2}).json()
    assert data["security_level"] == "COMPROMISED"
    assert client.get("/api/qkd/security-analysis", params={"qber": 2}).status_code == 422


class TestSocketEvents:
    @pytest.fixture
    def emitted(self, monkeypatch):
        events = []

        async def fake_emit(event, data=None, room=None, **kwargs):
            events.append((event, data, room))

        monkeypatch.setattr(main.sio, "emit", fake_emit)
        return events

    def test_streams_trace(self, emitted):
        asyncio.run(main.start_simulation("sid-1", {**PARAMS, "seed": 4}))

        names = [name for name, _, _ in emitted]
        logs = [data["action"] for name, data, _ in emitted if name == "activity_log"]
        assert names[-1] == "simulation_complete"
        assert "security_alert" not in names
        assert logs == emitted[-1][1]["log"]
        assert all(room == "sid-1" for _, _, room in emitted)

    def test_security_alert(self, emitted):
        body = {**PARAMS, "numQubits": 2000, "enableEve": True, "enableSecureMode": True, "seed": 3}
        asyncio.run(main.start_simulation("sid-2", body))

        names = [name for name, _, _ in emitted]
        assert "security_alert" in names
        assert emitted[-1][1]["eveDetected"] is True

    def test_invalid_parameters(self, emitted):
        asyncio.run(main.start_simulation("sid-3", {"numQubits": -1}))

        assert len(emitted) == 1
        assert emitted[0][0] == "simulation_error"

    @pytest.mark.parametrize("seed", ["abc", -1, 1.5, True])
    def test_invalid_seed(self, emitted, seed):
        asyncio.run(main.start_simulation("sid-4", {**PARAMS, "seed": seed}))

        assert emitted == [("simulation_error", {"error": "seed must be a non-negative integer"}, "sid-4")]
