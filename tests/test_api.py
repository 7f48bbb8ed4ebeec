import inspect

from fastapi.testclient import TestClient

from xwing_sim.api.app import app

client = TestClient(app)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_rosters():
    response = client.get("/api/rosters")
    assert response.status_code == 200
    rosters = {r["name"]: r for r in response.json()}
    assert "default" in rosters
    assert rosters["default"]["labels"]["side_a"] == "Rebels"
    assert len(rosters["default"]["ships"]) == 10


def test_simulate_returns_tallies():
    payload = {"roster": "duel", "trials": 50, "seed": 3, "workers": 2}
    first = client.post("/api/simulate", json=payload)
    second = client.post("/api/simulate", json=payload)
    assert first.status_code == 200
    data = first.json()
    assert data["trials"] == 50
    assert data["side_a"]["wins"] + data["side_b"]["wins"] + data["draws"] == 50
    assert data["side_a"] == second.json()["side_a"]


def test_simulate_unknown_roster():
    response = client.post("/api/simulate", json={"roster": "missing", "trials": 5})
    assert response.status_code == 404


def test_simulate_unknown_action():
    response = client.post("/api/simulate", json={"roster": "duel", "trials": 5, "action": "barrel_roll"})
    assert response.status_code == 400


def test_simulate_validates_trial_count():
    response = client.post("/api/simulate", json={"roster": "duel", "trials": 0})
    assert response.status_code == 422


def test_roster_listing_runs_off_the_event_loop():
    from xwing_sim.api.routes import list_rosters

    assert not inspect.iscoroutinefunction(list_rosters)
