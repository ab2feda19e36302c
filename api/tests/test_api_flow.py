import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

import matcher.main as m
from matcher import config
from matcher.services.rounds import RoundController

ADMIN_HEADERS = {"X-Admin-Token": "dev-admin-token"}


@pytest.fixture()
def client(store, monkeypatch):
    monkeypatch.setattr(config, "ADMIN_TOKEN", "")
    monkeypatch.setattr(m, "SessionLocal", store.session_factory)
    monkeypatch.setattr(m, "round_controller", RoundController(store.session_factory))
    return TestClient(m.app)


def test_signup_trigger_and_view_flow(client, store):
    store.add_people(1, 2, 3, 4, 5)

    for person_id in [1, 2, 3, 4, 5]:
        resp = client.post(f"/waiting/{person_id}")
        assert resp.status_code == 200
        assert resp.json()["created"] is True

    again = client.post("/waiting/3")
    assert again.status_code == 200
    assert again.json()["created"] is False
    assert len(client.get("/waiting").json()["waiting"]) == 5

    assert client.post("/admin/matches/trigger").status_code == 401

    run = client.post("/admin/matches/trigger", headers=ADMIN_HEADERS)
    assert run.status_code == 200
    body = run.json()
    assert body["generation_id"] == 1
    assert body["pairs"] == [[1, 2], [3, 4]]
    assert body["leftover"] == 5

    latest = client.get("/matches").json()
    assert latest["generation_id"] == 1
    assert len(latest["matches"]) == 3
    assert client.get("/matches/1").json()["matches"] == latest["matches"]
    assert client.get("/matches/99").status_code == 404

    assert [w["person_id"] for w in client.get("/waiting").json()["waiting"]] == [5]
    people = {p["id"]: p["waiting"] for p in client.get("/people").json()["people"]}
    assert people == {1: False, 2: False, 3: False, 4: False, 5: True}

    history = client.get("/people/5/matches").json()["history"]
    assert history == [
        {"generation_id": 1, "created_at": history[0]["created_at"], "partner_id": None, "partner_name": None}
    ]
    assert client.get("/people/1/matches").json()["history"][0]["partner_name"] == "P2"

    rerun = client.post("/admin/matches/trigger", headers=ADMIN_HEADERS)
    assert rerun.status_code == 409


def test_empty_history_before_first_round(client):
    resp = client.get("/matches")
    assert resp.status_code == 200
    assert resp.json() == {"generation_id": None, "created_at": None, "matches": []}


def test_unknown_person_and_strict_duplicate(client, store, monkeypatch):
    store.add_people(1)
    assert client.post("/waiting/77").status_code == 404
    assert client.delete("/waiting/77").status_code == 404
    assert client.get("/people/77/matches").status_code == 404

    monkeypatch.setattr(m, "SIGNUP_IDEMPOTENT", False)
    assert client.post("/waiting/1").status_code == 200
    assert client.post("/waiting/1").status_code == 409

    withdrawn = client.delete("/waiting/1")
    assert withdrawn.json() == {"person_id": 1, "removed": True}


def test_configured_admin_token_replaces_dev_token(client, store, monkeypatch):
    monkeypatch.setattr(config, "ADMIN_TOKEN", "s3cret")
    assert client.post("/admin/matches/trigger", headers=ADMIN_HEADERS).status_code == 401
    resp = client.post("/admin/matches/trigger", headers={"X-Admin-Token": "s3cret"})
    assert resp.status_code == 409


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
