import time

import pytest

import app as app_module
from config import CFG
from models import Item


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(CFG, "TRIALS", 50)
    monkeypatch.setattr(CFG, "SEED", 3)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_generate_json_returns_full_board(client):
    resp = client.post("/generate", json={
        "items": [
            {"name": "X", "count": 2, "difficulty": 1},
            {"name": "Y", "count": 2, "difficulty": 2},
        ],
        "width": 2,
        "height": 2,
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert (data["width"], data["height"]) == (2, 2)
    assert sorted(c["name"] for c in data["cells"]) == ["X", "X", "Y", "Y"]
    assert data["placed_count"] == 4
    assert data["empty_count"] == 0
    assert data["demand_count"] == 4
    assert data["svg"].startswith("<svg")

    latest = client.get("/result/latest").get_json()
    assert latest["cells"] == data["cells"]


def test_generate_defaults_to_square_grid(client):
    resp = client.post("/generate", json={"items": [{"name": "A", "count": 10, "difficulty": 3}]})
    data = resp.get_json()
    assert (data["width"], data["height"]) == (3, 3)


def test_generate_form_post(client):
    resp = client.post("/generate", data={
        "name[]": ["A", "B"],
        "count[]": ["3", "2"],
        "difficulty[]": ["1", "4"],
        "width": "3",
        "height": "2",
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["cells"]) == 6
    assert data["empty_count"] >= 1


def test_short_supply_marks_empty_cells(client):
    resp = client.post("/generate", json={
        "items": [{"name": "A", "count": 1, "difficulty": 2}],
        "width": 2,
        "height": 2,
    })
    data = resp.get_json()
    assert data["empty_count"] == 3
    assert sum(1 for c in data["cells"] if c.get("empty")) == 3


def test_zero_dimension_is_rejected(client):
    resp = client.post("/generate", json={
        "items": [{"name": "A", "count": 4, "difficulty": 1}],
        "width": 0,
        "height": 2,
    })
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["kind"] == "invalid_dimensions"
    assert client.get("/progress").get_json()["status"] == "Error"


def test_bad_difficulty_is_rejected(client):
    resp = client.post("/generate", json={"items": [{"name": "A", "count": 4, "difficulty": 7}]})
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "invalid_difficulty"


def test_oversized_grid_is_rejected(client, monkeypatch):
    monkeypatch.setattr(CFG, "MAX_CELLS", 10)
    resp = client.post("/generate", json={
        "items": [{"name": "A", "count": 4, "difficulty": 1}],
        "width": 4,
        "height": 4,
    })
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "invalid_dimensions"


def test_oversized_supply_is_rejected(client, monkeypatch):
    monkeypatch.setattr(CFG, "MAX_SUPPLY", 100)
    resp = client.post("/generate", json={
        "items": [{"name": "A", "count": 3_000_000, "difficulty": 1}],
        "width": 1,
        "height": 1,
    })
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["kind"] == "invalid_count"
    assert "3000000" in data["error"]
    assert client.get("/progress").get_json()["phase"] == ""


def test_supply_at_the_limit_is_accepted(client, monkeypatch):
    monkeypatch.setattr(CFG, "MAX_SUPPLY", 4)
    resp = client.post("/generate", json={"items": [{"name": "A", "count": 4, "difficulty": 1}]})
    assert resp.status_code == 200


def test_bad_search_config_reports_error(client, monkeypatch):
    monkeypatch.setattr(CFG, "TRIALS", 0)
    resp = client.post("/generate", json={"items": [{"name": "A", "count": 4, "difficulty": 1}]})
    assert resp.status_code == 500
    assert resp.get_json()["kind"] == "invalid_config"
    snap = client.get("/progress").get_json()
    assert snap["status"] == "Error"
    assert snap["done"] is True
    assert not app_module._ACTIVE_CANCELS


def test_nothing_parsed(client):
    resp = client.post("/generate", json={"hello": "world"})
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["kind"] == "bad_request"
    assert "hello" in data["error"]


def test_cancel_during_generation_yields_no_board(client, monkeypatch):
    real_generate = app_module.generate_board

    def cancelling_generate(items, width, height, **kwargs):
        # what a concurrent POST /cancel does to the active generation
        with app_module._ACTIVE_LOCK:
            for evt in app_module._ACTIVE_CANCELS:
                evt.set()
        return real_generate(items, width, height, **kwargs)

    monkeypatch.setattr(app_module, "generate_board", cancelling_generate)
    client.post("/reset")

    resp = client.post("/generate", json={"items": [{"name": "A", "count": 4, "difficulty": 1}]})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "cancelled"
    assert client.get("/result/latest").get_json()["cells"] == []
    assert client.get("/progress").get_json()["status"] == "Cancelled"


def test_cancel_when_idle(client):
    resp = client.post("/cancel")
    assert resp.get_json() == {"ok": False, "cancelled": False}


def test_progress_is_not_cached(client):
    client.post("/generate", json={"items": [{"name": "A", "count": 4, "difficulty": 1}]})
    resp = client.get("/progress")
    assert resp.headers["Cache-Control"] == "no-store, max-age=0"
    snap = resp.get_json()
    assert snap["status"] == "Done"
    assert snap["phase"] == "materialize"
    assert snap["trials_done"] == 50
    assert snap["grid"] == "2 × 2"


def test_reset_clears_last_result(client):
    client.post("/generate", json={"items": [{"name": "A", "count": 4, "difficulty": 1}]})
    client.post("/reset")
    latest = client.get("/result/latest").get_json()
    assert latest["ok"] is False
    assert latest["cells"] == []
    assert client.get("/progress").get_json()["status"] == "Idle"


def test_cancel_reaches_every_running_generation(client):
    first = app_module._begin_generation()
    second = app_module._begin_generation()
    try:
        resp = client.post("/cancel")
        assert resp.get_json() == {"ok": True, "cancelled": True}
        assert first.is_set()
        assert second.is_set()
    finally:
        app_module._end_generation(first)
        app_module._end_generation(second)
    assert not app_module._ACTIVE_CANCELS


def test_result_elapsed_uses_progress_format(monkeypatch):
    monkeypatch.setattr(CFG, "TRIALS", 5)
    board = app_module.generate_board([Item(id=0, name="A", count=1, difficulty=1)], 1, 1, seed=1)
    result = app_module._board_result(board, 1, [("A", 1, 1)], time.time() - 3725)
    assert result["elapsed_str"] == "1h 2m"
