# tests/integration/test_api_drafts.py
from __future__ import annotations


def _q(qid, order, qtype="text", text="Q", options=None):
    return {
        "id": qid,
        "question_text": text,
        "question_type": qtype,
        "options": options or [],
        "is_required": True,
        "order_index": order,
    }


def test_add_uses_path_specific_required_default(client):
    created = client.post("/drafts/questions/add", json={"questions": [], "path": "create"}).json()
    assert created["questions"][0]["is_required"] is True

    edited = client.post("/drafts/questions/add", json={"questions": created["questions"], "path": "edit"}).json()
    assert edited["questions"][1]["is_required"] is False
    assert [q["order_index"] for q in edited["questions"]] == [0, 1]


def test_remove_and_move(client):
    qs = [_q("a", 0), _q("b", 1), _q("c", 2)]

    moved = client.post("/drafts/questions/move", json={"questions": qs, "question_id": "c", "direction": "up"}).json()
    assert [q["id"] for q in moved["questions"]] == ["a", "c", "b"]

    removed = client.post("/drafts/questions/remove", json={"questions": moved["questions"], "question_id": "a"}).json()
    assert [(q["id"], q["order_index"]) for q in removed["questions"]] == [("c", 0), ("b", 1)]


def test_move_rejects_unknown_direction(client):
    r = client.post("/drafts/questions/move", json={"questions": [], "question_id": "a", "direction": "left"})
    assert r.status_code == 422


def test_change_type_clears_options(client):
    qs = [_q("a", 0, qtype="multiple_choice", options=["x", "y"])]
    out = client.post("/drafts/questions/type", json={"questions": qs, "question_id": "a", "question_type": "text"}).json()
    assert out["questions"][0]["question_type"] == "text"
    assert out["questions"][0]["options"] == []


def test_preview_orders_and_reports_validation(client):
    draft = {
        "title": "Poll",
        "questions": [_q("b", 1), _q("a", 0, qtype="multiple_choice", options=["one"])],
    }
    ok = client.post("/drafts/preview", json={"draft": draft, "path": "create"}).json()
    assert ok["valid"] is True
    assert [q["id"] for q in ok["questions"]] == ["a", "b"]

    bad = client.post("/drafts/preview", json={"draft": draft, "path": "edit"}).json()
    assert bad["valid"] is False
    assert bad["error"] == "question 1 needs options"


def test_move_and_remove_use_display_order_for_unsorted_lists(client):
    qs = [_q("c", 2), _q("a", 0), _q("b", 1)]

    moved = client.post("/drafts/questions/move", json={"questions": qs, "question_id": "a", "direction": "up"}).json()
    assert [q["id"] for q in moved["questions"]] == ["a", "b", "c"]

    removed = client.post("/drafts/questions/remove", json={"questions": qs, "question_id": "b"}).json()
    assert [(q["id"], q["order_index"]) for q in removed["questions"]] == [("a", 0), ("c", 1)]
