# tests/integration/test_api_forms.py
from __future__ import annotations

from conftest import question_ids


def test_create_requires_identity(client, sample_draft):
    r = client.post("/forms", json=sample_draft)
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "authentication_required"


def test_create_form_trims_and_orders(created_form):
    form = created_form
    assert form["title"] == "Customer feedback"
    assert form["is_active"] is True
    assert [q["order_index"] for q in form["questions"]] == [0, 1, 2]
    assert form["questions"][2]["options"] == ["Friend", "Search"]
    assert form["public_url"] == f"https://forms.example.test/form/{form['id']}"


def test_create_validation_errors(client, owner_headers):
    r = client.post("/forms", json={"title": "", "questions": []}, headers=owner_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "title required"

    r = client.post("/forms", json={"title": "T", "questions": []}, headers=owner_headers)
    assert r.json()["error"]["message"] == "at least one question required"

    # nothing was written
    assert client.get("/forms", headers=owner_headers).json() == []


def test_single_option_choice_ok_on_create_rejected_on_edit(client, owner_headers):
    draft = {
        "title": "Poll",
        "questions": [
            {"id": "temp-1", "question_text": "Pick", "question_type": "multiple_choice",
             "options": ["Only"], "is_required": True, "order_index": 0},
        ],
    }
    r = client.post("/forms", json=draft, headers=owner_headers)
    assert r.status_code == 201, r.text
    form_id = r.json()["id"]

    r = client.put(f"/forms/{form_id}", json=draft, headers=owner_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "question 1 needs options"


def test_edit_replaces_questions(client, owner_headers, created_form, sample_draft):
    form_id = created_form["id"]
    old_ids = set(question_ids(created_form))

    edited = dict(sample_draft)
    edited["title"] = "Renamed"
    edited["questions"] = list(reversed(created_form["questions"]))[:2]

    r = client.put(f"/forms/{form_id}", json=edited, headers=owner_headers)
    assert r.status_code == 200, r.text
    saved = r.json()

    assert saved["title"] == "Renamed"
    assert [q["order_index"] for q in saved["questions"]] == [0, 1]
    assert not old_ids & set(question_ids(saved))


def test_other_user_sees_not_found(client, created_form, other_headers, sample_draft):
    form_id = created_form["id"]

    assert client.get(f"/forms/{form_id}", headers=other_headers).status_code == 404
    assert client.put(f"/forms/{form_id}", json=sample_draft, headers=other_headers).status_code == 404
    assert client.delete(f"/forms/{form_id}", headers=other_headers).status_code == 404
    assert client.get("/forms", headers=other_headers).json() == []


def test_list_toggle_and_delete(client, owner_headers, created_form):
    form_id = created_form["id"]

    items = client.get("/forms", headers=owner_headers).json()
    assert [f["id"] for f in items] == [form_id]
    assert items[0]["status"] == "active"
    assert items[0]["responses"] == 0

    r = client.post(f"/forms/{form_id}/active", json={"is_active": False}, headers=owner_headers)
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    assert client.get("/forms", headers=owner_headers).json()[0]["status"] == "draft"

    r = client.delete(f"/forms/{form_id}", headers=owner_headers)
    assert r.status_code == 200
    assert client.get(f"/forms/{form_id}", headers=owner_headers).status_code == 404
