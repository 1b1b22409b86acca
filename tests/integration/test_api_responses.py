# tests/integration/test_api_responses.py
from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

from feedback_api.services import store


def _submit(client, form, text, rating):
    text_q, rating_q, _ = [q["id"] for q in form["questions"]]
    r = client.post(
        f"/public/forms/{form['id']}/responses",
        json={"answers": {text_q: text, rating_q: rating}},
    )
    assert r.status_code == 201, r.text
    return r.json()["response_id"]


def test_form_responses_stats(client, owner_headers, created_form):
    _submit(client, created_form, "good", "4")
    _submit(client, created_form, "fine", "5")

    data = client.get(f"/forms/{created_form['id']}/responses", headers=owner_headers).json()
    assert data["stats"] == {"total_responses": 2, "avg_rating": 4.5, "this_week": None}
    assert len(data["items"]) == 2


def test_form_csv_export(client, owner_headers, created_form):
    rid = _submit(client, created_form, 'He said "hi"', "3")

    r = client.get(f"/forms/{created_form['id']}/responses.csv", headers=owner_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "Customer feedback-responses.csv" in r.headers["content-disposition"]

    lines = r.text.splitlines()
    assert lines[0] == (
        '"Response ID","Submitted At","IP Address",'
        '"What did you like?","Rate us","Where did you hear about us?"'
    )
    assert lines[1].startswith(f'"{rid}",')
    assert lines[1].endswith('"He said ""hi""","3",""')


def test_form_csv_not_found_for_other_user(client, other_headers, created_form):
    r = client.get(f"/forms/{created_form['id']}/responses.csv", headers=other_headers)
    assert r.status_code == 404


def test_owner_wide_responses_filter_and_csv(client, owner_headers, created_form, sample_draft):
    second = dict(sample_draft, title="Gym survey")
    gym = client.post("/forms", json=second, headers=owner_headers).json()

    _submit(client, created_form, "great coffee", "5")
    _submit(client, gym, "too crowded", "2")

    data = client.get("/responses", headers=owner_headers).json()
    assert data["stats"]["total_responses"] == 2
    assert data["stats"]["this_week"] == 2
    assert data["stats"]["avg_rating"] == 3.5

    only_gym = client.get("/responses", params={"form_id": gym["id"]}, headers=owner_headers).json()
    assert [it["form_title"] for it in only_gym["items"]] == ["Gym survey"]

    coffee = client.get("/responses", params={"q": "COFFEE"}, headers=owner_headers).json()
    assert [it["form_title"] for it in coffee["items"]] == ["Customer feedback"]

    r = client.get("/responses.csv", headers=owner_headers)
    rows = list(csv.reader(io.StringIO(r.text)))
    assert rows[0][:2] == ["Form Title", "Submitted At"]
    assert len(rows) == 3


def test_dashboard_summary(client, owner_headers, created_form, test_settings):
    _submit(client, created_form, "a", "2")
    _submit(client, created_form, "b", "3")

    # an old response outside both the month and the 7-day trend
    store.create_response(
        test_settings.abs_sqlite_path(),
        created_form["id"],
        {},
        submitted_at="2020-01-01T00:00:00+00:00",
    )

    s = client.get("/dashboard", headers=owner_headers).json()
    assert s["total_forms"] == 1
    assert s["total_responses"] == 3
    assert s["this_month"] == 2
    assert s["active_forms_count"] == 1
    assert s["avg_responses_per_form"] == 3.0
    assert s["avg_rating"] == 2.5
    assert s["top_performing_form"]["id"] == created_form["id"]

    today = datetime.now(timezone.utc).date().isoformat()
    assert len(s["trend"]) == 7
    assert s["trend"][-1] == {"date": today, "count": 2}
    assert s["recent_forms"][0]["created"] == "Just now"


def test_dashboard_empty_for_new_user(client, other_headers):
    s = client.get("/dashboard", headers=other_headers).json()
    assert s["total_forms"] == 0
    assert s["top_performing_form"] is None
    assert [d["count"] for d in s["trend"]] == [0] * 7
