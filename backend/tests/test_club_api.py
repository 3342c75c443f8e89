import pytest
from app.services.one_rm import estimate_one_rep_max
from app.services.prs import THOUSAND_LB_TARGET_KG
from helpers import client, new_user, make_exercise, log_set

def test_empty_club():
    _, h = new_user()
    r = client.get("/prs/club", headers=h)
    assert r.status_code == 200
    assert r.json() == {"bench_kg": None, "deadlift_kg": None, "squat_kg": None, "total_kg": 0.0,
                        "percent": 0.0, "reached_target": False, "target_kg": pytest.approx(THOUSAND_LB_TARGET_KG)}

def test_crossing_the_thousand_pound_line():
    _, h = new_user()
    bench = make_exercise(h, "Bench Press")
    dead = make_exercise(h, "Deadlift")
    squat = make_exercise(h, "Back Squat")
    front = make_exercise(h, "Front Squat")

    log_set(h, bench, 140, 1, performed_at="2026-03-02T10:00:00Z")
    r = log_set(h, front, 200, 1, performed_at="2026-03-02T11:00:00Z")
    assert r["prs"]["club_total_kg"] == pytest.approx(estimate_one_rep_max(140, 1))
    r = log_set(h, dead, 220, 1, performed_at="2026-03-03T10:00:00Z")
    assert r["prs"]["club_just_reached"] is False

    r = log_set(h, squat, 180, 1, performed_at="2026-03-04T10:00:00Z")
    total = sum(estimate_one_rep_max(w, 1) for w in (140, 220, 180))
    assert r["prs"]["club_just_reached"] is True
    assert r["prs"]["club_total_kg"] == pytest.approx(total)

    club = client.get("/prs/club", headers=h).json()
    assert club["squat_kg"] == pytest.approx(estimate_one_rep_max(180, 1))
    assert club["reached_target"] is True
    assert club["percent"] == 100

    # already in the club: no second celebration
    r = log_set(h, squat, 190, 1, performed_at="2026-03-05T10:00:00Z")
    assert r["prs"]["new_1rm"] is True
    assert r["prs"]["club_just_reached"] is False

def test_recompute_reports_club_crossing_after_edit():
    _, h = new_user()
    bench = make_exercise(h, "Bench Press")
    dead = make_exercise(h, "Deadlift")
    log_set(h, bench, 100, 1, performed_at="2026-03-02T10:00:00Z")
    s = log_set(h, dead, 200, 1, performed_at="2026-03-02T11:00:00Z")["set"]

    r = client.patch(f"/sets/{s['id']}", headers=h, json={"weight": 400})
    assert r.json()["club_just_reached"] is True
    body = client.post("/prs/recompute", headers=h).json()
    assert body["club_before"]["reached_target"] is True
    assert body["club_just_reached"] is False
