import pytest
from app.services.one_rm import estimate_one_rep_max
from app.services.recompute import PRService, default_sequencer
from helpers import client, new_user, make_exercise, log_set, prs_by_name


def test_deadlift_records_rise_and_never_fall():
    _, h = new_user()
    dl = make_exercise(h, "Deadlift")

    first = log_set(h, dl, 180, 1, performed_at="2026-03-02T10:00:00Z")
    assert first["prs"]["new_weight"] and first["prs"]["new_1rm"] and first["prs"]["new_volume"]
    rec = prs_by_name(h)["Deadlift"]
    assert rec["weight_pr"]["value"] == 180
    assert rec["one_rm_pr"]["value"] == pytest.approx(estimate_one_rep_max(180, 1))

    second = log_set(h, dl, 185, 1, performed_at="2026-03-03T10:00:00Z")
    assert second["prs"]["new_weight"] and second["prs"]["new_1rm"]
    rec = prs_by_name(h)["Deadlift"]
    assert rec["weight_pr"]["value"] == 185
    assert rec["one_rm_pr"]["value"] == pytest.approx(estimate_one_rep_max(185, 1))

    third = log_set(h, dl, 170, 1, performed_at="2026-03-04T10:00:00Z")
    assert not any(third["prs"][k] for k in ("new_weight", "new_1rm", "new_volume"))
    rec = prs_by_name(h)["Deadlift"]
    assert rec["weight_pr"]["value"] == 185
    assert rec["one_rm_pr"]["value"] == pytest.approx(estimate_one_rep_max(185, 1))
    assert rec["weight_pr"]["set_id"] == second["set"]["id"]


def test_failed_set_is_never_a_record():
    _, h = new_user()
    sq = make_exercise(h, "Back Squat")
    log_set(h, sq, 150, 5, performed_at="2026-03-02T10:00:00Z")

    failed = log_set(h, sq, 200, 1, failed=True, performed_at="2026-03-02T10:10:00Z")
    assert failed["set"]["failed"] is True
    assert failed["prs"] == {"new_weight": False, "new_1rm": False, "new_volume": False,
                             "club_total_kg": None, "club_just_reached": False}
    assert prs_by_name(h)["Back Squat"]["weight_pr"]["value"] == 150


def test_same_day_sets_build_volume_and_ties_keep_first_set():
    _, h = new_user()
    bp = make_exercise(h, "Bench Press")
    a = log_set(h, bp, 100, 5, performed_at="2026-03-02T10:00:00Z")
    b = log_set(h, bp, 100, 5, performed_at="2026-03-02T10:05:00Z")
    assert b["prs"]["new_volume"] is True
    assert b["prs"]["new_weight"] is False and b["prs"]["new_1rm"] is False

    rec = prs_by_name(h)["Bench Press"]
    assert rec["volume_pr"]["value"] == 1000
    assert rec["volume_pr"]["date_iso"] == "2026-03-02T00:00:00+00:00"
    assert rec["weight_pr"]["set_id"] == a["set"]["id"]


def test_incremental_and_full_recompute_agree():
    _, h = new_user()
    bp = make_exercise(h, "Bench Press")
    dl = make_exercise(h, "Deadlift")
    log_set(h, bp, 100, 5, performed_at="2026-03-02T10:00:00Z")
    log_set(h, bp, 100, 5, performed_at="2026-03-02T10:05:00Z")
    log_set(h, bp, 105, 3, performed_at="2026-03-05T10:00:00Z")
    log_set(h, dl, 180, 2, performed_at="2026-03-03T10:00:00Z")
    log_set(h, dl, 170, 5, performed_at="2026-03-06T10:00:00Z")
    # backdated ties: the records move to the earlier sets without a notification
    tie = log_set(h, bp, 105, 3, performed_at="2026-02-20T10:00:00Z")
    assert not any(tie["prs"][k] for k in ("new_weight", "new_1rm", "new_volume"))
    early = log_set(h, dl, 170, 5, performed_at="2026-03-01T10:00:00Z")
    assert not any(early["prs"][k] for k in ("new_weight", "new_1rm", "new_volume"))
    incremental = client.get("/prs", headers=h).json()
    by_name = {p["exercise_name"]: p for p in incremental}
    assert by_name["Bench Press"]["weight_pr"]["set_id"] == tie["set"]["id"]
    assert by_name["Bench Press"]["weight_pr"]["date_iso"] == "2026-02-20T10:00:00+00:00"
    assert by_name["Deadlift"]["one_rm_pr"]["set_id"] == early["set"]["id"]
    assert by_name["Deadlift"]["volume_pr"]["date_iso"] == "2026-03-01T00:00:00+00:00"

    r = client.post("/prs/recompute", headers=h)
    assert r.status_code == 200
    body = r.json()
    assert body["summaries"] == incremental
    assert body["improved"] == {}
    assert body["club_just_reached"] is False
    assert client.get("/prs", headers=h).json() == incremental

    # unchanged input -> identical output
    assert client.post("/prs/recompute", headers=h).json()["summaries"] == body["summaries"]


def test_edit_recomputes_in_both_directions():
    _, h = new_user()
    dl = make_exercise(h, "Deadlift")
    log_set(h, dl, 180, 1, performed_at="2026-03-02T10:00:00Z")
    top = log_set(h, dl, 185, 1, performed_at="2026-03-03T10:00:00Z")["set"]

    r = client.patch(f"/sets/{top['id']}", headers=h, json={"weight": 150})
    assert r.status_code == 200, r.text
    assert r.json()["improved"] == []
    assert prs_by_name(h)["Deadlift"]["weight_pr"]["value"] == 180

    r = client.patch(f"/sets/{top['id']}", headers=h, json={"weight": 200})
    assert r.json()["improved"] == ["1rm", "volume", "weight"]
    assert r.json()["set"]["weight"] == 200
    assert prs_by_name(h)["Deadlift"]["weight_pr"]["value"] == 200

    # marking it failed drops it out of every record
    r = client.patch(f"/sets/{top['id']}", headers=h, json={"failed": True})
    assert r.json()["set"]["failed"] is True
    assert prs_by_name(h)["Deadlift"]["weight_pr"]["value"] == 180


def test_delete_recomputes_and_clears():
    _, h = new_user()
    dl = make_exercise(h, "Deadlift")
    s1 = log_set(h, dl, 180, 1, performed_at="2026-03-02T10:00:00Z")["set"]
    s2 = log_set(h, dl, 170, 1, performed_at="2026-03-03T10:00:00Z")["set"]

    assert client.delete(f"/sets/{s1['id']}", headers=h).status_code == 204
    assert prs_by_name(h)["Deadlift"]["weight_pr"]["value"] == 170

    assert client.delete(f"/sets/{s2['id']}", headers=h).status_code == 204
    assert client.get("/prs", headers=h).json() == []
    assert client.delete(f"/sets/{s2['id']}", headers=h).status_code == 404


def test_pounds_are_stored_as_kilograms():
    _, h = new_user()
    bp = make_exercise(h, "Bench Press")
    s = log_set(h, bp, 225, 1, unit="lb", performed_at="2026-03-02T10:00:00Z")["set"]
    assert s["weight"] == pytest.approx(102.0582833)


def test_incremental_failure_falls_back_to_full_recompute(monkeypatch):
    _, h = new_user()
    dl = make_exercise(h, "Deadlift")

    def broken(self, set_id):
        raise RuntimeError("rpc unavailable")
    monkeypatch.setattr(PRService, "upsert_for_set", broken)

    r = client.post("/sets", headers=h, json={"exercise_id": dl, "weight": 200, "reps": 3,
                                             "performed_at": "2026-03-02T10:00:00Z"})
    assert r.status_code == 201, r.text
    # no notification, but the records are right
    assert r.json()["prs"]["new_weight"] is False
    assert prs_by_name(h)["Deadlift"]["weight_pr"]["value"] == 200


def test_validation_and_missing_rows():
    _, h = new_user()
    bp = make_exercise(h, "Bench Press")
    assert client.post("/sets", headers=h, json={"exercise_id": bp, "weight": 0, "reps": 5}).status_code == 422
    assert client.post("/sets", headers=h, json={"exercise_id": bp, "weight": 50, "reps": 0}).status_code == 422
    assert client.post("/sets", headers=h, json={"exercise_id": bp, "weight": 50, "reps": 5, "rpe": 11}).status_code == 422
    assert client.post("/sets", headers=h, json={"exercise_id": 999999, "weight": 50, "reps": 5}).status_code == 404
    assert client.post("/sets", headers=h, json={"exercise_id": bp, "weight": 50, "reps": 5,
                                                 "workout_id": 999999}).status_code == 404
    assert client.patch("/sets/999999", headers=h, json={"weight": 10}).status_code == 404


def test_edit_still_lands_when_a_newer_recompute_wins(monkeypatch):
    user_id, h = new_user()
    dl = make_exercise(h, "Deadlift")
    log_set(h, dl, 180, 1, performed_at="2026-03-02T10:00:00Z")
    top = log_set(h, dl, 200, 1, performed_at="2026-03-03T10:00:00Z")["set"]

    real_start = default_sequencer.start
    raced = []

    def start_then_lose_race(uid):
        ticket = real_start(uid)
        if uid == user_id and not raced:
            # a concurrent recompute that never saw this edit commits first
            newer = real_start(uid)
            with default_sequencer.write_slot(uid, newer):
                pass
            raced.append(newer)
        return ticket
    monkeypatch.setattr(default_sequencer, "start", start_then_lose_race)

    assert client.delete(f"/sets/{top['id']}", headers=h).status_code == 204
    assert raced
    rec = prs_by_name(h)["Deadlift"]
    assert rec["weight_pr"]["value"] == 180
    assert rec["one_rm_pr"]["value"] == pytest.approx(estimate_one_rep_max(180, 1))
