import uuid
from fastapi.testclient import TestClient
from app.main import app
from app.security import create_access_token

client = TestClient(app)

def new_user():
    """Fresh user id + auth headers; every test works on its own rows."""
    user_id = f"user-{uuid.uuid4().hex[:10]}"
    return user_id, {"Authorization": f"Bearer {create_access_token(user_id)}"}

def make_exercise(headers, name, short_name=None):
    r = client.post("/exercises", headers=headers, json={"name": name, "short_name": short_name})
    assert r.status_code == 201, r.text
    return r.json()["id"]

def log_set(headers, exercise_id, weight, reps, *, failed=False, performed_at=None, **extra):
    body = {"exercise_id": exercise_id, "weight": weight, "reps": reps, "failed": failed,
            "performed_at": performed_at, **extra}
    r = client.post("/sets", headers=headers, json=body)
    assert r.status_code == 201, r.text
    return r.json()

def prs_by_name(headers):
    r = client.get("/prs", headers=headers)
    assert r.status_code == 200, r.text
    return {p["exercise_name"]: p for p in r.json()}
