from fastapi.testclient import TestClient
from app.main import app
from app.security import create_access_token
import uuid

client = TestClient(app)
def uid(): return f"user-{uuid.uuid4().hex[:10]}"

def test_requires_auth():
    # no token -> 401s
    assert client.get("/prs").status_code == 401
    assert client.post("/sets", json={"exercise_id": 1, "weight": 10, "reps": 1}).status_code == 401

def test_token_expired():
    expired = create_access_token(uid(), expires_minutes=-1)
    r = client.get("/prs", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Token expired"

def test_garbage_token_401():
    r = client.get("/exercises", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authenticated"

def test_token_without_sub_401():
    from jose import jwt
    from app.settings import get_settings
    s = get_settings()
    tok = jwt.encode({"exp": 9999999999}, s.SECRET_KEY, algorithm=s.ALGORITHM)
    r = client.get("/exercises", headers={"Authorization": f"Bearer {tok}"})
    assert r.status_code == 401

def test_rows_are_scoped_to_token_user():
    h1 = {"Authorization": f"Bearer {create_access_token(uid())}"}
    h2 = {"Authorization": f"Bearer {create_access_token(uid())}"}
    ex = client.post("/exercises", headers=h1, json={"name": "Bench Press"}).json()["id"]
    s = client.post("/sets", headers=h1, json={"exercise_id": ex, "weight": 100, "reps": 5}).json()["set"]

    # another user sees neither the exercise nor the set
    assert ex not in [e["id"] for e in client.get("/exercises", headers=h2).json()]
    assert client.post("/sets", headers=h2, json={"exercise_id": ex, "weight": 100, "reps": 5}).status_code == 404
    assert client.delete(f"/sets/{s['id']}", headers=h2).status_code == 404
    assert client.get("/prs", headers=h2).json() == []
