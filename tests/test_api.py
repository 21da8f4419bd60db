"""End-to-end tests through the HTTP layer."""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from ride2gather.core.errors import ServerFailure
from ride2gather.db.session import Base, get_db
from ride2gather.deps import get_blob_store
from ride2gather.main import app
from ride2gather.routers import api_profiles
from ride2gather.services.blob_store import LocalBlobStore


@pytest.fixture()
def uploads_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def client(uploads_dir):
    # StaticPool keeps one in-memory database across the worker threads.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: LocalBlobStore(
        root=uploads_dir, base_url="http://testserver", max_bytes=5 * 1024 * 1024
    )
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def _signup(client, email="a@x.com", username="alice", password="secret1", **extra):
    return client.post("/signup", json={"email": email, "username": username, "password": password, **extra})


def test_signup_login_profile_flow(client):
    resp = _signup(client)
    assert resp.status_code == 201
    assert resp.json() == {"id": 1, "email": "a@x.com", "username": "alice", "country_code": ""}

    resp = client.post("/login", json={"identity": "alice", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["id"] == 1

    resp = client.post("/login", json={"identity": "alice", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"code": "invalid_credentials", "message": "Invalid password"}

    resp = client.patch("/user/1", json={"equipment_name": "CBR600RR"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["primary_equipment_id"] == 1
    assert body["primary_equipment"]["id"] == 1

    resp = client.get("/user/alice")
    assert resp.status_code == 200
    body = resp.json()
    assert body["primary_equipment"]["name"] == "CBR600RR"
    assert body["bio"] == ""
    assert body["avatar_ref"] == ""
    assert "password_hash" not in body


def test_signup_duplicate_and_validation_errors(client):
    assert _signup(client).status_code == 201

    resp = _signup(client, email="other@x.com")
    assert resp.status_code == 409
    assert resp.json()["code"] == "conflict"
    assert resp.json()["message"] == "email or username already exists"

    resp = client.post("/signup", json={"email": "b@x.com", "username": "bob"})
    assert resp.status_code == 422
    assert resp.json()["message"] == "email, username, and password are required"

    resp = _signup(client, email="c@x.com", username="cy")
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


def test_login_unknown_identity_is_404(client):
    resp = client.post("/login", json={"identity": "ghost", "password": "secret1"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_patch_partial_semantics(client):
    _signup(client)
    client.patch("/user/1", json={"bike_name": "ZX-6R"})

    resp = client.patch("/user/1", json={"bio": "track days"})
    assert resp.json()["bio"] == "track days"
    assert resp.json()["primary_equipment"]["name"] == "ZX-6R"

    resp = client.patch("/user/1", json={"equipment_name": None})
    assert resp.json()["primary_equipment_id"] is None
    assert resp.json()["bio"] == "track days"

    resp = client.patch("/user/1", json={"equipment_name": "ZX-6R"})
    assert resp.json()["primary_equipment_id"] == 1


def test_patch_unknown_user_and_bad_id(client):
    assert client.patch("/user/7", json={"bio": "x"}).status_code == 404
    assert client.patch("/user/abc", json={"bio": "x"}).status_code == 422


def test_avatar_upload_stores_reference(client, uploads_dir):
    _signup(client)

    resp = client.post("/user/1/pfp", files={"pfp": ("me.png", b"\x89PNG\r\n", "image/png")})

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == 1
    assert body["avatar_ref"].startswith("http://testserver/uploads/")
    stored_name = body["avatar_ref"].rsplit("/", 1)[1]
    assert (uploads_dir / stored_name).read_bytes() == b"\x89PNG\r\n"
    assert client.get("/user/alice").json()["avatar_ref"] == body["avatar_ref"]


def test_avatar_upload_errors(client, uploads_dir):
    resp = client.post("/user/1/pfp", files={"pfp": ("me.png", b"x", "image/png")})
    assert resp.status_code == 404
    assert not uploads_dir.exists() or not any(uploads_dir.iterdir())

    _signup(client)
    resp = client.post("/user/1/pfp", data={"other": "value"})
    assert resp.status_code == 422
    assert "pfp" in resp.json()["message"]


def test_users_roster_sorted(client):
    _signup(client, email="c@x.com", username="carol")
    _signup(client, email="a@x.com", username="alice")

    resp = client.get("/users")

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert [row["username"] for row in body["data"]] == ["alice", "carol"]
    assert set(body["data"][0]) == {"id", "username", "avatar_ref", "last_online"}


def test_health_and_request_id_header(client):
    resp = client.get("/", headers={"X-Request-ID": "abc123"})
    assert resp.json() == {"ok": True, "service": "ride2gather-api"}
    assert resp.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").json() == {"ok": True}


def test_avatar_over_size_limit_is_413(client, uploads_dir):
    _signup(client)
    app.dependency_overrides[get_blob_store] = lambda: LocalBlobStore(
        root=uploads_dir, base_url="http://testserver", max_bytes=16
    )

    resp = client.post("/user/1/pfp", files={"pfp": ("big.png", b"x" * 64, "image/png")})

    assert resp.status_code == 413
    assert resp.json()["code"] == "payload_too_large"
    assert not any(uploads_dir.iterdir())
    assert client.get("/user/alice").json()["avatar_ref"] == ""


def test_avatar_failed_update_removes_stored_file(client, uploads_dir, monkeypatch):
    _signup(client)

    def failing_update(db, account_id, reference):
        raise ServerFailure("disk full")

    monkeypatch.setattr(api_profiles, "update_avatar", failing_update)

    resp = client.post("/user/1/pfp", files={"pfp": ("me.png", b"\x89PNG\r\n", "image/png")})

    assert resp.status_code == 500
    assert resp.json() == {"code": "server_error", "message": "disk full"}
    assert not any(uploads_dir.iterdir())


def test_storage_failure_returns_server_error_envelope(client):
    # No tables in this database, so every query fails inside the driver.
    broken_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    BrokenSession = sessionmaker(bind=broken_engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = BrokenSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    for resp in (client.get("/users"), _signup(client), client.get("/user/alice")):
        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == "server_error"
        assert "no such table: accounts" in body["message"]
