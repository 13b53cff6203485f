"""
API endpoint tests: login, password generation and gated record access
"""

import time

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from passvault.main import app
from passvault.config import get_settings
from passvault.dependencies import get_record_service
from passvault.services.crypto import TokenService
from passvault.services.crypto.encoding import b64url_decode, b64url_encode

UNAUTHORIZED = {"error": "Unauthorized"}


@pytest.fixture
def client():
    """Create test client"""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_records():
    """Clear all records before each test"""
    store = get_record_service().store
    store.clear()
    yield
    store.clear()


@pytest.fixture
def token(client, master_password):
    response = client.post("/api/auth/login", json={"password": master_password})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def create_item(client, headers, **overrides):
    body = {
        "title": "Mail",
        "username": "alice@example.com",
        "password": "hunter2",
        "login_url": "https://mail.example.com",
        "notes": "personal account",
    }
    body.update(overrides)
    response = client.post("/api/items", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestLoginAPI:
    """Test master password login"""

    def test_login_success(self, client, master_password):
        before = int(time.time())
        response = client.post("/api/auth/login", json={"password": master_password})

        assert response.status_code == 200
        data = response.json()
        assert data["token"].count(".") == 2
        duration = get_settings().SESSION_DURATION
        assert (before + duration) * 1000 <= data["expiresAt"] <= (before + duration + 5) * 1000

    def test_login_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"password": "wrong"})

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_login_empty_password(self, client):
        response = client.post("/api/auth/login", json={"password": ""})
        assert response.status_code == 401

    def test_login_missing_field(self, client):
        response = client.post("/api/auth/login", json={})
        assert response.status_code == 422

    def test_login_token_verifies(self, client, token):
        payload = TokenService(get_settings().JWT_SECRET).verify(token)
        assert payload.exp - payload.iat == get_settings().SESSION_DURATION


class TestPasswordGenerationAPI:
    """Test password generation endpoint (no authentication required)"""

    def test_default_policy(self, client):
        response = client.get("/api/generate-password")

        assert response.status_code == 200
        assert len(response.json()["password"]) == 16

    def test_digits_only(self, client):
        response = client.get(
            "/api/generate-password",
            params={"length": 12, "uppercase": "false", "lowercase": "false", "symbols": "false"},
        )

        assert response.status_code == 200
        password = response.json()["password"]
        assert len(password) == 12
        assert password.isdigit()

    def test_exclude_similar(self, client):
        response = client.get(
            "/api/generate-password", params={"length": 300, "excludeSimilar": "true"}
        )

        assert response.status_code == 200
        assert not set(response.json()["password"]) & set("0OIl")

    def test_all_classes_disabled(self, client):
        response = client.get(
            "/api/generate-password",
            params={"uppercase": "false", "lowercase": "false", "numbers": "false", "symbols": "false"},
        )

        assert response.status_code == 400
        assert "at least one character class" in response.json()["error"]

    @pytest.mark.parametrize("length", [0, -3, 513])
    def test_invalid_length(self, client, length):
        response = client.get("/api/generate-password", params={"length": length})
        assert response.status_code == 422


class TestItemsAPI:
    """Test record endpoints"""

    def test_create_and_list_decrypted(self, client, auth_headers):
        """Test authenticated GET returns decrypted passwords"""
        created = create_item(client, auth_headers)
        assert created["password"] == "hunter2"
        assert created["id"] == 1

        response = client.get("/api/items", headers=auth_headers)

        assert response.status_code == 200
        items = response.json()
        assert len(items) == 1
        assert items[0]["password"] == "hunter2"
        assert items[0]["title"] == "Mail"
        assert "encrypted_password" not in items[0]

    @pytest.mark.asyncio
    async def test_store_holds_only_ciphertext(self, client, auth_headers):
        created = create_item(client, auth_headers, password="s3cr3t-value")

        stored = await get_record_service().store.get(created["id"])
        assert stored.encrypted_password != "s3cr3t-value"
        assert "s3cr3t-value" not in stored.model_dump_json()

    def test_list_newest_first(self, client, auth_headers):
        create_item(client, auth_headers, title="first")
        create_item(client, auth_headers, title="second")

        titles = [i["title"] for i in client.get("/api/items", headers=auth_headers).json()]
        assert titles == ["second", "first"]

    def test_get_single(self, client, auth_headers):
        created = create_item(client, auth_headers)

        response = client.get(f"/api/items/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["password"] == "hunter2"

    def test_get_missing(self, client, auth_headers):
        response = client.get("/api/items/999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_update(self, client, auth_headers):
        created = create_item(client, auth_headers)

        response = client.put(
            f"/api/items/{created['id']}",
            json={"title": "Mail (work)", "username": "alice", "password": "n3w-pass"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Mail (work)"
        assert data["password"] == "n3w-pass"
        assert data["login_url"] is None
        assert data["created_at"] == created["created_at"]

    def test_update_missing(self, client, auth_headers):
        response = client.put(
            "/api/items/999",
            json={"title": "x", "username": "y", "password": "z"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_delete(self, client, auth_headers):
        created = create_item(client, auth_headers)

        response = client.delete(f"/api/items/{created['id']}", headers=auth_headers)
        assert response.status_code == 204

        response = client.delete(f"/api/items/{created['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_create_requires_fields(self, client, auth_headers):
        response = client.post("/api/items", json={"title": "x"}, headers=auth_headers)
        assert response.status_code == 422

    def test_tampered_record_is_opaque_500(self, client, auth_headers):
        """Test a corrupted stored secret fails closed without leaking"""
        created = create_item(client, auth_headers)
        store = get_record_service().store
        stored = store._records[created["id"]]
        raw = bytearray(b64url_decode(stored.encrypted_password))
        raw[-1] ^= 0x01
        store._records[created["id"]] = stored.model_copy(
            update={"encrypted_password": b64url_encode(bytes(raw))}
        )

        response = client.get(f"/api/items/{created['id']}", headers=auth_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert "hunter2" not in response.text


class TestAuthorizationGate:
    """Test that every record route rejects unauthenticated callers uniformly"""

    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/items"),
        ("GET", "/api/items/1"),
        ("POST", "/api/items"),
        ("PUT", "/api/items/1"),
        ("DELETE", "/api/items/1"),
    ])
    def test_missing_header(self, client, method, path):
        body = {"title": "x", "username": "y", "password": "z"}
        response = client.request(method, path, json=body if method in ("POST", "PUT") else None)

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED
        assert response.headers["www-authenticate"] == "Bearer"

    def test_wrong_scheme(self, client, token):
        response = client.get("/api/items", headers={"Authorization": f"Basic {token}"})

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_expired_token(self, client):
        """Test a correctly signed but expired token is rejected"""
        past = TokenService(get_settings().JWT_SECRET, clock=lambda: time.time() - 7200)
        expired = past.issue(60)

        response = client.get("/api/items", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_forged_token(self, client):
        forged = TokenService("not-the-server-secret").issue(600)

        response = client.get("/api/items", headers={"Authorization": f"Bearer {forged}"})

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_tampered_token(self, client, token):
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{'A' if signature[0] != 'A' else 'B'}{signature[1:]}"

        response = client.get("/api/items", headers={"Authorization": f"Bearer {tampered}"})

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_records_not_touched_when_unauthorized(self, client, auth_headers):
        client.post("/api/items", json={"title": "x", "username": "y", "password": "z"})

        assert client.get("/api/items", headers=auth_headers).json() == []


@pytest.mark.asyncio
async def test_end_to_end_async(master_password):
    """Login, store a secret, read it back; reject the same read without a token"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        login = await client.post("/api/auth/login", json={"password": master_password})
        assert login.status_code == 200
        headers = {"Authorization": f"Bearer {login.json()['token']}"}

        created = await client.post(
            "/api/items",
            json={"title": "Bank", "username": "bob", "password": "p@ss w0rd"},
            headers=headers,
        )
        assert created.status_code == 201

        listed = await client.get("/api/items", headers=headers)
        assert [i["password"] for i in listed.json()] == ["p@ss w0rd"]

        anonymous = await client.get("/api/items")
        assert anonymous.status_code == 401


class TestErrorResponses:
    """Test that framework errors use the same body shape and never echo input"""

    def test_validation_error_does_not_echo_password(self, client, auth_headers):
        response = client.post(
            "/api/items",
            json={"username": "u", "password": "S3cretPlaintext!"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Invalid request"
        assert {"loc": ["body", "title"], "msg": "Field required"} in body["fields"]
        assert "S3cretPlaintext!" not in response.text

    def test_login_validation_error_does_not_echo_body(self, client):
        response = client.post("/api/auth/login", json={"passwd": "typo-secret"})

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"
        assert "typo-secret" not in response.text

    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/nope"),
        ("PATCH", "/api/items"),
        ("POST", "/api/generate-password"),
        ("DELETE", "/api/auth/login"),
    ])
    def test_unknown_api_route_requires_session(self, client, method, path):
        """Test unauthenticated callers cannot discover which /api routes exist"""
        response = client.request(method, path)

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/nope"),
        ("PATCH", "/api/items"),
    ])
    def test_unknown_api_route_with_session(self, client, auth_headers, method, path):
        response = client.request(method, path, headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_unknown_path_outside_api(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_wrong_method_outside_api(self, client):
        response = client.post("/health")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
