"""Tests for authentication API endpoints."""

from fastapi.testclient import TestClient

from tests.helpers import auth_headers


class TestAuthAPI:
    """Token verification through the HTTP surface."""

    def test_verify_valid_token(self, client: TestClient):
        response = client.post("/auth/verify", headers=auth_headers(uid="uid-42", email="a@example.com", name="Alice"))

        assert response.status_code == 200
        assert response.json() == {"valid": True, "user": {"uid": "uid-42", "email": "a@example.com", "name": "Alice"}}

    def test_verify_does_not_create_profile(self, client: TestClient):
        client.post("/auth/verify", headers=auth_headers(uid="uid-43"))

        response = client.put("/users/profile", json={"display_name": "x"}, headers=auth_headers(uid="uid-43"))
        assert response.status_code == 404

    def test_verify_missing_token(self, client: TestClient):
        response = client.post("/auth/verify")
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_verify_invalid_token(self, client: TestClient, invalid_auth_headers):
        response = client.post("/auth/verify", headers=invalid_auth_headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    def test_verify_expired_token(self, client: TestClient, expired_auth_headers):
        response = client.post("/auth/verify", headers=expired_auth_headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Token expired"}


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Hello from tripjournal!"}
