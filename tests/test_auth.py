"""
Tests for registration, login and token handling.
"""
from datetime import datetime, timedelta

import jwt

from inbox.core.config import JWT_ALGORITHM, JWT_SECRET_KEY
from inbox.core.jwt_auth import JWTAuth


class TestRegister:

    def test_returns_token_and_user(self, client):
        response = client.post("/api/auth/register", json={
            "name": "Ana", "email": "Ana@Example.com", "password": "pw"
        })
        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "ana@example.com"
        assert data["user"]["role"] == "agent"
        assert data["user"]["status"] == "available"
        assert "passwordHash" not in data["user"]

    def test_duplicate_email(self, client, agent):
        response = client.post("/api/auth/register", json={
            "name": "Other", "email": "ana@example.com", "password": "pw"
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"

    def test_invalid_email_is_rejected(self, client):
        response = client.post("/api/auth/register", json={
            "name": "Ana", "email": "not-an-email", "password": "pw"
        })
        assert response.status_code == 422


class TestLogin:

    def test_valid_credentials(self, client, agent):
        response = client.post("/api/auth/login", json={
            "email": "ana@example.com", "password": "secret123"
        })
        assert response.status_code == 200
        token = response.json()["token"]
        assert JWTAuth.get_user_id(JWTAuth.decode_token(token)) == agent[1]["id"]

    def test_wrong_password(self, client, agent):
        response = client.post("/api/auth/login", json={
            "email": "ana@example.com", "password": "nope"
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid credentials"

    def test_unknown_email(self, client):
        response = client.post("/api/auth/login", json={
            "email": "ghost@example.com", "password": "x"
        })
        assert response.status_code == 400


class TestMe:

    def test_me(self, client, agent):
        headers, user = agent
        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["id"] == user["id"]

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Access denied. No token provided."

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"x-auth-token": "garbage"})
        assert response.status_code == 401

    def test_expired_token(self, client, agent):
        _, user = agent
        token = JWTAuth.create_token(user["id"], lifetime_minutes=-5)
        response = client.get("/api/auth/me", headers={"x-auth-token": token})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_deleted_user(self, client):
        token = JWTAuth.create_token("does-not-exist")
        response = client.get("/api/auth/me", headers={"x-auth-token": token})
        assert response.status_code == 404


class TestTokenPayload:

    def test_claims(self):
        token = JWTAuth.create_token("u1")
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        assert payload["userId"] == "u1"
        assert payload["sub"] == "u1"
        lifetime = payload["exp"] - payload["iat"]
        assert timedelta(seconds=lifetime) == timedelta(hours=24)

    def test_foreign_secret_is_rejected(self, client):
        token = jwt.encode(
            {"userId": "u1", "exp": datetime.utcnow() + timedelta(minutes=5)},
            "some-other-secret-with-enough-length-0123456789",
            algorithm="HS256",
        )
        response = client.get("/api/chats", headers={"x-auth-token": token})
        assert response.status_code == 401
