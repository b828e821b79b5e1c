"""
Tests for the user directory and presence endpoints.
"""
from unittest import mock


class TestListAndGet:

    def test_list_requires_token(self, client):
        assert client.get("/api/users").status_code == 401

    def test_list(self, client, agent, admin):
        headers, _ = agent
        response = client.get("/api/users", headers=headers)
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()}
        assert emails == {"ana@example.com", "root@example.com"}

    def test_get_unknown(self, client, agent):
        headers, _ = agent
        assert client.get("/api/users/missing", headers=headers).status_code == 404


class TestStatus:

    def test_update_own_status_broadcasts(self, client, context, agent):
        headers, user = agent
        with mock.patch.object(context.hub, "broadcast_sync") as broadcast:
            response = client.patch("/api/users/status", json={"status": "busy"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["status"] == "busy"
        broadcast.assert_called_once_with(
            "user-status-changed", {"userId": user["id"], "status": "busy"}
        )

    def test_invalid_status(self, client, agent):
        headers, _ = agent
        response = client.patch("/api/users/status", json={"status": "sleeping"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status"

    def test_missing_status(self, client, agent):
        headers, _ = agent
        response = client.patch("/api/users/status", json={}, headers=headers)
        assert response.status_code == 400


class TestUpdate:

    def test_update_own_profile(self, client, agent):
        headers, user = agent
        response = client.put(
            f"/api/users/{user['id']}", json={"name": "Ana Maria"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Ana Maria"

    def test_role_change_requires_admin(self, client, agent):
        headers, user = agent
        response = client.put(
            f"/api/users/{user['id']}", json={"role": "admin"}, headers=headers
        )
        assert response.status_code == 403

    def test_admin_can_change_role(self, client, agent, admin):
        admin_headers, _ = admin
        _, user = agent
        response = client.put(
            f"/api/users/{user['id']}", json={"role": "admin"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    def test_email_taken(self, client, agent, admin):
        headers, user = agent
        response = client.put(
            f"/api/users/{user['id']}", json={"email": "root@example.com"}, headers=headers
        )
        assert response.status_code == 400


class TestDelete:

    def test_agent_cannot_delete(self, client, agent, admin):
        headers, _ = agent
        _, root = admin
        assert client.delete(f"/api/users/{root['id']}", headers=headers).status_code == 403

    def test_admin_deletes(self, client, agent, admin):
        admin_headers, _ = admin
        _, user = agent
        response = client.delete(f"/api/users/{user['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404
