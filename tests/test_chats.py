"""
Tests for the chat endpoints.
"""
from unittest import mock


def _create(client, headers, number, name="Contact", **extra):
    body = {"contact": {"name": name, "number": number}, **extra}
    return client.post("/api/chats", json=body, headers=headers)


class TestCreate:

    def test_new_chat_is_unassigned(self, client, chat):
        assert chat["contact"] == {"name": "Carlos", "number": "5511988887777", "profilePic": ""}
        assert chat["status"] == "unassigned"
        assert chat["category"] == "unassigned"
        assert chat["assignedTo"] is None
        assert chat["unreadCount"] == 0

    def test_same_number_returns_existing(self, client, agent, chat):
        headers, _ = agent
        response = _create(client, headers, "5511988887777", name="Someone else")
        assert response.status_code == 200
        assert response.json()["id"] == chat["id"]
        assert response.json()["contact"]["name"] == "Carlos"

    def test_created_with_assignee(self, client, agent):
        headers, user = agent
        response = _create(client, headers, "123", assignedTo=user["id"])
        assert response.status_code == 201
        data = response.json()
        assert (data["status"], data["category"]) == ("open", "mine")
        assert data["assignedTo"]["name"] == "Ana Agent"

    def test_missing_number(self, client, agent):
        headers, _ = agent
        response = client.post("/api/chats", json={"contact": {"name": "X"}}, headers=headers)
        assert response.status_code == 422

    def test_requires_token(self, client):
        assert _create(client, {}, "123").status_code == 401


class TestList:

    def test_most_recent_first(self, client, agent):
        headers, _ = agent
        first = _create(client, headers, "1").json()
        second = _create(client, headers, "2").json()

        client.post("/api/messages", json={"chatId": first["id"], "content": "bump"}, headers=headers)

        ids = [c["id"] for c in client.get("/api/chats", headers=headers).json()]
        assert ids == [first["id"], second["id"]]

    def test_mine_only_lists_caller_chats(self, client, agent, register):
        headers, user = agent
        other_headers, other = register(name="Bruno")
        _create(client, headers, "1", assignedTo=user["id"])
        _create(client, headers, "2", assignedTo=other["id"])
        _create(client, headers, "3")

        mine = client.get("/api/chats", params={"category": "mine"}, headers=headers).json()
        assert [c["contact"]["number"] for c in mine] == ["1"]

        theirs = client.get("/api/chats", params={"category": "mine"}, headers=other_headers).json()
        assert [c["contact"]["number"] for c in theirs] == ["2"]

    def test_filter_by_status(self, client, agent):
        headers, user = agent
        _create(client, headers, "1", assignedTo=user["id"])
        _create(client, headers, "2")

        response = client.get("/api/chats", params={"status": "unassigned"}, headers=headers)
        assert [c["contact"]["number"] for c in response.json()] == ["2"]


class TestGet:

    def test_get(self, client, agent, chat):
        headers, _ = agent
        response = client.get(f"/api/chats/{chat['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["id"] == chat["id"]

    def test_unknown(self, client, agent):
        headers, _ = agent
        response = client.get("/api/chats/missing", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Chat not found"


class TestAssign:

    def test_assign_sets_open_mine(self, client, context, agent, chat):
        headers, user = agent
        with mock.patch.object(context.hub, "broadcast_sync") as broadcast:
            response = client.patch(
                f"/api/chats/{chat['id']}/assign", json={"userId": user["id"]}, headers=headers
            )

        assert response.status_code == 200
        data = response.json()
        assert (data["status"], data["category"]) == ("open", "mine")
        assert data["assignedTo"]["id"] == user["id"]
        event, payload = broadcast.call_args.args
        assert event == "chat-updated"
        assert payload["id"] == chat["id"]

    def test_unassign_resets_state(self, client, agent, chat):
        headers, user = agent
        client.patch(f"/api/chats/{chat['id']}/assign", json={"userId": user["id"]}, headers=headers)

        response = client.patch(
            f"/api/chats/{chat['id']}/assign", json={"userId": None}, headers=headers
        )
        data = response.json()
        assert (data["status"], data["category"]) == ("unassigned", "unassigned")
        assert data["assignedTo"] is None

    def test_unknown_user(self, client, agent, chat):
        headers, _ = agent
        response = client.patch(
            f"/api/chats/{chat['id']}/assign", json={"userId": "ghost"}, headers=headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_unknown_chat(self, client, agent):
        headers, user = agent
        response = client.patch(
            "/api/chats/missing/assign", json={"userId": user["id"]}, headers=headers
        )
        assert response.status_code == 404


class TestUpdate:

    def test_assigned_to_rederives_state(self, client, agent, chat):
        headers, user = agent
        response = client.put(
            f"/api/chats/{chat['id']}", json={"assignedTo": user["id"]}, headers=headers
        )
        data = response.json()
        assert (data["status"], data["category"]) == ("open", "mine")

    def test_explicit_status_wins(self, client, agent, chat):
        headers, user = agent
        response = client.put(
            f"/api/chats/{chat['id']}",
            json={"assignedTo": user["id"], "status": "paused", "category": "team"},
            headers=headers,
        )
        data = response.json()
        assert (data["status"], data["category"]) == ("paused", "team")

    def test_without_assignee_field_keeps_assignment(self, client, agent, chat):
        headers, user = agent
        client.patch(f"/api/chats/{chat['id']}/assign", json={"userId": user["id"]}, headers=headers)

        response = client.put(f"/api/chats/{chat['id']}", json={"isImportant": True}, headers=headers)
        data = response.json()
        assert data["isImportant"] is True
        assert data["assignedTo"]["id"] == user["id"]


class TestStatusAndImportant:

    def test_status(self, client, agent, chat):
        headers, _ = agent
        response = client.patch(
            f"/api/chats/{chat['id']}/status", json={"status": "closed"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "closed"

    def test_invalid_status(self, client, agent, chat):
        headers, _ = agent
        response = client.patch(
            f"/api/chats/{chat['id']}/status", json={"status": "archived"}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status"

    def test_important(self, client, agent, chat):
        headers, _ = agent
        response = client.patch(
            f"/api/chats/{chat['id']}/important", json={"isImportant": True}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["isImportant"] is True
