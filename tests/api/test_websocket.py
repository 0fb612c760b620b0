import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.main import app


def register_and_login(client: TestClient, username: str) -> str:
    client.post("/auth/register", json={
        "email": f"{username}@example.com",
        "username": username,
        "password": "password123"
    })
    response = client.post("/auth/login", json={"username": username, "password": "password123"})
    return response.json()["access_token"]


@pytest.fixture
def ws_client(pubsub):
    with TestClient(app) as client:
        yield client


def test_channel_flow_for_owner(ws_client):
    token = register_and_login(ws_client, "alice")
    document = ws_client.post(
        "/api/documents",
        json={"title": "T1", "content": "C1"},
        headers={"Authorization": f"Bearer {token}"}
    ).json()
    document_id = document["id"]

    with ws_client.websocket_connect(f"/ws/documents/{document_id}?token={token}") as ws:
        ws.send_text("{not json")
        ws.send_json({"type": "edit", "documentId": document_id + 1, "content": "wrong channel"})
        ws.send_json({"type": "join", "documentId": document_id})

        joined = ws.receive_json()
        assert joined["type"] == "user_joined"
        assert joined["documentId"] == document_id
        assert joined["user"]["username"] == "alice"

        ws.send_json({"type": "edit", "documentId": document_id, "content": "C2"})
        update = ws.receive_json()
        assert update == {
            "type": "content_update",
            "documentId": document_id,
            "content": "C2",
            "user": joined["user"],
            "timestamp": update["timestamp"],
        }

    response = ws_client.get(f"/api/documents/{document_id}", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["content"] == "C2"


def test_invalid_token_closes_with_4401(ws_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect("/ws/documents/1?token=garbage") as ws:
            ws.receive_json()

    assert exc_info.value.code == 4401


def test_reader_edit_is_not_broadcast(ws_client):
    owner_token = register_and_login(ws_client, "alice")
    reader_token = register_and_login(ws_client, "bob")
    owner_headers = {"Authorization": f"Bearer {owner_token}"}
    document_id = ws_client.post("/api/documents", json={"title": "T1", "content": "C1"}, headers=owner_headers).json()["id"]
    ws_client.post(f"/api/documents/{document_id}/invite", json={"email": "bob@example.com"}, headers=owner_headers)

    with ws_client.websocket_connect(f"/ws/documents/{document_id}?token={owner_token}") as owner_ws:
        owner_ws.send_json({"type": "join", "documentId": document_id})
        assert owner_ws.receive_json()["type"] == "user_joined"

        with ws_client.websocket_connect(f"/ws/documents/{document_id}?token={reader_token}") as reader_ws:
            reader_ws.send_json({"type": "edit", "documentId": document_id, "content": "C2"})
            reader_ws.send_json({"type": "join", "documentId": document_id})

            # Первым приходит join: правка читателя отброшена
            assert owner_ws.receive_json()["type"] == "user_joined"
            assert reader_ws.receive_json()["type"] == "user_joined"

    document = ws_client.get(f"/api/documents/{document_id}", headers=owner_headers).json()
    assert document["content"] == "C1"


def test_stranger_cannot_subscribe_to_private_document(ws_client):
    owner_token = register_and_login(ws_client, "alice")
    stranger_token = register_and_login(ws_client, "mallory")
    document_id = ws_client.post(
        "/api/documents",
        json={"title": "Secret", "content": "C1"},
        headers={"Authorization": f"Bearer {owner_token}"}
    ).json()["id"]

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect(f"/ws/documents/{document_id}?token={stranger_token}") as ws:
            ws.receive_json()
    assert exc_info.value.code == 4403

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect(f"/ws/documents/{document_id + 100}?token={owner_token}") as ws:
            ws.receive_json()
    assert exc_info.value.code == 4403


def test_public_document_viewer_receives_updates(ws_client):
    owner_token = register_and_login(ws_client, "alice")
    viewer_token = register_and_login(ws_client, "carol")
    document_id = ws_client.post(
        "/api/documents",
        json={"title": "Open", "content": "C1", "is_public": True},
        headers={"Authorization": f"Bearer {owner_token}"}
    ).json()["id"]

    with ws_client.websocket_connect(f"/ws/documents/{document_id}?token={owner_token}") as owner_ws:
        owner_ws.send_json({"type": "join", "documentId": document_id})
        assert owner_ws.receive_json()["type"] == "user_joined"

        with ws_client.websocket_connect(f"/ws/documents/{document_id}?token={viewer_token}") as viewer_ws:
            # Сообщения сокета обрабатываются только после подписки
            viewer_ws.send_json({"type": "leave", "documentId": document_id})
            assert viewer_ws.receive_json()["type"] == "user_left"
            assert owner_ws.receive_json()["type"] == "user_left"

            owner_ws.send_json({"type": "edit", "documentId": document_id, "content": "C2"})

            update = viewer_ws.receive_json()
            assert update["type"] == "content_update"
            assert update["content"] == "C2"
            assert owner_ws.receive_json()["type"] == "content_update"
