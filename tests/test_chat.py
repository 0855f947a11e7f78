"""
Test chat messages and their event fan-out.
"""

import json
import socket
import threading
import time

import httpx
import pytest
import uvicorn

from bmvt.services.chat_broadcaster import broadcaster
from bmvt.services.file_store import FileStore
from main import app


@pytest.fixture
def live_server():
    """Serve the app from a background uvicorn thread and yield its base URL."""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    config = uvicorn.Config(app, host="127.0.0.1", port=port, lifespan="off", log_config=None, log_level="warning")
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        assert time.monotonic() < deadline, "server did not start"
        time.sleep(0.05)

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=10)


def wait_for_count(channel, expected, timeout=5.0):
    deadline = time.monotonic() + timeout
    while broadcaster.count(channel) != expected and time.monotonic() < deadline:
        time.sleep(0.05)
    return broadcaster.count(channel)


@pytest.fixture
def subscribe():
    """Open in-process subscriptions and close them after the test."""
    opened = []

    def _subscribe(channel):
        subscriber = broadcaster.subscribe(channel)
        opened.append(subscriber)
        assert subscriber.queue.get_nowait().startswith("event: ready")
        return subscriber

    yield _subscribe
    for subscriber in opened:
        broadcaster.unsubscribe(subscriber)


def post_message(client, headers, **fields):
    response = client.post("/api/chat/messages", json={"channel": "intra", **fields}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["item"]


def read_event(subscriber) -> dict:
    frame = subscriber.queue.get_nowait()
    assert frame.startswith("data: ")
    return json.loads(frame[len("data: "):])


class TestMessages:
    def test_channels(self, client, agent_headers):
        response = client.get("/api/chat/channels", headers=agent_headers)

        assert response.json() == {"channels": ["intra", "encadreurs"]}

    def test_post_defaults_author_to_caller(self, client, agent_headers):
        item = post_message(client, agent_headers, text="  Salam  ")

        assert item["text"] == "Salam"
        assert item["author_id"] == 2000
        assert item["author_name"] == "agent@bmvt.sn"
        assert item["attachments"] == []

    def test_anonymous_post_requires_author_name(self, client):
        missing = client.post("/api/chat/messages", json={"channel": "intra", "text": "Salam"})
        named = client.post(
            "/api/chat/messages", json={"channel": "intra", "text": "Salam", "authorName": "Awa", "authorId": 12}
        )

        assert missing.status_code == 400
        assert missing.json()["message"] == "authorName requis."
        assert named.status_code == 201
        assert named.json()["item"]["author_name"] == "Awa"
        assert named.json()["item"]["author_id"] == 12

    def test_chat_is_open_without_token(self, client):
        item = post_message(client, {}, text="Bienvenue", authorName="Accueil")

        listing = client.get("/api/chat/messages", params={"channel": "intra"})

        assert item["author_id"] is None
        assert listing.status_code == 200
        assert [m["text"] for m in listing.json()["items"]] == ["Bienvenue"]

    def test_invalid_channel(self, client, agent_headers):
        response = client.post(
            "/api/chat/messages", json={"channel": "general", "text": "x"}, headers=agent_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Channel invalide."

    def test_empty_message(self, client, agent_headers):
        response = client.post(
            "/api/chat/messages", json={"channel": "intra", "text": "   "}, headers=agent_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Message vide."

    def test_attachments(self, client, agent_headers):
        response = client.post(
            "/api/chat/messages",
            data={"channel": "intra"},
            files=[
                ("files[]", ("photo.jpg", b"img", "image/jpeg")),
                ("files[]", ("liste.pdf", b"pdf", "application/pdf")),
            ],
            headers=agent_headers,
        )

        assert response.status_code == 201
        attachments = response.json()["item"]["attachments"]
        assert [a["type"] for a in attachments] == ["image", "file"]
        assert [a["name"] for a in attachments] == ["photo.jpg", "liste.pdf"]
        assert all(a["url"].startswith("/uploads/chat/") for a in attachments)

    def test_too_many_files(self, client, agent_headers):
        files = [("files", (f"f{i}.txt", b"x", "text/plain")) for i in range(11)]

        response = client.post(
            "/api/chat/messages", data={"channel": "intra"}, files=files, headers=agent_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Trop de fichiers (max 10)."

    def test_list_per_channel_oldest_first(self, client, agent_headers):
        first = post_message(client, agent_headers, text="un")
        second = post_message(client, agent_headers, text="deux")
        post_message(client, agent_headers, channel="encadreurs", text="autre")

        listing = client.get("/api/chat/messages", params={"channel": "intra"}, headers=agent_headers).json()
        newer = client.get(
            "/api/chat/messages", params={"channel": "intra", "afterId": first["id"]}, headers=agent_headers
        ).json()
        latest = client.get(
            "/api/chat/messages", params={"channel": "intra", "limit": 1}, headers=agent_headers
        ).json()

        assert [m["text"] for m in listing["items"]] == ["un", "deux"]
        assert [m["id"] for m in newer["items"]] == [second["id"]]
        assert [m["text"] for m in latest["items"]] == ["deux"]

    def test_list_requires_valid_channel(self, client, agent_headers):
        response = client.get("/api/chat/messages", headers=agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Paramètre 'channel' invalide."

    def test_update_appends_or_replaces_attachments(self, client, agent_headers):
        created = client.post(
            "/api/chat/messages",
            data={"channel": "intra", "text": "photos"},
            files=[("files", ("a.jpg", b"a", "image/jpeg"))],
            headers=agent_headers,
        ).json()["item"]
        url = f"/api/chat/messages/{created['id']}"
        first_file = FileStore("chat").resolve(created["attachments"][0]["url"])

        appended = client.put(
            url, data={"text": "photos"}, files=[("files", ("b.mp4", b"b", "video/mp4"))], headers=agent_headers
        ).json()
        replaced = client.put(
            url,
            data={"replaceAttachments": "true"},
            files=[("files", ("c.jpg", b"c", "image/jpeg"))],
            headers=agent_headers,
        ).json()

        assert appended["message"] == "Mise à jour effectuée"
        assert [a["name"] for a in appended["item"]["attachments"]] == ["a.jpg", "b.mp4"]
        assert appended["item"]["edited_at"] is not None
        assert [a["name"] for a in replaced["item"]["attachments"]] == ["c.jpg"]
        assert replaced["item"]["text"] == "photos"
        assert not first_file.exists()

    def test_soft_delete(self, client, agent_headers):
        message = client.post(
            "/api/chat/messages",
            data={"channel": "intra", "text": "à supprimer"},
            files=[("files", ("a.jpg", b"a", "image/jpeg"))],
            headers=agent_headers,
        ).json()["item"]
        stored = FileStore("chat").resolve(message["attachments"][0]["url"])
        url = f"/api/chat/messages/{message['id']}"

        deleted = client.delete(url, headers=agent_headers)
        again = client.delete(url, headers=agent_headers)
        edit = client.put(url, json={"text": "modifié"}, headers=agent_headers)
        listing = client.get("/api/chat/messages", params={"channel": "intra"}, headers=agent_headers).json()
        fetched = client.get(url, headers=agent_headers).json()

        assert deleted.json() == {"message": "Supprimé", "affectedRows": 1}
        assert again.status_code == 400
        assert again.json()["message"] == "Déjà supprimé."
        assert edit.status_code == 400
        assert listing["total"] == 0
        assert fetched["deleted_at"] is not None
        assert fetched["attachments"] == []
        assert not stored.exists()

    def test_missing_message(self, client, agent_headers):
        response = client.delete("/api/chat/messages/999", headers=agent_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Message introuvable"


class TestEvents:
    def test_new_message_reaches_its_channel_only(self, client, agent_headers, subscribe):
        intra = subscribe("intra")
        encadreurs = subscribe("encadreurs")

        item = post_message(client, agent_headers, text="Départ à 10h")

        event = read_event(intra)
        assert event["type"] == "message:new"
        assert event["item"] == item
        assert intra.queue.empty()
        assert encadreurs.queue.empty()

    def test_update_and_delete_events(self, client, agent_headers, subscribe):
        item = post_message(client, agent_headers, text="v1")
        intra = subscribe("intra")

        client.put(f"/api/chat/messages/{item['id']}", json={"text": "v2"}, headers=agent_headers)
        client.delete(f"/api/chat/messages/{item['id']}", headers=agent_headers)

        updated = read_event(intra)
        deleted = read_event(intra)
        assert updated["type"] == "message:update"
        assert updated["item"]["text"] == "v2"
        assert deleted == {"type": "message:delete", "id": item["id"]}

    def test_ping_reaches_every_channel(self, subscribe):
        intra = subscribe("intra")
        encadreurs = subscribe("encadreurs")

        assert broadcaster.ping() == 2
        assert intra.queue.get_nowait().startswith("event: ping")
        assert encadreurs.queue.get_nowait().startswith("event: ping")

    def test_stream_rejects_invalid_channel(self, client, agent_headers):
        response = client.get("/api/chat/stream", params={"channel": "general"}, headers=agent_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Paramètre 'channel' invalide."

    def test_unsubscribe(self):
        subscriber = broadcaster.subscribe("intra")
        before = broadcaster.count("intra")

        broadcaster.unsubscribe(subscriber)

        assert broadcaster.count("intra") == before - 1


class TestStream:
    def test_stream_over_http(self, live_server):
        before = broadcaster.count("intra")

        with httpx.Client(base_url=live_server, timeout=5) as http:
            with http.stream("GET", "/api/chat/stream", params={"channel": "intra"}) as response:
                assert response.status_code == 200
                assert response.headers["content-type"].startswith("text/event-stream")
                lines = response.iter_lines()

                assert next(lines) == "event: ready"
                assert json.loads(next(lines)[len("data: "):]) == {"ok": True}
                assert next(lines) == ""
                assert broadcaster.count("intra") == before + 1

                posted = http.post(
                    "/api/chat/messages", json={"channel": "intra", "text": "Salam", "authorName": "Awa"}
                )
                assert posted.status_code == 201
                item = posted.json()["item"]

                created = json.loads(next(lines)[len("data: "):])
                assert created == {"type": "message:new", "item": item}
                assert next(lines) == ""

                assert http.delete(f"/api/chat/messages/{item['id']}").status_code == 200
                deleted = json.loads(next(lines)[len("data: "):])
                assert deleted == {"type": "message:delete", "id": item["id"]}

        assert wait_for_count("intra", before) == before

    def test_invalid_channel_opens_no_subscription(self, live_server):
        before = broadcaster.count()

        response = httpx.get(f"{live_server}/api/chat/stream", params={"channel": "general"}, timeout=5)

        assert response.status_code == 400
        assert broadcaster.count() == before
