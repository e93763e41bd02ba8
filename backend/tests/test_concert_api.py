import pytest

from resource_server.config.settings import settings
from tests.helpers import auth_headers, song_payload, accessory_payload


STUDIO = auth_headers("1", username="Studio One")
FAN_A = auth_headers("100", username="fan-a")
FAN_B = auth_headers("200", username="fan-b")


def create_concert(client, headers=STUDIO, **body):
    payload = {"concertName": "Live Night", "maxAudience": 2}
    payload.update(body)
    r = client.post("/api/concert/create", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["roomId"]


def test_create_concert(client):
    r = client.post(
        "/api/concert/create",
        json={"concertName": "Live Night", "songs": [song_payload(2), song_payload(1)]},
        headers=STUDIO,
    )

    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["expiresIn"] == 7200
    assert data["roomId"].startswith("concert_")
    assert len(data["roomId"].split("_")[2]) == 9

    info = client.get(f"/api/concert/{data['roomId']}/info", headers=FAN_A).json()["concert"]
    assert info["studioUserId"] == "1"
    assert info["studioName"] == "Studio One"
    assert info["maxAudience"] == 100
    assert info["currentAudience"] == 0
    assert info["isOpen"] is False
    assert info["currentSong"] == 1
    assert [s["songNum"] for s in info["songs"]] == [1, 2]


def test_create_requires_concert_name(client):
    r = client.post("/api/concert/create", json={"maxAudience": 5}, headers=STUDIO)

    assert r.status_code == 400
    assert r.json()["error"] == "VALIDATION_ERROR"


def test_requires_bearer_token(client):
    r = client.get("/api/concert/list")
    assert r.status_code == 401
    assert r.json()["error"] == "NO_AUTH_HEADER"

    r = client.get("/api/concert/list", headers={"Authorization": "Token abc"})
    assert r.status_code == 401
    assert r.json()["error"] == "INVALID_AUTH_FORMAT"

    r = client.get("/api/concert/list", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["error"] == "INVALID_TOKEN"


def test_development_token(client, monkeypatch):
    monkeypatch.setattr(settings, "DEV_AUTH_TOKEN", "dev-token")
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")

    r = client.post(
        "/api/concert/create",
        json={"concertName": "Dev"},
        headers={"Authorization": "Bearer dev-token"},
    )
    assert r.status_code == 200
    room_id = r.json()["roomId"]
    info = client.get(f"/api/concert/{room_id}/info", headers=FAN_A).json()["concert"]
    assert info["studioUserId"] == "dev-user-01"

    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    r = client.get("/api/concert/list", headers={"Authorization": "Bearer dev-token"})
    assert r.status_code == 401


def test_join_flow(client):
    room_id = create_concert(client, maxAudience=1)

    r = client.post(f"/api/concert/{room_id}/join", headers=FAN_A)
    assert r.status_code == 409
    assert r.json()["error"] == "CONCERT_NOT_OPEN"

    r = client.post(f"/api/concert/{room_id}/toggle-open", json={"isOpen": True}, headers=STUDIO)
    assert r.status_code == 200
    assert r.json()["isOpen"] is True

    r = client.post(f"/api/concert/{room_id}/join", headers=FAN_A)
    assert r.status_code == 200
    concert = r.json()["concert"]
    assert concert["concertName"] == "Live Night"
    assert concert["currentAudience"] == 1

    r = client.post(f"/api/concert/{room_id}/join", headers=FAN_B)
    assert r.status_code == 409
    assert r.json()["error"] == "CONCERT_FULL"

    r = client.post(f"/api/concert/{room_id}/leave", headers=FAN_A)
    assert r.status_code == 200
    assert r.json()["wasMember"] is True

    r = client.post(f"/api/concert/{room_id}/join", headers=FAN_B)
    assert r.status_code == 200


def test_join_unknown_concert(client):
    r = client.post("/api/concert/concert_0_missing/join", headers=FAN_A)

    assert r.status_code == 404
    assert r.json()["error"] == "CONCERT_NOT_FOUND"


def test_studio_only_routes(client):
    room_id = create_concert(client)

    checks = [
        ("post", f"/api/concert/{room_id}/songs/add", song_payload(1)),
        ("delete", f"/api/concert/{room_id}/songs/1", None),
        ("post", f"/api/concert/{room_id}/songs/change", {"songNum": 1}),
        ("post", f"/api/concert/{room_id}/accessories/add", accessory_payload()),
        ("delete", f"/api/concert/{room_id}/accessories/0", None),
        ("put", f"/api/concert/{room_id}/accessories", {"accessories": []}),
        ("post", f"/api/concert/{room_id}/listen-server", {"localIP": "10.0.0.2", "port": 7777}),
        ("post", f"/api/concert/{room_id}/toggle-open", {"isOpen": True}),
        ("delete", f"/api/concert/{room_id}", None),
    ]
    for method, url, body in checks:
        kwargs = {"headers": FAN_A}
        if body is not None:
            kwargs["json"] = body
        r = client.request(method.upper(), url, **kwargs)
        assert r.status_code == 403, url
        assert r.json()["error"] == "PERMISSION_DENIED"


def test_playlist_management(client):
    room_id = create_concert(client)

    r = client.post(f"/api/concert/{room_id}/songs/add", json=song_payload(2), headers=STUDIO)
    assert r.status_code == 200
    assert r.json()["currentSong"] == 2

    client.post(f"/api/concert/{room_id}/songs/add", json=song_payload(1), headers=STUDIO)
    r = client.post(f"/api/concert/{room_id}/songs/add", json=song_payload(1), headers=STUDIO)
    assert r.status_code == 409
    assert r.json()["error"] == "DUPLICATE_SONG"

    r = client.post(f"/api/concert/{room_id}/songs/change", json={"songNum": 5}, headers=STUDIO)
    assert r.status_code == 404
    assert r.json()["error"] == "SONG_NOT_FOUND"

    r = client.delete(f"/api/concert/{room_id}/songs/2", headers=STUDIO)
    assert r.status_code == 200
    assert [s["songNum"] for s in r.json()["songs"]] == [1]
    assert r.json()["currentSong"] == 1


def test_current_song_requires_membership(client):
    room_id = create_concert(client, songs=[song_payload(1)])

    r = client.get(f"/api/concert/{room_id}/current-song", headers=FAN_A)
    assert r.status_code == 403
    assert r.json()["error"] == "ACCESS_DENIED"

    client.post(f"/api/concert/{room_id}/toggle-open", json={"isOpen": True}, headers=STUDIO)
    client.post(f"/api/concert/{room_id}/join", headers=FAN_A)

    r = client.get(f"/api/concert/{room_id}/current-song", headers=FAN_A)
    assert r.status_code == 200
    current = r.json()["currentSong"]
    assert current["songNum"] == 1
    assert current["concertName"] == "Live Night"
    assert current["studioName"] == "Studio One"


def test_accessories_frozen_while_open(client):
    room_id = create_concert(client)

    r = client.post(f"/api/concert/{room_id}/accessories/add", json=accessory_payload(), headers=STUDIO)
    assert r.status_code == 200
    assert len(r.json()["accessories"]) == 1

    r = client.delete(f"/api/concert/{room_id}/accessories/3", headers=STUDIO)
    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_ACCESSORY_INDEX"

    client.post(f"/api/concert/{room_id}/toggle-open", json={"isOpen": True}, headers=STUDIO)

    r = client.put(f"/api/concert/{room_id}/accessories", json={"accessories": []}, headers=STUDIO)
    assert r.status_code == 409
    assert r.json()["error"] == "CONCERT_OPEN"


def test_listen_server(client):
    room_id = create_concert(client)

    r = client.post(
        f"/api/concert/{room_id}/listen-server",
        json={"localIP": "192.168.1.5", "port": 7777},
        headers=STUDIO,
    )
    assert r.status_code == 200
    assert r.json()["listenServer"] == {"localIP": "192.168.1.5", "port": 7777, "publicIP": None, "publicPort": None}

    r = client.post(f"/api/concert/{room_id}/listen-server", json={"port": 7777}, headers=STUDIO)
    assert r.status_code == 400


def test_list_and_destroy(client):
    first = create_concert(client, concertName="First")
    second = create_concert(client, headers=FAN_B, concertName="Second")

    r = client.get("/api/concert/list", headers=FAN_A)
    assert r.status_code == 200
    assert r.json()["count"] == 2
    assert {c["roomId"] for c in r.json()["concerts"]} == {first, second}

    r = client.delete(f"/api/concert/{first}", headers=STUDIO)
    assert r.status_code == 200

    r = client.get(f"/api/concert/{first}/info", headers=FAN_A)
    assert r.status_code == 404
    r = client.get("/api/concert/list", headers=FAN_A)
    assert [c["roomId"] for c in r.json()["concerts"]] == [second]


def test_expire_all(client, service, monkeypatch):
    create_concert(client)
    create_concert(client)

    r = client.post("/api/concert/expire-all", headers=FAN_A)
    assert r.status_code == 200
    assert r.json()["expiredCount"] == 2

    monkeypatch.setattr(service, "production", True)
    r = client.post("/api/concert/expire-all", headers=FAN_A)
    assert r.status_code == 403
    assert r.json()["error"] == "OPERATION_NOT_ALLOWED"


def test_health(client):
    r = client.get("/health/resource")
    assert r.status_code == 200
    assert r.json()["redis"] == "connected"

    r = client.get("/api/health")
    assert r.json()["status"] == "ok"


def test_environment_flags(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "Production")
    assert settings.is_production is True
    assert settings.is_development is False

    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    assert settings.is_production is False
    assert settings.is_development is True
