from typing import Optional

from resource_server.services.auth_service import create_access_token


def auth_headers(user_id: str, username: Optional[str] = None) -> dict:
    token = create_access_token(user_id, username=username)
    return {"Authorization": f"Bearer {token}"}


def song_payload(song_num: int, audio_id: int = 1) -> dict:
    return {
        "songNum": song_num,
        "audioId": audio_id,
        "streamUrl": f"https://cdn.example.com/audio/{audio_id}.mp3",
        "stageDirectionId": 100 + song_num,
    }


def accessory_payload(socket_name: str = "hand_r", model_url: str = "https://cdn.example.com/models/mic.glb") -> dict:
    return {
        "socketName": socket_name,
        "relativeLocation": {"x": 1.0, "y": 0.0, "z": 2.5},
        "relativeRotation": {"pitch": 0.0, "yaw": 90.0, "roll": 0.0},
        "modelUrl": model_url,
    }


def concert_data(studio_user_id=1, concert_name: str = "T", max_audience: int = 2, **extra) -> dict:
    data = {
        "studioUserId": studio_user_id,
        "studioName": "Studio",
        "concertName": concert_name,
        "maxAudience": max_audience,
    }
    data.update(extra)
    return data
