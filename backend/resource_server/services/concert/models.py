"""
Concert Models

Typed values stored in the session store. Field names are camelCase on the
wire and in Redis, snake_case in Python.
"""
from typing import List, Optional, Union
import time

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, field_validator
from pydantic.alias_generators import to_camel

from resource_server.config.constants import DEFAULT_MAX_AUDIENCE
from .exceptions import (
    DuplicateSongError,
    SongNotFoundError,
    RoomOpenError,
    NoCurrentSongError,
    InconsistentRoomError,
    InvalidAccessoryIndexError,
)

UserId = Union[int, str]


def now_ms() -> int:
    return int(time.time() * 1000)


class ConcertModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Vector3(ConcertModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Rotator(ConcertModel):
    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0


class Song(ConcertModel):
    """A playlist entry. Replaced only by remove + add."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    song_num: int
    audio_id: Union[int, str]
    stream_url: str
    stage_direction_id: Union[int, str]


class NowPlaying(Song):
    concert_name: str
    studio_name: Optional[str] = None


class Accessory(ConcertModel):
    socket_name: str
    relative_location: Vector3
    relative_rotation: Rotator
    relative_scale: Optional[Vector3] = None
    model_url: str


class ListenServerEndpoint(ConcertModel):
    """Connection info for the studio's real-time listen server."""

    local_ip: str = Field(alias="localIP", min_length=1)
    port: int = Field(ge=1, le=65535)
    public_ip: Optional[str] = Field(None, alias="publicIP")
    public_port: Optional[int] = Field(None, ge=1, le=65535)

    @field_validator("public_ip", "public_port", mode="before")
    @classmethod
    def _blank_as_none(cls, value):
        return value or None


class Room(ConcertModel):
    """
    A concert session.

    Invariants kept by the mutators below:
    - songs sorted ascending and unique by song_num
    - current_song is None or the song_num of an entry in songs
    - current_audience is the size of the membership set. It is never
      stored in the document and is filled in on every read.
    """

    room_id: str
    studio_user_id: UserId
    studio_name: Optional[str] = None
    concert_name: str
    songs: List[Song] = Field(default_factory=list)
    accessories: List[Accessory] = Field(default_factory=list)
    max_audience: PositiveInt = DEFAULT_MAX_AUDIENCE
    current_audience: NonNegativeInt = 0
    current_song: Optional[int] = None
    is_open: bool = False
    listen_server: Optional[ListenServerEndpoint] = None
    created_at: int = Field(default_factory=now_ms)

    @field_validator("songs")
    @classmethod
    def _sort_songs(cls, songs: List[Song]) -> List[Song]:
        return sorted(songs, key=lambda s: s.song_num)

    @classmethod
    def create(cls, room_id: str, data: dict) -> "Room":
        """Build a fresh room with the first song selected. Audience starts empty."""
        seen = set()
        for song in data.get("songs") or []:
            num = song.song_num if isinstance(song, Song) else song.get("songNum", song.get("song_num"))
            if num in seen:
                raise DuplicateSongError(num)
            seen.add(num)

        fields = {k: v for k, v in data.items() if v is not None}
        fields.pop("roomId", None)
        fields.pop("room_id", None)
        room = cls.model_validate({**fields, "room_id": room_id})
        room.current_audience = 0
        room.current_song = room.songs[0].song_num if room.songs else None
        return room

    # === Serialization ===

    @classmethod
    def from_document(cls, raw: str, audience: int = 0) -> "Room":
        room = cls.model_validate_json(raw)
        room.current_audience = audience
        return room

    def to_document(self) -> str:
        return self.model_dump_json(by_alias=True, exclude={"current_audience"})

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    # === Playlist ===

    def find_song(self, song_num: int) -> Optional[Song]:
        return next((s for s in self.songs if s.song_num == song_num), None)

    def add_song(self, song: Song):
        if self.find_song(song.song_num) is not None:
            raise DuplicateSongError(song.song_num)
        self.songs = sorted([*self.songs, song], key=lambda s: s.song_num)
        if self.current_song is None:
            self.current_song = song.song_num

    def remove_song(self, song_num: int):
        song = self.find_song(song_num)
        if song is None:
            raise SongNotFoundError(song_num)
        self.songs = [s for s in self.songs if s.song_num != song_num]
        if self.current_song == song_num:
            self.current_song = self.songs[0].song_num if self.songs else None

    def select_song(self, song_num: int):
        if self.find_song(song_num) is None:
            raise SongNotFoundError(song_num)
        self.current_song = song_num

    def now_playing(self) -> NowPlaying:
        if self.current_song is None:
            raise NoCurrentSongError("No song is currently playing")
        song = self.find_song(self.current_song)
        if song is None:
            raise InconsistentRoomError(f"Current song {self.current_song} not found in song list")
        return NowPlaying(
            **song.model_dump(),
            concert_name=self.concert_name,
            studio_name=self.studio_name,
        )

    # === Accessories (frozen while the show is open) ===

    def _ensure_editable(self, action: str):
        if self.is_open:
            raise RoomOpenError(f"Cannot {action} while concert is open")

    def add_accessory(self, accessory: Accessory):
        self._ensure_editable("add accessory")
        self.accessories.append(accessory)

    def remove_accessory(self, index: int):
        self._ensure_editable("remove accessory")
        if index < 0 or index >= len(self.accessories):
            raise InvalidAccessoryIndexError(index, len(self.accessories))
        del self.accessories[index]

    def replace_accessories(self, accessories: List[Accessory]):
        self._ensure_editable("update accessories")
        self.accessories = list(accessories)


class CreatedRoom(ConcertModel):
    room_id: str
    expires_in: int


class ExpireAllResult(ConcertModel):
    expired_count: int
    expired_rooms: List[str]
