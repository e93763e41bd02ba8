from typing import List, Optional

from pydantic import Field, PositiveInt

from resource_server.services.concert.models import (
    ConcertModel,
    Room,
    Song,
    NowPlaying,
    Accessory,
    ListenServerEndpoint,
)


# === Requests ===

class CreateConcertRequest(ConcertModel):
    concert_name: str = Field(..., min_length=1)
    songs: List[Song] = Field(default_factory=list)
    accessories: List[Accessory] = Field(default_factory=list)
    max_audience: Optional[PositiveInt] = None
    is_open: bool = False
    listen_server: Optional[ListenServerEndpoint] = None


class ChangeSongRequest(ConcertModel):
    song_num: int


class ReplaceAccessoriesRequest(ConcertModel):
    accessories: List[Accessory]


class ToggleOpenRequest(ConcertModel):
    is_open: bool


# === Responses ===

class ApiResponse(ConcertModel):
    success: bool = True
    message: Optional[str] = None


class CreateConcertResponse(ApiResponse):
    room_id: str
    expires_in: int


class ConcertListResponse(ApiResponse):
    count: int
    concerts: List[Room]


class ConcertInfoResponse(ApiResponse):
    concert: Room


class JoinedConcert(ConcertModel):
    concert_name: str
    studio_name: Optional[str]
    songs: List[Song]
    current_song: Optional[int]
    current_audience: int
    max_audience: int
    listen_server: Optional[ListenServerEndpoint]


class JoinConcertResponse(ApiResponse):
    concert: JoinedConcert


class LeaveConcertResponse(ApiResponse):
    was_member: bool


class SongsResponse(ApiResponse):
    songs: List[Song]
    current_song: Optional[int]


class ChangeSongResponse(ApiResponse):
    current_song: Optional[int]


class CurrentSongResponse(ApiResponse):
    current_song: NowPlaying


class AccessoriesResponse(ApiResponse):
    accessories: List[Accessory]


class ListenServerResponse(ApiResponse):
    listen_server: Optional[ListenServerEndpoint]


class ToggleOpenResponse(ApiResponse):
    is_open: bool


class DestroyConcertResponse(ApiResponse):
    room_id: str


class ExpireAllResponse(ApiResponse):
    expired_count: int
    expired_rooms: List[str]
