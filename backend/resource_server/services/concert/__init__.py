"""
Concert Session Module

Re-exports the coordinator, its store/registry glue, value types and
exceptions.
"""
from resource_server.services.protocols import Admission

from .service import ConcertService, info_key, audience_key
from .store import RedisSessionStore
from .registry import RoomRegistry
from .models import (
    Room,
    Song,
    NowPlaying,
    Accessory,
    Vector3,
    Rotator,
    ListenServerEndpoint,
    CreatedRoom,
    ExpireAllResult,
)
from .exceptions import (
    ConcertServiceError,
    NotFoundError,
    ConflictError,
    InvalidStateError,
    ValidationError,
    InfrastructureError,
    OperationNotAllowedError,
    RoomNotFoundError,
    SongNotFoundError,
    DuplicateSongError,
    ConcurrentModificationError,
    RoomClosedError,
    RoomFullError,
    RoomOpenError,
    NoCurrentSongError,
    InconsistentRoomError,
    InvalidAccessoryIndexError,
    InvalidListenServerError,
    SessionStoreUnavailableError,
)

__all__ = [
    "ConcertService",
    "RedisSessionStore",
    "RoomRegistry",
    "Admission",
    "info_key",
    "audience_key",
    "Room",
    "Song",
    "NowPlaying",
    "Accessory",
    "Vector3",
    "Rotator",
    "ListenServerEndpoint",
    "CreatedRoom",
    "ExpireAllResult",
    "ConcertServiceError",
    "NotFoundError",
    "ConflictError",
    "InvalidStateError",
    "ValidationError",
    "InfrastructureError",
    "OperationNotAllowedError",
    "RoomNotFoundError",
    "SongNotFoundError",
    "DuplicateSongError",
    "ConcurrentModificationError",
    "RoomClosedError",
    "RoomFullError",
    "RoomOpenError",
    "NoCurrentSongError",
    "InconsistentRoomError",
    "InvalidAccessoryIndexError",
    "InvalidListenServerError",
    "SessionStoreUnavailableError",
]
