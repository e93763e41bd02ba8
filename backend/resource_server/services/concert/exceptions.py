"""
Concert Service Exceptions

Typed failures raised by the session store, the room registry and the
concert coordinator. The HTTP layer maps them by category.
"""


class ConcertServiceError(Exception):
    """Base exception for concert service errors"""
    pass


# === Categories ===

class NotFoundError(ConcertServiceError):
    """Room, song or referenced resource is absent or expired"""
    pass


class ConflictError(ConcertServiceError):
    """Request conflicts with the current room state"""
    pass


class InvalidStateError(ConcertServiceError):
    """Operation is not allowed in the room's current state"""
    pass


class ValidationError(ConcertServiceError):
    """Malformed argument (index out of range, missing field)"""
    pass


class InfrastructureError(ConcertServiceError):
    """Session store unreachable or timed out"""
    pass


class OperationNotAllowedError(ConcertServiceError):
    """Operation disabled for the current deployment environment"""
    pass


# === Concrete errors ===

class RoomNotFoundError(NotFoundError):
    """Raised when the concert room does not exist or has expired"""

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Concert {room_id} not found or expired")


class SongNotFoundError(NotFoundError):
    """Raised when a song number is not in the playlist"""

    def __init__(self, song_num: int):
        self.song_num = song_num
        super().__init__(f"Song number {song_num} not found")


class DuplicateSongError(ConflictError):
    """Raised when a song number is already in the playlist"""

    def __init__(self, song_num: int):
        self.song_num = song_num
        super().__init__(f"Song number {song_num} already exists")


class ConcurrentModificationError(ConflictError):
    """Raised when the room changed between read and write. Safe to retry."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Concurrent modification of {key}, retry the request")


class RoomClosedError(InvalidStateError):
    """Raised when joining a room that is not open"""
    pass


class RoomFullError(InvalidStateError):
    """Raised when the audience has reached maxAudience"""
    pass


class RoomOpenError(InvalidStateError):
    """Raised when editing accessories while the room is open"""
    pass


class NoCurrentSongError(InvalidStateError):
    """Raised when no song is currently selected"""
    pass


class InconsistentRoomError(InvalidStateError):
    """Raised when currentSong references a song missing from the playlist"""
    pass


class InvalidAccessoryIndexError(ValidationError):
    """Raised when an accessory index is outside [0, length)"""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Invalid accessory index: {index} (room has {length} accessories)")


class InvalidListenServerError(ValidationError):
    """Raised when a listen server endpoint lacks localIP or port"""
    pass


class SessionStoreUnavailableError(InfrastructureError):
    """Raised when Redis cannot be reached or a command times out"""
    pass
