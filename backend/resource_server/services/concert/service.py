"""
Concert Service - Session Coordinator

Owns every read and write of concert room documents and audience sets:
- Room lifecycle (create, destroy, bulk expire)
- Audience membership (join, leave, access check)
- Playlist, accessories, listen server and open gate

The coordinator performs no authentication or authorization. The HTTP layer
compares the caller's identity with Room.studio_user_id before owner-only
operations, and uses verify_access before participant-only reads.

Concurrency model:
- Membership lives only in the audience set. Room.current_audience is its
  SCARD, read alongside the document, so it cannot drift from the set.
- Joins go through a capacity-checked insert that is atomic in the store
  and retried there until it commits. Audience traffic never writes the
  room document.
- Room fields are changed by whole-document read-modify-write under a
  Redis WATCH. A room is edited by one studio, which is not expected to
  send conflicting edits concurrently; if it does, the second writer gets
  ConcurrentModificationError instead of silently overwriting the first.
"""
import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from resource_server.config.constants import (
    CONCERT_SESSION_TTL_SEC,
    CONCERT_INFO_KEY,
    CONCERT_AUDIENCE_KEY,
    DEFAULT_CONCERT_LIST_LIMIT,
)
from resource_server.services.protocols import Admission, SessionStoreProtocol
from resource_server.services.metrics import rooms_created, rooms_destroyed, audience_joins

from .exceptions import (
    RoomNotFoundError,
    RoomClosedError,
    RoomFullError,
    ValidationError,
    InvalidListenServerError,
    OperationNotAllowedError,
)
from .models import (
    Room,
    Song,
    NowPlaying,
    Accessory,
    ListenServerEndpoint,
    CreatedRoom,
    ExpireAllResult,
    UserId,
)
from .registry import RoomRegistry

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def info_key(room_id: str) -> str:
    return CONCERT_INFO_KEY.format(room_id=room_id)


def audience_key(room_id: str) -> str:
    return CONCERT_AUDIENCE_KEY.format(room_id=room_id)


def _coerce(model: Type[M], value: Union[M, dict], error: Type[ValidationError] = ValidationError) -> M:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except PydanticValidationError as e:
        raise error(f"Invalid {model.__name__}: {e}") from e


class ConcertService:
    """Coordinator for concert sessions held in a SessionStoreProtocol."""

    SESSION_TTL = CONCERT_SESSION_TTL_SEC

    def __init__(
        self,
        store: SessionStoreProtocol,
        registry: Optional[RoomRegistry] = None,
        production: bool = False,
    ):
        self.store = store
        self.registry = registry or RoomRegistry(store)
        self.production = production

    # === Internal helpers ===

    async def _load(self, room_id: str) -> Optional[Room]:
        raw, audience = await asyncio.gather(
            self.store.get_document(info_key(room_id)),
            self.store.count_members(audience_key(room_id)),
        )
        if raw is None:
            return None
        return Room.from_document(raw, audience)

    async def _require(self, room_id: str) -> Room:
        room = await self._load(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    async def _update(self, room_id: str, mutate: Callable[[Room], None]) -> Room:
        """Read-modify-write a room, keeping its remaining TTL."""

        def transform(raw: str) -> str:
            room = Room.from_document(raw)
            mutate(room)
            return room.to_document()

        written = await self.store.update_document(info_key(room_id), transform, self.SESSION_TTL)
        if written is None:
            raise RoomNotFoundError(room_id)
        audience = await self.store.count_members(audience_key(room_id))
        return Room.from_document(written, audience)

    async def _remaining_ttl(self, room_id: str) -> int:
        ttl = await self.store.ttl(info_key(room_id))
        return ttl if ttl > 0 else self.SESSION_TTL

    # === Lifecycle ===

    async def create(self, room_id: str, data: dict) -> CreatedRoom:
        """
        Store a new room and register it for discovery.

        Args:
            room_id: Caller-generated opaque id
            data: Room fields (studioUserId, studioName, concertName, songs,
                  accessories, maxAudience, isOpen, listenServer, createdAt)

        Returns:
            CreatedRoom with the room id and its lifetime in seconds
        """
        try:
            room = Room.create(room_id, data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid concert data: {e}") from e

        await self.store.put_document(info_key(room_id), room.to_document(), self.SESSION_TTL)
        await self.registry.register(room_id, room.created_at)
        rooms_created.inc()

        logger.info(
            f"[Concert] Created {room_id} '{room.concert_name}' by {room.studio_user_id} "
            f"(songs={len(room.songs)}, maxAudience={room.max_audience}, open={room.is_open})"
        )
        return CreatedRoom(room_id=room_id, expires_in=self.SESSION_TTL)

    async def destroy(self, room_id: str) -> str:
        """Delete the room document, its audience set and its registry entry."""
        if await self.store.get_document(info_key(room_id)) is None:
            raise RoomNotFoundError(room_id)

        await asyncio.gather(
            self.store.delete(info_key(room_id)),
            self.store.delete(audience_key(room_id)),
            self.registry.unregister(room_id),
        )
        rooms_destroyed.labels(reason="destroy").inc()
        logger.info(f"[Concert] Destroyed {room_id}")
        return room_id

    async def expire_all(self) -> ExpireAllResult:
        """Tear down every registered room. Refused in production."""
        if self.production:
            logger.warning("[Concert] expire_all rejected in production")
            raise OperationNotAllowedError("Bulk expiration is disabled in production")

        room_ids = await self.registry.all_ids()
        if room_ids:
            keys = [k for rid in room_ids for k in (info_key(rid), audience_key(rid))]
            await self.store.delete(*keys)
        await self.registry.clear()

        rooms_destroyed.labels(reason="expire_all").inc(len(room_ids))
        logger.info(f"[Concert] Expired {len(room_ids)} room(s)")
        return ExpireAllResult(expired_count=len(room_ids), expired_rooms=room_ids)

    # === Queries ===

    async def get_info(self, room_id: str) -> Room:
        return await self._require(room_id)

    async def list_active(self, limit: int = DEFAULT_CONCERT_LIST_LIMIT) -> List[Room]:
        """
        Most recently created rooms first, open and closed alike.

        The registry is read a page at a time. Ids whose document has expired
        are removed from it, which shifts the following ids down by as many
        positions.
        """
        if limit <= 0:
            return []

        rooms: List[Room] = []
        offset = 0
        while len(rooms) < limit:
            room_ids = await self.registry.recent(limit=limit, offset=offset)
            if not room_ids:
                break

            documents, audiences = await asyncio.gather(
                self.store.get_documents([info_key(rid) for rid in room_ids]),
                self.store.count_members_many([audience_key(rid) for rid in room_ids]),
            )

            stale: List[str] = []
            for room_id, raw, audience in zip(room_ids, documents, audiences):
                if raw is None:
                    stale.append(room_id)
                else:
                    rooms.append(Room.from_document(raw, audience))

            if stale:
                await self.registry.unregister(*stale)
                rooms_destroyed.labels(reason="stale").inc(len(stale))
                logger.info(f"[Concert] Pruned {len(stale)} expired room(s) from registry")

            if len(room_ids) < limit:
                break
            offset += len(room_ids) - len(stale)

        return rooms[:limit]

    async def verify_access(self, room_id: str, participant_id: UserId) -> bool:
        return await self.store.is_member(audience_key(room_id), str(participant_id))

    async def get_current_song(self, room_id: str) -> NowPlaying:
        room = await self._require(room_id)
        return room.now_playing()

    # === Audience ===

    async def join(self, room_id: str, participant_id: UserId) -> Room:
        """
        Add a participant to an open room with free capacity.

        Re-joining is a no-op, and a current member re-joining a full room
        succeeds. The capacity check and the insertion are a single atomic
        step in the store.
        """
        member = str(participant_id)
        room = await self._require(room_id)

        if not room.is_open:
            audience_joins.labels(result="closed").inc()
            raise RoomClosedError(f"Concert {room_id} is not open for joining")

        ttl = await self._remaining_ttl(room_id)
        outcome = await self.store.add_member_capped(
            audience_key(room_id), member, capacity=room.max_audience, ttl=ttl
        )

        if outcome is Admission.FULL:
            audience_joins.labels(result="full").inc()
            raise RoomFullError(f"Concert {room_id} is full (maxAudience={room.max_audience})")

        if outcome is Admission.PRESENT:
            audience_joins.labels(result="rejoined").inc()
            logger.debug(f"[Concert] {member} already in {room_id}")
        else:
            audience_joins.labels(result="joined").inc()

        room.current_audience = await self.store.count_members(audience_key(room_id))
        logger.debug(f"[Concert] {member} joined {room_id} ({room.current_audience}/{room.max_audience})")
        return room

    async def leave(self, room_id: str, participant_id: UserId) -> bool:
        """Remove a participant. Returns whether they were a member."""
        member = str(participant_id)
        was_member = await self.store.remove_member(audience_key(room_id), member)
        if was_member:
            logger.debug(f"[Concert] {member} left {room_id}")
        return was_member

    # === Playlist ===

    async def add_song(self, room_id: str, song: Union[Song, dict]) -> Room:
        song = _coerce(Song, song)
        room = await self._update(room_id, lambda r: r.add_song(song))
        logger.info(f"[Concert] Added song {song.song_num} to {room_id}")
        return room

    async def remove_song(self, room_id: str, song_num: int) -> Room:
        room = await self._update(room_id, lambda r: r.remove_song(song_num))
        logger.info(f"[Concert] Removed song {song_num} from {room_id} (current={room.current_song})")
        return room

    async def change_song(self, room_id: str, song_num: int) -> Room:
        room = await self._update(room_id, lambda r: r.select_song(song_num))
        logger.info(f"[Concert] {room_id} now playing song {song_num}")
        return room

    # === Accessories ===

    async def add_accessory(self, room_id: str, accessory: Union[Accessory, dict]) -> Room:
        accessory = _coerce(Accessory, accessory)
        room = await self._update(room_id, lambda r: r.add_accessory(accessory))
        logger.info(f"[Concert] Added accessory '{accessory.socket_name}' to {room_id}")
        return room

    async def remove_accessory(self, room_id: str, index: int) -> Room:
        room = await self._update(room_id, lambda r: r.remove_accessory(index))
        logger.info(f"[Concert] Removed accessory #{index} from {room_id}")
        return room

    async def replace_accessories(self, room_id: str, accessories: Iterable[Union[Accessory, dict]]) -> Room:
        items = [_coerce(Accessory, a) for a in accessories]
        room = await self._update(room_id, lambda r: r.replace_accessories(items))
        logger.info(f"[Concert] Replaced accessories of {room_id} ({len(items)} total)")
        return room

    # === Listen server & gate ===

    async def update_listen_server(self, room_id: str, endpoint: Union[ListenServerEndpoint, dict]) -> Room:
        endpoint = _coerce(ListenServerEndpoint, endpoint, InvalidListenServerError)

        def apply(room: Room):
            room.listen_server = endpoint

        room = await self._update(room_id, apply)
        logger.info(f"[Concert] Listen server for {room_id}: {endpoint.local_ip}:{endpoint.port}")
        return room

    async def toggle_open(self, room_id: str, is_open: bool) -> Room:
        def apply(room: Room):
            room.is_open = is_open

        room = await self._update(room_id, apply)
        logger.info(f"[Concert] {room_id} is now {'open' if is_open else 'closed'}")
        return room
