"""
Concert API - Endpoints for concert sessions

Implements:
- Room lifecycle (create, list, info, destroy, expire-all)
- Audience join/leave and the participant-only current song
- Studio-only playlist, accessory, listen server and open gate edits

Authorization lives here: studio-only routes depend on get_studio_room,
participant reads on require_member. Errors raised by ConcertService are
rendered by api.errors.
"""
import logging
import random
import time

from fastapi import APIRouter, Depends

from resource_server.config.constants import (
    DEFAULT_CONCERT_LIST_LIMIT,
    DEFAULT_MAX_AUDIENCE,
    ROOM_ID_PREFIX,
    ROOM_ID_RANDOM_LENGTH,
    ROOM_ID_ALPHABET,
)
from resource_server.api.deps import (
    CurrentUser,
    get_current_user,
    get_concert_service,
    get_studio_room,
    require_member,
)
from resource_server.services.concert import (
    ConcertService,
    Room,
    Song,
    Accessory,
    ListenServerEndpoint,
)
from resource_server.schemas.concert import (
    CreateConcertRequest,
    CreateConcertResponse,
    ConcertListResponse,
    ConcertInfoResponse,
    JoinedConcert,
    JoinConcertResponse,
    LeaveConcertResponse,
    SongsResponse,
    ChangeSongRequest,
    ChangeSongResponse,
    CurrentSongResponse,
    AccessoriesResponse,
    ReplaceAccessoriesRequest,
    ListenServerResponse,
    ToggleOpenRequest,
    ToggleOpenResponse,
    DestroyConcertResponse,
    ExpireAllResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concert", tags=["concert"])


def generate_room_id() -> str:
    suffix = "".join(random.choices(ROOM_ID_ALPHABET, k=ROOM_ID_RANDOM_LENGTH))
    return f"{ROOM_ID_PREFIX}_{int(time.time() * 1000)}_{suffix}"


@router.post("/create", response_model=CreateConcertResponse)
async def create_concert(
    req: CreateConcertRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
):
    """Create a concert. The caller becomes its studio."""
    room_id = generate_room_id()
    data = req.model_dump(exclude_none=True)
    data.update(
        studio_user_id=current_user.user_id,
        studio_name=current_user.username,
        max_audience=req.max_audience or DEFAULT_MAX_AUDIENCE,
    )
    created = await service.create(room_id, data)

    logger.info(f"[API] Concert {room_id} created by {current_user.user_id}")
    return CreateConcertResponse(room_id=created.room_id, expires_in=created.expires_in)


@router.get("/list", response_model=ConcertListResponse)
async def list_concerts(
    limit: int = DEFAULT_CONCERT_LIST_LIMIT,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
):
    """Active concerts, newest first. Closed ones included (see isOpen)."""
    concerts = await service.list_active(limit=limit)
    return ConcertListResponse(count=len(concerts), concerts=concerts)


@router.post("/expire-all", response_model=ExpireAllResponse)
async def expire_all_concerts(
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
):
    """Tear down every concert. Rejected in production."""
    result = await service.expire_all()
    logger.info(f"[API] expire-all by {current_user.user_id}: {result.expired_count} room(s)")
    return ExpireAllResponse(
        message="All concerts expired",
        expired_count=result.expired_count,
        expired_rooms=result.expired_rooms,
    )


@router.post("/{room_id}/join", response_model=JoinConcertResponse)
async def join_concert(
    room_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
):
    room = await service.join(room_id, current_user.user_id)
    return JoinConcertResponse(
        message="Joined concert successfully",
        concert=JoinedConcert(
            concert_name=room.concert_name,
            studio_name=room.studio_name,
            songs=room.songs,
            current_song=room.current_song,
            current_audience=room.current_audience,
            max_audience=room.max_audience,
            listen_server=room.listen_server,
        ),
    )


@router.post("/{room_id}/leave", response_model=LeaveConcertResponse)
async def leave_concert(
    room_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
):
    was_member = await service.leave(room_id, current_user.user_id)
    return LeaveConcertResponse(message="Left concert", was_member=was_member)


@router.get("/{room_id}/info", response_model=ConcertInfoResponse)
async def get_concert_info(
    room_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
):
    room = await service.get_info(room_id)
    return ConcertInfoResponse(concert=room)


@router.get("/{room_id}/current-song", response_model=CurrentSongResponse)
async def get_current_song(
    room_id: str,
    member: CurrentUser = Depends(require_member),
    service: ConcertService = Depends(get_concert_service),
):
    """Currently playing song. Only for joined participants."""
    song = await service.get_current_song(room_id)
    return CurrentSongResponse(current_song=song)


# === Studio only ===

@router.post("/{room_id}/songs/add", response_model=SongsResponse)
async def add_song(
    room_id: str,
    song: Song,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.add_song(room_id, song)
    return SongsResponse(
        message="Song added successfully",
        songs=updated.songs,
        current_song=updated.current_song,
    )


@router.delete("/{room_id}/songs/{song_num}", response_model=SongsResponse)
async def remove_song(
    room_id: str,
    song_num: int,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.remove_song(room_id, song_num)
    return SongsResponse(
        message="Song removed successfully",
        songs=updated.songs,
        current_song=updated.current_song,
    )


@router.post("/{room_id}/songs/change", response_model=ChangeSongResponse)
async def change_song(
    room_id: str,
    req: ChangeSongRequest,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.change_song(room_id, req.song_num)
    return ChangeSongResponse(message="Song changed successfully", current_song=updated.current_song)


@router.post("/{room_id}/accessories/add", response_model=AccessoriesResponse)
async def add_accessory(
    room_id: str,
    accessory: Accessory,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.add_accessory(room_id, accessory)
    return AccessoriesResponse(message="Accessory added successfully", accessories=updated.accessories)


@router.delete("/{room_id}/accessories/{index}", response_model=AccessoriesResponse)
async def remove_accessory(
    room_id: str,
    index: int,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.remove_accessory(room_id, index)
    return AccessoriesResponse(message="Accessory removed successfully", accessories=updated.accessories)


@router.put("/{room_id}/accessories", response_model=AccessoriesResponse)
async def replace_accessories(
    room_id: str,
    req: ReplaceAccessoriesRequest,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.replace_accessories(room_id, req.accessories)
    return AccessoriesResponse(message="Accessories updated successfully", accessories=updated.accessories)


@router.post("/{room_id}/listen-server", response_model=ListenServerResponse)
async def update_listen_server(
    room_id: str,
    endpoint: ListenServerEndpoint,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.update_listen_server(room_id, endpoint)
    return ListenServerResponse(message="Listen server updated", listen_server=updated.listen_server)


@router.post("/{room_id}/toggle-open", response_model=ToggleOpenResponse)
async def toggle_open(
    room_id: str,
    req: ToggleOpenRequest,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    updated = await service.toggle_open(room_id, req.is_open)
    return ToggleOpenResponse(
        message=f"Concert is now {'open' if updated.is_open else 'closed'}",
        is_open=updated.is_open,
    )


@router.delete("/{room_id}", response_model=DestroyConcertResponse)
async def destroy_concert(
    room_id: str,
    room: Room = Depends(get_studio_room),
    service: ConcertService = Depends(get_concert_service),
):
    await service.destroy(room_id)
    return DestroyConcertResponse(message="Concert destroyed", room_id=room_id)
