from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, Request, status

from resource_server.config.settings import settings
from resource_server.config.constants import DEV_USER_ID, DEV_USER_NAME
from resource_server.services.auth_service import decode_token
from resource_server.services.concert import ConcertService, Room

logger = logging.getLogger(__name__)


@dataclass
class CurrentUser:
    user_id: str
    username: Optional[str] = None


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """
    Resolve the caller's identity from a bearer JWT.

    In development a configured DEV_AUTH_TOKEN is accepted as-is and maps to
    a fixed developer identity.
    """
    if not authorization:
        raise _unauthorized("NO_AUTH_HEADER", "No authorization header provided")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("INVALID_AUTH_FORMAT", 'Authorization header must start with "Bearer "')

    if (
        settings.is_development
        and settings.DEV_AUTH_TOKEN
        and token == settings.DEV_AUTH_TOKEN
    ):
        logger.debug("[Auth] Development token accepted")
        return CurrentUser(user_id=DEV_USER_ID, username=DEV_USER_NAME)

    payload = decode_token(token)
    if not payload:
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired token")
    user_id = payload.get("sub") or payload.get("userId")
    if user_id is None:
        raise _unauthorized("INVALID_TOKEN", "Invalid token payload")
    return CurrentUser(user_id=str(user_id), username=payload.get("username"))


def get_concert_service(request: Request) -> ConcertService:
    return request.app.state.concert_service


async def get_studio_room(
    room_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
) -> Room:
    """Load a room and require the caller to be its studio."""
    room = await service.get_info(room_id)
    if str(room.studio_user_id) != current_user.user_id:
        logger.warning(f"[Auth] {current_user.user_id} is not the studio of {room_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "PERMISSION_DENIED", "message": "Only the studio can modify this concert"},
        )
    return room


async def require_member(
    room_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConcertService = Depends(get_concert_service),
) -> CurrentUser:
    """Require the caller to have joined the room."""
    if not await service.verify_access(room_id, current_user.user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "ACCESS_DENIED", "message": "Not in concert room"},
        )
    return current_user
