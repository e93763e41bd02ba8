"""
Room Registry

Time-ordered index of active concert rooms (sorted set, score = creation
time in epoch ms). Entries whose room document expired are pruned lazily by
the coordinator when it notices them during a listing.
"""
from typing import List, Optional
import logging

from resource_server.config.constants import ACTIVE_SESSIONS_KEY
from resource_server.services.protocols import SessionStoreProtocol

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Discovery index over room ids."""

    def __init__(self, store: SessionStoreProtocol, key: str = ACTIVE_SESSIONS_KEY):
        self._store = store
        self.key = key

    async def register(self, room_id: str, created_at_ms: int):
        await self._store.index_add(self.key, room_id, created_at_ms)
        logger.debug(f"[Registry] Registered {room_id} at {created_at_ms}")

    async def unregister(self, *room_ids: str) -> int:
        removed = await self._store.index_remove(self.key, *room_ids)
        if removed:
            logger.debug(f"[Registry] Removed {removed} room(s): {', '.join(room_ids)}")
        return removed

    async def recent(self, limit: Optional[int] = None, offset: int = 0) -> List[str]:
        """Room ids, most recently created first."""
        return await self._store.index_range(self.key, limit=limit, descending=True, offset=offset)

    async def all_ids(self) -> List[str]:
        """Room ids, oldest first."""
        return await self._store.index_range(self.key)

    async def clear(self) -> bool:
        return bool(await self._store.delete(self.key))
