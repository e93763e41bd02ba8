"""
Protocol definitions for the concert session store.

The coordinator depends on this interface rather than on a Redis client,
so tests can hand it an in-process store and deployments a real one.

Usage:
    from resource_server.services.protocols import SessionStoreProtocol

    async def touch(store: SessionStoreProtocol, key: str):
        raw = await store.get_document(key)
"""

from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence


class Admission(str, Enum):
    """Outcome of a capacity-checked set insertion."""

    ADDED = "added"
    PRESENT = "present"
    FULL = "full"


class SessionStoreProtocol(Protocol):
    """
    Keyed store with per-key expiration, atomic set membership and a
    score-ordered index.

    Documents are opaque strings. Set and index members are strings.
    """

    async def ping(self) -> bool:
        """Return True when the backing store answers."""
        ...

    async def get_document(self, key: str) -> Optional[str]:
        ...

    async def get_documents(self, keys: Sequence[str]) -> List[Optional[str]]:
        """Fetch several documents in one round trip, None for missing keys."""
        ...

    async def put_document(self, key: str, value: str, ttl: int) -> None:
        """Write a document, (re)setting its expiration to ttl seconds."""
        ...

    async def update_document(
        self,
        key: str,
        transform: Callable[[str], str],
        default_ttl: int,
    ) -> Optional[str]:
        """
        Check-and-set update of an existing document.

        The remaining expiration is kept; default_ttl applies only when the
        key carries none. Returns the written value, or None if the key
        does not exist. Raises ConcurrentModificationError if the key
        changed between read and write.
        """
        ...

    async def ttl(self, key: str) -> int:
        """Remaining seconds; negative when missing or without expiration."""
        ...

    async def delete(self, *keys: str) -> int:
        ...

    async def add_member_capped(
        self,
        key: str,
        member: str,
        capacity: int,
        ttl: Optional[int] = None,
    ) -> Admission:
        """
        Add to a set only while it holds fewer than capacity members.

        The size check and the insertion are atomic. An existing member is
        reported as PRESENT even when the set is full. Never raises
        ConcurrentModificationError.
        """
        ...

    async def remove_member(self, key: str, member: str) -> bool:
        """Remove from a set. True only if the member was present."""
        ...

    async def is_member(self, key: str, member: str) -> bool:
        ...

    async def count_members(self, key: str) -> int:
        ...

    async def count_members_many(self, keys: Sequence[str]) -> List[int]:
        """Set sizes for several keys in one round trip, 0 for missing keys."""
        ...

    async def index_add(self, key: str, member: str, score: float) -> None:
        ...

    async def index_remove(self, key: str, *members: str) -> int:
        ...

    async def index_range(
        self,
        key: str,
        limit: Optional[int] = None,
        descending: bool = False,
        offset: int = 0,
    ) -> List[str]:
        """Members ordered by score, optionally highest first, skipping offset and capped at limit."""
        ...
