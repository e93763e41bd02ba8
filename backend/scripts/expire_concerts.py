"""
Concert session maintenance.

    python scripts/expire_concerts.py --list     # show active concerts
    python scripts/expire_concerts.py            # expire every concert (non-production only)
"""
import argparse
import asyncio
import sys
import os

# Add backend to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from resource_server.config.settings import settings
from resource_server.config.redis import create_redis, close_redis
from resource_server.services.concert import (
    ConcertService,
    RedisSessionStore,
    OperationNotAllowedError,
)


async def list_concerts(service: ConcertService, limit: int):
    rooms = await service.list_active(limit=limit)
    if not rooms:
        print("No active concerts.")
        return
    for room in rooms:
        state = "open" if room.is_open else "closed"
        print(
            f"{room.room_id}  '{room.concert_name}'  studio={room.studio_user_id}  "
            f"{state}  audience={room.current_audience}/{room.max_audience}  songs={len(room.songs)}"
        )


async def expire_concerts(service: ConcertService) -> int:
    print(f"🧹 Expiring all concerts ({settings.ENVIRONMENT})...")
    try:
        result = await service.expire_all()
    except OperationNotAllowedError as e:
        print(f"❌ {e}")
        return 1
    print(f"✅ Expired {result.expired_count} concert(s).")
    for room_id in result.expired_rooms:
        print(f"   - {room_id}")
    return 0


async def main(args) -> int:
    client = create_redis()
    service = ConcertService(RedisSessionStore(client), production=settings.is_production)
    try:
        if args.list:
            await list_concerts(service, args.limit)
            return 0
        return await expire_concerts(service)
    finally:
        await close_redis(client)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concert session maintenance")
    parser.add_argument("--list", action="store_true", help="List active concerts instead of expiring them")
    parser.add_argument("--limit", type=int, default=50, help="Maximum concerts to list")
    sys.exit(asyncio.run(main(parser.parse_args())))
