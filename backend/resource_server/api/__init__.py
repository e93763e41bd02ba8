from fastapi import APIRouter, Request

from resource_server.api import concerts

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    redis_ok = await request.app.state.concert_service.store.ping()
    return {"status": "ok" if redis_ok else "degraded", "redis": "connected" if redis_ok else "disconnected"}


router.include_router(concerts.router)
