import pytest


@pytest.mark.asyncio
async def test_recent_returns_newest_first(registry):
    await registry.register("r1", 1000)
    await registry.register("r2", 2000)
    await registry.register("r3", 3000)

    assert await registry.recent() == ["r3", "r2", "r1"]
    assert await registry.recent(limit=2) == ["r3", "r2"]
    assert await registry.recent(limit=2, offset=2) == ["r1"]
    assert await registry.all_ids() == ["r1", "r2", "r3"]


@pytest.mark.asyncio
async def test_unregister_and_clear(registry, redis_client):
    await registry.register("r1", 1000)
    await registry.register("r2", 2000)

    assert await registry.unregister("r1") == 1
    assert await registry.unregister("r1") == 0
    assert await registry.all_ids() == ["r2"]

    assert await registry.clear() is True
    assert await registry.all_ids() == []
    assert await redis_client.exists("sessions:active") == 0
