import sys
import pytest
from pathlib import Path

# Add project root (2 levels up from tests/) to sys.path so tests can import 'resource_server'
root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

import fakeredis
from fakeredis import aioredis as fake_aioredis

from resource_server.services.concert import ConcertService, RedisSessionStore, RoomRegistry


@pytest.fixture
def redis_server():
    """A single emulated Redis server shared by every client in a test."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    return fake_aioredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def sync_redis(redis_server):
    """Second, synchronous connection to the same server (simulates another writer)."""
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def store(redis_client):
    return RedisSessionStore(redis_client)


@pytest.fixture
def registry(store):
    return RoomRegistry(store)


@pytest.fixture
def service(store, registry):
    return ConcertService(store, registry)


@pytest.fixture
def client(service):
    """TestClient bound to the app with the fake-backed coordinator."""
    from fastapi.testclient import TestClient
    from resource_server.main import app

    app.state.concert_service = service
    with TestClient(app) as test_client:
        yield test_client
    app.state.concert_service = None
