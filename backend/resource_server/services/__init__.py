"""Business Logic Services.

Service Categories:
- Concert: session coordinator, Redis session store, room registry
- Auth: bearer token decoding for the HTTP layer

Support modules:
- protocols: SessionStoreProtocol consumed by the coordinator
- metrics: Prometheus counters
"""
