"""
Application-wide constants for concert session coordination.

Environment-dependent settings (Redis, JWT, environment name) belong in
settings.py. This file holds operational parameters that rarely change
between deployments.
"""

# ==============================================================================
# CONCERT SESSIONS
# ==============================================================================

# Lifetime of a concert room from creation (seconds). Never renewed by mutations.
CONCERT_SESSION_TTL_SEC: int = 7200

# Default audience capacity when the studio does not supply one
DEFAULT_MAX_AUDIENCE: int = 100

# Default number of rooms returned by the active concert listing
DEFAULT_CONCERT_LIST_LIMIT: int = 10

# ==============================================================================
# REDIS KEYS
# ==============================================================================

# Room document (JSON string)
CONCERT_INFO_KEY: str = "concert:room:{room_id}:info"

# Room membership (set of participant ids)
CONCERT_AUDIENCE_KEY: str = "concert:room:{room_id}:audience"

# Registry of active rooms (sorted set, score = creation time in epoch ms)
ACTIVE_SESSIONS_KEY: str = "sessions:active"

# ==============================================================================
# ROOM IDS
# ==============================================================================

# Room ids look like concert_<epoch-ms>_<random>
ROOM_ID_PREFIX: str = "concert"
ROOM_ID_RANDOM_LENGTH: int = 9
ROOM_ID_ALPHABET: str = "abcdefghijklmnopqrstuvwxyz0123456789"

# ==============================================================================
# AUTH
# ==============================================================================

# Identity assigned to requests carrying the development token
DEV_USER_ID: str = "dev-user-01"
DEV_USER_NAME: str = "developer"
