import os
from typing import FrozenSet, Optional
import redis

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
VALID_FEATURES = os.getenv("VALID_FEATURES", "")

def redis_client(url: str = REDIS_URL) -> redis.Redis:
    return redis.Redis.from_url(url, decode_responses=True)

def configured_features(raw: str = VALID_FEATURES) -> Optional[FrozenSet[str]]:
    # blank -> no restriction
    names = [name.strip() for name in raw.split(",") if name.strip()]
    if not names:
        return None
    return frozenset(names)
