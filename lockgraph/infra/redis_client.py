"""Redis connection settings.

``LOCKGRAPH_REDIS_URL`` takes precedence over the generic ``REDIS_URL``; with
neither set the local default database is used.
"""

from __future__ import annotations

import os

import redis

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
REDIS_URL_ENV_VARS = ("LOCKGRAPH_REDIS_URL", "REDIS_URL")


def get_redis_url() -> str:
    for name in REDIS_URL_ENV_VARS:
        url = os.environ.get(name, "").strip()
        if url:
            return url
    return DEFAULT_REDIS_URL


def create_redis(url: str | None = None) -> redis.Redis:
    # Records are stored as JSON text, so read them back as str.
    return redis.Redis.from_url(url or get_redis_url(), decode_responses=True)
