from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import redis


@contextmanager
def resource_lock(*, r: redis.Redis, key: str, ttl_ms: int = 5_000) -> Iterator[None]:
    """Best-effort exclusive lock around one graph or session edit.

    A second writer fails fast instead of waiting. The TTL bounds how long a
    crashed holder can block the resource.
    """

    lock_key = f"lock:{key}"
    acquired = r.set(lock_key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise ValueError(f"{key} is busy")
    try:
        yield
    finally:
        r.delete(lock_key)
