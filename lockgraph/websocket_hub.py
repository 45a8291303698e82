"""Live update notifications for open editor and play views.

Clients subscribe to one graph or one session. After a write the route calls
``notify``, and every subscriber gets ``{"type": "<kind>_updated",
"<kind>_id": ...}`` and refetches. Nothing is buffered for clients that
connect later; the Redis event streams are the durable record.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

from lockgraph.streams import ResourceKind

logger = logging.getLogger(__name__)

Subscription = tuple[ResourceKind, str]


def update_message(kind: ResourceKind, resource_id: str) -> dict[str, str]:
    return {"type": f"{kind}_updated", f"{kind}_id": resource_id}


class UpdateHub:
    def __init__(self) -> None:
        self._subscribers: dict[Subscription, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    def subscriber_count(self, kind: ResourceKind, resource_id: str) -> int:
        return len(self._subscribers.get((kind, resource_id), ()))

    async def subscribe(self, kind: ResourceKind, resource_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._subscribers[(kind, resource_id)].add(websocket)
        logger.debug("websocket subscribed to %s %s", kind, resource_id)

    async def unsubscribe(self, kind: ResourceKind, resource_id: str, websocket: WebSocket) -> None:
        key = (kind, resource_id)
        async with self._lock:
            sockets = self._subscribers.get(key)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._subscribers[key]

    async def notify(self, kind: ResourceKind, resource_id: str) -> int:
        """Tell every subscriber of the resource that it changed.

        Returns how many sockets took the message. Sockets that fail are
        unsubscribed.
        """

        async with self._lock:
            sockets = list(self._subscribers.get((kind, resource_id), ()))

        message = update_message(kind, resource_id)
        delivered = 0
        for ws in sockets:
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("dropping websocket for %s %s", kind, resource_id, exc_info=True)
                await self.unsubscribe(kind, resource_id, ws)
            else:
                delivered += 1
        return delivered


hub = UpdateHub()
