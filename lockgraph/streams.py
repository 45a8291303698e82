from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, cast

import redis

ResourceKind = Literal["graph", "session"]


@dataclass(frozen=True, slots=True)
class EventStream:
    """Redis Stream carrying change events for one graph or session."""

    kind: ResourceKind
    resource_id: str

    @property
    def key(self) -> str:
        return f"events:{self.kind}:{self.resource_id}"


def publish_event(*, r: redis.Redis, stream: EventStream, fields: Mapping[str, str]) -> str:
    # redis-py stubs expect field/value unions; we only use string fields/values.
    stream_id = r.xadd(stream.key, {str(k): str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def read_events(*, r: redis.Redis, stream: EventStream, count: int = 20, start: str = "-", end: str = "+") -> list[dict[str, object]]:
    entries = r.xrange(stream.key, min=start, max=end, count=count)
    return [{"id": eid, "fields": fields} for eid, fields in entries]
