"""Pending request bodies and their serialization."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from trctl.rpc.protocol import Method, ResponseTag

# Keys whose values accumulate across directives instead of being replaced
LIST_VALUED_KEYS = frozenset(
    {
        "trackerAdd",
        "trackerRemove",
        "labels",
        "files-wanted",
        "files-unwanted",
        "priority-high",
        "priority-normal",
        "priority-low",
    }
)


class RequestKind(str, Enum):
    """The three request bodies that accumulate directives."""

    TORRENT_ADD = "torrent-add"
    TORRENT_SET = "torrent-set"
    SESSION_SET = "session-set"


# Implicit and final flushes always happen in this order
FLUSH_ORDER: tuple[RequestKind, ...] = (
    RequestKind.TORRENT_ADD,
    RequestKind.TORRENT_SET,
    RequestKind.SESSION_SET,
)


@dataclass
class PendingRequest:
    """A request body being built up, one RPC call."""

    method: str
    arguments: dict[str, Any] = field(default_factory=dict)
    tag: int | None = None

    @classmethod
    def for_kind(cls, kind: RequestKind) -> PendingRequest:
        if kind is RequestKind.TORRENT_ADD:
            return cls(Method.TORRENT_ADD, tag=int(ResponseTag.TORRENT_ADD))
        return cls(kind.value)

    def merge(self, key: str, value: Any) -> None:
        """Set ``key``; list-valued keys append instead of replacing."""
        if key in LIST_VALUED_KEYS:
            bucket = self.arguments.setdefault(key, [])
            if isinstance(value, (list, tuple)):
                bucket.extend(value)
            else:
                bucket.append(value)
        else:
            self.arguments[key] = value

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"method": self.method, "arguments": self.arguments}
        if self.tag is not None:
            payload["tag"] = self.tag
        return payload

    def to_json(self) -> str:
        """Compact JSON, the form posted to the daemon."""
        return json.dumps(self.to_payload(), separators=(",", ":"))
