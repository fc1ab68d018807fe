"""RPC protocol definitions for talking to the daemon.

Defines header and endpoint constants, response tags, method names,
the field lists requested by each view and the response envelope model.
"""

from __future__ import annotations

import json
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field

from trctl.rpc.variant import Record
from trctl.utils.exceptions import ProtocolDecodeError

# Endpoint constants
SESSION_ID_HEADER = "X-Transmission-Session-Id"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9091
DEFAULT_URL_PATH = "/transmission/rpc/"
SUCCESS = "success"


class ResponseTag(IntEnum):
    """Tags correlating a request with the presenter for its response."""

    SESSION = 0
    STATS = 1
    DETAILS = 2
    FILES = 3
    LIST = 4
    PEERS = 5
    PIECES = 6
    PORTTEST = 7
    TORRENT_ADD = 8
    TRACKERS = 9


class Method:
    """RPC method names."""

    SESSION_GET = "session-get"
    SESSION_SET = "session-set"
    SESSION_STATS = "session-stats"
    SESSION_CLOSE = "session-close"
    TORRENT_GET = "torrent-get"
    TORRENT_SET = "torrent-set"
    TORRENT_ADD = "torrent-add"
    TORRENT_START = "torrent-start"
    TORRENT_STOP = "torrent-stop"
    TORRENT_REMOVE = "torrent-remove"
    TORRENT_SET_LOCATION = "torrent-set-location"
    TORRENT_REANNOUNCE = "torrent-reannounce"
    TORRENT_VERIFY = "torrent-verify"
    PORT_TEST = "port-test"
    BLOCKLIST_UPDATE = "blocklist-update"


# Torrent status codes
STATUS_STOPPED = 0
STATUS_CHECK_WAIT = 1
STATUS_CHECK = 2
STATUS_DOWNLOAD_WAIT = 3
STATUS_DOWNLOAD = 4
STATUS_SEED_WAIT = 5
STATUS_SEED = 6

# Torrent error codes
STAT_TRACKER_WARNING = 1
STAT_TRACKER_ERROR = 2
STAT_LOCAL_ERROR = 3

# Per-torrent seed ratio modes
RATIOLIMIT_GLOBAL = 0
RATIOLIMIT_SINGLE = 1
RATIOLIMIT_UNLIMITED = 2

# File priorities
PRIORITY_LOW = -1
PRIORITY_NORMAL = 0
PRIORITY_HIGH = 1

# Tracker announce/scrape states
TRACKER_INACTIVE = 0
TRACKER_WAITING = 1
TRACKER_QUEUED = 2
TRACKER_ACTIVE = 3

# Alt-speed schedule day bits, Sunday first
SCHEDULE_DAYS = (
    (1, "Sun"),
    (2, "Mon"),
    (4, "Tue"),
    (8, "Wed"),
    (16, "Thu"),
    (32, "Fri"),
    (64, "Sat"),
)

FILES_FIELDS: tuple[str, ...] = ("files", "name", "priorities", "wanted")

DETAILS_FIELDS: tuple[str, ...] = (
    "activityDate",
    "addedDate",
    "bandwidthPriority",
    "comment",
    "corruptEver",
    "creator",
    "dateCreated",
    "desiredAvailable",
    "doneDate",
    "downloadDir",
    "downloadedEver",
    "downloadLimit",
    "downloadLimited",
    "error",
    "errorString",
    "eta",
    "hashString",
    "haveUnchecked",
    "haveValid",
    "honorsSessionLimits",
    "id",
    "isFinished",
    "isPrivate",
    "labels",
    "leftUntilDone",
    "magnetLink",
    "name",
    "peersConnected",
    "peersGettingFromUs",
    "peersSendingToUs",
    "peer-limit",
    "pieceCount",
    "pieceSize",
    "rateDownload",
    "rateUpload",
    "recheckProgress",
    "secondsDownloading",
    "secondsSeeding",
    "seedRatioMode",
    "seedRatioLimit",
    "sizeWhenDone",
    "source",
    "startDate",
    "status",
    "totalSize",
    "uploadedEver",
    "uploadLimit",
    "uploadLimited",
    "webseeds",
    "webseedsSendingToUs",
)

LIST_FIELDS: tuple[str, ...] = (
    "error",
    "errorString",
    "eta",
    "id",
    "isFinished",
    "leftUntilDone",
    "name",
    "peersGettingFromUs",
    "peersSendingToUs",
    "rateDownload",
    "rateUpload",
    "sizeWhenDone",
    "status",
    "uploadRatio",
)

PEERS_FIELDS: tuple[str, ...] = ("peers",)
PIECES_FIELDS: tuple[str, ...] = ("pieces", "pieceCount")
TRACKERS_FIELDS: tuple[str, ...] = ("trackerStats",)


class TaggedResponse(BaseModel):
    """Decoded response envelope."""

    result: str | None = Field(None, description="'success' or the daemon's error string")
    tag: int | None = Field(None, description="Tag echoed from the request")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Response arguments")

    @property
    def succeeded(self) -> bool:
        return self.result == SUCCESS

    def args(self) -> Record:
        """Arguments wrapped for typed access."""
        return Record(self.arguments)


def decode_response(body: str | bytes) -> TaggedResponse:
    """Decode a response body into a :class:`TaggedResponse`.

    Raises:
        ProtocolDecodeError: body is not a JSON object or lacks ``result``
        ValueShapeError: ``result``, ``tag`` or ``arguments`` has the wrong type

    """
    try:
        top = json.loads(body)
    except (TypeError, ValueError) as e:
        text = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
        msg = f"Unable to parse response '{text}'"
        raise ProtocolDecodeError(msg) from e

    if not isinstance(top, dict):
        msg = f"Response is not a JSON object: {type(top).__name__}"
        raise ProtocolDecodeError(msg)

    record = Record(top)
    result = record.find_str("result")
    if result is None:
        msg = "Response has no 'result' field"
        raise ProtocolDecodeError(msg)
    tag = record.find_int("tag")
    arguments = record.find_dict("arguments")

    return TaggedResponse(
        result=result,
        tag=tag,
        arguments=dict(arguments) if arguments is not None else {},
    )
