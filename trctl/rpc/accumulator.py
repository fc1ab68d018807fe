"""Command accumulator: folds directives into as few RPC calls as possible.

Session options, torrent options and a torrent being added each build up in
their own pending request. A pending request is sent when a directive needs
it out of the way (adding a torrent, switching the selected torrent, running
an action on the selected torrents) and at the end of the run. Flushes
always go in the order torrent-add, torrent-set, session-set.

Speed and peer limits given before any torrent is selected wait for the
next selection: ``-d 50 -u 20 -t 3`` limits torrent 3. With no selection
before the next request they become session limits.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from trctl.rpc.protocol import (
    DETAILS_FIELDS,
    FILES_FIELDS,
    LIST_FIELDS,
    PEERS_FIELDS,
    PIECES_FIELDS,
    TRACKERS_FIELDS,
    Method,
    ResponseTag,
)
from trctl.rpc.request import FLUSH_ORDER, PendingRequest, RequestKind
from trctl.rpc.selector import resolve_ids
from trctl.utils.console_utils import create_console, print_error, print_warning
from trctl.utils.exceptions import DirectiveError, TrctlError
from trctl.utils.logging_config import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from rich.console import Console

    from trctl.rpc.dispatcher import RequestDispatcher
    from trctl.rpc.router import ResponseRouter

logger = get_logger(__name__)

# torrent-get views: tag, fields, selector fallback
TORRENT_VIEWS: dict[ResponseTag, tuple[tuple[str, ...], str | None]] = {
    ResponseTag.DETAILS: (DETAILS_FIELDS, None),
    ResponseTag.LIST: (LIST_FIELDS, "all"),
    ResponseTag.FILES: (FILES_FIELDS, None),
    ResponseTag.PEERS: (PEERS_FIELDS, None),
    ResponseTag.PIECES: (PIECES_FIELDS, None),
    ResponseTag.TRACKERS: (TRACKERS_FIELDS, None),
}

_SPEED_KEYS = {
    "down": ("downloadLimit", "downloadLimited", "speed-limit-down", "speed-limit-down-enabled"),
    "up": ("uploadLimit", "uploadLimited", "speed-limit-up", "speed-limit-up-enabled"),
}


def encode_metainfo(source: str) -> str | None:
    """Base64 contents of ``source`` when it names a readable file."""
    path = Path(source)
    try:
        if not path.is_file():
            return None
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Not reading %s as a torrent file: %s", source, e)
        return None
    return base64.b64encode(data).decode("ascii")


class CommandAccumulator:
    """Turns a stream of directives into flushed RPC requests."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        router: ResponseRouter,
        err: Console | None = None,
        selector: str = "",
    ) -> None:
        self.dispatcher = dispatcher
        self.router = router
        self.err = err if err is not None else create_console(stderr=True)
        self.selector = selector
        self.succeeded = True
        self._pending: dict[RequestKind, PendingRequest] = {}
        # limits given with no torrent selected: torrent key -> (session key, value)
        self._held_limits: dict[str, tuple[str, Any]] = {}
        router.on_torrent_added = self._bind_added_torrent

    # -- state -----------------------------------------------------------

    def pending(self, kind: RequestKind) -> PendingRequest | None:
        return self._pending.get(kind)

    @property
    def has_pending_add(self) -> bool:
        return RequestKind.TORRENT_ADD in self._pending

    def _ensure(self, kind: RequestKind) -> PendingRequest:
        request = self._pending.get(kind)
        if request is None:
            request = PendingRequest.for_kind(kind)
            self._pending[kind] = request
        return request

    def _bind_added_torrent(self, torrent_id: int) -> None:
        logger.debug("Selecting newly added torrent %d", torrent_id)
        self.selector = str(torrent_id)

    def mark_failed(self) -> None:
        self.succeeded = False

    def _attach_ids(self, arguments: dict[str, Any], fallback: str | None = None) -> None:
        resolution = resolve_ids(self.selector, fallback)
        if resolution.warning is not None:
            logger.info("Selector %r: %s", self.selector, resolution.warning)
            print_warning(str(resolution.warning), self.err)
        resolution.apply(arguments)

    # -- flushing --------------------------------------------------------

    async def _send(self, request: PendingRequest) -> bool:
        try:
            response = await self.dispatcher.execute(request)
            ok = self.router.route(response)
        except TrctlError as e:
            logger.info("%s failed: %s", request.method, e)
            print_error(str(e), self.err)
            ok = False
        if not ok:
            self.succeeded = False
        return ok

    async def flush(self, kind: RequestKind) -> bool:
        """Send and clear one pending request; True when there was none."""
        request = self._pending.pop(kind, None)
        if request is None:
            return True
        if kind is RequestKind.TORRENT_SET:
            self._attach_ids(request.arguments)
        logger.info("flush %s with %d arguments", request.method, len(request.arguments))
        return await self._send(request)

    async def _flush_kinds(self, kinds: Iterable[RequestKind]) -> bool:
        wanted = set(kinds)
        ok = True
        for kind in FLUSH_ORDER:
            if kind in wanted and kind in self._pending:
                ok = await self.flush(kind) and ok
        return ok

    async def _immediate(
        self,
        method: str,
        arguments: dict[str, Any] | None = None,
        tag: int | None = None,
        torrent_scoped: bool = False,
        fallback: str | None = None,
    ) -> bool:
        self._release_held_limits()
        arguments = dict(arguments or {})
        if torrent_scoped:
            await self.flush(RequestKind.TORRENT_SET)
            self._attach_ids(arguments, fallback)
        return await self._send(PendingRequest(method, arguments, tag))

    async def finish(self) -> bool:
        """Flush everything still pending; True only if every flush succeeded."""
        self._release_held_limits()
        await self._flush_kinds(FLUSH_ORDER)
        return self.succeeded

    # -- accumulating directives -----------------------------------------

    def set_session_option(self, key: str, value: Any) -> None:
        self._ensure(RequestKind.SESSION_SET).merge(key, value)

    def set_torrent_option(self, key: str, value: Any) -> None:
        self._ensure(RequestKind.TORRENT_SET).merge(key, value)

    def set_torrent_or_add_option(self, key: str, value: Any) -> None:
        """Applies to the torrent being added, else to the selected torrents."""
        if self.has_pending_add:
            self._pending[RequestKind.TORRENT_ADD].merge(key, value)
        else:
            self.set_torrent_option(key, value)

    def _set_limit(self, torrent_key: str, session_key: str, value: Any) -> None:
        """Torrent limit when a torrent is selected, else held for the next selection.

        Held limits go to the torrents of the next ``select_torrent``. Any
        other request, a new torrent-add or the end of the run turns them
        into session-wide limits.
        """
        if self.selector:
            self.set_torrent_option(torrent_key, value)
        else:
            self._held_limits[torrent_key] = (session_key, value)

    def _release_held_limits(self, to_torrents: bool = False) -> None:
        held, self._held_limits = self._held_limits, {}
        for torrent_key, (session_key, value) in held.items():
            if to_torrents:
                self.set_torrent_option(torrent_key, value)
            else:
                self.set_session_option(session_key, value)

    def set_speed_limit(self, direction: str, kbps: int) -> None:
        """Per-torrent limit for the selected torrents, else the session limit."""
        torrent_key, torrent_flag, session_key, session_flag = _SPEED_KEYS[direction]
        self._set_limit(torrent_key, session_key, kbps)
        self._set_limit(torrent_flag, session_flag, True)

    def clear_speed_limit(self, direction: str) -> None:
        _, torrent_flag, _, session_flag = _SPEED_KEYS[direction]
        self._set_limit(torrent_flag, session_flag, False)

    def set_peer_limit(self, limit: int) -> None:
        self._set_limit("peer-limit", "peer-limit-global", limit)

    def set_download_dir(self, path: str) -> None:
        """Download folder of the torrent being added, else the session default."""
        if self.has_pending_add:
            self._pending[RequestKind.TORRENT_ADD].merge("download-dir", path)
        else:
            self.set_session_option("download-dir", path)

    async def begin_torrent_add(self) -> None:
        self._release_held_limits()
        await self._flush_kinds(FLUSH_ORDER)
        self._ensure(RequestKind.TORRENT_ADD)

    async def add_torrent_source(self, source: str) -> None:
        """Add a .torrent file, URL or magnet link to the pending add.

        Raises:
            DirectiveError: no add is pending

        """
        request = self._pending.get(RequestKind.TORRENT_ADD)
        if request is None:
            msg = f"Unknown option: {source}"
            raise DirectiveError(msg)

        if "metainfo" in request.arguments or "filename" in request.arguments:
            await self.flush(RequestKind.TORRENT_ADD)
            request = self._ensure(RequestKind.TORRENT_ADD)

        metainfo = encode_metainfo(source)
        if metainfo is not None:
            request.merge("metainfo", metainfo)
        else:
            request.merge("filename", source)

    async def select_torrent(self, selector: str) -> None:
        """Make ``selector`` current once pending add/set are sent under the old one.

        Limits held since no torrent was selected apply to the new selection.
        """
        await self._flush_kinds((RequestKind.TORRENT_ADD, RequestKind.TORRENT_SET))
        self.selector = selector
        if selector:
            self._release_held_limits(to_torrents=True)

    # -- immediate requests ----------------------------------------------

    async def get_torrents(self, view: ResponseTag) -> bool:
        fields, fallback = TORRENT_VIEWS[view]
        return await self._immediate(
            Method.TORRENT_GET,
            {"fields": list(fields)},
            tag=int(view),
            torrent_scoped=True,
            fallback=fallback,
        )

    async def session_info(self) -> bool:
        return await self._immediate(Method.SESSION_GET, tag=int(ResponseTag.SESSION))

    async def session_stats(self) -> bool:
        return await self._immediate(Method.SESSION_STATS, tag=int(ResponseTag.STATS))

    async def port_test(self) -> bool:
        return await self._immediate(Method.PORT_TEST, tag=int(ResponseTag.PORTTEST))

    async def blocklist_update(self) -> bool:
        return await self._immediate(Method.BLOCKLIST_UPDATE)

    async def session_close(self) -> bool:
        return await self._immediate(Method.SESSION_CLOSE)

    async def start_torrents(self) -> bool:
        """Start the selected torrents, or add the pending torrent unpaused."""
        if self.has_pending_add:
            self._pending[RequestKind.TORRENT_ADD].merge("paused", False)
            return True
        return await self._immediate(Method.TORRENT_START, torrent_scoped=True)

    async def stop_torrents(self) -> bool:
        """Stop the selected torrents, or add the pending torrent paused."""
        if self.has_pending_add:
            self._pending[RequestKind.TORRENT_ADD].merge("paused", True)
            return True
        return await self._immediate(Method.TORRENT_STOP, torrent_scoped=True)

    async def reannounce(self) -> bool:
        return await self._immediate(Method.TORRENT_REANNOUNCE, torrent_scoped=True)

    async def verify(self) -> bool:
        return await self._immediate(Method.TORRENT_VERIFY, torrent_scoped=True)

    async def remove_torrents(self, delete_local_data: bool = False) -> bool:
        return await self._immediate(
            Method.TORRENT_REMOVE,
            {"delete-local-data": delete_local_data},
            torrent_scoped=True,
        )

    async def set_location(self, location: str, move: bool) -> bool:
        """Move data (``move``) or point the torrent at existing data.

        Without ``move`` and with an add pending, the location becomes the
        new torrent's download folder.
        """
        if not move and self.has_pending_add:
            self._pending[RequestKind.TORRENT_ADD].merge("download-dir", location)
            return True
        return await self._immediate(
            Method.TORRENT_SET_LOCATION,
            {"location": location, "move": move},
            torrent_scoped=True,
        )
