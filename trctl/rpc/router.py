"""Routes decoded responses to presenters by tag."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from trctl.rpc.presenters import PRESENTERS
from trctl.rpc.protocol import ResponseTag
from trctl.utils.console_utils import print_error
from trctl.utils.exceptions import ProtocolDecodeError, RpcError, ValueShapeError
from trctl.utils.logging_config import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from rich.console import Console

    from trctl.rpc.protocol import TaggedResponse
    from trctl.utils.formatting import UnitFormatter

logger = get_logger(__name__)


class ResponseRouter:
    """Prints each successful response with the presenter for its tag.

    Args:
        out: Console receiving presenter text
        err: Console receiving error messages
        rpc_url: Endpoint shown in the generic acknowledgement
        formatter: Unit formatter shared by all presenters
        on_torrent_added: Called with the id of a newly added torrent

    """

    def __init__(
        self,
        out: Console,
        err: Console,
        rpc_url: str,
        formatter: UnitFormatter,
        on_torrent_added: Callable[[int], None] | None = None,
    ) -> None:
        self.out = out
        self.err = err
        self.rpc_url = rpc_url
        self.formatter = formatter
        self.on_torrent_added = on_torrent_added

    def route(self, response: TaggedResponse) -> bool:
        """Present one response; returns True on success."""
        if response.result is None:
            logger.debug("Response without result field, tag=%s", response.tag)
            return False

        if not response.succeeded:
            error = RpcError(response.result)
            logger.info("Daemon reported failure: %s", error)
            print_error(f"Error: {error}", self.err)
            return False

        try:
            return self._present(response)
        except ValueShapeError as e:
            logger.info("Malformed response for tag %s: %s", response.tag, e)
            print_error(str(ProtocolDecodeError(f"Unable to decode response: {e}")), self.err)
            return False

    def _present(self, response: TaggedResponse) -> bool:
        args = response.args()
        presenter = PRESENTERS.get(response.tag) if response.tag is not None else None
        if presenter is not None:
            text = presenter(args, self.formatter)
            if text:
                self.out.print(text)
            return True

        if response.tag == ResponseTag.TORRENT_ADD:
            added = args.find_dict("torrent-added")
            torrent_id = added.find_int("id") if added is not None else None
            if torrent_id is not None and self.on_torrent_added is not None:
                self.on_torrent_added(torrent_id)

        self.out.print(f'{self.rpc_url} responded: "{response.result}"')
        return True
