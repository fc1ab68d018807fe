"""HTTP transport for RPC requests.

Posts one serialized request at a time to the daemon and handles the
session-id challenge: a 409 answer carries a fresh identifier in
``X-Transmission-Session-Id``, which is stored on the session context before
the identical body is posted again. The retry loop is bounded.
"""

from __future__ import annotations

import asyncio
import netrc
import os
from pathlib import Path
from typing import TYPE_CHECKING

import aiohttp

from trctl import __version__
from trctl.rpc.protocol import SESSION_ID_HEADER, Method, TaggedResponse, decode_response
from trctl.utils.console_utils import create_console, print_debug_block
from trctl.utils.exceptions import (
    ConfigurationError,
    HttpStatusError,
    SessionRetryExhaustedError,
    TransportError,
)
from trctl.utils.logging_config import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from rich.console import Console

    from trctl.rpc.request import PendingRequest
    from trctl.rpc.session import SessionContext

logger = get_logger(__name__)

USER_AGENT = f"trctl/{__version__}"


class RequestDispatcher:
    """Sends pending requests to the daemon over HTTP."""

    def __init__(
        self,
        context: SessionContext,
        timeout: float = 60.0,
        blocklist_timeout: float = 300.0,
        max_session_retries: int = 3,
        err: Console | None = None,
    ):
        """Initialize dispatcher.

        Args:
            context: Endpoint, credentials and session identifier
            timeout: Request timeout in seconds
            blocklist_timeout: Timeout for blocklist-update, which is slow
            max_session_retries: How many 409 answers in a row are retried
            err: Console for --debug echoes, stderr by default

        """
        self.context = context
        self.timeout = timeout
        self.blocklist_timeout = blocklist_timeout
        self.max_session_retries = max_session_retries
        self.err = err if err is not None else create_console(stderr=True)
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Create the HTTP session on first use."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            try:
                if not self._session.closed:
                    await self._session.close()
            finally:
                self._session = None

    async def __aenter__(self) -> RequestDispatcher:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.context.session_id:
            headers[SESSION_ID_HEADER] = self.context.session_id
        return headers

    def _get_auth(self) -> aiohttp.BasicAuth | None:
        """Explicit ``user:pw`` credential, else a .netrc entry for the host."""
        if self.context.auth:
            login, _, password = self.context.auth.partition(":")
            return aiohttp.BasicAuth(login, password)

        if self.context.netrc:
            path = Path(self.context.netrc).expanduser()
            try:
                entry = netrc.netrc(str(path)).authenticators(self.context.host)
            except (OSError, netrc.NetrcParseError) as e:
                msg = f"Unable to read netrc file {path}: {e}"
                raise ConfigurationError(msg) from e
        else:
            path = Path(os.path.expanduser("~")) / ".netrc"
            if not path.is_file():
                return None
            try:
                entry = netrc.netrc(str(path)).authenticators(self.context.host)
            except (OSError, netrc.NetrcParseError) as e:
                logger.warning("Ignoring unreadable %s: %s", path, e)
                return None

        if entry is None:
            return None
        login, _account, password = entry
        return aiohttp.BasicAuth(login or "", password or "")

    def _timeout_for(self, pending: PendingRequest) -> float:
        if pending.method == Method.BLOCKLIST_UPDATE:
            return self.blocklist_timeout
        return self.timeout

    async def _post(
        self,
        body: str,
        timeout: float,
        auth: aiohttp.BasicAuth | None,
    ) -> tuple[int, str | None, str]:
        """One HTTP round trip: status, session-id header and body text."""
        session = await self._ensure_session()
        url = self.context.http_url
        try:
            async with session.post(
                url,
                data=body.encode("utf-8"),
                headers=self._get_headers(),
                auth=auth,
                timeout=aiohttp.ClientTimeout(total=timeout),
                # peer certificates are not verified
                ssl=False,
            ) as resp:
                text = await resp.text(errors="replace")
                return resp.status, resp.headers.get(SESSION_ID_HEADER), text
        except asyncio.TimeoutError as e:
            msg = f"({url}) Timeout was reached after {timeout:g} seconds"
            raise TransportError(msg) from e
        except aiohttp.ClientError as e:
            msg = f"({url}) {e}"
            raise TransportError(msg) from e

    async def execute(self, pending: PendingRequest) -> TaggedResponse:
        """Post a request and decode the daemon's answer.

        Raises:
            TransportError: connection, TLS or timeout failure
            SessionRetryExhaustedError: too many 409 answers in a row
            HttpStatusError: any status other than 200 and a proper 409
            ProtocolDecodeError: the 200 body is not a response envelope

        """
        body = pending.to_json()
        timeout = self._timeout_for(pending)
        auth = self._get_auth()

        if self.context.debug:
            print_debug_block("posting:", body, self.err)

        retries = 0
        while True:
            logger.debug("POST %s to %s", pending.method, self.context.http_url)
            status, session_id, text = await self._post(body, timeout, auth)

            if status == 409:
                if not session_id:
                    raise HttpStatusError(status, text)
                self.context.session_id = session_id
                if retries >= self.max_session_retries:
                    msg = (
                        f"({self.context.http_url}) Session id rejected "
                        f"{retries + 1} times; giving up"
                    )
                    raise SessionRetryExhaustedError(
                        msg, {"max_session_retries": self.max_session_retries}
                    )
                retries += 1
                logger.debug(
                    "retry %s with new session id (attempt %d)",
                    pending.method,
                    retries,
                )
                continue

            if status != 200:
                logger.debug("%s answered HTTP %d", pending.method, status)
                raise HttpStatusError(status, text)

            if self.context.debug:
                print_debug_block(f"got response (len {len(text)}):", text, self.err)
            return decode_response(text)
