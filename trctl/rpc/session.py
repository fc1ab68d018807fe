"""Per-run connection state shared by the accumulator and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass

from trctl.rpc.protocol import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_URL_PATH


@dataclass
class SessionContext:
    """Endpoint, credentials and the daemon-issued session identifier.

    ``url`` is the endpoint without scheme (``host:port/path``), the form
    echoed after successful commands. Only the dispatcher writes
    ``session_id``.
    """

    url: str = f"{DEFAULT_HOST}:{DEFAULT_PORT}{DEFAULT_URL_PATH}"
    use_ssl: bool = False
    auth: str | None = None
    netrc: str | None = None
    debug: bool = False
    session_id: str | None = None

    @property
    def http_url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.url}"

    @property
    def host(self) -> str:
        """Host name without port or brackets, used for .netrc lookup."""
        authority = self.url.split("/", 1)[0]
        if authority.startswith("["):
            return authority[1 : authority.find("]")]
        return authority.rsplit(":", 1)[0] if ":" in authority else authority


@dataclass(frozen=True)
class Endpoint:
    """Result of interpreting the optional host argument."""

    host: str | None = None
    port: int | None = None
    url: str | None = None
    use_ssl: bool = False


def _parse_port(text: str) -> int | None:
    return int(text) if text.isdigit() else None


def parse_host_argument(arg: str) -> Endpoint:
    """Interpret ``port``, ``host``, ``host:port``, ``[v6]:port`` or a URL.

    A ``http(s)://host:port/transmission`` URL has ``/rpc/`` appended; the
    https form turns TLS on. An unbracketed IPv6 address is bracketed.
    """
    if arg.startswith("http://"):
        return Endpoint(url=arg[len("http://") :].rstrip("/") + "/rpc/")
    if arg.startswith("https://"):
        return Endpoint(url=arg[len("https://") :].rstrip("/") + "/rpc/", use_ssl=True)

    port = _parse_port(arg)
    if port is not None:
        return Endpoint(port=port)

    if ":" not in arg:
        return Endpoint(host=arg)

    host_end = len(arg)
    port = None
    last_colon = arg.rfind(":")
    if arg.find(":") == last_colon or arg[last_colon - 1] == "]":
        port = _parse_port(arg[last_colon + 1 :])
        if port is not None:
            host_end = last_colon

    host = arg[:host_end]
    if not host.startswith("[") and ":" in host:
        host = f"[{host}]"
    return Endpoint(host=host, port=port)


def build_rpc_url(
    endpoint: Endpoint,
    default_host: str = DEFAULT_HOST,
    default_port: int = DEFAULT_PORT,
    url_path: str = DEFAULT_URL_PATH,
) -> str:
    """Endpoint URL without scheme, e.g. ``localhost:9091/transmission/rpc/``."""
    if endpoint.url:
        return endpoint.url
    host = endpoint.host or default_host
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    port = endpoint.port if endpoint.port is not None else default_port
    return f"{host}:{port}{url_path}"
