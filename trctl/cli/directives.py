"""Command-line directives: the option table, tokenizer and handlers.

Each option maps to one accumulator operation. Directives run strictly in
command-line order; a directive that cannot be understood is reported and
marks the run as failed without stopping the ones after it.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Sequence

from rich.table import Table

from trctl import __version__
from trctl.rpc.protocol import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    RATIOLIMIT_GLOBAL,
    RATIOLIMIT_SINGLE,
    RATIOLIMIT_UNLIMITED,
    ResponseTag,
)
from trctl.rpc.selector import NO_MATCH, parse_number_range
from trctl.utils.console_utils import create_console, print_error, print_warning
from trctl.utils.exceptions import DirectiveError
from trctl.utils.logging_config import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from rich.console import Console

    from trctl.rpc.accumulator import CommandAccumulator
    from trctl.rpc.session import SessionContext

logger = get_logger(__name__)

SPEED_UNIT = "kB/s"
MEM_UNIT = "MiB"

USAGE_HEADER = (
    f"trctl {__version__}\n"
    "Remote control for a Transmission daemon\n"
    "\n"
    "Usage: trctl [host] [options]\n"
    "       trctl [port] [options]\n"
    "       trctl [host:port] [options]\n"
    "       trctl [http(s?)://host:port/transmission/] [options]"
)


@dataclass(frozen=True)
class OptionSpec:
    """One row of the option table."""

    long: str
    short: str | None
    help: str
    has_arg: bool = False
    arg_name: str | None = None


OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec("add", "a", "Add torrent files by filename or URL"),
    OptionSpec("alt-speed", "as", "Use the alternate Limits"),
    OptionSpec("no-alt-speed", "AS", "Don't use the alternate Limits"),
    OptionSpec("alt-speed-downlimit", "asd", f"max alternate download speed (in {SPEED_UNIT})", True, "<speed>"),
    OptionSpec("alt-speed-uplimit", "asu", f"max alternate upload speed (in {SPEED_UNIT})", True, "<speed>"),
    OptionSpec("alt-speed-scheduler", "asc", "Use the scheduled on/off times"),
    OptionSpec("no-alt-speed-scheduler", "ASC", "Don't use the scheduled on/off times"),
    OptionSpec("alt-speed-time-begin", None, "Time to start using the alt speed limits (in hhmm)", True, "<time>"),
    OptionSpec("alt-speed-time-end", None, "Time to stop using the alt speed limits (in hhmm)", True, "<time>"),
    OptionSpec("alt-speed-days", None, 'Numbers for any/all days of the week - eg. "1-7"', True, "<days>"),
    OptionSpec("blocklist-update", None, "Blocklist update"),
    OptionSpec("incomplete-dir", "c", "Where to store new torrents until they're complete", True, "<dir>"),
    OptionSpec("no-incomplete-dir", "C", "Don't store incomplete torrents in a different location"),
    OptionSpec("debug", "b", "Print debugging information"),
    OptionSpec(
        "downlimit",
        "d",
        f"Set the max download speed in {SPEED_UNIT} for the current torrent(s) or globally",
        True,
        "<speed>",
    ),
    OptionSpec("no-downlimit", "D", "Disable max download speed for the current torrent(s) or globally"),
    OptionSpec("cache", "e", f"Set the maximum size of the session's memory cache (in {MEM_UNIT})", True, "<size>"),
    OptionSpec("encryption-required", "er", "Encrypt all peer connections"),
    OptionSpec("encryption-preferred", "ep", "Prefer encrypted peer connections"),
    OptionSpec("encryption-tolerated", "et", "Prefer unencrypted peer connections"),
    OptionSpec("exit", None, "Tell the transmission session to shut down"),
    OptionSpec("files", "f", "List the current torrent(s)' files"),
    OptionSpec("get", "g", "Mark files for download", True, "<files>"),
    OptionSpec("no-get", "G", "Mark files for not downloading", True, "<files>"),
    OptionSpec("help", "h", "Show this help text and exit"),
    OptionSpec("info", "i", "Show the current torrent(s)' details"),
    OptionSpec("info-files", "if", "List the current torrent(s)' files"),
    OptionSpec("info-peers", "ip", "List the current torrent(s)' peers"),
    OptionSpec("info-pieces", "ic", "List the current torrent(s)' pieces"),
    OptionSpec("info-trackers", "it", "List the current torrent(s)' trackers"),
    OptionSpec("session-info", "si", "Show the session's details"),
    OptionSpec("session-stats", "st", "Show the session's statistics"),
    OptionSpec("list", "l", "List all torrents"),
    OptionSpec("labels", "L", "Set the current torrents' labels", True, "<label[,label...]>"),
    OptionSpec("move", None, "Move current torrent's data to a new folder", True, "<path>"),
    OptionSpec("find", None, "Tell Transmission where to find a torrent's data", True, "<path>"),
    OptionSpec("portmap", "m", "Enable portmapping via NAT-PMP or UPnP"),
    OptionSpec("no-portmap", "M", "Disable portmapping"),
    OptionSpec("auth", "n", "Set username and password", True, "<user:pw>"),
    OptionSpec("authenv", "ne", "Set authentication info from the TR_AUTH environment variable (user:pw)"),
    OptionSpec("netrc", "N", "Set authentication info from a .netrc file", True, "<file>"),
    OptionSpec("ssl", None, "Use SSL when talking to daemon"),
    OptionSpec("dht", "o", "Enable distributed hash tables (DHT)"),
    OptionSpec("no-dht", "O", "Disable distributed hash tables (DHT)"),
    OptionSpec("port", "p", "Port for incoming peers (Default: 51413)", True, "<port>"),
    OptionSpec("port-test", "pt", "Port testing"),
    OptionSpec("random-port", "P", "Random port for incoming peers"),
    OptionSpec("priority-high", "ph", "Try to download these file(s) first", True, "<files>"),
    OptionSpec("priority-normal", "pn", "Try to download these file(s) normally", True, "<files>"),
    OptionSpec("priority-low", "pl", "Try to download these file(s) last", True, "<files>"),
    OptionSpec("bandwidth-high", "Bh", "Give this torrent first chance at available bandwidth"),
    OptionSpec("bandwidth-normal", "Bn", "Give this torrent bandwidth left over by high priority torrents"),
    OptionSpec("bandwidth-low", "Bl", "Give this torrent bandwidth left over by high and normal priority torrents"),
    OptionSpec("reannounce", None, "Reannounce the current torrent(s)"),
    OptionSpec("remove", "r", "Remove the current torrent(s)"),
    OptionSpec("peers", "pr", "Set the maximum number of peers for the current torrent(s) or globally", True, "<max>"),
    OptionSpec("remove-and-delete", "rad", "Remove the current torrent(s) and delete local data"),
    OptionSpec("torrent-done-script", None, "A script to run when a torrent finishes downloading", True, "<file>"),
    OptionSpec("no-torrent-done-script", None, "Don't run the done-downloading script"),
    OptionSpec(
        "torrent-done-seeding-script", None, "A script to run when a torrent finishes seeding", True, "<file>"
    ),
    OptionSpec("no-torrent-done-seeding-script", None, "Don't run the done-seeding script"),
    OptionSpec("seedratio", "sr", "Let the current torrent(s) seed until a specific ratio", True, "ratio"),
    OptionSpec("seedratio-default", "srd", "Let the current torrent(s) use the global seedratio settings"),
    OptionSpec("no-seedratio", "SR", "Let the current torrent(s) seed regardless of ratio"),
    OptionSpec(
        "global-seedratio",
        "gsr",
        "All torrents, unless overridden by a per-torrent setting, should seed until a specific ratio",
        True,
        "ratio",
    ),
    OptionSpec(
        "no-global-seedratio",
        "GSR",
        "All torrents, unless overridden by a per-torrent setting, should seed regardless of ratio",
    ),
    OptionSpec("tracker-add", "td", "Add a tracker to a torrent", True, "<tracker>"),
    OptionSpec("tracker-remove", "tr", "Remove a tracker from a torrent", True, "<trackerId>"),
    OptionSpec("start", "s", "Start the current torrent(s)"),
    OptionSpec("stop", "S", "Stop the current torrent(s)"),
    OptionSpec("torrent", "t", "Set the current torrent(s)", True, "<torrent>"),
    OptionSpec("start-paused", None, "Start added torrents paused"),
    OptionSpec("no-start-paused", None, "Start added torrents unpaused"),
    OptionSpec("trash-torrent", None, "Delete torrents after adding"),
    OptionSpec("no-trash-torrent", None, "Do not delete torrents after adding"),
    OptionSpec("honor-session", "hl", "Make the current torrent(s) honor the session limits"),
    OptionSpec("no-honor-session", "HL", "Make the current torrent(s) not honor the session limits"),
    OptionSpec(
        "uplimit",
        "u",
        f"Set the max upload speed in {SPEED_UNIT} for the current torrent(s) or globally",
        True,
        "<speed>",
    ),
    OptionSpec("no-uplimit", "U", "Disable max upload speed for the current torrent(s) or globally"),
    OptionSpec("utp", None, "Enable uTP for peer connections"),
    OptionSpec("no-utp", None, "Disable uTP for peer connections"),
    OptionSpec("verify", "v", "Verify the current torrent(s)"),
    OptionSpec("version", "V", "Show version number and exit"),
    OptionSpec(
        "download-dir",
        "w",
        "When used in conjunction with --add, set the new torrent's download folder. "
        "Otherwise, set the default download folder",
        True,
        "<path>",
    ),
    OptionSpec("pex", "x", "Enable peer exchange (PEX)"),
    OptionSpec("no-pex", "X", "Disable peer exchange (PEX)"),
    OptionSpec("lpd", "y", "Enable local peer discovery (LPD)"),
    OptionSpec("no-lpd", "Y", "Disable local peer discovery (LPD)"),
    OptionSpec("peer-info", "pi", "List the current torrent(s)' peers"),
)

_BY_LONG = {opt.long: opt for opt in OPTIONS}
_BY_SHORT = {opt.short: opt for opt in OPTIONS if opt.short}

# Argument-less session-set options: option -> (key, value)
SESSION_FLAGS: dict[str, tuple[str, Any]] = {
    "alt-speed": ("alt-speed-enabled", True),
    "no-alt-speed": ("alt-speed-enabled", False),
    "alt-speed-scheduler": ("alt-speed-time-enabled", True),
    "no-alt-speed-scheduler": ("alt-speed-time-enabled", False),
    "no-incomplete-dir": ("incomplete-dir-enabled", False),
    "encryption-required": ("encryption", "required"),
    "encryption-preferred": ("encryption", "preferred"),
    "encryption-tolerated": ("encryption", "tolerated"),
    "portmap": ("port-forwarding-enabled", True),
    "no-portmap": ("port-forwarding-enabled", False),
    "dht": ("dht-enabled", True),
    "no-dht": ("dht-enabled", False),
    "utp": ("utp-enabled", True),
    "no-utp": ("utp-enabled", False),
    "random-port": ("peer-port-random-on-start", True),
    "pex": ("pex-enabled", True),
    "no-pex": ("pex-enabled", False),
    "lpd": ("lpd-enabled", True),
    "no-lpd": ("lpd-enabled", False),
    "no-global-seedratio": ("seedRatioLimited", False),
    "start-paused": ("start-added-torrents", False),
    "no-start-paused": ("start-added-torrents", True),
    "trash-torrent": ("trash-original-torrent-files", True),
    "no-trash-torrent": ("trash-original-torrent-files", False),
    "no-torrent-done-script": ("script-torrent-done-enabled", False),
    "no-torrent-done-seeding-script": ("script-torrent-done-seeding-enabled", False),
}

# Argument-less torrent-set options
TORRENT_FLAGS: dict[str, tuple[str, Any]] = {
    "seedratio-default": ("seedRatioMode", RATIOLIMIT_GLOBAL),
    "no-seedratio": ("seedRatioMode", RATIOLIMIT_UNLIMITED),
    "honor-session": ("honorsSessionLimits", True),
    "no-honor-session": ("honorsSessionLimits", False),
}

# Options that go to a pending torrent-add, else torrent-set
TORRENT_OR_ADD_FLAGS: dict[str, tuple[str, Any]] = {
    "bandwidth-high": ("bandwidthPriority", PRIORITY_HIGH),
    "bandwidth-normal": ("bandwidthPriority", PRIORITY_NORMAL),
    "bandwidth-low": ("bandwidthPriority", PRIORITY_LOW),
}

FILE_LIST_KEYS: dict[str, str] = {
    "get": "files-wanted",
    "no-get": "files-unwanted",
    "priority-high": "priority-high",
    "priority-normal": "priority-normal",
    "priority-low": "priority-low",
}

TORRENT_VIEWS: dict[str, ResponseTag] = {
    "info": ResponseTag.DETAILS,
    "list": ResponseTag.LIST,
    "files": ResponseTag.FILES,
    "info-files": ResponseTag.FILES,
    "info-peers": ResponseTag.PEERS,
    "peer-info": ResponseTag.PEERS,
    "info-pieces": ResponseTag.PIECES,
    "info-trackers": ResponseTag.TRACKERS,
}

_INT_RE = re.compile(r"\s*[+-]?\d+")
_FLOAT_RE = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


@dataclass(frozen=True)
class Directive:
    """One parsed command-line instruction.

    ``option`` is ``None`` for a bare token, which names a torrent source.
    """

    option: OptionSpec | None
    value: str | None = None

    @property
    def name(self) -> str:
        return self.option.long if self.option is not None else "<source>"


def find_option(token: str) -> tuple[OptionSpec | None, str | None]:
    """Match ``--long``, ``--long=value``, ``-short`` or ``-shortVALUE``."""
    if token.startswith("--"):
        name, sep, value = token[2:].partition("=")
        opt = _BY_LONG.get(name)
        if opt is None:
            return None, None
        return opt, value if sep else None

    if token.startswith("-") and len(token) > 1:
        body = token[1:]
        opt = _BY_SHORT.get(body)
        if opt is not None:
            return opt, None
        # longest short name that takes an argument glued to it
        best: OptionSpec | None = None
        for short, candidate in _BY_SHORT.items():
            if candidate.has_arg and body.startswith(short):
                if best is None or len(short) > len(best.short or ""):
                    best = candidate
        if best is not None:
            return best, body[len(best.short or "") :]

    return None, None


def tokenize(args: Sequence[str]) -> list[Directive]:
    """Turn raw arguments into directives, in order.

    Tokens that are not options become source directives. An option that
    needs a value takes the next token; when none is left its value stays
    ``None`` and the handler reports it.
    """
    directives: list[Directive] = []
    i = 0
    while i < len(args):
        token = args[i]
        i += 1
        opt, value = find_option(token)
        if opt is None:
            directives.append(Directive(None, token))
            continue
        if opt.has_arg and value is None and i < len(args):
            value = args[i]
            i += 1
        directives.append(Directive(opt, value))
    return directives


def parse_number(text: str) -> int:
    """Strict integer argument.

    Raises:
        DirectiveError: ``text`` is not a whole number

    """
    if not re.fullmatch(r"[+-]?\d+", text.strip()):
        msg = f'Not a number: "{text}"'
        raise DirectiveError(msg)
    return int(text)


def lenient_int(text: str) -> int:
    """Leading integer of ``text``, 0 when there is none."""
    m = _INT_RE.match(text)
    return int(m.group()) if m else 0


def lenient_float(text: str) -> float:
    """Leading decimal number of ``text``, 0.0 when there is none."""
    m = _FLOAT_RE.match(text)
    return float(m.group()) if m else 0.0


def parse_time_of_day(text: str) -> int | None:
    """Minutes after midnight for an ``hhmm`` string, ``None`` when invalid."""
    if len(text) != 4 or not text.isdigit():
        return None
    hour, minute = int(text[:2]), int(text[2:])
    if hour < 24 and minute < 60:
        return hour * 60 + minute
    return None


def parse_days(text: str) -> int | None:
    """Day-of-week bit mask for ``"1-3,4,7"``; 7 and 0 both mean Sunday."""
    days = parse_number_range(text) or []
    mask = 0
    for day in days:
        if day > 7:
            continue
        mask |= 1 << (0 if day == 7 else day)
    return mask or None


def parse_file_list(text: str) -> tuple[list[int], str | None]:
    """File indices for a files directive and an optional warning.

    ``"all"`` is the empty list. An empty or malformed list matches no file.
    """
    if not text:
        return list(NO_MATCH), "No files specified!"
    if text == "all":
        return [], None
    indices = parse_number_range(text)
    if indices is None:
        return list(NO_MATCH), f'Invalid file list "{text}"; no file will match'
    return indices, None


def render_usage(out: Console) -> None:
    """Print the usage header and the option table."""
    out.print(USAGE_HEADER)
    out.print()
    out.print("Options:")
    table = Table(box=None, show_header=False, pad_edge=False, padding=(0, 1))
    table.add_column("short", no_wrap=True)
    table.add_column("long", no_wrap=True)
    table.add_column("arg", no_wrap=True)
    table.add_column("help")
    for opt in sorted(OPTIONS, key=lambda o: o.long):
        table.add_row(
            f"-{opt.short}" if opt.short else "",
            f"--{opt.long}",
            opt.arg_name or "",
            opt.help,
        )
    out.print(table)


class DirectiveRunner:
    """Feeds directives to a :class:`CommandAccumulator`.

    Args:
        accumulator: Receives every mutation and immediate request
        context: Session state changed by --auth, --netrc, --ssl and --debug
        out: Console for --help and --version
        err: Console for warnings and errors
        environ: Environment consulted by --authenv

    """

    def __init__(
        self,
        accumulator: CommandAccumulator,
        context: SessionContext,
        out: Console | None = None,
        err: Console | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.acc = accumulator
        self.context = context
        self.out = out if out is not None else create_console()
        self.err = err if err is not None else create_console(stderr=True)
        self.environ = environ if environ is not None else os.environ
        self._handlers: dict[str, Callable[[str | None], Awaitable[Any] | None]] = {
            "add": self._add,
            "debug": self._debug,
            "auth": self._auth,
            "authenv": self._authenv,
            "netrc": self._netrc,
            "ssl": self._ssl,
            "torrent": self._torrent,
            "incomplete-dir": self._incomplete_dir,
            "cache": self._cache,
            "alt-speed-downlimit": self._alt_speed_downlimit,
            "alt-speed-uplimit": self._alt_speed_uplimit,
            "alt-speed-time-begin": self._alt_speed_time_begin,
            "alt-speed-time-end": self._alt_speed_time_end,
            "alt-speed-days": self._alt_speed_days,
            "port": self._port,
            "global-seedratio": self._global_seedratio,
            "torrent-done-script": self._torrent_done_script,
            "torrent-done-seeding-script": self._torrent_done_seeding_script,
            "downlimit": self._downlimit,
            "no-downlimit": self._no_downlimit,
            "uplimit": self._uplimit,
            "no-uplimit": self._no_uplimit,
            "peers": self._peers,
            "tracker-remove": self._tracker_remove,
            "seedratio": self._seedratio,
            "labels": self._labels,
            "tracker-add": self._tracker_add,
            "download-dir": self._download_dir,
            "find": self._find,
            "move": self._move,
            "start": self._start,
            "stop": self._stop,
            "verify": self._verify,
            "reannounce": self._reannounce,
            "remove": self._remove,
            "remove-and-delete": self._remove_and_delete,
            "session-info": self._session_info,
            "session-stats": self._session_stats,
            "port-test": self._port_test,
            "blocklist-update": self._blocklist_update,
            "exit": self._exit,
        }

    async def run(self, directives: Sequence[Directive]) -> bool:
        """Apply every directive, then flush what is pending.

        Returns True only when every directive and flush succeeded.
        --help and --version stop processing at once, without flushing.
        """
        for directive in directives:
            if directive.name == "help":
                render_usage(self.out)
                return True
            if directive.name == "version":
                self.out.print(f"trctl {__version__}")
                return True
            try:
                await self.apply(directive)
            except DirectiveError as e:
                logger.info("Directive %s rejected: %s", directive.name, e)
                print_error(str(e), self.err)
                self.acc.mark_failed()
        return await self.acc.finish()

    async def apply(self, directive: Directive) -> None:
        """Apply one directive.

        Raises:
            DirectiveError: the directive or its argument is invalid

        """
        opt = directive.option
        if opt is None:
            await self.acc.add_torrent_source(directive.value or "")
            return

        if opt.has_arg and directive.value is None:
            msg = f"Option --{opt.long} requires an argument"
            raise DirectiveError(msg)

        name = opt.long
        logger.debug("directive %s %s", name, directive.value or "")

        if name in ("help", "version"):
            return
        if name in SESSION_FLAGS:
            self.acc.set_session_option(*SESSION_FLAGS[name])
        elif name in TORRENT_FLAGS:
            self.acc.set_torrent_option(*TORRENT_FLAGS[name])
        elif name in TORRENT_OR_ADD_FLAGS:
            self.acc.set_torrent_or_add_option(*TORRENT_OR_ADD_FLAGS[name])
        elif name in FILE_LIST_KEYS:
            self._files(FILE_LIST_KEYS[name], directive.value or "")
        elif name in TORRENT_VIEWS:
            await self.acc.get_torrents(TORRENT_VIEWS[name])
        else:
            result = self._handlers[name](directive.value)
            if result is not None:
                await result

    # -- meta ------------------------------------------------------------

    async def _add(self, _value: str | None) -> None:
        await self.acc.begin_torrent_add()

    def _debug(self, _value: str | None) -> None:
        self.context.debug = True

    def _auth(self, value: str | None) -> None:
        self.context.auth = value

    def _authenv(self, _value: str | None) -> None:
        auth = self.environ.get("TR_AUTH")
        if auth is None:
            msg = "The TR_AUTH environment variable is not set"
            raise DirectiveError(msg)
        self.context.auth = auth

    def _netrc(self, value: str | None) -> None:
        self.context.netrc = value

    def _ssl(self, _value: str | None) -> None:
        self.context.use_ssl = True

    async def _torrent(self, value: str | None) -> None:
        await self.acc.select_torrent(value or "")

    # -- session-set -----------------------------------------------------

    def _incomplete_dir(self, value: str | None) -> None:
        self.acc.set_session_option("incomplete-dir", value)
        self.acc.set_session_option("incomplete-dir-enabled", True)

    def _cache(self, value: str | None) -> None:
        self.acc.set_session_option("cache-size-mb", lenient_int(value or ""))

    def _alt_speed_downlimit(self, value: str | None) -> None:
        self.acc.set_session_option("alt-speed-down", parse_number(value or ""))

    def _alt_speed_uplimit(self, value: str | None) -> None:
        self.acc.set_session_option("alt-speed-up", parse_number(value or ""))

    def _time_of_day(self, key: str, value: str | None) -> None:
        minutes = parse_time_of_day(value or "")
        if minutes is None:
            print_warning("Please specify the time of day in 'hhmm' format.", self.err)
            return
        self.acc.set_session_option(key, minutes)

    def _alt_speed_time_begin(self, value: str | None) -> None:
        self._time_of_day("alt-speed-time-begin", value)

    def _alt_speed_time_end(self, value: str | None) -> None:
        self._time_of_day("alt-speed-time-end", value)

    def _alt_speed_days(self, value: str | None) -> None:
        mask = parse_days(value or "")
        if mask is None:
            print_warning("Please specify the days of the week in '1-3,4,7' format.", self.err)
            return
        self.acc.set_session_option("alt-speed-time-day", mask)

    def _port(self, value: str | None) -> None:
        self.acc.set_session_option("peer-port", parse_number(value or ""))

    def _global_seedratio(self, value: str | None) -> None:
        self.acc.set_session_option("seedRatioLimit", lenient_float(value or ""))
        self.acc.set_session_option("seedRatioLimited", True)

    def _torrent_done_script(self, value: str | None) -> None:
        self.acc.set_session_option("script-torrent-done-filename", value)
        self.acc.set_session_option("script-torrent-done-enabled", True)

    def _torrent_done_seeding_script(self, value: str | None) -> None:
        self.acc.set_session_option("script-torrent-done-seeding-filename", value)
        self.acc.set_session_option("script-torrent-done-seeding-enabled", True)

    # -- session-set or torrent-set --------------------------------------

    def _downlimit(self, value: str | None) -> None:
        self.acc.set_speed_limit("down", parse_number(value or ""))

    def _no_downlimit(self, _value: str | None) -> None:
        self.acc.clear_speed_limit("down")

    def _uplimit(self, value: str | None) -> None:
        self.acc.set_speed_limit("up", parse_number(value or ""))

    def _no_uplimit(self, _value: str | None) -> None:
        self.acc.clear_speed_limit("up")

    def _peers(self, value: str | None) -> None:
        self.acc.set_peer_limit(lenient_int(value or ""))

    # -- torrent-set, or torrent-add when one is pending -----------------

    def _tracker_remove(self, value: str | None) -> None:
        self.acc.set_torrent_option("trackerRemove", lenient_int(value or ""))

    def _seedratio(self, value: str | None) -> None:
        self.acc.set_torrent_option("seedRatioLimit", lenient_float(value or ""))
        self.acc.set_torrent_option("seedRatioMode", RATIOLIMIT_SINGLE)

    def _files(self, key: str, value: str) -> None:
        indices, warning = parse_file_list(value)
        if warning is not None:
            print_warning(warning, self.err)
        self.acc.set_torrent_or_add_option(key, indices)

    def _labels(self, value: str | None) -> None:
        labels = [label for label in (value or "").split(",") if label]
        self.acc.set_torrent_or_add_option("labels", labels)

    def _tracker_add(self, value: str | None) -> None:
        self.acc.set_torrent_or_add_option("trackerAdd", value)

    def _download_dir(self, value: str | None) -> None:
        self.acc.set_download_dir(value or "")

    # -- immediate requests ----------------------------------------------

    async def _find(self, value: str | None) -> None:
        await self.acc.set_location(value or "", move=False)

    async def _move(self, value: str | None) -> None:
        await self.acc.set_location(value or "", move=True)

    async def _start(self, _value: str | None) -> None:
        await self.acc.start_torrents()

    async def _stop(self, _value: str | None) -> None:
        await self.acc.stop_torrents()

    async def _verify(self, _value: str | None) -> None:
        await self.acc.verify()

    async def _reannounce(self, _value: str | None) -> None:
        await self.acc.reannounce()

    async def _remove(self, _value: str | None) -> None:
        await self.acc.remove_torrents(delete_local_data=False)

    async def _remove_and_delete(self, _value: str | None) -> None:
        await self.acc.remove_torrents(delete_local_data=True)

    async def _session_info(self, _value: str | None) -> None:
        await self.acc.session_info()

    async def _session_stats(self, _value: str | None) -> None:
        await self.acc.session_stats()

    async def _port_test(self, _value: str | None) -> None:
        await self.acc.port_test()

    async def _blocklist_update(self, _value: str | None) -> None:
        await self.acc.blocklist_update()

    async def _exit(self, _value: str | None) -> None:
        await self.acc.session_close()
