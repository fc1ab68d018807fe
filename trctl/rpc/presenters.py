"""Text presenters for RPC responses.

Each presenter takes the response ``arguments`` as a :class:`Record` plus a
:class:`UnitFormatter` and returns the text to print, without a trailing
newline. A line or section whose fields are missing from the response is
left out, so older daemons that omit fields still get output.
"""

from __future__ import annotations

import base64
import binascii
import math
from typing import Any, Callable

from trctl.rpc.protocol import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    RATIOLIMIT_GLOBAL,
    RATIOLIMIT_SINGLE,
    RATIOLIMIT_UNLIMITED,
    SCHEDULE_DAYS,
    STAT_LOCAL_ERROR,
    STAT_TRACKER_ERROR,
    STAT_TRACKER_WARNING,
    STATUS_CHECK,
    STATUS_CHECK_WAIT,
    STATUS_DOWNLOAD,
    STATUS_DOWNLOAD_WAIT,
    STATUS_SEED,
    STATUS_SEED_WAIT,
    STATUS_STOPPED,
    TRACKER_ACTIVE,
    TRACKER_INACTIVE,
    TRACKER_QUEUED,
    TRACKER_WAITING,
    ResponseTag,
)
from trctl.rpc.variant import Record
from trctl.utils.exceptions import ValueShapeError
from trctl.utils.formatting import (
    UnitFormatter,
    format_date,
    format_duration_with_total,
    format_eta,
    format_percent,
    format_ratio,
    ratio_of,
)

Presenter = Callable[[Record, UnitFormatter], str]

BANDWIDTH_PRIORITY_NAMES = ("Low", "Normal", "High", "Invalid")


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _torrents(args: Record) -> list[Record]:
    return args.find_records("torrents") or []


def _section(title: str, lines: list[str]) -> list[str]:
    return [title, *lines] if lines else []


def _join_sections(sections: list[list[str]]) -> str:
    return "\n\n".join("\n".join(s) for s in sections if s)


def _element(items: list[Any], index: int, key: str, kind: type) -> Any:
    if index >= len(items):
        return None
    value = items[index]
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise ValueShapeError(f"{key}[{index}]", "bool", value)
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueShapeError(f"{key}[{index}]", kind.__name__, value)
    return value


def status_string(t: Record) -> str:
    """One-word torrent state as shown in the list and details views."""
    status = t.find_int("status")
    if status is None:
        return ""

    if status in (STATUS_DOWNLOAD_WAIT, STATUS_SEED_WAIT):
        return "Queued"

    if status == STATUS_STOPPED:
        return "Finished" if t.find_bool("isFinished") else "Stopped"

    if status in (STATUS_CHECK_WAIT, STATUS_CHECK):
        label = "Will Verify" if status == STATUS_CHECK_WAIT else "Verifying"
        progress = t.find_real("recheckProgress")
        if progress is not None:
            return f"{label} ({math.floor(progress * 100.0):.0f}%)"
        return label

    if status in (STATUS_DOWNLOAD, STATUS_SEED):
        from_us = t.find_int("peersGettingFromUs") or 0
        to_us = t.find_int("peersSendingToUs") or 0
        if from_us and to_us:
            return "Up & Down"
        if to_us:
            return "Downloading"
        if from_us:
            left = t.find_int("leftUntilDone") or 0
            return "Uploading" if left > 0 else "Seeding"
        return "Idle"

    return "Unknown"


def _details_name(t: Record) -> list[str]:
    lines = []
    torrent_id = t.find_int("id")
    if torrent_id is not None:
        lines.append(f"  Id: {torrent_id}")
    for key, label in (("name", "Name"), ("hashString", "Hash"), ("magnetLink", "Magnet")):
        value = t.find_str(key)
        if value is not None:
            lines.append(f"  {label}: {value}")
    labels = t.find_list("labels")
    if labels is not None:
        lines.append("  Labels: " + ", ".join(str(x) for x in labels if isinstance(x, str)))
    return _section("NAME", lines)


def _details_transfer(t: Record, fmt: UnitFormatter) -> list[str]:
    lines = []
    state = status_string(t)
    if state:
        lines.append(f"  State: {state}")

    location = t.find_str("downloadDir")
    if location is not None:
        lines.append(f"  Location: {location}")

    size_when_done = t.find_int("sizeWhenDone")
    left = t.find_int("leftUntilDone")
    if size_when_done and left is not None:
        done = 100.0 * (size_when_done - left) / size_when_done
        lines.append(f"  Percent Done: {format_percent(done)}%")

    eta = t.find_int("eta")
    if eta is not None:
        lines.append(f"  ETA: {format_duration_with_total(eta) if eta >= 0 else 'Unknown'}")

    for key, label in (("rateDownload", "Download Speed"), ("rateUpload", "Upload Speed")):
        rate = t.find_int(key)
        if rate is not None:
            lines.append(f"  {label}: {fmt.speed_bps(rate)}")

    unchecked = t.find_int("haveUnchecked")
    valid = t.find_int("haveValid")
    if unchecked is not None and valid is not None:
        lines.append(f"  Have: {fmt.size(unchecked + valid)} ({fmt.size(valid)} verified)")

    if size_when_done is not None:
        desired = t.find_int("desiredAvailable")
        if size_when_done < 1:
            lines.append("  Availability: None")
        elif desired is not None and left is not None:
            available = desired + size_when_done - left
            lines.append(f"  Availability: {format_percent(100.0 * available / size_when_done)}%")
        total_size = t.find_int("totalSize")
        if total_size is not None:
            lines.append(
                f"  Total size: {fmt.size(total_size)} ({fmt.size(size_when_done)} wanted)"
            )

    downloaded = t.find_int("downloadedEver")
    uploaded = t.find_int("uploadedEver")
    if downloaded is not None and uploaded is not None:
        corrupt = t.find_int("corruptEver")
        if corrupt:
            lines.append(
                f"  Downloaded: {fmt.size(downloaded)} "
                f"(+{fmt.size(corrupt)} discarded after failed checksum)"
            )
        else:
            lines.append(f"  Downloaded: {fmt.size(downloaded)}")
        lines.append(f"  Uploaded: {fmt.size(uploaded)}")
        lines.append(f"  Ratio: {format_ratio(ratio_of(uploaded, downloaded))}")

    error_string = t.find_str("errorString")
    error = t.find_int("error")
    if error_string and error:
        if error == STAT_TRACKER_WARNING:
            lines.append(f"  Tracker gave a warning: {error_string}")
        elif error == STAT_TRACKER_ERROR:
            lines.append(f"  Tracker gave an error: {error_string}")
        elif error == STAT_LOCAL_ERROR:
            lines.append(f"  Error: {error_string}")

    connected = t.find_int("peersConnected")
    from_us = t.find_int("peersGettingFromUs")
    to_us = t.find_int("peersSendingToUs")
    if connected is not None and from_us is not None and to_us is not None:
        lines.append(
            f"  Peers: connected to {connected}, uploading to {from_us}, "
            f"downloading from {to_us}"
        )

    webseeds = t.find_list("webseeds")
    webseeds_sending = t.find_int("webseedsSendingToUs")
    if webseeds and webseeds_sending is not None:
        lines.append(
            f"  Web Seeds: downloading from {webseeds_sending} of "
            f"{len(webseeds)} web seeds"
        )

    return _section("TRANSFER", lines)


def _details_history(t: Record) -> list[str]:
    lines = []
    for key, label in (
        ("addedDate", "Date added:      "),
        ("doneDate", "Date finished:   "),
        ("startDate", "Date started:    "),
        ("activityDate", "Latest activity: "),
    ):
        value = t.find_int(key)
        if value:
            lines.append(f"  {label} {format_date(value)}")
    for key, label in (
        ("secondsDownloading", "Downloading Time:"),
        ("secondsSeeding", "Seeding Time:    "),
    ):
        value = t.find_int(key)
        if value is not None and value > 0:
            lines.append(f"  {label} {format_duration_with_total(value)}")
    return _section("HISTORY", lines)


def _details_origins(t: Record, fmt: UnitFormatter) -> list[str]:
    lines = []
    created = t.find_int("dateCreated")
    if created:
        lines.append(f"  Date created: {format_date(created)}")
    is_private = t.find_bool("isPrivate")
    if is_private is not None:
        lines.append(f"  Public torrent: {_yes_no(not is_private)}")
    for key, label in (("comment", "Comment"), ("creator", "Creator"), ("source", "Source")):
        value = t.find_str(key)
        if value:
            lines.append(f"  {label}: {value}")
    piece_count = t.find_int("pieceCount")
    if piece_count is not None:
        lines.append(f"  Piece Count: {piece_count}")
    piece_size = t.find_int("pieceSize")
    if piece_size is not None:
        lines.append(f"  Piece Size: {fmt.mem(piece_size)}")
    return _section("ORIGINS", lines)


def _details_limits(t: Record, fmt: UnitFormatter) -> list[str]:
    lines = []
    for flag, key, label in (
        ("downloadLimited", "downloadLimit", "Download Limit"),
        ("uploadLimited", "uploadLimit", "Upload Limit"),
    ):
        limited = t.find_bool(flag)
        limit = t.find_int(key)
        if limited is not None and limit is not None:
            lines.append(f"  {label}: {fmt.speed_kbps(limit) if limited else 'Unlimited'}")

    mode = t.find_int("seedRatioMode")
    if mode == RATIOLIMIT_GLOBAL:
        lines.append("  Ratio Limit: Default")
    elif mode == RATIOLIMIT_SINGLE:
        limit = t.find_real("seedRatioLimit")
        if limit is not None:
            lines.append(f"  Ratio Limit: {format_ratio(limit)}")
    elif mode == RATIOLIMIT_UNLIMITED:
        lines.append("  Ratio Limit: Unlimited")

    honors = t.find_bool("honorsSessionLimits")
    if honors is not None:
        lines.append(f"  Honors Session Limits: {_yes_no(honors)}")

    peer_limit = t.find_int("peer-limit")
    if peer_limit is not None:
        lines.append(f"  Peer limit: {peer_limit}")

    priority = t.find_int("bandwidthPriority")
    if priority is not None:
        lines.append(f"  Bandwidth Priority: {BANDWIDTH_PRIORITY_NAMES[(priority + 1) & 3]}")

    return _section("LIMITS & BANDWIDTH", lines)


def present_details(args: Record, fmt: UnitFormatter) -> str:
    """Sectioned details for each torrent in the response."""
    blocks = []
    for t in _torrents(args):
        blocks.append(
            _join_sections(
                [
                    _details_name(t),
                    _details_transfer(t, fmt),
                    _details_history(t),
                    _details_origins(t, fmt),
                    _details_limits(t, fmt),
                ]
            )
        )
    return "\n\n".join(b for b in blocks if b)


def present_files(args: Record, fmt: UnitFormatter) -> str:
    blocks = []
    for t in _torrents(args):
        name = t.find_str("name")
        files = t.find_records("files")
        priorities = t.find_list("priorities")
        wanted = t.find_list("wanted")
        if name is None or files is None or priorities is None or wanted is None:
            continue

        lines = [
            f"{name} ({len(files)} files):",
            "%3s  %4s %8s %3s %9s  %s" % ("#", "Done", "Priority", "Get", "Size", "Name"),
        ]
        for index, f in enumerate(files):
            length = f.find_int("length")
            filename = f.find_str("name")
            have = f.find_int("bytesCompleted")
            priority = _element(priorities, index, "priorities", int)
            is_wanted = _element(wanted, index, "wanted", bool)
            if None in (length, filename, have, priority, is_wanted):
                continue

            percent = have / length if length else 1.0
            if priority == PRIORITY_LOW:
                priority_name = "Low"
            elif priority == PRIORITY_HIGH:
                priority_name = "High"
            else:
                priority_name = "Normal"
            lines.append(
                "%3d: %3.0f%% %-8s %-3s %9s  %s"
                % (
                    index,
                    math.floor(100.0 * percent),
                    priority_name,
                    _yes_no(is_wanted),
                    fmt.size(length),
                    filename,
                )
            )
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def present_list(args: Record, fmt: UnitFormatter) -> str:
    """The torrent table with a totals line."""
    torrents = args.find_records("torrents")
    if torrents is None:
        return ""

    lines = [
        "%6s   %-4s  %9s  %-8s  %6s  %6s  %-5s  %-11s  %s"
        % ("ID", "Done", "Have", "ETA", "Up", "Down", "Ratio", "Status", "Name")
    ]
    total_size = 0
    total_up = 0
    total_down = 0

    for t in torrents:
        eta = t.find_int("eta")
        torrent_id = t.find_int("id")
        left = t.find_int("leftUntilDone")
        name = t.find_str("name")
        down = t.find_int("rateDownload")
        up = t.find_int("rateUpload")
        size_when_done = t.find_int("sizeWhenDone")
        status = t.find_int("status")
        ratio = t.find_real("uploadRatio")
        if None in (eta, torrent_id, left, name, down, up, size_when_done, status, ratio):
            continue

        if size_when_done:
            done = f"{int(100.0 * (size_when_done - left) / size_when_done)}%"
        else:
            done = "n/a"

        eta_text = format_eta(eta) if (left != 0 or eta != -1) else "Done"
        error_mark = "*" if t.find_int("error") else " "

        lines.append(
            "%6d%c  %4s  %9s  %-8s  %6.1f  %6.1f  %5s  %-11s  %s"
            % (
                torrent_id,
                error_mark,
                done,
                fmt.size(size_when_done - left),
                eta_text,
                fmt.kbps_value(up),
                fmt.kbps_value(down),
                format_ratio(ratio),
                status_string(t),
                name,
            )
        )
        total_up += up
        total_down += down
        total_size += size_when_done - left

    lines.append(
        "Sum:           %9s            %6.1f  %6.1f"
        % (fmt.size(total_size), fmt.kbps_value(total_up), fmt.kbps_value(total_down))
    )
    return "\n".join(lines)


def present_peers(args: Record, fmt: UnitFormatter) -> str:
    blocks = []
    for t in _torrents(args):
        peers = t.find_records("peers")
        if peers is None:
            continue
        lines = [
            "%-40s  %-12s  %-5s %-6s  %-6s  %s"
            % ("Address", "Flags", "Done", "Down", "Up", "Client")
        ]
        for p in peers:
            address = p.find_str("address")
            client = p.find_str("clientName")
            progress = p.find_real("progress")
            flags = p.find_str("flagStr")
            to_client = p.find_int("rateToClient")
            to_peer = p.find_int("rateToPeer")
            if None in (address, client, progress, flags, to_client, to_peer):
                continue
            lines.append(
                "%-40s  %-12s  %-5.1f %6.1f  %6.1f  %s"
                % (
                    address,
                    flags,
                    progress * 100.0,
                    fmt.kbps_value(to_client),
                    fmt.kbps_value(to_peer),
                    client,
                )
            )
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_piece_bits(raw: str, piece_count: int) -> str:
    """Bitfield as rows of 0/1, space every 8 pieces, new row every 64."""
    try:
        bitfield = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueShapeError("pieces", "base64", raw) from e

    parts = ["  "]
    piece = 0
    for byte in bitfield:
        bit = 0
        while piece < piece_count and bit < 8:
            parts.append("1" if byte & (1 << (7 - bit)) else "0")
            bit += 1
            piece += 1
        parts.append(" ")
        if piece % 64 == 0:
            parts.append("\n  ")
    return "".join(parts).rstrip()


def present_pieces(args: Record, fmt: UnitFormatter) -> str:
    blocks = []
    for t in _torrents(args):
        raw = t.find_str("pieces")
        piece_count = t.find_int("pieceCount")
        if raw is None or piece_count is None:
            continue
        blocks.append(render_piece_bits(raw, piece_count))
    return "\n\n".join(blocks)


def present_port_test(args: Record, fmt: UnitFormatter) -> str:
    is_open = args.find_bool("port-is-open")
    if is_open is None:
        return ""
    return f"Port is open: {_yes_no(is_open)}"


_TRACKER_FIELDS = (
    "downloadCount",
    "hasAnnounced",
    "hasScraped",
    "host",
    "id",
    "isBackup",
    "announceState",
    "scrapeState",
    "lastAnnouncePeerCount",
    "lastAnnounceResult",
    "lastAnnounceStartTime",
    "lastAnnounceSucceeded",
    "lastAnnounceTime",
    "lastAnnounceTimedOut",
    "lastScrapeResult",
    "lastScrapeStartTime",
    "lastScrapeSucceeded",
    "lastScrapeTime",
    "lastScrapeTimedOut",
    "leecherCount",
    "nextAnnounceTime",
    "nextScrapeTime",
    "seederCount",
    "tier",
)


def _tracker_lines(tr: Record, now: int) -> list[str]:
    if not tr.has_all(*_TRACKER_FIELDS):
        return []

    def ago(key: str) -> str:
        return format_duration_with_total(now - tr.find_int(key))

    is_backup = tr.find_bool("isBackup")
    tier = tr.find_int("tier")
    lines = ["", f"  Tracker {tr.find_int('id')}: {tr.find_str('host')}"]
    lines.append(f"  Backup on tier {tier}" if is_backup else f"  Active in tier {tier}")
    if is_backup:
        return lines

    announce_state = tr.find_int("announceState")
    if tr.find_bool("hasAnnounced") and announce_state != TRACKER_INACTIVE:
        if tr.find_bool("lastAnnounceSucceeded"):
            lines.append(
                f"  Got a list of {tr.find_int('lastAnnouncePeerCount')} peers "
                f"{ago('lastAnnounceTime')} ago"
            )
        elif tr.find_bool("lastAnnounceTimedOut"):
            lines.append("  Peer list request timed out; will retry")
        else:
            lines.append(
                f"  Got an error \"{tr.find_str('lastAnnounceResult')}\" "
                f"{ago('lastAnnounceTime')} ago"
            )

    if announce_state == TRACKER_INACTIVE:
        lines.append("  No updates scheduled")
    elif announce_state == TRACKER_WAITING:
        wait = format_duration_with_total(tr.find_int("nextAnnounceTime") - now)
        lines.append(f"  Asking for more peers in {wait}")
    elif announce_state == TRACKER_QUEUED:
        lines.append("  Queued to ask for more peers")
    elif announce_state == TRACKER_ACTIVE:
        lines.append(f"  Asking for more peers now... {ago('lastAnnounceStartTime')}")

    if tr.find_bool("hasScraped"):
        if tr.find_bool("lastScrapeSucceeded"):
            lines.append(
                f"  Tracker had {tr.find_int('seederCount')} seeders and "
                f"{tr.find_int('leecherCount')} leechers {ago('lastScrapeTime')} ago"
            )
        elif tr.find_bool("lastScrapeTimedOut"):
            lines.append("  Tracker scrape timed out; will retry")
        else:
            lines.append(
                f"  Got a scrape error \"{tr.find_str('lastScrapeResult')}\" "
                f"{ago('lastScrapeTime')} ago"
            )

    scrape_state = tr.find_int("scrapeState")
    if scrape_state == TRACKER_WAITING:
        wait = format_duration_with_total(tr.find_int("nextScrapeTime") - now)
        lines.append(f"  Asking for peer counts in {wait}")
    elif scrape_state == TRACKER_QUEUED:
        lines.append("  Queued to ask for peer counts")
    elif scrape_state == TRACKER_ACTIVE:
        lines.append(f"  Asking for peer counts now... {ago('lastScrapeStartTime')}")

    return lines


def present_trackers(args: Record, fmt: UnitFormatter) -> str:
    now = fmt.now()
    blocks = []
    for t in _torrents(args):
        stats = t.find_records("trackerStats")
        if stats is None:
            continue
        lines: list[str] = []
        for tr in stats:
            lines.extend(_tracker_lines(tr, now))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _speed_limit_line(
    label: str,
    fmt: UnitFormatter,
    limit: int,
    enabled: bool,
    alt_limit: int,
    alt_enabled: bool,
) -> str:
    if alt_enabled:
        effective = fmt.speed_kbps(alt_limit)
    elif enabled:
        effective = fmt.speed_kbps(limit)
    else:
        effective = "Unlimited"
    return (
        f"  {label} speed limit: {effective} "
        f"({'Enabled' if enabled else 'Disabled'} limit: {fmt.speed_kbps(limit)}; "
        f"{'Enabled' if alt_enabled else 'Disabled'} turtle limit: {fmt.speed_kbps(alt_limit)})"
    )


def _session_limits(args: Record, fmt: UnitFormatter) -> list[str]:
    required = (
        "alt-speed-down",
        "alt-speed-enabled",
        "alt-speed-time-begin",
        "alt-speed-time-enabled",
        "alt-speed-time-end",
        "alt-speed-time-day",
        "alt-speed-up",
        "peer-limit-global",
        "speed-limit-down",
        "speed-limit-down-enabled",
        "speed-limit-up",
        "speed-limit-up-enabled",
        "seedRatioLimit",
        "seedRatioLimited",
    )
    if not args.has_all(*required):
        return []

    alt_enabled = args.find_bool("alt-speed-enabled")
    ratio_limited = args.find_bool("seedRatioLimited")
    ratio_limit = args.find_real("seedRatioLimit")
    lines = [
        f"  Peer limit: {args.find_int('peer-limit-global')}",
        "  Default seed ratio limit: "
        + (format_ratio(ratio_limit) if ratio_limited else "Unlimited"),
        _speed_limit_line(
            "Upload",
            fmt,
            args.find_int("speed-limit-up"),
            args.find_bool("speed-limit-up-enabled"),
            args.find_int("alt-speed-up"),
            alt_enabled,
        ),
        _speed_limit_line(
            "Download",
            fmt,
            args.find_int("speed-limit-down"),
            args.find_bool("speed-limit-down-enabled"),
            args.find_int("alt-speed-down"),
            alt_enabled,
        ),
    ]

    if args.find_bool("alt-speed-time-enabled"):
        begin = args.find_int("alt-speed-time-begin")
        end = args.find_int("alt-speed-time-end")
        day_mask = args.find_int("alt-speed-time-day")
        days = "".join(f"{name} " for bit, name in SCHEDULE_DAYS if day_mask & bit)
        lines.append(
            "  Turtle schedule: %02d:%02d - %02d:%02d  %s"
            % (begin // 60, begin % 60, end // 60, end % 60, days)
        )
    return _section("LIMITS", lines)


def present_session(args: Record, fmt: UnitFormatter) -> str:
    """Daemon version, configuration, limits and misc settings."""
    version = []
    daemon_version = args.find_str("version")
    if daemon_version is not None:
        version.append(f"  Daemon version: {daemon_version}")
    for key, label in (("rpc-version", "RPC version"), ("rpc-version-minimum", "RPC minimum version")):
        value = args.find_int(key)
        if value is not None:
            version.append(f"  {label}: {value}")

    config = []
    for key, label in (
        ("config-dir", "Configuration directory"),
        ("download-dir", "Download directory"),
    ):
        value = args.find_str(key)
        if value is not None:
            config.append(f"  {label}: {value}")
    peer_port = args.find_int("peer-port")
    if peer_port is not None:
        config.append(f"  Listenport: {peer_port}")
    for key, label in (
        ("port-forwarding-enabled", "Portforwarding enabled"),
        ("utp-enabled", "uTP enabled"),
        ("dht-enabled", "Distributed hash table enabled"),
        ("lpd-enabled", "Local peer discovery enabled"),
        ("pex-enabled", "Peer exchange allowed"),
    ):
        value = args.find_bool(key)
        if value is not None:
            config.append(f"  {label}: {_yes_no(value)}")
    encryption = args.find_str("encryption")
    if encryption is not None:
        config.append(f"  Encryption: {encryption}")
    cache_size = args.find_int("cache-size-mb")
    if cache_size is not None:
        config.append(f"  Maximum memory cache size: {fmt.mem_mb(cache_size)}")

    misc = []
    for key, label in (
        ("start-added-torrents", "Autostart added torrents"),
        ("trash-original-torrent-files", "Delete automatically added torrents"),
    ):
        value = args.find_bool(key)
        if value is not None:
            misc.append(f"  {label}: {_yes_no(value)}")

    return _join_sections(
        [
            _section("VERSION", version),
            _section("CONFIG", config),
            _session_limits(args, fmt),
            _section("MISC", misc),
        ]
    )


def _stats_lines(stats: Record, fmt: UnitFormatter) -> list[str]:
    up = stats.find_int("uploadedBytes")
    down = stats.find_int("downloadedBytes")
    seconds = stats.find_int("secondsActive")
    return [
        f"  Uploaded:   {fmt.size(up)}",
        f"  Downloaded: {fmt.size(down)}",
        f"  Ratio:      {format_ratio(ratio_of(up, down))}",
        f"  Duration:   {format_duration_with_total(seconds)}",
    ]


def present_session_stats(args: Record, fmt: UnitFormatter) -> str:
    sections = []
    required = ("uploadedBytes", "downloadedBytes", "secondsActive")

    current = args.find_dict("current-stats")
    if current is not None and current.has_all(*required):
        sections.append(_section("CURRENT SESSION", _stats_lines(current, fmt)))

    total = args.find_dict("cumulative-stats")
    if total is not None and total.has_all("sessionCount", *required):
        lines = [f"  Started {total.find_int('sessionCount')} times"]
        lines.extend(_stats_lines(total, fmt))
        sections.append(_section("TOTAL", lines))

    return _join_sections(sections)


PRESENTERS: dict[int, Presenter] = {
    ResponseTag.SESSION: present_session,
    ResponseTag.STATS: present_session_stats,
    ResponseTag.DETAILS: present_details,
    ResponseTag.FILES: present_files,
    ResponseTag.LIST: present_list,
    ResponseTag.PEERS: present_peers,
    ResponseTag.PIECES: present_pieces,
    ResponseTag.PORTTEST: present_port_test,
    ResponseTag.TRACKERS: present_trackers,
}
