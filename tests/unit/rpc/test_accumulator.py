"""Tests for the command accumulator."""

from __future__ import annotations

import base64

import pytest

from trctl.rpc.accumulator import encode_metainfo
from trctl.rpc.protocol import LIST_FIELDS, ResponseTag
from trctl.rpc.request import RequestKind
from trctl.utils.exceptions import DirectiveError, TransportError

pytestmark = [pytest.mark.unit, pytest.mark.rpc]


class TestMerging:
    """Test accumulation of same-kind directives."""

    @pytest.mark.asyncio
    async def test_same_kind_directives_make_one_request(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_speed_limit("down", 50)
        acc.set_speed_limit("up", 20)
        acc.set_session_option("pex-enabled", True)
        acc.set_session_option("pex-enabled", False)

        assert await acc.finish() is True
        assert dispatcher.sent == [
            {
                "method": "session-set",
                "arguments": {
                    "speed-limit-down": 50,
                    "speed-limit-down-enabled": True,
                    "speed-limit-up": 20,
                    "speed-limit-up-enabled": True,
                    "pex-enabled": False,
                },
            }
        ]

    @pytest.mark.asyncio
    async def test_limits_with_selected_torrent(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        await acc.select_torrent("3")
        acc.set_speed_limit("down", 50)
        acc.set_speed_limit("up", 20)

        await acc.finish()

        assert dispatcher.sent == [
            {
                "method": "torrent-set",
                "arguments": {
                    "downloadLimit": 50,
                    "downloadLimited": True,
                    "uploadLimit": 20,
                    "uploadLimited": True,
                    "ids": [3],
                },
            }
        ]

    @pytest.mark.asyncio
    async def test_clear_limit_and_peer_limit_routing(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.clear_speed_limit("down")
        acc.set_peer_limit(80)
        await acc.blocklist_update()
        await acc.select_torrent("1")
        acc.clear_speed_limit("up")
        acc.set_peer_limit(20)

        await acc.finish()

        assert dispatcher.methods() == ["blocklist-update", "torrent-set", "session-set"]
        _, tset, sset = dispatcher.sent
        assert tset["arguments"] == {"uploadLimited": False, "peer-limit": 20, "ids": [1]}
        assert sset["arguments"] == {"speed-limit-down-enabled": False, "peer-limit-global": 80}

    @pytest.mark.asyncio
    async def test_limits_before_selection_apply_to_it(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_speed_limit("down", 50)
        acc.set_speed_limit("up", 20)
        await acc.select_torrent("3")

        assert acc.pending(RequestKind.SESSION_SET) is None
        assert await acc.finish() is True
        assert dispatcher.sent == [
            {
                "method": "torrent-set",
                "arguments": {
                    "downloadLimit": 50,
                    "downloadLimited": True,
                    "uploadLimit": 20,
                    "uploadLimited": True,
                    "ids": [3],
                },
            }
        ]

    @pytest.mark.asyncio
    async def test_held_limit_is_overridden_after_selection(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_peer_limit(10)
        await acc.select_torrent("5")
        acc.set_peer_limit(15)

        await acc.finish()

        assert dispatcher.sent[0]["arguments"] == {"peer-limit": 15, "ids": [5]}

    @pytest.mark.asyncio
    async def test_held_limits_become_session_limits_before_a_request(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_speed_limit("down", 50)
        await acc.session_stats()
        await acc.select_torrent("3")

        await acc.finish()

        assert dispatcher.methods() == ["session-stats", "session-set"]
        assert dispatcher.sent[1]["arguments"] == {
            "speed-limit-down": 50,
            "speed-limit-down-enabled": True,
        }

    @pytest.mark.asyncio
    async def test_new_add_turns_held_limits_into_session_limits(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_speed_limit("up", 5)

        await acc.begin_torrent_add()

        assert dispatcher.methods() == ["session-set"]
        assert dispatcher.sent[0]["arguments"] == {
            "speed-limit-up": 5,
            "speed-limit-up-enabled": True,
        }

    @pytest.mark.asyncio
    async def test_list_keys_append_across_directives(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        await acc.select_torrent("2")
        acc.set_torrent_or_add_option("trackerAdd", "http://a/announce")
        acc.set_torrent_or_add_option("trackerAdd", "http://b/announce")

        await acc.finish()

        assert dispatcher.sent[0]["arguments"]["trackerAdd"] == ["http://a/announce", "http://b/announce"]


class TestFlushOrdering:
    """Test implicit flushes on incompatible transitions."""

    @pytest.mark.asyncio
    async def test_begin_add_flushes_set_before_session(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_session_option("dht-enabled", True)
        await acc.select_torrent("4")
        acc.set_torrent_option("honorsSessionLimits", False)

        await acc.begin_torrent_add()

        assert dispatcher.methods() == ["torrent-set", "session-set"]
        assert acc.has_pending_add

    @pytest.mark.asyncio
    async def test_select_flushes_with_previous_selector(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_session_option("lpd-enabled", True)
        await acc.select_torrent("1")
        acc.set_torrent_option("honorsSessionLimits", True)

        await acc.select_torrent("2")

        assert dispatcher.sent == [
            {"method": "torrent-set", "arguments": {"honorsSessionLimits": True, "ids": [1]}}
        ]
        assert acc.selector == "2"
        assert acc.pending(RequestKind.SESSION_SET) is not None

    @pytest.mark.asyncio
    async def test_torrent_set_lands_before_action(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        await acc.select_torrent("5")
        acc.set_torrent_option("seedRatioMode", 2)

        await acc.verify()

        assert dispatcher.methods() == ["torrent-set", "torrent-verify"]
        assert all(p["arguments"]["ids"] == [5] for p in dispatcher.sent)

    @pytest.mark.asyncio
    async def test_finish_order(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        acc.set_session_option("utp-enabled", True)
        await acc.select_torrent("7")
        acc.set_torrent_option("honorsSessionLimits", True)
        await acc.begin_torrent_add()
        await acc.add_torrent_source("magnet:?xt=urn:btih:abc")
        acc.set_session_option("utp-enabled", False)

        await acc.finish()

        assert dispatcher.methods() == ["torrent-set", "session-set", "torrent-add", "session-set"]

    @pytest.mark.asyncio
    async def test_flush_clears_even_on_failure(self, make_accumulator):
        acc, dispatcher = make_accumulator({"session-set": TransportError("(url) refused")})
        acc.set_session_option("pex-enabled", True)

        assert await acc.finish() is False
        await acc.finish()

        assert dispatcher.methods() == ["session-set"]


class TestTorrentAdd:
    """Test the torrent-add request."""

    @pytest.mark.asyncio
    async def test_added_torrent_becomes_selector(self, make_accumulator, consoles):
        acc, dispatcher = make_accumulator(
            {"torrent-add": {"result": "success", "arguments": {"torrent-added": {"id": 42}}}}
        )
        await acc.begin_torrent_add()
        await acc.add_torrent_source("https://example.org/x.torrent")

        assert await acc.finish() is True
        assert acc.selector == "42"
        assert dispatcher.sent[0] == {
            "method": "torrent-add",
            "arguments": {"filename": "https://example.org/x.torrent"},
            "tag": ResponseTag.TORRENT_ADD,
        }
        assert f'{acc.router.rpc_url} responded: "success"' in consoles.stdout

    @pytest.mark.asyncio
    async def test_file_source_is_sent_as_metainfo(self, make_accumulator, tmp_path):
        torrent = tmp_path / "x.torrent"
        torrent.write_bytes(b"d4:infod4:name1:xee")
        acc, dispatcher = make_accumulator()
        await acc.begin_torrent_add()
        await acc.add_torrent_source(str(torrent))

        await acc.finish()

        metainfo = dispatcher.sent[0]["arguments"]["metainfo"]
        assert base64.b64decode(metainfo) == b"d4:infod4:name1:xee"

    @pytest.mark.asyncio
    async def test_each_source_is_its_own_add(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        await acc.begin_torrent_add()
        acc.set_download_dir("/data")
        await acc.add_torrent_source("magnet:?xt=urn:btih:one")
        await acc.add_torrent_source("magnet:?xt=urn:btih:two")

        await acc.finish()

        assert dispatcher.methods() == ["torrent-add", "torrent-add"]
        assert dispatcher.sent[0]["arguments"] == {
            "download-dir": "/data",
            "filename": "magnet:?xt=urn:btih:one",
        }
        assert dispatcher.sent[1]["arguments"] == {"filename": "magnet:?xt=urn:btih:two"}

    @pytest.mark.asyncio
    async def test_source_without_add_is_rejected(self, make_accumulator):
        acc, _ = make_accumulator()

        with pytest.raises(DirectiveError, match="Unknown option: stray"):
            await acc.add_torrent_source("stray")

    @pytest.mark.asyncio
    async def test_options_go_to_pending_add(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        await acc.begin_torrent_add()
        acc.set_torrent_or_add_option("bandwidthPriority", 1)
        acc.set_torrent_or_add_option("files-unwanted", [0, 2])
        assert await acc.stop_torrents() is True
        assert await acc.set_location("/existing", move=False) is True

        await acc.finish()

        assert dispatcher.sent == [
            {
                "method": "torrent-add",
                "arguments": {
                    "bandwidthPriority": 1,
                    "files-unwanted": [0, 2],
                    "paused": True,
                    "download-dir": "/existing",
                },
                "tag": ResponseTag.TORRENT_ADD,
            }
        ]

    def test_encode_metainfo_missing_file(self, tmp_path):
        assert encode_metainfo(str(tmp_path / "nope.torrent")) is None
        assert encode_metainfo("magnet:?xt=urn:btih:abc") is None


class TestImmediateRequests:
    """Test requests sent as soon as their directive arrives."""

    @pytest.mark.asyncio
    async def test_list_falls_back_to_all(self, make_accumulator):
        acc, dispatcher = make_accumulator({"torrent-get": {"result": "success", "arguments": {"torrents": []}}})

        assert await acc.get_torrents(ResponseTag.LIST) is True
        assert dispatcher.sent == [
            {
                "method": "torrent-get",
                "arguments": {"fields": list(LIST_FIELDS)},
                "tag": ResponseTag.LIST,
            }
        ]

    @pytest.mark.asyncio
    async def test_details_without_selector_matches_nothing(self, make_accumulator, consoles):
        acc, dispatcher = make_accumulator({"torrent-get": {"result": "success", "arguments": {"torrents": []}}})

        await acc.get_torrents(ResponseTag.DETAILS)

        assert dispatcher.sent[0]["arguments"]["ids"] == [-1]
        assert "No torrent specified" in consoles.stderr

    @pytest.mark.asyncio
    async def test_session_requests_carry_tags(self, make_accumulator):
        acc, dispatcher = make_accumulator(
            {"port-test": {"result": "success", "arguments": {"port-is-open": True}}}
        )

        await acc.port_test()
        await acc.blocklist_update()
        await acc.session_close()

        assert dispatcher.sent[0] == {"method": "port-test", "arguments": {}, "tag": ResponseTag.PORTTEST}
        assert dispatcher.sent[1] == {"method": "blocklist-update", "arguments": {}}
        assert dispatcher.sent[2] == {"method": "session-close", "arguments": {}}

    @pytest.mark.asyncio
    async def test_remove_and_move(self, make_accumulator):
        acc, dispatcher = make_accumulator()
        await acc.select_torrent("active")

        await acc.remove_torrents(delete_local_data=True)
        await acc.set_location("/new/home", move=True)
        await acc.start_torrents()

        assert dispatcher.sent == [
            {"method": "torrent-remove", "arguments": {"delete-local-data": True, "ids": "recently-active"}},
            {
                "method": "torrent-set-location",
                "arguments": {"location": "/new/home", "move": True, "ids": "recently-active"},
            },
            {"method": "torrent-start", "arguments": {"ids": "recently-active"}},
        ]

    @pytest.mark.asyncio
    async def test_rpc_error_fails_the_run(self, make_accumulator, consoles):
        acc, _ = make_accumulator({"torrent-reannounce": {"result": "invalid or corrupt torrent file"}})
        await acc.select_torrent("all")

        assert await acc.reannounce() is False
        assert await acc.finish() is False
        assert "Error: invalid or corrupt torrent file" in consoles.stderr

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_later_requests(self, make_accumulator, consoles):
        acc, dispatcher = make_accumulator({"session-stats": TransportError("(url) Connection refused")})

        assert await acc.session_stats() is False
        assert await acc.blocklist_update() is True
        assert dispatcher.methods() == ["session-stats", "blocklist-update"]
        assert "Connection refused" in consoles.stderr
        assert acc.succeeded is False
