"""Tests for typed record access and response decoding."""

from __future__ import annotations

import pytest

from trctl.rpc.protocol import ResponseTag, decode_response
from trctl.rpc.variant import Record
from trctl.utils.exceptions import ProtocolDecodeError, ValueShapeError

pytestmark = [pytest.mark.unit, pytest.mark.rpc]


class TestRecord:
    """Test typed accessors."""

    def test_missing_and_null_are_none(self):
        record = Record({"a": None})

        assert record.find_int("a") is None
        assert record.find_str("missing") is None
        assert record.find_records("missing") is None

    def test_int_rejects_bool_and_float(self):
        record = Record({"flag": True, "ratio": 1.5, "count": 3})

        assert record.find_int("count") == 3
        with pytest.raises(ValueShapeError):
            record.find_int("flag")
        with pytest.raises(ValueShapeError):
            record.find_int("ratio")

    def test_real_widens_int(self):
        value = Record({"ratio": 2}).find_real("ratio")

        assert value == 2.0
        assert isinstance(value, float)

    def test_bool_accepts_zero_and_one(self):
        record = Record({"on": 1, "off": 0, "bad": 2})

        assert record.find_bool("on") is True
        assert record.find_bool("off") is False
        with pytest.raises(ValueShapeError):
            record.find_bool("bad")

    def test_str_shape_error_names_key(self):
        with pytest.raises(ValueShapeError) as excinfo:
            Record({"name": 5}).find_str("name")

        assert excinfo.value.key == "name"
        assert "expected str" in str(excinfo.value)

    def test_find_dict_wraps(self):
        inner = Record({"torrent-added": {"id": 42}}).find_dict("torrent-added")

        assert isinstance(inner, Record)
        assert inner.find_int("id") == 42

    def test_find_records_checks_each_element(self):
        with pytest.raises(ValueShapeError) as excinfo:
            Record({"torrents": [{"id": 1}, 7]}).find_records("torrents")

        assert excinfo.value.key == "torrents[1]"

    def test_has_all(self):
        record = Record({"a": 1, "b": None})

        assert record.has_all("a")
        assert not record.has_all("a", "b")


class TestDecodeResponse:
    """Test the response envelope decoder."""

    def test_success_with_tag(self):
        response = decode_response('{"result":"success","tag":4,"arguments":{"torrents":[]}}')

        assert response.succeeded
        assert response.tag == ResponseTag.LIST
        assert response.args().find_list("torrents") == []

    def test_error_result(self):
        response = decode_response('{"result":"no such method"}')

        assert not response.succeeded
        assert response.result == "no such method"
        assert response.arguments == {}

    def test_invalid_json(self):
        with pytest.raises(ProtocolDecodeError, match="Unable to parse response 'nope'"):
            decode_response("nope")

    def test_not_an_object(self):
        with pytest.raises(ProtocolDecodeError):
            decode_response("[1, 2]")

    def test_missing_result(self):
        with pytest.raises(ProtocolDecodeError, match="result"):
            decode_response('{"arguments":{}}')

    def test_wrong_tag_type(self):
        with pytest.raises(ValueShapeError):
            decode_response('{"result":"success","tag":"4"}')

    def test_bytes_body(self):
        assert decode_response(b'{"result":"success"}').succeeded
