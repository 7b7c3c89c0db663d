from __future__ import annotations

import io
import json

import pytest

from sdlc_mcp.transport.base import TransportError
from sdlc_mcp.transport.stdio import StdioTransport
from tests.conftest import rpc


class BrokenStream(io.StringIO):
    def readline(self, *args):
        raise OSError("broken pipe")

    def write(self, s):
        raise OSError("broken pipe")


def test_reads_lines_in_order(stdin_factory):
    t = StdioTransport(stdin_factory('{"a": 1}\n{"b": 2}\n'), io.StringIO())
    assert t.read_line() == '{"a": 1}'
    assert t.read_line() == '{"b": 2}'
    assert t.read_line() is None


def test_skips_blank_lines_and_strips(stdin_factory):
    t = StdioTransport(stdin_factory("\n   \n  {\"x\": 1}  \r\n"), io.StringIO())
    assert t.read_line() == '{"x": 1}'
    assert t.lines_read == 1


def test_last_line_without_newline(stdin_factory):
    t = StdioTransport(stdin_factory('{"x": 1}'), io.StringIO())
    assert t.read_line() == '{"x": 1}'
    assert t.read_line() is None


def test_empty_input_is_eof(stdin_factory):
    t = StdioTransport(stdin_factory(""), io.StringIO())
    assert t.read_line() is None


def test_write_appends_newline():
    out = io.StringIO()
    t = StdioTransport(io.StringIO(), out)
    t.write_line('{"ok": true}')
    t.write_line('{"ok": false}')
    assert out.getvalue() == '{"ok": true}\n{"ok": false}\n'


def test_read_failure_is_distinct_from_eof():
    t = StdioTransport(BrokenStream(), io.StringIO())
    with pytest.raises(TransportError, match="broken pipe"):
        t.read_line()


def test_write_failure():
    t = StdioTransport(io.StringIO(), BrokenStream())
    with pytest.raises(TransportError):
        t.write_line("{}")


def test_closed_stream_raises_transport_error():
    stdin = io.StringIO("x\n")
    stdin.close()
    t = StdioTransport(stdin, io.StringIO())
    with pytest.raises(TransportError):
        t.read_line()


def test_transport_error_is_connection_error():
    assert issubclass(TransportError, ConnectionError)


def test_reads_byte_streams():
    t = StdioTransport(io.BytesIO('{"name": "café"}\n'.encode()), io.StringIO())
    assert t.read_line() == '{"name": "café"}'
    assert t.read_line() is None


def test_invalid_utf8_is_replaced_not_fatal():
    t = StdioTransport(io.BytesIO(b"\xff\xfe garbage\n{}\n"), io.StringIO())
    assert t.read_line() == "\ufffd\ufffd garbage"
    assert t.read_line() == "{}"


def test_invalid_utf8_gets_error_reply_and_later_requests_are_served(dispatcher):
    stdin = io.BytesIO(b"\xff\xfe garbage\n" + json.dumps(rpc(1, "initialize", {})).encode() + b"\n")
    out = io.StringIO()
    assert dispatcher.serve(StdioTransport(stdin, out)) == 2
    bad, good = [json.loads(line) for line in out.getvalue().splitlines()]
    assert bad["id"] is None
    assert bad["error"]["code"] == -32603
    assert good["id"] == 1
    assert "result" in good


def test_context_manager_flushes_on_exit():
    class CountingStream(io.StringIO):
        flushes = 0

        def flush(self):
            self.flushes += 1
            super().flush()

    out = CountingStream()
    with StdioTransport(io.StringIO(), out) as t:
        assert isinstance(t, StdioTransport)
    assert out.flushes == 1
