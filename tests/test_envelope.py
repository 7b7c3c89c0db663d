from __future__ import annotations

from sdlc_mcp import envelope
from sdlc_mcp.types import ErrorCode


def test_success_shape():
    env = envelope.success(7, {"ok": True})
    assert env == {"jsonrpc": "2.0", "id": 7, "result": {"ok": True}}
    assert "error" not in env


def test_error_shape():
    env = envelope.error("abc", ErrorCode.METHOD_NOT_FOUND, "Method not found: x")
    assert env == {
        "jsonrpc": "2.0",
        "id": "abc",
        "error": {"code": -32601, "message": "Method not found: x"},
    }
    assert "result" not in env


def test_error_code_is_plain_int():
    env = envelope.error(None, ErrorCode.INTERNAL_ERROR, "boom")
    assert type(env["error"]["code"]) is int


def test_null_result_is_kept():
    env = envelope.success(1, None)
    assert "result" in env and env["result"] is None


def test_error_codes_are_distinct():
    codes = [c.value for c in ErrorCode]
    assert len(codes) == len(set(codes))
