from __future__ import annotations

from typing import Any

from sdlc_mcp.types import JSONRPC_VERSION, ErrorCode


def success(msg_id: Any, result: Any) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}


def error(msg_id: Any, code: ErrorCode | int, message: str) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "error": {"code": int(code), "message": message},
    }
