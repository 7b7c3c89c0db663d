from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "0.1.0"
SERVER_NAME = "sdlc-tools-mcp-server"
DEFAULT_TIMEOUT = 30


class ErrorCode(IntEnum):
    EXECUTION_FAILED = -32000
    CAPABILITY_NOT_FOUND = -32001
    NOT_INITIALIZED = -32002
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class RpcError(Exception):
    """Protocol-level failure raised inside a method handler."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class Success:
    value: Any


@dataclass(frozen=True)
class Failure:
    message: str
    exception: BaseException | None = None


Outcome = Union[Success, Failure]
