from __future__ import annotations

import logging
import sys
from typing import BinaryIO, TextIO

from sdlc_mcp.transport.base import BaseTransport, TransportError

logger = logging.getLogger(__name__)


class StdioTransport(BaseTransport):
    """Newline-delimited messages over stdin/stdout.

    Input is read as bytes and decoded as UTF-8 with replacement, so an
    undecodable line reaches the dispatcher as malformed JSON instead of
    failing the stream. Text streams are accepted as well.
    """

    def __init__(self, stdin: BinaryIO | TextIO | None = None, stdout: TextIO | None = None) -> None:
        if stdin is None:
            stdin = getattr(sys.stdin, "buffer", sys.stdin)
        self._stdin = stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.lines_read: int = 0

    def read_line(self) -> str | None:
        while True:
            try:
                raw = self._stdin.readline()
            except (OSError, ValueError) as exc:
                raise TransportError(f"Failed to read from stdin: {exc}") from exc
            if not raw:
                logger.debug("stdin closed (EOF)")
                return None
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8", errors="replace")
            line = raw.strip()
            if not line:
                continue
            self.lines_read += 1
            return line

    def write_line(self, line: str) -> None:
        try:
            self._stdout.write(line + "\n")
            self._stdout.flush()
        except (OSError, ValueError) as exc:
            raise TransportError(f"Failed to write to stdout: {exc}") from exc

    def close(self) -> None:
        try:
            self._stdout.flush()
        except (OSError, ValueError):
            logger.debug("stdout already closed")
