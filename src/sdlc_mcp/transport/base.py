from __future__ import annotations

import abc
import sys

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing import TypeVar

    Self = TypeVar("Self", bound="BaseTransport")


class TransportError(ConnectionError):
    """Reading from or writing to the channel failed (not a clean EOF)."""


class BaseTransport(abc.ABC):
    @abc.abstractmethod
    def read_line(self) -> str | None:
        """Block for the next non-blank line; None signals end of stream."""

    @abc.abstractmethod
    def write_line(self, line: str) -> None: ...

    def close(self) -> None:
        """Release the channel. The default has nothing to release."""

    def __enter__(self) -> Self:  # type: ignore[return-value]
        return self  # type: ignore[return-value]

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()
