from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Registry(Generic[T]):
    """Name-keyed collection of capabilities of one kind.

    Iteration follows registration order. Registering a name that is
    already present replaces the earlier entry in place and logs a warning.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._items: dict[str, T] = {}

    def register(self, item: T) -> None:
        name = item.name  # type: ignore[attr-defined]
        if name in self._items:
            logger.warning("Replacing %s already registered as %r", self.kind, name)
        self._items[name] = item
        logger.info("Registered %s: %s", self.kind, name)

    def get(self, name: str) -> T | None:
        return self._items.get(name)

    def names(self) -> list[str]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)
