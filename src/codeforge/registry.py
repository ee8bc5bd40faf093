"""Generic keyed registry shared by the worker and workflow stores."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from codeforge.errors import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Registry(Generic[T]):
    """Name -> item mapping with last-write-wins registration.

    Writes are expected during setup only; once runs start the registry is
    read concurrently. Writes take a lock so a late registration cannot
    interleave with another one, but no ordering is guaranteed against
    in-flight readers.
    """

    def __init__(
        self,
        kind: str,
        not_found: Callable[[str], NotFoundError] | None = None,
    ):
        """Initialize an empty registry.

        Args:
            kind: Human readable item kind, used in logs and errors
            not_found: Factory for the error raised by get() on a miss
        """
        self.kind = kind
        self._not_found = not_found or (lambda key: NotFoundError(f"{kind} {key} not found"))
        self._items: dict[str, T] = {}
        self._lock = threading.Lock()

    def register(self, key: str, item: T) -> None:
        """Insert or replace the item stored under key."""
        with self._lock:
            replaced = key in self._items
            self._items[key] = item
        if replaced:
            logger.debug("Replaced %s %r", self.kind, key)
        else:
            logger.debug("Registered %s %r", self.kind, key)

    def get(self, key: str) -> T:
        """Return the item stored under key.

        Raises:
            NotFoundError: If nothing is registered under key
        """
        try:
            return self._items[key]
        except KeyError:
            raise self._not_found(key) from None

    def list_all(self) -> dict[str, T]:
        """Return a snapshot copy of the registry contents."""
        return dict(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.list_all())
