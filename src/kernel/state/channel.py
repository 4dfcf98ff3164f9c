"""
In-process change channel.

Each subscriber gets its own unbounded asyncio.Queue; publishing pushes the
new value to every live queue without awaiting.
"""

import asyncio
from typing import Generic, Set, TypeVar

T = TypeVar("T")


class StateChannel(Generic[T]):
    """Fan-out of values to any number of subscribers."""

    def __init__(self) -> None:
        self._subscribers: Set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> "asyncio.Queue[T]":
        """Register a new subscriber queue."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: "asyncio.Queue[T]") -> None:
        self._subscribers.discard(queue)

    def publish(self, value: T) -> None:
        """Push a value to every subscriber."""
        for queue in list(self._subscribers):
            queue.put_nowait(value)
