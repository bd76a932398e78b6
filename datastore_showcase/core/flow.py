"""Minimal reactive streams built on asyncio.

``SharedState`` holds one latest value and fans every published value out to
any number of subscribers. ``Flow`` is a cold, composable view over a
subscription: mapping a flow adds no extra watch on the source, each
subscriber is still served by the same ``SharedState``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

_UNSET = object()
_CLOSED = object()


class FlowClosedError(Exception):
    """Raised when reading from a flow whose source has been closed."""


class SharedState(Generic[T]):
    """Latest-value holder with multicast delivery.

    Each subscriber gets its own unbounded queue, so every subscriber sees
    the same ordered sequence of values published after it subscribed,
    starting with the value current at subscription time.
    """

    def __init__(self) -> None:
        self._value: object = _UNSET
        self._subscribers: set[asyncio.Queue[object]] = set()
        self._closed = False

    @property
    def has_value(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> T:
        if self._value is _UNSET:
            raise LookupError("No value published yet")
        return self._value  # type: ignore[return-value]

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, value: T) -> None:
        """Set the current value and deliver it to every subscriber."""
        if self._closed:
            raise FlowClosedError("Cannot publish to a closed state")
        self._value = value
        for queue in self._subscribers:
            queue.put_nowait(value)

    def close(self) -> None:
        """Complete all current and future subscriptions."""
        if self._closed:
            return
        self._closed = True
        for queue in self._subscribers:
            queue.put_nowait(_CLOSED)

    async def subscribe(self) -> AsyncIterator[T]:
        """Iterate the current value, then every later published value."""
        if self._closed:
            return

        queue: asyncio.Queue[object] = asyncio.Queue()
        # Registration and the initial read happen without a suspension
        # point, so no published value can fall between them.
        self._subscribers.add(queue)
        try:
            if self._value is not _UNSET:
                yield self._value  # type: ignore[misc]
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item  # type: ignore[misc]
        finally:
            self._subscribers.discard(queue)


class Flow(Generic[T]):
    """Cold async-iterable stream.

    Every ``async for`` over a flow opens a new subscription on the
    underlying source.
    """

    def __init__(self, source: Callable[[], AsyncIterator[T]]) -> None:
        self._source = source

    def __aiter__(self) -> AsyncIterator[T]:
        return self._source()

    def map(self, transform: Callable[[T], R]) -> Flow[R]:
        """Derive a flow applying ``transform`` to every value."""
        source = self._source

        async def mapped() -> AsyncIterator[R]:
            async with aclosing(source()) as upstream:
                async for value in upstream:
                    yield transform(value)

        return Flow(mapped)

    def distinct_until_changed(self) -> Flow[T]:
        """Derive a flow that skips values equal to the previous one."""
        source = self._source

        async def distinct() -> AsyncIterator[T]:
            previous: object = _UNSET
            async with aclosing(source()) as upstream:
                async for value in upstream:
                    if previous is not _UNSET and value == previous:
                        continue
                    previous = value
                    yield value

        return Flow(distinct)

    async def first(self) -> T:
        """Return the first value and cancel the subscription.

        Raises:
            FlowClosedError: If the source completes without a value
        """
        async with aclosing(self._source()) as iterator:
            async for value in iterator:
                return value
        raise FlowClosedError("Flow completed without emitting a value")
