"""
A long-lived asyncio loop running in a background thread.

Flask views are synchronous; the retrieval and model clients are async and
bind to the loop they were first used on. Every request therefore submits
its coroutines to this one loop, where requests interleave cooperatively.
"""

import asyncio
import logging
import threading
from typing import Any, AsyncIterator, Awaitable, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EXHAUSTED = object()


async def _await(awaitable: Awaitable[T]) -> T:
    return await awaitable


async def _anext(agen: AsyncIterator[Any]) -> Any:
    try:
        return await agen.__anext__()
    except StopAsyncIteration:
        return _EXHAUSTED


class BackgroundEventLoop:
    """Runs coroutines and async iterators on a dedicated loop thread."""

    def __init__(self, name: str = "travel-companion-loop"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()
        logger.debug(f"Background event loop started: {name}")

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def running(self) -> bool:
        return self._loop.is_running() and not self._loop.is_closed()

    def run(self, awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
        """Block the calling thread until ``awaitable`` finishes on the loop."""
        future = asyncio.run_coroutine_threadsafe(_await(awaitable), self._loop)
        return future.result(timeout)

    def iterate(self, agen: AsyncIterator[T]) -> Iterator[T]:
        """
        Pull items from an async generator one at a time.

        Closing the returned iterator (e.g. on client disconnect) closes the
        async generator on the loop as well.
        """
        try:
            while True:
                item = self.run(_anext(agen))
                if item is _EXHAUSTED:
                    return
                yield item
        finally:
            aclose = getattr(agen, "aclose", None)
            if aclose is not None and self.running:
                self.run(aclose())

    def stop(self, timeout: float = 5.0) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        self._loop.close()
