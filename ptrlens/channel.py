"""
Work channel between the line producer and the resolver workers
"""

import threading
from collections import deque
from typing import Iterator, Optional


class ChannelClosed(Exception):
    """Raised when putting into a closed channel"""


class WorkChannel:
    """
    Unbounded, closable, multi-consumer FIFO.

    Every item is handed to exactly one consumer. Closing the channel
    is the only end-of-work signal: once closed and drained, get()
    returns None to every waiting consumer.
    """

    def __init__(self):
        self._items: deque[str] = deque()
        self._cond = threading.Condition()
        self._closed = False

    def put(self, item: str):
        """Add an item. Never blocks."""
        with self._cond:
            if self._closed:
                raise ChannelClosed("put() on a closed channel")
            self._items.append(item)
            self._cond.notify()

    def get(self) -> Optional[str]:
        """
        Take the next item, waiting for one if necessary.

        Returns:
            The item, or None when the channel is closed and empty
        """
        with self._cond:
            while not self._items:
                if self._closed:
                    return None
                self._cond.wait()
            return self._items.popleft()

    def close(self):
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        with self._cond:
            return len(self._items)

    def __iter__(self) -> Iterator[str]:
        while True:
            item = self.get()
            if item is None:
                return
            yield item
