"""FIFO queue of pending outgoing actions."""

from __future__ import annotations

import collections
import threading
from typing import Deque, Optional

from core.actions import Action


class ActionQueue:
    """Ordered queue of :data:`~core.actions.Action` values.

    ``push`` appends, ``pop`` removes the oldest.  There is no priority,
    deduplication or cancellation.  A lock guards the deque so a producer on
    another thread cannot race the worker's drain.
    """

    def __init__(self) -> None:
        self._items: Deque[Action] = collections.deque()
        self._lock = threading.Lock()

    def push(self, action: Action) -> None:
        with self._lock:
            self._items.append(action)

    def pop(self) -> Optional[Action]:
        """Remove and return the oldest action, or ``None`` when empty."""
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def clear(self) -> int:
        """Drop every pending action and return how many were dropped."""
        with self._lock:
            dropped = len(self._items)
            self._items.clear()
            return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0
