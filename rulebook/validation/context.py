"""Cancellable validation context.

A Context carries request-scoped values and a cancellation signal into
context-aware rules. It is immutable from a rule's point of view: deriving
a child (with_value, with_cancel, with_timeout) never touches the parent.
Cancellation flows downward: a cancelled parent makes every descendant
report the same error.
"""
from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, Callable


class Cancelled(Exception):
    """The context was cancelled explicitly."""

    def __str__(self) -> str:
        return "context canceled"


class DeadlineExceeded(Exception):
    """The context deadline passed."""

    def __str__(self) -> str:
        return "context deadline exceeded"


class Context:
    __slots__ = ("_parent", "_key", "_value", "_deadline", "_cancelled", "_lock")

    def __init__(self, parent: Context | None = None, *, key: Any = None, value: Any = None,
                 deadline: float | None = None) -> None:
        self._parent = parent
        self._key = key
        self._value = value
        self._deadline = deadline  # time.monotonic() based
        self._cancelled: Exception | None = None
        self._lock = threading.Lock()

    @classmethod
    def background(cls) -> Context:
        """An empty, never-cancelled root context."""
        return cls()

    # --------------- values ---------------
    def with_value(self, key: Any, value: Any) -> Context:
        return Context(self, key=key, value=value)

    def value(self, key: Any, default: Any = None) -> Any:
        """Look a value up along the parent chain, nearest first."""
        node: Context | None = self
        while node is not None:
            if node._key is not None and node._key == key:
                return node._value
            node = node._parent
        return default

    # --------------- cancellation ---------------
    def with_cancel(self) -> tuple[Context, Callable[[], None]]:
        child = Context(self)
        return child, child._cancel

    def with_timeout(self, seconds: float) -> tuple[Context, Callable[[], None]]:
        child = Context(self, deadline=time.monotonic() + seconds)
        return child, child._cancel

    def with_deadline(self, when: datetime) -> tuple[Context, Callable[[], None]]:
        return self.with_timeout((when - datetime.now(when.tzinfo)).total_seconds())

    def _cancel(self) -> None:
        with self._lock:
            if self._cancelled is None:
                self._cancelled = Cancelled()

    def deadline(self) -> float | None:
        """Earliest monotonic deadline along the chain, if any."""
        deadlines = []
        node: Context | None = self
        while node is not None:
            if node._deadline is not None:
                deadlines.append(node._deadline)
            node = node._parent
        return min(deadlines) if deadlines else None

    def err(self) -> Exception | None:
        """None while active, else Cancelled or DeadlineExceeded."""
        node: Context | None = self
        while node is not None:
            if node._cancelled is not None:
                return node._cancelled
            if node._deadline is not None and time.monotonic() >= node._deadline:
                return DeadlineExceeded()
            node = node._parent
        return None

    def done(self) -> bool:
        return self.err() is not None

    def __repr__(self) -> str:
        return f"Context(err={self.err()!r}, deadline={self.deadline()!r})"
