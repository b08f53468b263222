"""Stream combinators: finishing, folding, mapping, chaining and timeouts."""

from __future__ import annotations

import enum
from datetime import timedelta
from typing import Any, Callable

from .base import DONE, PENDING, ActorFuture, ActorStream
from .combinators import Clock, Delay, FutureTimeout, _ensure_future


def _is_signal(item: Any) -> bool:
    return item is PENDING or item is DONE


def _drain(next_item: Callable[[], Any]) -> Any:
    """Pull items until the source is pending (``PENDING``) or exhausted (``None``)."""
    while True:
        item = next_item()
        if item is PENDING:
            return PENDING
        if item is DONE:
            return None


class Finish:
    """A plain future that completes when a plain stream is exhausted.

    The stream may be an object with ``poll_next(task)`` or any iterable.
    """

    def __init__(self, stream: Any) -> None:
        if hasattr(stream, "poll_next"):
            self._next = stream.poll_next
        else:
            items = iter(stream)
            self._next = lambda task: next(items, DONE)

    def poll(self, task: Any) -> Any:
        """Drain ready items; return ``None`` at the end, otherwise ``PENDING``."""
        return _drain(lambda: self._next(task))


def finish(stream: Any) -> Finish:
    """Turn a plain stream into a future that resolves when it completes."""
    return Finish(stream)


class StreamFinish(ActorFuture):
    """An actor future that completes when an actor stream is exhausted."""

    def __init__(self, stream: ActorStream) -> None:
        self._stream = stream

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        return _drain(lambda: self._stream.poll_next(act, ctx, task))


class _FoldState(enum.Enum):
    EMPTY = enum.auto()
    READY = enum.auto()
    PROCESSING = enum.auto()


class StreamFold(ActorFuture):
    """Accumulates every stream item with ``f(acc, item, act, ctx)``, which returns a future."""

    def __init__(
        self,
        stream: ActorStream,
        init: Any,
        f: Callable[[Any, Any, Any, Any], ActorFuture],
    ) -> None:
        self._stream = stream
        self._f = f
        self._acc = init
        self._future: ActorFuture | None = None
        self._state = _FoldState.READY

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        while True:
            state, self._state = self._state, _FoldState.EMPTY
            if state is _FoldState.EMPTY:
                raise RuntimeError("cannot poll Fold twice")
            if state is _FoldState.READY:
                item = self._stream.poll_next(act, ctx, task)
                if item is PENDING:
                    self._state = _FoldState.READY
                    return PENDING
                acc, self._acc = self._acc, None
                if item is DONE:
                    return acc
                self._future = _ensure_future(self._f(acc, item, act, ctx), "fold")
                self._state = _FoldState.PROCESSING
                continue
            output = self._future.poll(act, ctx, task)
            if output is PENDING:
                self._state = _FoldState.PROCESSING
                return PENDING
            self._future = None
            self._acc = output
            self._state = _FoldState.READY


class StreamMap(ActorStream):
    """Transforms every item with ``f(item, act, ctx)``."""

    def __init__(self, stream: ActorStream, f: Callable[[Any, Any, Any], Any]) -> None:
        self._stream = stream
        self._f = f

    def poll_next(self, act: Any, ctx: Any, task: Any) -> Any:
        item = self._stream.poll_next(act, ctx, task)
        return item if _is_signal(item) else self._f(item, act, ctx)


class StreamThen(ActorStream):
    """Yields the output of the future ``f(item, act, ctx)`` for every item."""

    def __init__(self, stream: ActorStream, f: Callable[[Any, Any, Any], ActorFuture]) -> None:
        self._stream = stream
        self._f = f
        self._future: ActorFuture | None = None

    def poll_next(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._future is None:
            item = self._stream.poll_next(act, ctx, task)
            if _is_signal(item):
                return item
            self._future = _ensure_future(self._f(item, act, ctx), "then")
        output = self._future.poll(act, ctx, task)
        if output is not PENDING:
            self._future = None
        return output


class StreamTimeout(ActorStream):
    """Yields a ``FutureTimeout`` instance whenever no item arrives within the timeout.

    Items are passed through unchanged; the timer restarts after every item
    and after every reported timeout.
    """

    def __init__(
        self,
        stream: ActorStream,
        timeout: float | timedelta,
        clock: Clock | None = None,
    ) -> None:
        self._stream = stream
        self._timeout = timeout
        self._clock = clock
        self._delay: Delay | None = None

    def poll_next(self, act: Any, ctx: Any, task: Any) -> Any:
        item = self._stream.poll_next(act, ctx, task)
        if item is DONE:
            return DONE
        if item is not PENDING:
            self._delay = None
            return item
        if self._delay is None:
            self._delay = Delay(self._timeout, self._clock)
        if self._delay.poll(task) is PENDING:
            return PENDING
        self._delay = None
        return FutureTimeout("stream timed out")