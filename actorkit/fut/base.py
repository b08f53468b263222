"""Actor-aware futures and streams driven by explicit polling.

A future's ``poll`` returns either its output or ``PENDING``. A stream's
``poll_next`` returns the next item, ``PENDING`` when no item is ready yet,
or ``DONE`` once the stream is exhausted. Failures are raised.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable


class _Signal(enum.Enum):
    PENDING = "pending"
    DONE = "done"

    def __repr__(self) -> str:
        return self.name


PENDING = _Signal.PENDING
DONE = _Signal.DONE


class ActorFuture(ABC):
    """A value that becomes available later and is polled with an actor and its context."""

    @abstractmethod
    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        """Return the output, or ``PENDING`` if it is not ready yet."""

    def map(self, f: Callable[[Any, Any, Any], Any]) -> "ActorFuture":
        """Transform the output with ``f(output, act, ctx)``."""
        from .combinators import Map

        return Map(self, f)

    def then(self, f: Callable[[Any, Any, Any], "ActorFuture"]) -> "ActorFuture":
        """Chain the future returned by ``f(output, act, ctx)``."""
        from .combinators import Then

        return Then(self, f)

    def timeout(self, timeout: Any) -> "ActorFuture":
        """Fail with ``FutureTimeout`` if the output takes longer than ``timeout``."""
        from .combinators import Timeout

        return Timeout(self, timeout)


class ActorStream(ABC):
    """A sequence of values produced over time and polled with an actor and its context."""

    @abstractmethod
    def poll_next(self, act: Any, ctx: Any, task: Any) -> Any:
        """Return the next item, ``PENDING``, or ``DONE``."""

    def map(self, f: Callable[[Any, Any, Any], Any]) -> "ActorStream":
        """Transform every item with ``f(item, act, ctx)``."""
        from .streams import StreamMap

        return StreamMap(self, f)

    def then(self, f: Callable[[Any, Any, Any], ActorFuture]) -> "ActorStream":
        """Yield the outputs of the futures returned by ``f(item, act, ctx)``."""
        from .streams import StreamThen

        return StreamThen(self, f)

    def fold(self, init: Any, f: Callable[[Any, Any, Any, Any], ActorFuture]) -> ActorFuture:
        """Accumulate all items into one value with ``f(acc, item, act, ctx)``."""
        from .streams import StreamFold

        return StreamFold(self, init, f)

    def timeout(self, timeout: Any) -> "ActorStream":
        """Report a timeout whenever no item arrives within ``timeout``."""
        from .streams import StreamTimeout

        return StreamTimeout(self, timeout)

    def finish(self) -> ActorFuture:
        """Return a future that completes when the stream is exhausted."""
        from .streams import StreamFinish

        return StreamFinish(self)


class FutureWrap(ActorFuture):
    """Adapts a plain pollable future (``poll(task)``) into an actor future."""

    def __init__(self, fut: Any) -> None:
        self._fut = fut

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        return self._fut.poll(task)


class StreamWrap(ActorStream):
    """Adapts a plain pollable stream (``poll_next(task)``) or an iterable into an actor stream."""

    def __init__(self, stream: Any) -> None:
        if hasattr(stream, "poll_next"):
            self._source = stream
            self._items = None
        else:
            self._source = None
            self._items = iter(stream)

    def poll_next(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._source is not None:
            return self._source.poll_next(task)
        return next(self._items, DONE)


def wrap_future(fut: Any) -> FutureWrap:
    """Wrap a plain pollable future so it can run inside an actor context."""
    return FutureWrap(fut)


def wrap_stream(stream: Any | Iterable[Any]) -> StreamWrap:
    """Wrap a plain pollable stream or an iterable so it can run inside an actor context."""
    return StreamWrap(stream)


class Ready(ActorFuture):
    """A future that is immediately ready with a value."""

    def __init__(self, value: Any) -> None:
        self._value = value
        self._taken = False

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._taken:
            raise RuntimeError("cannot poll Ready twice")
        self._taken = True
        value, self._value = self._value, None
        return value


def ready(value: Any) -> Ready:
    """Create a future that is immediately ready with ``value``."""
    return Ready(value)


class FutureResult(ActorFuture):
    """A future that immediately yields a value or raises an error."""

    def __init__(self, value: Any = None, error: BaseException | None = None) -> None:
        self._value = value
        self._error = error
        self._taken = False

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._taken:
            raise RuntimeError("cannot poll Result twice")
        self._taken = True
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        value, self._value = self._value, None
        return value


def ok(value: Any) -> FutureResult:
    """Create a finished, successful future."""
    return FutureResult(value)


def err(error: BaseException) -> FutureResult:
    """Create a finished future that raises ``error`` when polled."""
    if not isinstance(error, BaseException):
        raise TypeError("err() requires an exception instance")
    return FutureResult(error=error)