"""Timers and the map, then and timeout combinators for actor futures."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Any, Callable

from .base import PENDING, ActorFuture

Clock = Callable[[], float]


def _seconds(timeout: float | timedelta) -> float:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


def _ensure_future(value: Any, combinator: str) -> ActorFuture:
    """Return ``value`` if it is an actor future, otherwise raise ``TypeError``."""
    if not isinstance(value, ActorFuture):
        raise TypeError(f"{combinator}() callback must return an ActorFuture")
    return value


class FutureTimeout(Exception):
    """Raised when a future does not complete within its timeout."""


class Delay:
    """A timer that becomes ready once its deadline has passed."""

    def __init__(self, timeout: float | timedelta, clock: Clock | None = None) -> None:
        self._clock = clock or time.monotonic
        self.deadline = self._clock() + _seconds(timeout)

    def poll(self, task: Any) -> Any:
        """Return ``None`` once the deadline is reached, otherwise ``PENDING``."""
        return None if self._clock() >= self.deadline else PENDING


class Map(ActorFuture):
    """Applies ``f(output, act, ctx)`` to the output of a future."""

    def __init__(self, future: ActorFuture, f: Callable[[Any, Any, Any], Any]) -> None:
        self._future = future
        self._f: Callable[[Any, Any, Any], Any] | None = f

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        output = self._future.poll(act, ctx, task)
        if output is PENDING:
            return PENDING
        if self._f is None:
            raise RuntimeError("cannot poll Map twice")
        f, self._f = self._f, None
        return f(output, act, ctx)


class Then(ActorFuture):
    """Runs the future produced by ``f(output, act, ctx)`` after the first one completes."""

    def __init__(self, future: ActorFuture, f: Callable[[Any, Any, Any], ActorFuture]) -> None:
        self._first: ActorFuture | None = future
        self._f: Callable[[Any, Any, Any], ActorFuture] | None = f
        self._second: ActorFuture | None = None

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._second is None:
            if self._first is None or self._f is None:
                raise RuntimeError("Then polled after its chain failed")
            output = self._first.poll(act, ctx, task)
            if output is PENDING:
                return PENDING
            f = self._f
            self._first = self._f = None
            self._second = _ensure_future(f(output, act, ctx), "then")
        return self._second.poll(act, ctx, task)


class Timeout(ActorFuture):
    """Raises ``FutureTimeout`` if the inner future is not done before the deadline."""

    def __init__(
        self,
        future: ActorFuture,
        timeout: float | timedelta,
        clock: Clock | None = None,
    ) -> None:
        self._future = future
        self._delay = Delay(timeout, clock)

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._delay.poll(task) is not PENDING:
            raise FutureTimeout("future timed out")
        return self._future.poll(act, ctx, task)