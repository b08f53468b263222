"""Condition variables and timer-driven actor futures and streams."""

from __future__ import annotations

import copy
from datetime import timedelta
from typing import Any, Callable, Generic, TypeVar

from .fut.base import PENDING, ActorFuture, ActorStream
from .fut.combinators import Delay

T = TypeVar("T")


def _seconds(timeout: float | timedelta) -> float:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


class _Waiter:
    """One-shot receiver handed out by ``Condition.wait``; ``poll(task)`` yields the value."""

    def __init__(self) -> None:
        self._value: Any = None
        self._ready = False

    @property
    def done(self) -> bool:
        return self._ready

    def poll(self, task: Any) -> Any:
        return self._value if self._ready else PENDING

    def _send(self, value: Any) -> None:
        self._value = value
        self._ready = True


class Condition(Generic[T]):
    """Lets many waiters receive a copy of a single result once it is set."""

    def __init__(self) -> None:
        self._waiters: list[_Waiter] = []
        self._set = False

    def wait(self) -> _Waiter:
        """Register a waiter that becomes ready when ``set`` is called."""
        if self._set:
            raise RuntimeError("condition has already been set")
        waiter = _Waiter()
        self._waiters.append(waiter)
        return waiter

    def set(self, result: T) -> None:
        """Deliver a copy of ``result`` to every waiter."""
        if self._set:
            raise RuntimeError("condition has already been set")
        self._set = True
        for waiter in self._waiters:
            waiter._send(copy.copy(result))
        self._waiters.clear()


class TimerFunc(ActorFuture):
    """Runs ``f(act, ctx)`` once the timeout has elapsed."""

    def __init__(
        self,
        timeout: float | timedelta,
        f: Callable[[Any, Any], Any],
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._f: Callable[[Any, Any], Any] | None = f
        self._delay = Delay(timeout, clock)

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._delay.poll(task) is PENDING:
            return PENDING
        f, self._f = self._f, None
        if f is not None:
            f(act, ctx)
        return None


class IntervalFunc(ActorStream):
    """Runs ``f(act, ctx)`` every period; missed ticks are caught up. Never ends."""

    def __init__(
        self,
        timeout: float | timedelta,
        f: Callable[[Any, Any], Any],
        clock: Callable[[], float] | None = None,
    ) -> None:
        period = _seconds(timeout)
        if period <= 0:
            raise ValueError("interval period must be positive")
        self._period = period
        self._f = f
        self._delay = Delay(period, clock)

    def poll_next(self, act: Any, ctx: Any, task: Any) -> Any:
        while self._delay.poll(task) is not PENDING:
            self._delay.deadline += self._period
            self._f(act, ctx)
        return PENDING