"""Futures that a context runs for waiting, message delivery and message streams."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable

from .fut.base import DONE, PENDING, ActorFuture, ActorStream, wrap_stream
from .fut.combinators import Delay
from .handler import respond


def _deliver(act: Any, ctx: Any, msg: Any) -> None:
    """Hand ``msg`` to the actor's ``handle`` and process its response without a reply."""
    respond(act.handle(msg, ctx), ctx, None)


class ActorWaitItem(ActorFuture):
    """Wraps a waited-on future; it counts as done once the actor is no longer alive."""

    def __init__(self, fut: ActorFuture) -> None:
        self._fut = fut

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._fut.poll(act, ctx, task) is PENDING and ctx.state().alive():
            return PENDING
        return None


class _OnceMessage:
    def __init__(self, msg: Any) -> None:
        self._msg = msg
        self._delivered = False

    def deliver(self, act: Any, ctx: Any) -> None:
        if self._delivered:
            raise RuntimeError("message already delivered")
        self._delivered = True
        msg, self._msg = self._msg, None
        _deliver(act, ctx, msg)


class ActorDelayedMessageItem(ActorFuture):
    """Delivers a message to the actor's ``handle`` after a timeout."""

    def __init__(
        self,
        msg: Any,
        timeout: float | timedelta,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._message = _OnceMessage(msg)
        self._delay = Delay(timeout, clock)

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if self._delay.poll(task) is PENDING:
            return PENDING
        self._message.deliver(act, ctx)
        return None


class ActorMessageItem(ActorFuture):
    """Delivers a message to the actor's ``handle`` when polled."""

    def __init__(self, msg: Any) -> None:
        self._message = _OnceMessage(msg)

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        self._message.deliver(act, ctx)
        return None


class ActorMessageStreamItem(ActorFuture):
    """Delivers every item of a stream to the actor's ``handle`` as a message.

    Delivery pauses while the context is waiting on a future.
    """

    def __init__(self, stream: Any) -> None:
        self._stream = stream if isinstance(stream, ActorStream) else wrap_stream(stream)

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        while True:
            msg = self._stream.poll_next(act, ctx, task)
            if msg is DONE:
                return None
            if msg is PENDING:
                return PENDING
            _deliver(act, ctx, msg)
            if ctx.waiting():
                return PENDING