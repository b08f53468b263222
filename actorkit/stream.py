"""Handling a stream's items the same way as messages sent to an actor."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from .context import ActorState, SpawnHandle
from .fut.base import DONE, PENDING, ActorFuture, ActorStream, wrap_stream

logger = logging.getLogger(__name__)


class StreamHandler(ABC):
    """Mixin for actors that consume streams.

    ``handle`` is called for every item, ``started`` before the first poll of a
    stream, and ``finished`` when a stream ends; by default that stops the actor.
    """

    @abstractmethod
    def handle(self, item: Any, ctx: Any) -> None:
        """Process one item of the stream."""

    def started(self, ctx: Any) -> None:
        """Called when a stream is polled for the first time."""

    def finished(self, ctx: Any) -> None:
        """Called when a stream ends; stops the actor by default."""
        ctx.stop()

    def add_stream(self, stream: Any, ctx: Any) -> SpawnHandle:
        """Register ``stream`` with the actor's context and return its handle.

        The stream may be an actor stream, a plain pollable stream or an
        iterable. A stopped actor gets no stream and a default handle.
        """
        if ctx.state() == ActorState.STOPPED:
            logger.error("Context::add_stream called for stopped actor.")
            return SpawnHandle()
        return ctx.spawn(ActorStreamItem(stream))


class ActorStreamItem(ActorFuture):
    """Feeds a stream's items to a ``StreamHandler`` actor."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream if isinstance(stream, ActorStream) else wrap_stream(stream)
        self._started = False

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        if not self._started:
            self._started = True
            act.started(ctx)
        while True:
            item = self._stream.poll_next(act, ctx, task)
            if item is DONE:
                act.finished(ctx)
                return None
            if item is PENDING:
                return PENDING
            act.handle(item, ctx)
            if ctx.waiting():
                return PENDING