"""Message responses: how a handler's return value reaches the sender."""

from __future__ import annotations

from typing import Any

from .fut.base import ActorFuture, wrap_future


def _send(tx: Any, value: Any) -> None:
    if tx is not None:
        tx.send(value)


def _spawn_reply(ctx: Any, fut: ActorFuture, tx: Any) -> None:
    def reply(output: Any, act: Any, inner_ctx: Any) -> None:
        _send(tx, output)

    ctx.spawn(fut.map(reply))


class MessageResult:
    """Wraps a handler's result so it is sent back unchanged."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"MessageResult({self.value!r})"

    def handle(self, ctx: Any, tx: Any) -> None:
        """Send the wrapped value to ``tx`` if there is one."""
        _send(tx, self.value)


class Response:
    """A reply that is either ready now or produced by a plain future."""

    def __init__(self, *, value: Any = None, future: Any = None) -> None:
        self._value = value
        self._future = future

    @staticmethod
    def fut(fut: Any) -> "Response":
        """Create a reply produced by a plain future with ``poll(task)``."""
        if not hasattr(fut, "poll"):
            raise TypeError("Response.fut() requires an object with poll(task)")
        return Response(future=fut)

    @staticmethod
    def reply(value: Any) -> "Response":
        """Create a reply that is ready now."""
        return Response(value=value)

    def __repr__(self) -> str:
        item = "Fut(_)" if self._future is not None else "Result(_)"
        return f"Response(item={item})"

    def handle(self, ctx: Any, tx: Any) -> None:
        """Send the value, or spawn the future and send its output when it completes."""
        if self._future is not None:
            _spawn_reply(ctx, wrap_future(self._future), tx)
        else:
            _send(tx, self._value)


class ActorResponse:
    """A reply that is either ready now or produced by an actor future."""

    def __init__(self, *, value: Any = None, future: ActorFuture | None = None) -> None:
        self._value = value
        self._future = future

    @staticmethod
    def reply(value: Any) -> "ActorResponse":
        """Create a reply that is ready now."""
        return ActorResponse(value=value)

    @staticmethod
    def deferred(fut: ActorFuture) -> "ActorResponse":
        """Create a reply produced by an actor future run in the actor's context."""
        if not isinstance(fut, ActorFuture):
            raise TypeError("ActorResponse.deferred() requires an ActorFuture")
        return ActorResponse(future=fut)

    def __repr__(self) -> str:
        item = "Fut(_)" if self._future is not None else "Result(_)"
        return f"ActorResponse(item={item})"

    def handle(self, ctx: Any, tx: Any) -> None:
        """Send the value, or spawn the future and send its output when it completes."""
        if self._future is not None:
            _spawn_reply(ctx, self._future, tx)
        else:
            _send(tx, self._value)


_RESPONSE_TYPES = (MessageResult, Response, ActorResponse)


def respond(result: Any, ctx: Any, tx: Any) -> None:
    """Deliver a handler's return value to the response channel ``tx``.

    Response objects decide for themselves; an actor future is spawned into
    ``ctx`` and its output sent when it completes; any other value is sent as is.
    ``tx`` may be ``None`` when nobody waits for the reply.
    """
    if isinstance(result, _RESPONSE_TYPES):
        result.handle(ctx, tx)
    elif isinstance(result, ActorFuture):
        _spawn_reply(ctx, result, tx)
    else:
        _send(tx, result)