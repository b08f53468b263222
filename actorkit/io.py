"""Actor-driven writers for non-blocking byte streams, encoders and sinks.

A writer's byte stream is any object with ``write(data)``. It returns the
number of bytes taken, or ``None`` when it cannot take any right now. Raising
``BlockingIOError`` means the same, and also tells the writer that the
stream's buffer is full. It may also have ``flush()``, which may return
``PENDING``.

A sink has ``send(item)``, ``poll_flush(task)`` and ``poll_close(task)``. The
two poll methods return ``None`` when done and ``PENDING`` otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .context import Running, SpawnHandle
from .fut.base import PENDING, ActorFuture

LOW_WATERMARK = 4 * 1024
HIGH_WATERMARK = 4 * LOW_WATERMARK


class WriteZeroError(OSError):
    """Raised when the transport accepted zero bytes of a non-empty frame."""

    def __init__(self, message: str = "failed to write frame to transport") -> None:
        super().__init__(message)


class WriteHandler:
    """Mixin for actors that own a writer; receives its errors and its end."""

    def error(self, err: BaseException, ctx: Any) -> Running:
        """Called on a write error; ``Running.CONTINUE`` keeps the writer going."""
        return Running.STOP

    def finished(self, ctx: Any) -> None:
        """Called when the writer finishes; stops the actor by default."""
        ctx.stop()


def _wake(task: Any) -> None:
    wake = getattr(task, "wake", None)
    if callable(wake):
        wake()


@dataclass
class _WriterState:
    io: Any
    buffer: bytearray = field(default_factory=bytearray)
    error: BaseException | None = None
    low: int = LOW_WATERMARK
    high: int = HIGH_WATERMARK
    closing: bool = False
    closed: bool = False
    handle: SpawnHandle = field(default_factory=SpawnHandle)
    task: Any = None


def _stop_requested(act: Any, err: BaseException, ctx: Any) -> bool:
    return act.error(err, ctx) == Running.STOP


class _WriterFut(ActorFuture):
    """Writes the shared buffer to the byte stream whenever the context polls it."""

    def __init__(self, state: _WriterState) -> None:
        self._state = state

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        state = self._state
        if state.error is not None:
            error, state.error = state.error, None
            if _stop_requested(act, error, ctx):
                act.finished(ctx)
                return None

        state.task = None
        while state.buffer:
            try:
                written = state.io.write(bytes(state.buffer))
            except BlockingIOError:
                if len(state.buffer) > state.high:
                    ctx.wait(_WriterDrain(state))
                return PENDING
            except OSError as exc:
                if _stop_requested(act, exc, ctx):
                    act.finished(ctx)
                    return None
                continue
            if written is None:
                return PENDING
            if written == 0 and _stop_requested(act, WriteZeroError(), ctx):
                act.finished(ctx)
                return None
            del state.buffer[:written]

        flush = getattr(state.io, "flush", None)
        if flush is not None:
            try:
                if flush() is PENDING:
                    return PENDING
            except BlockingIOError:
                return PENDING
            except OSError as exc:
                if _stop_requested(act, exc, ctx):
                    act.finished(ctx)
                    return None

        if state.closing:
            state.closed = True
            act.finished(ctx)
            return None
        state.task = task
        return PENDING


class _WriterDrain(ActorFuture):
    """Holds the actor's messages back until the buffer drains below the low watermark."""

    def __init__(self, state: _WriterState) -> None:
        self._state = state

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        state = self._state
        if state.error is not None:
            return None
        while state.buffer:
            try:
                written = state.io.write(bytes(state.buffer))
            except BlockingIOError:
                return None if len(state.buffer) < state.low else PENDING
            except OSError as exc:
                state.error = exc
                return None
            if written is None:
                return PENDING
            if written == 0:
                state.error = WriteZeroError()
                return None
            del state.buffer[:written]
        return None


def _spawn_writer(io: Any, ctx: Any, buffer: bytes | bytearray | None = None) -> _WriterState:
    state = _WriterState(io, bytearray(buffer) if buffer is not None else bytearray())
    state.handle = ctx.spawn(_WriterFut(state))
    return state


def _notify_writer(state: _WriterState) -> None:
    task, state.task = state.task, None
    if task is not None:
        _wake(task)


class Writer:
    """Buffers bytes and writes them to a byte stream from the actor's context."""

    def __init__(self, io: Any, ctx: Any) -> None:
        self._state = _spawn_writer(io, ctx)

    def close(self) -> None:
        """Close gracefully once all buffered data is written."""
        self._state.closing = True

    def closed(self) -> bool:
        """True once the writer has closed."""
        return self._state.closed

    def set_buffer_capacity(self, low_watermark: int, high_watermark: int) -> None:
        """Set the watermarks that control waiting for the buffer to drain."""
        self._state.low = low_watermark
        self._state.high = high_watermark

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Queue bytes for writing."""
        self._state.buffer.extend(data)
        _notify_writer(self._state)

    def handle(self) -> SpawnHandle:
        """Handle of the future that does the writing."""
        return self._state.handle


class FramedWrite:
    """Encodes items with ``encoder.encode(item, buffer)`` and writes the bytes.

    An encoding error is handed to the actor's ``error`` on the next poll.
    """

    def __init__(
        self,
        io: Any,
        encoder: Any,
        ctx: Any,
        buffer: bytes | bytearray | None = None,
    ) -> None:
        self._state = _spawn_writer(io, ctx, buffer)
        self._encoder = encoder

    def close(self) -> None:
        """Close gracefully once all buffered data is written."""
        self._state.closing = True

    def closed(self) -> bool:
        """True once the writer has closed."""
        return self._state.closed

    def set_buffer_capacity(self, low: int, high: int) -> None:
        """Set the watermarks that control waiting for the buffer to drain."""
        self._state.low = low
        self._state.high = high

    def write(self, item: Any) -> None:
        """Encode ``item`` into the buffer."""
        try:
            self._encoder.encode(item, self._state.buffer)
        except Exception as exc:  # encoder errors go to the actor's error hook
            self._state.error = exc
        _notify_writer(self._state)

    def handle(self) -> SpawnHandle:
        """Handle of the future that does the writing."""
        return self._state.handle

    def flush_remaining(self) -> None:
        """Try once to write and flush what is left in the buffer; errors are ignored."""
        state = self._state
        if not state.buffer:
            return
        try:
            written = state.io.write(bytes(state.buffer))
            if written:
                del state.buffer[:written]
            flush = getattr(state.io, "flush", None)
            if flush is not None:
                flush()
        except OSError:
            pass

    def __enter__(self) -> "FramedWrite":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.flush_remaining()


@dataclass
class _SinkState:
    sink: Any
    closing: bool = False
    closed: bool = False
    task: Any = None
    handle: SpawnHandle = field(default_factory=SpawnHandle)


class _SinkWriteFuture(ActorFuture):
    def __init__(self, state: _SinkState) -> None:
        self._state = state

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        state = self._state
        state.task = None
        if not state.closing:
            try:
                state.sink.poll_flush(task)
            except Exception as exc:  # sink errors go to the actor's error hook
                if _stop_requested(act, exc, ctx):
                    act.finished(ctx)
                    return None
        else:
            if state.closed:
                raise RuntimeError("sink polled after it was closed")
            try:
                done = state.sink.poll_close(task)
            except Exception as exc:  # sink errors go to the actor's error hook
                if _stop_requested(act, exc, ctx):
                    act.finished(ctx)
                    return None
            else:
                if done is not PENDING:
                    state.closed = True
                    act.finished(ctx)
                    return None
        state.task = task
        return PENDING


class SinkWrite:
    """Sends items to a sink and flushes or closes it from the actor's context."""

    def __init__(self, sink: Any, ctx: Any) -> None:
        self._state = _SinkState(sink)
        self._state.handle = ctx.spawn(_SinkWriteFuture(self._state))

    def write(self, item: Any) -> None:
        """Send ``item`` to the sink; the sink's error propagates."""
        self._state.sink.send(item)
        self._notify()

    def close(self) -> None:
        """Close the sink gracefully."""
        self._state.closing = True
        self._notify()

    def closed(self) -> bool:
        """True once the sink has closed."""
        return self._state.closed

    def handle(self) -> SpawnHandle:
        """Handle of the future that drives the sink."""
        return self._state.handle

    def _notify(self) -> None:
        if self._state.task is not None:
            _wake(self._state.task)