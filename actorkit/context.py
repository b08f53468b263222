"""Actor execution context, mailbox and the poll loop that drives an actor."""

from __future__ import annotations

import enum
import weakref
from collections import deque
from dataclasses import dataclass
from typing import Any

from .fut.base import PENDING, ActorFuture

DEFAULT_CAPACITY = 16
"""Default address channel capacity."""


class ActorState(enum.Enum):
    """Lifecycle state of an actor."""

    STARTED = "started"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"

    def alive(self) -> bool:
        """True while the actor is started or running."""
        return self in (ActorState.STARTED, ActorState.RUNNING)


class Running(enum.Enum):
    """Answer of an actor's ``stopping`` hook."""

    STOP = "stop"
    CONTINUE = "continue"


@dataclass(frozen=True, order=True)
class SpawnHandle:
    """Identifies a future spawned into a context."""

    value: int = 0

    def next(self) -> "SpawnHandle":
        """Return the handle that follows this one."""
        return SpawnHandle(self.value + 1)


class _Flags(enum.Flag):
    STARTED = enum.auto()
    RUNNING = enum.auto()
    STOPPING = enum.auto()
    STOPPED = enum.auto()
    MB_CAP_CHANGED = enum.auto()


_NO_FLAGS = _Flags(0)


class _Channel:
    """Message queue shared by a mailbox and the addresses that feed it."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.queue: deque[Any] = deque()
        self.senders = 0

    def release_sender(self) -> None:
        self.senders -= 1

    def connected(self) -> bool:
        return self.senders > 0


class _Address:
    """A sender handle; the mailbox stays connected while any address is open."""

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel
        channel.senders += 1
        self._finalizer = weakref.finalize(self, channel.release_sender)

    def do_send(self, msg: Any) -> None:
        """Queue a message: an object with ``handle(act, ctx)`` or a callable ``(act, ctx)``."""
        if not self._finalizer.alive:
            raise RuntimeError("address is closed")
        self._channel.queue.append(msg)

    def connected(self) -> bool:
        """True while this address is open."""
        return self._finalizer.alive

    def close(self) -> None:
        """Release this address; closing twice has no further effect."""
        self._finalizer()

    def __enter__(self) -> "_Address":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class _SenderProducer:
    """Creates addresses for a channel without counting as a sender itself."""

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    def sender(self) -> _Address:
        return _Address(self._channel)

    def capacity(self) -> int:
        return self._channel.capacity

    def set_capacity(self, cap: int) -> None:
        self._channel.capacity = cap

    def connected(self) -> bool:
        return self._channel.connected()


def _deliver(msg: Any, act: Any, ctx: Any) -> None:
    handle = getattr(msg, "handle", None)
    if handle is not None:
        handle(act, ctx)
    else:
        msg(act, ctx)


class ContextParts:
    """The state of an actor's context: lifecycle flags, spawned and waited-on futures."""

    def __init__(self, addr: _SenderProducer) -> None:
        self._addr = addr
        self._flags = _Flags.RUNNING
        self._wait: list[ActorFuture] = []
        self._items: list[tuple[SpawnHandle, ActorFuture]] = []
        # slot 0: last issued handle, slot 1: handle being polled, rest: cancelled
        self._handles: list[SpawnHandle] = [SpawnHandle(), SpawnHandle()]

    def __repr__(self) -> str:
        return f"ContextParts(flags={self._flags!r})"

    def stop(self) -> None:
        """Begin stopping; the actor's ``stopping`` hook may still refuse."""
        if _Flags.RUNNING in self._flags:
            self._flags &= ~_Flags.RUNNING
            self._flags |= _Flags.STOPPING

    def terminate(self) -> None:
        """Stop without asking the actor."""
        self._flags = _Flags.STOPPED

    def state(self) -> ActorState:
        if _Flags.RUNNING in self._flags:
            return ActorState.RUNNING
        if _Flags.STOPPED in self._flags:
            return ActorState.STOPPED
        if _Flags.STOPPING in self._flags:
            return ActorState.STOPPING
        return ActorState.STARTED

    def waiting(self) -> bool:
        """True while a waited-on future is pending or the actor is stopping."""
        return bool(self._wait) or bool(self._flags & (_Flags.STOPPING | _Flags.STOPPED))

    def curr_handle(self) -> SpawnHandle:
        """Handle of the spawned future currently being polled."""
        return self._handles[1]

    def spawn(self, fut: ActorFuture) -> SpawnHandle:
        """Run ``fut`` alongside message processing; return its handle."""
        handle = self._handles[0].next()
        self._handles[0] = handle
        self._items.append((handle, fut))
        return handle

    def wait(self, fut: ActorFuture) -> None:
        """Run ``fut`` and receive no messages until it completes."""
        self._wait.append(fut)

    def cancel_future(self, handle: SpawnHandle) -> bool:
        """Cancel a previously spawned future."""
        self._handles.append(handle)
        return True

    def capacity(self) -> int:
        return self._addr.capacity()

    def set_mailbox_capacity(self, cap: int) -> None:
        self._flags |= _Flags.MB_CAP_CHANGED
        self._addr.set_capacity(cap)

    def address(self) -> _Address:
        """Return a new address of this actor."""
        return self._addr.sender()

    def restart(self) -> None:
        """Drop all futures and return to the running state; queued messages stay."""
        self._flags = _Flags.RUNNING
        self._wait = []
        self._items = []
        self._handles[0] = SpawnHandle()

    def started(self) -> bool:
        return _Flags.STARTED in self._flags

    def connected(self) -> bool:
        """True while any address of this actor is open."""
        return self._addr.connected()


class Mailbox:
    """Receiving end of an actor's address channel."""

    def __init__(self, msgs: _Channel | None = None, capacity: int = DEFAULT_CAPACITY) -> None:
        self._msgs = msgs if msgs is not None else _Channel(capacity)

    def __repr__(self) -> str:
        return f"Mailbox(capacity={self.capacity()})"

    def capacity(self) -> int:
        return self._msgs.capacity

    def set_capacity(self, cap: int) -> None:
        self._msgs.capacity = cap

    def connected(self) -> bool:
        return self._msgs.connected()

    def address(self) -> _Address:
        return _Address(self._msgs)

    def sender_producer(self) -> _SenderProducer:
        return _SenderProducer(self._msgs)

    def poll(self, act: Any, ctx: Any, task: Any) -> None:
        """Deliver queued messages until the queue is empty or the context waits."""
        queue = self._msgs.queue
        while True:
            if ctx.waiting():
                return
            if not queue:
                return
            _deliver(queue.popleft(), act, ctx)


def _parts_of(ctx: Any) -> ContextParts:
    if isinstance(ctx, ContextParts):
        return ctx
    parts = ctx.parts
    return parts() if callable(parts) else parts


def _swap_remove(items: list[Any], idx: int) -> None:
    last = items.pop()
    if idx < len(items):
        items[idx] = last


class ContextFut:
    """Drives an actor: runs its hooks, delivers messages and polls its futures.

    ``ctx`` is a ``ContextParts`` or an object exposing one as ``parts``.
    ``poll`` returns ``None`` once the actor has stopped, otherwise ``PENDING``.
    """

    def __init__(self, ctx: Any, act: Any, mailbox: Mailbox) -> None:
        self.ctx = ctx
        self.act = act
        self.mailbox = mailbox
        self._wait: list[ActorFuture] = []
        self._items: list[tuple[SpawnHandle, ActorFuture]] = []

    def __repr__(self) -> str:
        return "ContextFut(...)"

    @property
    def _parts(self) -> ContextParts:
        return _parts_of(self.ctx)

    def address(self) -> _Address:
        return self.mailbox.address()

    def _is_stopping(self) -> bool:
        return bool(self._parts._flags & (_Flags.STOPPING | _Flags.STOPPED))

    def alive(self) -> bool:
        flags = self._parts._flags
        if _Flags.STOPPED in flags:
            return False
        return (
            _Flags.STARTED not in flags
            or self.mailbox.connected()
            or bool(self._items)
            or bool(self._wait)
        )

    def restart(self) -> bool:
        """Reset the context for a supervised restart; False if no address is open."""
        if not self.mailbox.connected():
            return False
        self._wait = []
        self._items = []
        self._parts.restart()
        hook = getattr(self.act, "restarting", None)
        if hook is not None:
            hook(self.ctx)
        return True

    def _started_hook(self) -> None:
        hook = getattr(self.act, "started", None)
        if hook is not None:
            hook(self.ctx)

    def _stopped_hook(self) -> None:
        hook = getattr(self.act, "stopped", None)
        if hook is not None:
            hook(self.ctx)

    def _should_stop(self) -> bool:
        hook = getattr(self.act, "stopping", None)
        answer = hook(self.ctx) if hook is not None else Running.STOP
        return answer is None or answer == Running.STOP

    def _merge(self) -> bool:
        parts = self._parts
        modified = False
        if parts._wait:
            modified = True
            self._wait.extend(parts._wait)
            parts._wait.clear()
        if parts._items:
            modified = True
            self._items.extend(parts._items)
            parts._items.clear()
        if _Flags.MB_CAP_CHANGED in parts._flags:
            modified = True
            parts._flags &= ~_Flags.MB_CAP_CHANGED
        if len(parts._handles) > 2:
            modified = True
        return modified

    def _clean_cancelled_handles(self) -> None:
        handles = self._parts._handles
        while len(handles) > 2:
            handle = handles.pop()
            idx = 0
            while idx < len(self._items):
                if self._items[idx][0] == handle:
                    _swap_remove(self._items, idx)
                else:
                    idx += 1

    def _finish(self) -> None:
        self._parts._flags = _Flags.STOPPED | _Flags.STARTED
        self._stopped_hook()

    def _poll_items(self, task: Any) -> bool:
        """Poll spawned futures; return True if the main loop must start over."""
        parts = self._parts
        idx = 0
        while idx < len(self._items) and not self._is_stopping():
            handle, fut = self._items[idx]
            parts._handles[1] = handle
            if fut.poll(self.act, self.ctx, task) is PENDING:
                if len(parts._handles) > 2:
                    self._clean_cancelled_handles()
                    return True
                if self._wait and not self._is_stopping():
                    last = len(self._items) - 1
                    if idx != last:
                        self._items[idx], self._items[last] = self._items[last], self._items[idx]
                    return True
                idx += 1
            else:
                _swap_remove(self._items, idx)
                if self._wait and not self._is_stopping():
                    return True
        return False

    def poll(self, task: Any = None) -> Any:
        parts = self._parts
        if not parts.started():
            parts._flags |= _Flags.STARTED
            self._started_hook()
            if self._merge():
                self._clean_cancelled_handles()

        while True:
            # the most recently added wait future always goes first
            while self._wait and not self._is_stopping():
                fut = self._wait[-1]
                if fut.poll(self.act, self.ctx, task) is PENDING and parts.state().alive():
                    return PENDING
                self._wait.pop()
                self._merge()

            self.mailbox.poll(self.act, self.ctx, task)
            if self._wait and not self._is_stopping():
                continue

            if self._poll_items(task):
                continue
            parts._handles[1] = SpawnHandle()

            if self._merge() and _Flags.STOPPING not in parts._flags:
                if not self._items:
                    del parts._handles[2:]
                continue

            flags = parts._flags
            if _Flags.RUNNING in flags:
                if not self.alive() and self._should_stop():
                    self._finish()
                    return None
            elif _Flags.STOPPING in flags:
                if self._should_stop():
                    self._finish()
                    return None
                parts._flags = (parts._flags & ~_Flags.STOPPING) | _Flags.RUNNING
                continue
            elif _Flags.STOPPED in flags:
                self._stopped_hook()
                return None

            return PENDING