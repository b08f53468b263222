# actorkit

A small actor framework in which everything is driven by explicit polling.
Futures and streams are polled together with the actor they run for and that
actor's context, so callbacks can read and change actor state as results
arrive. There is no event loop inside the package: you call `poll` yourself,
from your own loop, scheduler or test.

## Polling conventions

`actorkit.fut.base` defines two markers:

- `PENDING` – the value is not ready yet; poll again later.
- `DONE` – a stream has no more items.

An actor future's `poll(act, ctx, task)` returns its output or `PENDING`, and
raises on failure. An actor stream's `poll_next(act, ctx, task)` returns the
next item, `PENDING` or `DONE`. `task` is passed through untouched; the
writers in `actorkit.io` call its `wake()` method if it has one.

## Actor futures and streams (`actorkit.fut`)

- `actorkit.fut.base`: the abstract `ActorFuture` and `ActorStream`;
  `wrap_future` (a plain object with `poll(task)`) and `wrap_stream` (a plain
  object with `poll_next(task)`, or any iterable); and the leaf futures
  `ready(value)`, `ok(value)` and `err(exception)`. Polling any of these
  leaf futures a second time raises `RuntimeError`.
- `actorkit.fut.combinators`: `Map`, `Then` and `Timeout`, created by
  `ActorFuture.map`, `ActorFuture.then` and `ActorFuture.timeout`. A timed-out
  future raises `FutureTimeout`. `Delay` is the timer they use; it reads
  `time.monotonic` unless given another `clock`. Timeouts are seconds or a
  `datetime.timedelta`.
- `actorkit.fut.streams`: `StreamMap`, `StreamThen`, `StreamFold`,
  `StreamTimeout` and `StreamFinish`, created by the `ActorStream` methods of
  the same names. `StreamTimeout` yields a `FutureTimeout` instance as an item
  whenever no item arrives in time and then restarts its timer. `finish(stream)`
  / `Finish` turn a plain stream or iterable into a plain future.
- `actorkit.fut.either`: `Either.left(value)` / `Either.right(value)`, with
  `factor_first`, `factor_second`, `into_inner`, and `poll`, which delegates
  to the held future.

```python
from actorkit.fut.base import ready, ok


def remember(value, act, ctx):
    act.last = value
    return value * 2


doubled = ready(21).map(remember)
checked = ok(5).then(lambda result, act, ctx: ready(result + 1))
```

## Timers and conditions (`actorkit.utils`)

- `TimerFunc(timeout, f)` calls `f(act, ctx)` once the timeout has passed.
- `IntervalFunc(period, f)` calls `f(act, ctx)` every period, catching up on
  missed ticks; it never ends. The period must be positive.
- `Condition` hands out waiters with `wait()`; `set(result)` gives each a
  copy of the result, which its `poll(task)` then returns. A condition can be
  set only once.

## Running an actor (`actorkit.context`)

An actor is any object. `ContextFut` calls these methods on it when they are
present: `started(ctx)`, `stopping(ctx)` (return `Running.CONTINUE` to stay
alive; `Running.STOP` or `None` lets it stop), `stopped(ctx)` and
`restarting(ctx)`.

- `Mailbox` holds queued messages. `Mailbox.address()` returns an address
  with `do_send(msg)`, `connected()` and `close()`, usable as a context
  manager. A message is an object with `handle(act, ctx)` or a callable
  `(act, ctx)`. The capacity is recorded but not enforced.
- `ContextParts` is the actor's context: `spawn` (returns a `SpawnHandle`),
  `wait` (no messages are delivered until the future completes),
  `cancel_future`, `stop`, `terminate`, `state` (an `ActorState`), `waiting`,
  `address` and the capacity methods.
- `ContextFut(ctx, act, mailbox)` drives the actor. `poll()` returns `None`
  once the actor has stopped and `PENDING` otherwise. A running actor stops on
  its own once it has no open address and no futures left.

```python
from actorkit.context import ContextFut, ContextParts, Mailbox


class Counter:
    def __init__(self):
        self.count = 0


mailbox = Mailbox()
actor = Counter()
driver = ContextFut(ContextParts(mailbox.sender_producer()), actor, mailbox)

addr = mailbox.address()
addr.do_send(lambda act, ctx: setattr(act, "count", act.count + 1))
driver.poll()   # PENDING; actor.count == 1
addr.close()
driver.poll()   # None: no address is open, the actor has stopped
```

## Supervision (`actorkit.supervisor`)

`Supervisor(context_fut)` polls a `ContextFut`; each time the actor stops
while an address is still open, it resets the context, calls the actor's
`restarting` hook and carries on. Its `poll()` returns `None` once the actor
has stopped with no address open.

## Message responses (`actorkit.handler`)

`respond(result, ctx, tx)` delivers a handler's return value to a reply
channel `tx` (any object with `send(value)`, or `None`). `MessageResult`,
`Response.reply` and `ActorResponse.reply` send a value at once;
`Response.fut` (plain future) and `ActorResponse.deferred` (actor future), as
well as a bare `ActorFuture`, are spawned into `ctx` and their output is sent
when they complete.

## Context items and stream handling

- `actorkit.contextitems`: `ActorMessageItem`, `ActorDelayedMessageItem` and
  `ActorMessageStreamItem` deliver messages to the actor's
  `handle(msg, ctx)` and process the result with `respond`; `ActorWaitItem`
  counts as done once the actor is no longer alive.
- `actorkit.stream`: subclass `StreamHandler`, implement `handle(item, ctx)`,
  and call `add_stream(stream, ctx)`. `started` runs before the first item,
  `finished` at the end (by default it calls `ctx.stop()`). A stopped actor
  gets no stream and a default handle.

## Writers (`actorkit.io`)

`Writer` buffers bytes, `FramedWrite` encodes items with
`encoder.encode(item, buffer)`, and `SinkWrite` feeds a sink with
`send`, `poll_flush` and `poll_close`. Each spawns a future into the actor's
context that does the writing; errors go to `WriteHandler.error` (return
`Running.CONTINUE` to keep going) and the end to `WriteHandler.finished`.
When more than the high watermark is buffered and the stream reports
`BlockingIOError`, message delivery pauses until the buffer drains below the
low watermark (4 KiB and 16 KiB by default, see `set_buffer_capacity`).
A zero-byte write is reported as `WriteZeroError`. The exact protocol for
byte streams and sinks is in the `actorkit.io` module docstring.

## What it does not do

- No event loop, runtime or threads: nothing runs unless you call `poll`.
- No service registry, no multi-threaded worker pools, no typed message
  dispatch: a message is simply an object or callable handed to the actor.
- No network or file I/O of its own; the writers work with objects you supply.

## Requirements

Python 3.10 or later. No third-party dependencies; `pytest` for the tests
(`pip install actorkit[test]`).