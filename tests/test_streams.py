import pytest

from actorkit.fut.base import DONE, PENDING, ActorFuture, ActorStream, ready, wrap_stream
from actorkit.fut.combinators import FutureTimeout
from actorkit.fut.streams import (
    Finish,
    StreamFinish,
    StreamFold,
    StreamMap,
    StreamThen,
    StreamTimeout,
    finish,
)


class Scripted(ActorStream):
    def __init__(self, items):
        self.items = list(items)
        self.polls = 0

    def poll_next(self, act, ctx, task):
        self.polls += 1
        if not self.items:
            return DONE
        return self.items.pop(0)


class PlainSource:
    def __init__(self, items):
        self.items = list(items)

    def poll_next(self, task):
        if not self.items:
            return DONE
        return self.items.pop(0)


class PendingOnce(ActorFuture):
    def __init__(self, value):
        self.value = value
        self.pending = True

    def poll(self, act, ctx, task):
        if self.pending:
            self.pending = False
            return PENDING
        return self.value


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_finish_drains_iterable():
    items = iter(["a", "b", "c"])
    assert finish(items).poll(None) is None
    assert next(items, "end") == "end"


def test_finish_waits_on_pending_source():
    fut = Finish(PlainSource(["a", PENDING, "b"]))
    assert fut.poll(None) is PENDING
    assert fut.poll(None) is None


def test_stream_finish_completes_after_pending():
    stream = Scripted([1, PENDING, 2])
    fut = StreamFinish(stream)
    assert fut.poll(None, None, None) is PENDING
    assert fut.poll(None, None, None) is None
    assert stream.items == []


def test_stream_map_transforms_items():
    stream = StreamMap(Scripted([1, PENDING, 2]), lambda i, act, ctx: (i, act, "m"))
    results = [stream.poll_next("act", None, None) for _ in range(4)]
    assert results == [(1, "act", "m"), PENDING, (2, "act", "m"), DONE]


def test_fold_collects_items():
    fut = wrap_stream([1, 2, 3]).fold([], lambda acc, i, act, ctx: ready(acc + [i]))
    assert isinstance(fut, StreamFold)
    assert fut.poll(None, None, None) == [1, 2, 3]


def test_fold_with_pending_futures():
    fut = wrap_stream(["x", "y"]).fold((), lambda acc, i, act, ctx: PendingOnce(acc + (i,)))
    outputs = []
    while True:
        out = fut.poll(None, None, None)
        if out is not PENDING:
            break
        outputs.append(out)
    assert out == ("x", "y")
    assert outputs == [PENDING, PENDING]


def test_fold_passes_actor_and_context():
    seen = []

    def step(acc, item, act, ctx):
        seen.append((act, ctx))
        return ready(acc + item)

    result = StreamFold(wrap_stream([1]), 6, step).poll("act", "ctx", None)
    assert result == 7
    assert seen == [("act", "ctx")]


def test_fold_polled_after_completion_raises():
    fut = wrap_stream([]).fold("init", lambda acc, i, act, ctx: ready(acc))
    assert fut.poll(None, None, None) == "init"
    with pytest.raises(RuntimeError):
        fut.poll(None, None, None)


def test_fold_callback_must_return_future():
    fut = wrap_stream([1]).fold(0, lambda acc, i, act, ctx: acc)
    with pytest.raises(TypeError):
        fut.poll(None, None, None)


def test_stream_then_yields_future_outputs():
    stream = wrap_stream(["a", "b"]).then(lambda i, act, ctx: ready((i, "t")))
    assert isinstance(stream, StreamThen)
    results = [stream.poll_next(None, None, None) for _ in range(3)]
    assert results == [("a", "t"), ("b", "t"), DONE]


def test_stream_then_keeps_pending_future():
    source = Scripted(["a", "b"])
    stream = StreamThen(source, lambda i, act, ctx: PendingOnce(i))
    assert stream.poll_next(None, None, None) is PENDING
    assert stream.poll_next(None, None, None) == "a"
    assert source.items == ["b"]


def test_stream_timeout_reports_timeout_then_continues():
    clock = FakeClock()
    stream = StreamTimeout(Scripted([PENDING, PENDING, "x"]), 5, clock)
    assert stream.poll_next(None, None, None) is PENDING
    clock.now = 5
    timed_out = stream.poll_next(None, None, None)
    assert isinstance(timed_out, FutureTimeout)
    assert stream.poll_next(None, None, None) == "x"
    assert stream.poll_next(None, None, None) is DONE


def test_stream_timeout_restarts_after_item():
    clock = FakeClock()
    stream = StreamTimeout(Scripted([PENDING, "x", PENDING]), 5, clock)
    assert stream.poll_next(None, None, None) is PENDING
    clock.now = 4
    assert stream.poll_next(None, None, None) == "x"
    clock.now = 6
    assert stream.poll_next(None, None, None) is PENDING