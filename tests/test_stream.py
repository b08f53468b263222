import logging

import pytest

from actorkit.context import ActorState, ContextFut, ContextParts, Mailbox, SpawnHandle
from actorkit.fut.base import PENDING, ActorFuture
from actorkit.stream import ActorStreamItem, StreamHandler


class Never(ActorFuture):
    def poll(self, act, ctx, task):
        return PENDING


class StreamActor(StreamHandler):
    def __init__(self, wait_on_first=False):
        self.items = []
        self.starts = 0
        self.finishes = 0
        self.wait_on_first = wait_on_first

    def handle(self, item, ctx):
        self.items.append(item)
        if self.wait_on_first and len(self.items) == 1:
            ctx.wait(Never())

    def started(self, ctx):
        self.starts += 1

    def finished(self, ctx):
        self.finishes += 1
        super().finished(ctx)


class PlainActor(StreamHandler):
    def __init__(self):
        self.items = []

    def handle(self, item, ctx):
        self.items.append(item)


@pytest.fixture
def mailbox():
    return Mailbox()


@pytest.fixture
def parts(mailbox):
    return ContextParts(mailbox.sender_producer())


def test_handle_is_required():
    with pytest.raises(TypeError):
        StreamHandler()


def test_add_stream_returns_fresh_handle(parts):
    act = PlainActor()
    first = act.add_stream([1], parts)
    second = act.add_stream([2], parts)
    assert first == SpawnHandle().next()
    assert second == first.next()


def test_add_stream_on_stopped_actor(parts, caplog):
    parts.terminate()
    with caplog.at_level(logging.ERROR):
        handle = PlainActor().add_stream([1], parts)
    assert handle == SpawnHandle()
    assert "add_stream called for stopped actor" in caplog.text


def test_stream_item_hooks(parts):
    act = StreamActor()
    item = ActorStreamItem(["a", "b"])
    assert item.poll(act, parts, None) is None
    assert act.items == ["a", "b"]
    assert act.starts == 1
    assert act.finishes == 1
    assert parts.state() == ActorState.STOPPING


def test_stream_item_pauses_while_waiting(parts):
    act = StreamActor(wait_on_first=True)
    item = ActorStreamItem([1, 2])
    assert item.poll(act, parts, None) is PENDING
    assert act.items == [1]
    assert act.finishes == 0
    assert parts.state() == ActorState.RUNNING


def test_stream_item_started_once(parts):
    class Source:
        def __init__(self):
            self.values = [PENDING, "x"]

        def poll_next(self, task):
            return self.values.pop(0) if self.values else PENDING

    act = StreamActor()
    item = ActorStreamItem(Source())
    assert item.poll(act, parts, None) is PENDING
    assert item.poll(act, parts, None) is PENDING
    assert act.items == ["x"]
    assert act.starts == 1


def test_stream_drives_actor_to_stop(parts, mailbox):
    act = StreamActor()
    act.add_stream(["p", "q"], parts)
    runner = ContextFut(parts, act, mailbox)
    assert runner.poll() is None
    assert act.items == ["p", "q"]
    assert parts.state() == ActorState.STOPPED