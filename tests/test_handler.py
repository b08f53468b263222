from actorkit.context import ContextFut, ContextParts, Mailbox
from actorkit.fut.base import PENDING, ready
from actorkit.handler import ActorResponse, MessageResult, Response, respond

import pytest


class Channel:
    def __init__(self):
        self.sent = []

    def send(self, value):
        self.sent.append(value)

    def is_canceled(self):
        return False


class Countdown:
    def __init__(self, n, value):
        self.n = n
        self.value = value

    def poll(self, task):
        if self.n:
            self.n -= 1
            return PENDING
        return self.value


class Act:
    pass


def make_runner():
    mailbox = Mailbox()
    parts = ContextParts(mailbox.sender_producer())
    return parts, ContextFut(parts, Act(), mailbox)


def test_message_result_sends_value():
    parts, _ = make_runner()
    ch = Channel()
    MessageResult(7).handle(parts, ch)
    assert ch.sent == [7]


def test_respond_plain_value():
    parts, _ = make_runner()
    ch = Channel()
    respond("hello", parts, ch)
    assert ch.sent == ["hello"]


def test_respond_message_result():
    parts, _ = make_runner()
    ch = Channel()
    respond(MessageResult([1, 2]), parts, ch)
    assert ch.sent == [[1, 2]]


def test_response_reply():
    parts, _ = make_runner()
    ch = Channel()
    Response.reply(5).handle(parts, ch)
    assert ch.sent == [5]


def test_response_fut_is_driven_by_context():
    parts, runner = make_runner()
    ch = Channel()
    Response.fut(Countdown(1, "done")).handle(parts, ch)
    assert ch.sent == []
    assert runner.poll() is PENDING
    assert ch.sent == []
    assert runner.poll() is None
    assert ch.sent == ["done"]


def test_response_fut_requires_pollable():
    with pytest.raises(TypeError):
        Response.fut(42)


def test_actor_response_reply():
    parts, _ = make_runner()
    ch = Channel()
    ActorResponse.reply(3).handle(parts, ch)
    assert ch.sent == [3]


def test_actor_response_deferred():
    parts, runner = make_runner()
    ch = Channel()
    ActorResponse.deferred(ready(9)).handle(parts, ch)
    assert ch.sent == []
    assert runner.poll() is None
    assert ch.sent == [9]


def test_actor_response_deferred_requires_actor_future():
    with pytest.raises(TypeError):
        ActorResponse.deferred(Countdown(0, 1))


def test_respond_actor_future_spawns():
    parts, runner = make_runner()
    ch = Channel()
    respond(ready("x"), parts, ch)
    assert ch.sent == []
    runner.poll()
    assert ch.sent == ["x"]


def test_respond_without_channel_still_runs_future():
    parts, runner = make_runner()
    seen = []
    respond(ready(1).map(lambda v, act, ctx: seen.append(v)), parts, None)
    runner.poll()
    assert seen == [1]


def test_reprs():
    assert repr(Response.reply(1)) == "Response(item=Result(_))"
    assert repr(Response.fut(Countdown(0, 1))) == "Response(item=Fut(_))"
    assert repr(ActorResponse.deferred(ready(1))) == "ActorResponse(item=Fut(_))"