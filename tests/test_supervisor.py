from types import SimpleNamespace

from actorkit.context import ContextFut, ContextParts, Mailbox, Running
from actorkit.fut.base import PENDING, ActorFuture
from actorkit.supervisor import Supervisor


def hooked_actor():
    """An actor whose lifecycle hooks log their names into ``events``."""
    events = []

    def hook(name, answer=None):
        def call(ctx):
            events.append(name)
            return answer

        return call

    return SimpleNamespace(
        events=events,
        started=hook("started"),
        stopping=hook("stopping", Running.STOP),
        stopped=hook("stopped"),
        restarting=hook("restarting"),
    )


class NeverReady(ActorFuture):
    polls = 0

    def poll(self, act, ctx, task):
        self.polls += 1
        return PENDING


def supervise(act):
    box = Mailbox()
    ctx_parts = ContextParts(box.sender_producer())
    return Supervisor(ContextFut(ctx_parts, act, box)), ctx_parts, box.address()


def stop_now(a, ctx):
    ctx.stop()


def test_stopped_actor_is_restarted_while_connected():
    act = hooked_actor()
    sup, _, addr = supervise(act)
    addr.do_send(stop_now)
    assert sup.poll() is PENDING
    assert act.events == ["started", "stopping", "stopped", "restarting", "started"]
    assert sup.fut.alive()


def test_supervisor_ends_when_addresses_are_closed():
    act = hooked_actor()
    sup, _, addr = supervise(act)
    assert sup.poll() is PENDING
    addr.close()
    assert sup.poll() is None
    assert "restarting" not in act.events
    assert act.events[-1] == "stopped"


def test_restart_discards_spawned_futures():
    act = hooked_actor()
    sup, ctx_parts, addr = supervise(act)
    never = NeverReady()
    ctx_parts.spawn(never)
    addr.do_send(stop_now)
    assert sup.poll() is PENDING
    assert never.polls == 0
    assert act.events.count("started") == 2


def test_messages_after_restart_are_handled():
    act = hooked_actor()
    sup, _, addr = supervise(act)
    addr.do_send(stop_now)
    sup.poll()
    addr.do_send(lambda a, ctx: a.events.append("after"))
    assert sup.poll() is PENDING
    assert act.events[-1] == "after"