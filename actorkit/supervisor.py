"""Supervisor that restarts an actor's context whenever the actor stops."""

from __future__ import annotations

from typing import Any

from .context import ContextFut
from .fut.base import PENDING


class Supervisor:
    """Restarts a stopped actor while any of its addresses is still open.

    The actor itself is not recreated; its ``restarting`` hook is called and
    its lifecycle starts again. Once no address is open, the supervisor ends.
    """

    def __init__(self, fut: ContextFut) -> None:
        self.fut = fut

    def __repr__(self) -> str:
        return f"Supervisor({self.fut!r})"

    def poll(self, task: Any = None) -> Any:
        """Return ``None`` when the actor is finished for good, otherwise ``PENDING``."""
        while True:
            if self.fut.poll(task) is PENDING:
                return PENDING
            if not self.fut.restart():
                return None