"""A future that is one of two alternatives producing the same kind of output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .base import ActorFuture


@dataclass(frozen=True)
class Either(ActorFuture):
    """Holds either a left or a right value; polling delegates to the held future."""

    value: Any
    is_left: bool = True

    @staticmethod
    def left(value: Any) -> "Either":
        """Create the first branch."""
        return Either(value, True)

    @staticmethod
    def right(value: Any) -> "Either":
        """Create the second branch."""
        return Either(value, False)

    @property
    def is_right(self) -> bool:
        return not self.is_left

    def factor_first(self) -> tuple[Any, "Either"]:
        """Split ``(x, a)`` into ``x`` and the same branch holding ``a``."""
        shared, inner = self.value
        return shared, Either(inner, self.is_left)

    def factor_second(self) -> tuple["Either", Any]:
        """Split ``(a, x)`` into the same branch holding ``a`` and ``x``."""
        inner, shared = self.value
        return Either(inner, self.is_left), shared

    def into_inner(self) -> Any:
        """Return the held value, whichever branch it is."""
        return self.value

    def poll(self, act: Any, ctx: Any, task: Any) -> Any:
        return self.value.poll(act, ctx, task)