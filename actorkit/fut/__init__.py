"""Futures and streams polled together with an actor and its context, and their combinators."""

__all__ = ["base", "combinators", "either", "streams"]