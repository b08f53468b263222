"""Poll-driven actor framework: actor-aware futures and streams, contexts, supervision and writers."""

__version__ = "0.1.0"

__all__ = [
    "context",
    "contextitems",
    "fut",
    "handler",
    "io",
    "stream",
    "supervisor",
    "utils",
]