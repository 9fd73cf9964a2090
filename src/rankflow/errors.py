"""Exception hierarchy for rankflow."""

from __future__ import annotations


class LayoutError(Exception):
    """Base class for every error raised by rankflow."""


class GraphError(LayoutError, ValueError):
    """Raised when the graph model is used in a way it does not support."""


class DuplicateEdgeError(GraphError):
    """Raised when an edge identity (tail, head, name) is created twice."""


class PreconditionError(LayoutError):
    """Raised when a phase receives a graph that violates its preconditions."""


class ConfigError(LayoutError, ValueError):
    """Raised for unknown or malformed layout options."""
