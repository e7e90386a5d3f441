"""Exceptions raised by the pine tree toolkit."""

from __future__ import annotations


class PineTreeError(Exception):
    """Base class for every error raised by :mod:`pinetree`."""


class InvalidParameterError(PineTreeError, ValueError):
    """A numeric input is non-finite, out of range, or over the node budget."""


class NodeNotFoundError(PineTreeError, KeyError):
    """No node with the requested id exists in the current tree."""

    def __init__(self, node_id: int) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Node {self.node_id} not found"
