"""Error taxonomy shared by the tree operations and the rollback engine."""

from __future__ import annotations

from typing import Optional


class TreeError(RuntimeError):
    """Base class for every failure raised by the decision-tree core."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NodeNotFoundError(TreeError):
    """A referenced node id is absent from the tree."""

    def __init__(self, node_id: str, role: str = "node"):
        self.node_id = node_id
        self.role = role
        super().__init__(f'{role.capitalize()} with id "{node_id}" not found.')


class DuplicateIdError(TreeError):
    """A node or branch id collides with an existing one in the same scope."""

    def __init__(self, item_id: str, scope: Optional[str] = None):
        self.item_id = item_id
        self.scope = scope
        if scope:
            message = f'Branch with id "{item_id}" already exists on node "{scope}".'
        else:
            message = f'Node with id "{item_id}" already exists.'
        super().__init__(message)


class InvalidOperationError(TreeError):
    """The operation is forbidden for the node it targets."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message)


class ProbabilityMismatchError(TreeError):
    """Branch probabilities of a chance node do not sum to 1."""

    def __init__(self, node_id: str, label: str, total: float, tolerance: float):
        self.node_id = node_id
        self.label = label
        self.total = total
        self.tolerance = tolerance
        super().__init__(f'Probabilities of chance node "{label}" sum to {total:.6f}; they must sum to 1.')


class CycleDetectedError(TreeError):
    """The branch relation loops back onto a node still being evaluated."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f'Cycle detected: node "{node_id}" is reachable from itself.')


__all__ = [
    "TreeError",
    "NodeNotFoundError",
    "DuplicateIdError",
    "InvalidOperationError",
    "ProbabilityMismatchError",
    "CycleDetectedError",
]
