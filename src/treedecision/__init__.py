"""Decision trees evaluated by rollback (backward induction)."""

from treedecision.core.errors import (
    CycleDetectedError,
    DuplicateIdError,
    InvalidOperationError,
    NodeNotFoundError,
    ProbabilityMismatchError,
    TreeError,
)
from treedecision.core.rollback import RollbackOptions, RollbackResult, rollback
from treedecision.core.tree import (
    Branch,
    CloneOptions,
    CloneResult,
    DecisionTree,
    Node,
    NodeKind,
    add_branch,
    add_node,
    clone_subtree,
    delete_subtree,
)

__version__ = "0.1.0"

__all__ = [
    "Branch",
    "CloneOptions",
    "CloneResult",
    "CycleDetectedError",
    "DecisionTree",
    "DuplicateIdError",
    "InvalidOperationError",
    "Node",
    "NodeKind",
    "NodeNotFoundError",
    "ProbabilityMismatchError",
    "RollbackOptions",
    "RollbackResult",
    "TreeError",
    "add_branch",
    "add_node",
    "clone_subtree",
    "delete_subtree",
    "rollback",
]
