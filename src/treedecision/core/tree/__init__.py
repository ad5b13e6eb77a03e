"""
Decision tree module.

Provides the data model and the structural operations that keep it
consistent.

Components:
- Node / Branch / DecisionTree: Frozen pydantic models keyed by node id
- add_node, add_branch, delete_subtree, clone_subtree: Copy-on-write operations
- TreeValidator: Collects structural problems before evaluation

Example:
    from treedecision.core.tree import NodeKind, add_branch, add_node, create_branch, create_node, new_tree

    tree = new_tree("Invest?")
    leaf = create_node(NodeKind.LEAF, "Do nothing", payoff=0)
    tree = add_node(tree, leaf)
    tree = add_branch(tree, tree.root_id, create_branch(leaf.id, "Skip"))
"""

from treedecision.core.tree.models import Branch, DecisionTree, Node, NodeKind
from treedecision.core.tree.operations import (
    CloneOptions,
    CloneResult,
    add_branch,
    add_node,
    clone_subtree,
    create_branch,
    create_node,
    delete_subtree,
    new_tree,
    remove_branch,
    update_node,
)
from treedecision.core.tree.validation import TreeValidator, find_cycle, probability_total, reachable_from

__all__ = [
    "Branch",
    "CloneOptions",
    "CloneResult",
    "DecisionTree",
    "Node",
    "NodeKind",
    "TreeValidator",
    "add_branch",
    "add_node",
    "clone_subtree",
    "create_branch",
    "create_node",
    "delete_subtree",
    "find_cycle",
    "new_tree",
    "probability_total",
    "reachable_from",
    "remove_branch",
    "update_node",
]
