"""Structural checks over a decision tree: reachability, cycles and probability totals."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Set

from treedecision.core.tree.models import DecisionTree, NodeKind

DEFAULT_TOLERANCE = 1e-6


def reachable_from(tree: DecisionTree, node_id: str) -> Set[str]:
    """
    Collect ``node_id`` and every node reachable from it through branches.

    Branch targets missing from the tree are skipped. Returns an empty set when
    ``node_id`` itself is absent.
    """
    if node_id not in tree.nodes:
        return set()

    visited: Set[str] = set()
    stack = [node_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for branch in tree.nodes[current].branches:
            if branch.to in tree.nodes and branch.to not in visited:
                stack.append(branch.to)
    return visited


def find_cycle(tree: DecisionTree) -> Optional[List[str]]:
    """
    Find one cycle in the branch relation.

    Returns:
        The node ids of the cycle in traversal order, first id repeated at the
        end (e.g. ``["a", "b", "a"]``), or None when the relation is acyclic.
    """
    done: Set[str] = set()

    for start in tree.nodes:
        if start in done:
            continue
        path: List[str] = [start]
        on_path: Dict[str, int] = {start: 0}
        iterators = [iter(tree.nodes[start].branches)]

        while iterators:
            branch = next(iterators[-1], None)
            if branch is None:
                finished = path.pop()
                del on_path[finished]
                done.add(finished)
                iterators.pop()
                continue
            target = branch.to
            if target not in tree.nodes or target in done:
                continue
            if target in on_path:
                return path[on_path[target]:] + [target]
            on_path[target] = len(path)
            path.append(target)
            iterators.append(iter(tree.nodes[target].branches))

    return None


def probability_total(tree: DecisionTree, node_id: str) -> float:
    """Sum of a node's branch probabilities (missing probabilities count as 0)."""
    node = tree.get_node(node_id)
    if node is None:
        return 0.0
    return math.fsum(branch.probability or 0.0 for branch in node.branches)


class TreeValidator:
    """Collects every structural problem that would make a rollback fail or mislead."""

    def __init__(self, tree: DecisionTree, tolerance: float = DEFAULT_TOLERANCE):
        self.tree = tree
        self.tolerance = tolerance

    def validate_all(self) -> List[str]:
        """Return list of validation errors (empty if the tree can be evaluated)."""
        errors: List[str] = []
        errors.extend(self._validate_root())
        errors.extend(self._validate_branches())
        errors.extend(self._validate_probabilities())
        errors.extend(self._validate_acyclic())
        return errors

    def _validate_root(self) -> List[str]:
        root_id = self.tree.root_id
        if root_id is not None and root_id not in self.tree.nodes:
            return [f"Root '{root_id}' is not a node of the tree"]
        if root_id is None and self.tree.nodes:
            return ["Tree has nodes but no root"]
        return []

    def _validate_branches(self) -> List[str]:
        """Dangling targets, branches under leaves and duplicate branch ids."""
        errors: List[str] = []
        for node_id, node in self.tree.nodes.items():
            if node.kind == NodeKind.LEAF and node.branches:
                errors.append(f"Leaf '{node_id}' has {len(node.branches)} branch(es)")
            seen: Set[str] = set()
            for branch in node.branches:
                if branch.id in seen:
                    errors.append(f"Node '{node_id}' has duplicate branch id '{branch.id}'")
                seen.add(branch.id)
                if branch.to not in self.tree.nodes:
                    errors.append(f"Branch '{branch.id}' of node '{node_id}' targets unknown node '{branch.to}'")
        return errors

    def _validate_probabilities(self) -> List[str]:
        errors: List[str] = []
        for node_id, node in self.tree.nodes.items():
            if node.kind != NodeKind.CHANCE or not node.branches:
                continue
            total = probability_total(self.tree, node_id)
            if abs(total - 1) > self.tolerance:
                errors.append(f"Chance node '{node_id}' ({node.label}) probabilities sum to {total:.6f}, expected 1")
        return errors

    def _validate_acyclic(self) -> List[str]:
        cycle = find_cycle(self.tree)
        if cycle is None:
            return []
        return ["Cycle detected: " + " -> ".join(cycle)]


__all__ = [
    "DEFAULT_TOLERANCE",
    "TreeValidator",
    "find_cycle",
    "probability_total",
    "reachable_from",
]
