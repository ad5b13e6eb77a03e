"""
Rollback (backward induction) over a decision tree.

Values are resolved from terminal nodes back towards the root:
- leaf / no branches: payoff (0 when absent)
- chance: probability-weighted sum of the branch targets
- decision: maximum over the branch targets; the first branch reaching the
  maximum (in stored order) is flagged optimal

Every node id in the tree is evaluated, not only those reachable from the
root. Memoization is scoped to a single pass, so ``rollback`` is a pure
function of the tree and the tolerance.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from treedecision.core.errors import CycleDetectedError, ProbabilityMismatchError
from treedecision.core.tree.models import Branch, DecisionTree, Node, NodeKind
from treedecision.core.tree.validation import DEFAULT_TOLERANCE
from treedecision.utils.logging import log_calls

logger = logging.getLogger(__name__)


class RollbackOptions(BaseModel):
    """Tunables of an evaluation pass."""

    tolerance: float = Field(default=DEFAULT_TOLERANCE, ge=0)


class RollbackResult(BaseModel):
    """Annotated tree plus a flat node id -> expected value mapping."""

    tree: DecisionTree
    expected_values: Dict[str, float] = Field(default_factory=dict)

    def value_of(self, node_id: str) -> Optional[float]:
        """Expected value of a node, or None if it was not evaluated."""
        return self.expected_values.get(node_id)

    def optimal_path(self) -> List[str]:
        """
        Node ids followed from the root through optimal branches.

        The path stops at the first node without an optimal branch (a chance
        or terminal node). Empty when the tree has no root.
        """
        path: List[str] = []
        current = self.tree.root
        while current is not None and current.id not in path:
            path.append(current.id)
            branch = current.optimal_branch()
            if branch is None:
                break
            current = self.tree.get_node(branch.to)
        return path


class _RollbackPass:
    """State of one evaluation pass; discarded when the pass ends."""

    def __init__(self, tree: DecisionTree, tolerance: float):
        self.tree = tree
        self.tolerance = tolerance
        self.values: Dict[str, float] = {}
        self.updated: Dict[str, Node] = {}
        self.visiting: Set[str] = set()

    def run(self) -> RollbackResult:
        for node_id in self.tree.nodes:
            self.evaluate(node_id)

        # Keep the input's key order in the annotated tree
        nodes = {node_id: self.updated[node_id] for node_id in self.tree.nodes}
        return RollbackResult(
            tree=DecisionTree(root_id=self.tree.root_id, nodes=nodes),
            expected_values={node_id: self.values[node_id] for node_id in self.tree.nodes},
        )

    def evaluate(self, start_id: str) -> float:
        """
        Resolve ``start_id`` and every node below it.

        Uses an explicit stack: a node is expanded once (children pushed),
        then resolved once all of its children hold a value.

        Raises:
            NodeNotFoundError: If a node or branch target is absent
            CycleDetectedError: If a node is reached again while still expanding
            ProbabilityMismatchError: If a chance node's probabilities miss 1
        """
        stack: List[Tuple[str, bool]] = [(start_id, False)]
        while stack:
            node_id, expanded = stack.pop()
            if node_id in self.values:
                continue
            node = self.tree.require_node(node_id)

            if expanded:
                self.visiting.discard(node_id)
                self._resolve(node)
                continue

            if node_id in self.visiting:
                raise CycleDetectedError(node_id)

            if node.is_terminal:
                self._resolve(node)
                continue

            self.visiting.add(node_id)
            stack.append((node_id, True))
            for branch in reversed(node.branches):
                if branch.to not in self.values:
                    stack.append((branch.to, False))

        return self.values[start_id]

    def _resolve(self, node: Node) -> None:
        if node.is_terminal:
            value, branches = node.payoff_or_zero, ()
        elif node.kind == NodeKind.CHANCE:
            value, branches = self._resolve_chance(node)
        else:
            value, branches = self._resolve_decision(node)

        self.values[node.id] = value
        self.updated[node.id] = node.model_copy(update={"expected_value": value, "branches": branches})

    def _resolve_chance(self, node: Node) -> Tuple[float, Tuple[Branch, ...]]:
        probabilities = [branch.probability if branch.probability is not None else 0.0 for branch in node.branches]
        total = math.fsum(probabilities)
        if abs(total - 1) > self.tolerance:
            raise ProbabilityMismatchError(node.id, node.label, total, self.tolerance)

        value = math.fsum(p * self.values[b.to] for p, b in zip(probabilities, node.branches))
        branches = tuple(
            b.model_copy(update={"probability": p, "is_optimal": False}) for p, b in zip(probabilities, node.branches)
        )
        return value, branches

    def _resolve_decision(self, node: Node) -> Tuple[float, Tuple[Branch, ...]]:
        best_value = -math.inf
        best_index: Optional[int] = None
        for index, branch in enumerate(node.branches):
            # Strictly greater: ties keep the earlier branch
            if self.values[branch.to] > best_value:
                best_value = self.values[branch.to]
                best_index = index

        if not math.isfinite(best_value):
            best_value = node.payoff_or_zero
            best_index = None

        branches = tuple(
            b.model_copy(update={"is_optimal": index == best_index}) for index, b in enumerate(node.branches)
        )
        return best_value, branches


@log_calls()
def rollback(tree: DecisionTree, options: Optional[RollbackOptions] = None) -> RollbackResult:
    """
    Evaluate every node of ``tree`` by backward induction.

    Args:
        tree: Tree to evaluate (not modified)
        options: Pass options; tolerance defaults to 1e-6

    Returns:
        RollbackResult with the annotated tree and the expected values

    Raises:
        NodeNotFoundError, ProbabilityMismatchError, CycleDetectedError: The
            pass is aborted on the first failure; nothing is returned
    """
    options = options or RollbackOptions()
    logger.debug("Rollback over %d node(s), tolerance=%g", len(tree.nodes), options.tolerance)
    return _RollbackPass(tree, options.tolerance).run()


__all__ = ["RollbackOptions", "RollbackResult", "rollback"]
