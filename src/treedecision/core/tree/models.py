"""
Decision tree data models.

These models represent a decision problem as a graph keyed by node id:
- Branch: A directed, labelled edge owned by exactly one source node
- Node: A decision, chance or leaf vertex with its ordered branches
- DecisionTree: The aggregate (root id + node mapping)

All models are frozen and branch sequences are tuples, so a tree value can be
shared between snapshots. Structural changes go through
``treedecision.core.tree.operations``, which always return a new tree.

Interchange format (JSON/YAML):
    rootId: root
    nodes:
      root:
        id: root
        type: decision
        label: Launch product?
        branches:
          - {id: b1, label: Launch, to: market}
          - {id: b2, label: Hold, to: hold}
      market:
        id: market
        type: chance
        ...
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from treedecision.core.errors import NodeNotFoundError


class NodeKind(str, Enum):
    """Kind of node in the decision tree."""

    DECISION = "decision"  # Pick the branch with the highest value
    CHANCE = "chance"  # Probability-weighted sum of the branches
    LEAF = "leaf"  # Terminal payoff


_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
)


class Branch(BaseModel):
    """
    Directed edge from its owning node to ``to``.

    ``probability`` only matters when the owner is a chance node and
    ``is_optimal`` only when it is a decision node; the latter is written by
    the rollback engine and reset by every structural operation.
    """

    model_config = _MODEL_CONFIG

    id: str
    label: str = ""
    to: str
    probability: Optional[float] = None
    is_optimal: bool = False

    def describe(self) -> str:
        """Human-readable description of this branch."""
        text = f"{self.label or self.id} -> {self.to}"
        if self.probability is not None:
            text += f" (p={self.probability:g})"
        if self.is_optimal:
            text += " *"
        return text


class Node(BaseModel):
    """A vertex in the decision graph."""

    model_config = _MODEL_CONFIG

    id: str
    kind: NodeKind = Field(..., alias="type")
    label: str = ""
    description: Optional[str] = None
    payoff: Optional[float] = None
    expected_value: Optional[float] = None
    branches: Tuple[Branch, ...] = ()

    @property
    def is_leaf(self) -> bool:
        """Check if this node is of kind leaf."""
        return self.kind == NodeKind.LEAF

    @property
    def is_terminal(self) -> bool:
        """Check if this node is valued by its payoff (leaf or no branches)."""
        return self.is_leaf or not self.branches

    @property
    def payoff_or_zero(self) -> float:
        return self.payoff if self.payoff is not None else 0.0

    def get_branch(self, branch_id: str) -> Optional[Branch]:
        """Get a branch of this node by id."""
        for branch in self.branches:
            if branch.id == branch_id:
                return branch
        return None

    def optimal_branch(self) -> Optional[Branch]:
        """Return the first branch flagged optimal, if any."""
        for branch in self.branches:
            if branch.is_optimal:
                return branch
        return None

    def describe(self) -> str:
        """Human-readable description of this node."""
        text = f"[{self.id}] {self.label or '<unnamed>'} ({self.kind.value})"
        if self.payoff is not None:
            text += f" payoff={self.payoff:g}"
        if self.expected_value is not None:
            text += f" EV={self.expected_value:g}"
        return text


class DecisionTree(BaseModel):
    """
    The aggregate: a node mapping plus the designated root.

    Nodes unreachable from the root are tolerated. ``root_id`` is either a key
    of ``nodes`` or ``None`` for an empty tree. Every key of ``nodes`` equals
    the id of the node it holds.

    Freezing covers the fields only: ``nodes`` is still a plain dict, and
    assigning into it changes every tree sharing that mapping. Go through
    ``treedecision.core.tree.operations`` to change a tree.
    """

    model_config = _MODEL_CONFIG

    root_id: Optional[str] = None
    nodes: Dict[str, Node] = Field(default_factory=dict)

    @field_validator("nodes")
    @classmethod
    def _keys_match_ids(cls, v: Dict[str, Node]) -> Dict[str, Node]:
        for key, node in v.items():
            if key != node.id:
                raise ValueError(f"node key '{key}' holds node with id '{node.id}'")
        return v

    # =========================================================================
    # Node Access
    # =========================================================================

    @property
    def root(self) -> Optional[Node]:
        """Get the root node."""
        if self.root_id is None:
            return None
        return self.nodes.get(self.root_id)

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID."""
        return self.nodes.get(node_id)

    def require_node(self, node_id: str, role: str = "node") -> Node:
        """Get a node by ID, raising ``NodeNotFoundError`` when absent."""
        node = self.nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id, role)
        return node

    def get_children(self, node_id: str) -> List[Node]:
        """Get the destination nodes of a node's branches, in branch order."""
        node = self.nodes.get(node_id)
        if not node:
            return []
        return [self.nodes[b.to] for b in node.branches if b.to in self.nodes]

    def get_leaf_nodes(self) -> List[Node]:
        """Get all terminal nodes (leaf kind or no branches)."""
        return [node for node in self.nodes.values() if node.is_terminal]

    def expected_values(self) -> Dict[str, float]:
        """Map node id to the last computed expected value, where present."""
        return {
            node_id: node.expected_value for node_id, node in self.nodes.items() if node.expected_value is not None
        }

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_depth(self) -> int:
        """Number of nodes on the longest branch path starting at the root."""
        if self.root_id is None or self.root_id not in self.nodes:
            return 0

        depths: Dict[str, int] = {}
        on_path: Set[str] = set()
        stack = [(self.root_id, False)]

        while stack:
            node_id, expanded = stack.pop()
            # Dangling targets and back edges do not add depth
            children = [
                b.to for b in self.nodes[node_id].branches if b.to in self.nodes and b.to not in on_path
            ]
            if expanded:
                on_path.discard(node_id)
                depths[node_id] = 1 + max((depths.get(c, 0) for c in children), default=0)
                continue
            if node_id in depths or node_id in on_path:
                continue
            on_path.add(node_id)
            stack.append((node_id, True))
            stack.extend((c, False) for c in children if c not in depths)

        return depths[self.root_id]

    def get_statistics(self) -> Dict[str, Any]:
        """Get summary counts about the tree."""
        kinds = [node.kind for node in self.nodes.values()]
        return {
            "total_nodes": len(self.nodes),
            "decision_nodes": kinds.count(NodeKind.DECISION),
            "chance_nodes": kinds.count(NodeKind.CHANCE),
            "leaf_nodes": kinds.count(NodeKind.LEAF),
            "branches": sum(len(node.branches) for node in self.nodes.values()),
            "depth": self.get_depth(),
        }

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Convert the tree to the camelCase interchange structure."""
        return {
            "rootId": self.root_id,
            "nodes": {
                node_id: node.model_dump(mode="json", by_alias=True, exclude_none=True)
                for node_id, node in self.nodes.items()
            },
        }


__all__ = [
    "Branch",
    "DecisionTree",
    "Node",
    "NodeKind",
]
