"""
Tests for decision tree data models.

Tests cover:
- Branch
- Node
- DecisionTree
"""

import pytest
from pydantic import ValidationError

from treedecision.core.errors import NodeNotFoundError
from treedecision.core.tree.models import Branch, DecisionTree, Node, NodeKind


class TestBranch:
    """Tests for Branch model."""

    def test_branch_defaults(self):
        """Probability is absent and the optimal flag is off by default."""
        branch = Branch(id="b1", to="leaf")

        assert branch.label == ""
        assert branch.probability is None
        assert branch.is_optimal is False

    def test_branch_is_frozen(self):
        """Branches cannot be mutated in place."""
        branch = Branch(id="b1", to="leaf")

        with pytest.raises(ValidationError):
            branch.to = "other"

    def test_branch_describe(self):
        branch = Branch(id="b1", label="Go", to="leaf", probability=0.5, is_optimal=True)

        assert branch.describe() == "Go -> leaf (p=0.5) *"


class TestNode:
    """Tests for Node model."""

    def test_node_accepts_interchange_keys(self):
        """Nodes validate from camelCase data with the kind under 'type'."""
        node = Node.model_validate(
            {
                "id": "n1",
                "type": "chance",
                "label": "Market",
                "expectedValue": 12.5,
                "branches": [{"id": "b", "label": "Up", "to": "n2", "probability": 1, "isOptimal": False}],
            }
        )

        assert node.kind == NodeKind.CHANCE
        assert node.expected_value == 12.5
        assert isinstance(node.branches, tuple)
        assert node.branches[0].probability == 1.0

    def test_node_rejects_unknown_kind(self):
        with pytest.raises(ValidationError):
            Node.model_validate({"id": "n1", "type": "maybe"})

    def test_terminal_detection(self):
        """A decision node without branches is terminal, like a leaf."""
        decision = Node(id="d", kind=NodeKind.DECISION)
        leaf = Node(id="l", kind=NodeKind.LEAF, payoff=3)

        assert decision.is_terminal
        assert not decision.is_leaf
        assert leaf.is_terminal and leaf.is_leaf
        assert decision.payoff_or_zero == 0.0
        assert leaf.payoff_or_zero == 3.0

    def test_optimal_branch(self):
        node = Node(
            id="d",
            kind=NodeKind.DECISION,
            branches=(Branch(id="a", to="x"), Branch(id="b", to="y", is_optimal=True)),
        )

        assert node.optimal_branch().id == "b"
        assert node.get_branch("a").to == "x"
        assert node.get_branch("missing") is None

    def test_describe(self):
        node = Node(id="l", kind=NodeKind.LEAF, label="Win", payoff=42)

        assert node.describe() == "[l] Win (leaf) payoff=42"


class TestDecisionTree:
    """Tests for DecisionTree model."""

    def test_empty_tree(self):
        tree = DecisionTree()

        assert tree.root is None
        assert tree.nodes == {}
        assert tree.get_depth() == 0

    def test_node_key_must_match_id(self):
        with pytest.raises(ValidationError) as exc_info:
            DecisionTree(root_id="a", nodes={"a": Node(id="b", kind=NodeKind.LEAF, payoff=1)})

        assert "node key 'a' holds node with id 'b'" in str(exc_info.value)

    def test_node_access(self, investment_tree):
        assert investment_tree.root.id == "root"
        assert investment_tree.get_node("leaf1").payoff == 100
        assert investment_tree.get_node("nope") is None
        assert [n.id for n in investment_tree.get_children("chance")] == ["leaf1", "leaf2"]

    def test_require_node_raises(self, investment_tree):
        with pytest.raises(NodeNotFoundError) as exc_info:
            investment_tree.require_node("ghost")

        assert exc_info.value.node_id == "ghost"
        assert "ghost" in str(exc_info.value)

    def test_leaf_nodes(self, investment_tree):
        assert sorted(n.id for n in investment_tree.get_leaf_nodes()) == ["leaf1", "leaf2", "leaf3"]

    def test_statistics(self, investment_tree):
        stats = investment_tree.get_statistics()

        assert stats == {
            "total_nodes": 5,
            "decision_nodes": 1,
            "chance_nodes": 1,
            "leaf_nodes": 3,
            "branches": 4,
            "depth": 3,
        }

    def test_depth_ignores_back_edges(self):
        """A cycle does not make depth computation loop."""
        tree = DecisionTree(
            root_id="a",
            nodes={
                "a": Node(id="a", kind=NodeKind.DECISION, branches=(Branch(id="x", to="b"),)),
                "b": Node(id="b", kind=NodeKind.DECISION, branches=(Branch(id="y", to="a"),)),
            },
        )

        assert tree.get_depth() == 2

    def test_to_dict_uses_interchange_keys(self, investment_tree):
        data = investment_tree.to_dict()

        assert data["rootId"] == "root"
        assert data["nodes"]["root"]["type"] == "decision"
        assert data["nodes"]["chance"]["branches"][0] == {
            "id": "c1",
            "label": "To leaf 1",
            "to": "leaf1",
            "probability": 0.25,
            "isOptimal": False,
        }
        assert "payoff" not in data["nodes"]["root"]

    def test_to_dict_keeps_null_root(self):
        assert DecisionTree().to_dict() == {"rootId": None, "nodes": {}}

    def test_expected_values_only_lists_computed_nodes(self):
        tree = DecisionTree(
            root_id="a",
            nodes={
                "a": Node(id="a", kind=NodeKind.LEAF, expected_value=1.5),
                "b": Node(id="b", kind=NodeKind.LEAF),
            },
        )

        assert tree.expected_values() == {"a": 1.5}
