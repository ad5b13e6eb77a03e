"""
Shared fixtures: small decision trees used across the test suite.
"""

import pytest

from treedecision.core.tree.models import Branch, DecisionTree, Node, NodeKind
from treedecision.io import save_tree


def build_investment_tree() -> DecisionTree:
    """
    root (decision)
    ├── b1 -> chance (chance)
    │         ├── c1 p=0.25 -> leaf1 (100)
    │         └── c2 p=0.75 -> leaf2 (20)
    └── b2 -> leaf3 (30)
    """
    nodes = [
        Node(
            id="root",
            kind=NodeKind.DECISION,
            label="Decision",
            branches=(
                Branch(id="b1", label="To chance", to="chance"),
                Branch(id="b2", label="To leaf 3", to="leaf3"),
            ),
        ),
        Node(
            id="chance",
            kind=NodeKind.CHANCE,
            label="Chance",
            branches=(
                Branch(id="c1", label="To leaf 1", to="leaf1", probability=0.25),
                Branch(id="c2", label="To leaf 2", to="leaf2", probability=0.75),
            ),
        ),
        Node(id="leaf1", kind=NodeKind.LEAF, label="Leaf 1", payoff=100),
        Node(id="leaf2", kind=NodeKind.LEAF, label="Leaf 2", payoff=20),
        Node(id="leaf3", kind=NodeKind.LEAF, label="Leaf 3", payoff=30),
    ]
    return DecisionTree(root_id="root", nodes={node.id: node for node in nodes})


@pytest.fixture
def investment_tree() -> DecisionTree:
    return build_investment_tree()


@pytest.fixture
def tree_file(tmp_path):
    """The investment tree saved as YAML."""
    path = tmp_path / "investment.yaml"
    save_tree(build_investment_tree(), path)
    return path
