"""
Tests for structural validation helpers.
"""

from treedecision.core.tree.models import Branch, DecisionTree, Node, NodeKind
from treedecision.core.tree.validation import TreeValidator, find_cycle, probability_total, reachable_from


def _cyclic_tree() -> DecisionTree:
    return DecisionTree(
        root_id="a",
        nodes={
            "a": Node(id="a", kind=NodeKind.DECISION, branches=(Branch(id="1", to="b"),)),
            "b": Node(id="b", kind=NodeKind.DECISION, branches=(Branch(id="2", to="c"),)),
            "c": Node(id="c", kind=NodeKind.DECISION, branches=(Branch(id="3", to="a"),)),
        },
    )


class TestReachability:
    def test_reachable_from_root(self, investment_tree):
        assert reachable_from(investment_tree, "root") == {"root", "chance", "leaf1", "leaf2", "leaf3"}

    def test_reachable_from_leaf(self, investment_tree):
        assert reachable_from(investment_tree, "leaf1") == {"leaf1"}

    def test_missing_start(self, investment_tree):
        assert reachable_from(investment_tree, "ghost") == set()

    def test_skips_dangling_targets(self):
        tree = DecisionTree(
            root_id="a",
            nodes={"a": Node(id="a", kind=NodeKind.DECISION, branches=(Branch(id="1", to="gone"),))},
        )

        assert reachable_from(tree, "a") == {"a"}

    def test_terminates_on_cycles(self):
        assert reachable_from(_cyclic_tree(), "b") == {"a", "b", "c"}


class TestFindCycle:
    def test_acyclic(self, investment_tree):
        assert find_cycle(investment_tree) is None

    def test_diamond_is_not_a_cycle(self):
        tree = DecisionTree(
            root_id="a",
            nodes={
                "a": Node(id="a", kind=NodeKind.DECISION, branches=(Branch(id="1", to="b"), Branch(id="2", to="c"))),
                "b": Node(id="b", kind=NodeKind.DECISION, branches=(Branch(id="3", to="d"),)),
                "c": Node(id="c", kind=NodeKind.DECISION, branches=(Branch(id="4", to="d"),)),
                "d": Node(id="d", kind=NodeKind.LEAF),
            },
        )

        assert find_cycle(tree) is None

    def test_reports_cycle(self):
        assert find_cycle(_cyclic_tree()) == ["a", "b", "c", "a"]

    def test_self_loop(self):
        tree = DecisionTree(
            root_id="a",
            nodes={"a": Node(id="a", kind=NodeKind.DECISION, branches=(Branch(id="1", to="a"),))},
        )

        assert find_cycle(tree) == ["a", "a"]


class TestProbabilityTotal:
    def test_sums_branches(self, investment_tree):
        assert probability_total(investment_tree, "chance") == 1.0

    def test_missing_probability_counts_as_zero(self, investment_tree):
        assert probability_total(investment_tree, "root") == 0.0

    def test_missing_node(self, investment_tree):
        assert probability_total(investment_tree, "ghost") == 0.0


class TestTreeValidator:
    def test_valid_tree(self, investment_tree):
        assert TreeValidator(investment_tree).validate_all() == []

    def test_reports_every_problem(self):
        tree = DecisionTree(
            root_id="missing",
            nodes={
                "c": Node(
                    id="c",
                    kind=NodeKind.CHANCE,
                    label="Weather",
                    branches=(
                        Branch(id="x", to="l", probability=0.2),
                        Branch(id="x", to="nowhere", probability=0.2),
                    ),
                ),
                "l": Node(id="l", kind=NodeKind.LEAF, branches=(Branch(id="y", to="c"),)),
            },
        )

        errors = TreeValidator(tree).validate_all()

        assert "Root 'missing' is not a node of the tree" in errors
        assert "Leaf 'l' has 1 branch(es)" in errors
        assert "Node 'c' has duplicate branch id 'x'" in errors
        assert "Branch 'x' of node 'c' targets unknown node 'nowhere'" in errors
        assert "Chance node 'c' (Weather) probabilities sum to 0.400000, expected 1" in errors
        assert "Cycle detected: c -> l -> c" in errors

    def test_nodes_without_root(self):
        tree = DecisionTree(nodes={"a": Node(id="a", kind=NodeKind.LEAF)})

        assert TreeValidator(tree).validate_all() == ["Tree has nodes but no root"]

    def test_tolerance(self):
        tree = DecisionTree(
            root_id="c",
            nodes={
                "c": Node(id="c", kind=NodeKind.CHANCE, branches=(Branch(id="1", to="l", probability=0.99),)),
                "l": Node(id="l", kind=NodeKind.LEAF),
            },
        )

        assert TreeValidator(tree).validate_all() != []
        assert TreeValidator(tree, tolerance=0.05).validate_all() == []
