"""Formatting helpers for CLI presentation."""

from __future__ import annotations

from typing import Optional, Set

from rich.table import Table
from rich.tree import Tree as RichTree

from treedecision.core.rollback import RollbackResult
from treedecision.core.tree.models import DecisionTree, Node, NodeKind

KIND_STYLES = {
    NodeKind.DECISION: "bold blue",
    NodeKind.CHANCE: "bold magenta",
    NodeKind.LEAF: "green",
}


def format_value(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def _node_text(node: Node) -> str:
    style = KIND_STYLES[node.kind]
    text = f"[{style}]{node.kind.value}[/{style}] {node.label or node.id} [dim]({node.id})[/dim]"
    if node.payoff is not None:
        text += f" payoff={format_value(node.payoff)}"
    if node.expected_value is not None:
        text += f" [yellow]EV={format_value(node.expected_value)}[/yellow]"
    return text


def build_tree_view(tree: DecisionTree, title: str = "Decision tree") -> RichTree:
    """Render the tree from its root; unreachable nodes are listed under a separate heading."""
    view = RichTree(f"[bold]{title}[/bold]")
    shown: Set[str] = set()

    def _add(parent: RichTree, node: Node) -> None:
        if node.id in shown:
            parent.add(f"{_node_text(node)} [dim](see above)[/dim]")
            return
        shown.add(node.id)
        branch_view = parent.add(_node_text(node))
        for branch in node.branches:
            marker = " [bold green]*[/bold green]" if branch.is_optimal else ""
            prob = f" p={branch.probability:g}" if branch.probability is not None else ""
            edge = branch_view.add(f"[cyan]{branch.label or branch.id}[/cyan]{prob}{marker}")
            target = tree.get_node(branch.to)
            if target is None:
                edge.add(f"[red]missing node {branch.to}[/red]")
            else:
                _add(edge, target)

    if tree.root is not None:
        _add(view, tree.root)

    orphans = [node for node_id, node in tree.nodes.items() if node_id not in shown]
    if orphans:
        detached = view.add("[dim]Unreachable from root[/dim]")
        for node in orphans:
            if node.id not in shown:
                _add(detached, node)
    return view


def build_values_table(result: RollbackResult) -> Table:
    table = Table(title="Expected values")
    table.add_column("Node", style="dim")
    table.add_column("Label")
    table.add_column("Kind")
    table.add_column("Expected value", justify="right", style="yellow")
    table.add_column("Choice", style="green")

    for node_id, node in result.tree.nodes.items():
        choice = ""
        if node.kind == NodeKind.DECISION:
            optimal = node.optimal_branch()
            choice = optimal.label or optimal.id if optimal else ""
        table.add_row(node_id, node.label, node.kind.value, format_value(result.value_of(node_id)), choice)
    return table


__all__ = [
    "build_tree_view",
    "build_values_table",
    "format_value",
]
