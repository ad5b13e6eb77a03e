"""
treedecision CLI: build decision trees in YAML/JSON files and evaluate them.

Trees are read from and written back to files; every structural command goes
through the copy-on-write operations of ``treedecision.core.tree`` and a file
is only rewritten when the operation succeeded.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from treedecision.cli.formatters import build_tree_view, build_values_table, format_value
from treedecision.cli.load_helpers import load_or_exit, run_or_exit
from treedecision.cli.paths import resolve_tree_path
from treedecision.core.rollback import RollbackOptions, rollback
from treedecision.core.tree import (
    CloneOptions,
    NodeKind,
    TreeValidator,
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
from treedecision.core.tree.validation import DEFAULT_TOLERANCE
from treedecision.io import export_json, save_tree
from treedecision.utils.logging import configure_logging

app = typer.Typer(help="treedecision CLI: build decision trees and evaluate them by rollback.")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose)


@app.command()
def init(
    file_path: str = typer.Argument(..., help="Tree file to create (bare names go to outputs/trees/)"),
    label: str = typer.Option("Initial decision", "--label", help="Label of the root decision"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Create a tree file holding a single decision root."""
    path = resolve_tree_path(file_path)
    if Path(path).exists() and not force:
        console.print(f"[red]File already exists:[/red] {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    tree = new_tree(label)
    save_tree(tree, path)
    console.print(f"[green]Created[/green] {path} (root: {tree.root_id})")


@app.command()
def show(
    file_path: str = typer.Argument(..., help="Tree file"),
    verbose: bool = typer.Option(False, "--verbose-load", help="Display full validation trace on loader errors"),
) -> None:
    """Display a tree with its last computed values."""
    path, tree = load_or_exit(file_path, console=console, verbose_errors=verbose)
    console.print(build_tree_view(tree, title=path))

    stats = tree.get_statistics()
    console.print(
        f"Nodes: {stats['total_nodes']} "
        f"(decision {stats['decision_nodes']}, chance {stats['chance_nodes']}, leaf {stats['leaf_nodes']}), "
        f"branches: {stats['branches']}, depth: {stats['depth']}"
    )


@app.command()
def validate(
    file_path: str = typer.Argument(..., help="Tree file"),
    tolerance: float = typer.Option(DEFAULT_TOLERANCE, min=0.0, help="Allowed deviation of probability sums from 1"),
    verbose: bool = typer.Option(False, "--verbose-load", help="Display full validation trace on loader errors"),
) -> None:
    """Check a tree for structural problems."""
    _, tree = load_or_exit(file_path, console=console, verbose_errors=verbose)

    console.print(f"[green]OK[/green] Loaded {len(tree.nodes)} node(s)")
    errors = TreeValidator(tree, tolerance).validate_all()
    if errors:
        console.print("[red]Validation errors detected:[/red]")
        for error in errors:
            console.print(f" - {error}")
        raise typer.Exit(code=1)

    console.print("[green]All validations passed[/green]")


@app.command()
def evaluate(
    file_path: str = typer.Argument(..., help="Tree file"),
    tolerance: float = typer.Option(DEFAULT_TOLERANCE, min=0.0, help="Allowed deviation of probability sums from 1"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Save the annotated tree to this file"),
    write: bool = typer.Option(False, "--write", help="Save the annotated tree back to the input file"),
    as_json: bool = typer.Option(False, "--json", help="Print expected values as JSON"),
) -> None:
    """Compute expected values by rollback and mark optimal decisions."""
    path, tree = load_or_exit(file_path, console=console)
    result = run_or_exit(rollback, tree, RollbackOptions(tolerance=tolerance), console=console)

    if as_json:
        console.print_json(data=result.expected_values)
    else:
        console.print(build_values_table(result))
        if tree.root_id is not None:
            console.print(f"\n[bold]Root value:[/bold] {format_value(result.value_of(tree.root_id))}")
            console.print(f"[dim]Optimal path: {' -> '.join(result.optimal_path())}[/dim]")

    for target in filter(None, [output, path if write else None]):
        save_tree(result.tree, target)
        console.print(f"Saved: {target}")


@app.command("add-node")
def add_node_command(
    file_path: str = typer.Argument(..., help="Tree file"),
    kind: NodeKind = typer.Argument(..., help="Node kind"),
    label: str = typer.Argument(..., help="Node label"),
    node_id: Optional[str] = typer.Option(None, "--id", help="Node id (generated if omitted)"),
    payoff: Optional[float] = typer.Option(None, "--payoff", help="Terminal payoff"),
    parent: Optional[str] = typer.Option(None, "--parent", help="Attach the node under this node"),
    branch_label: Optional[str] = typer.Option(None, "--branch-label", help="Label of the attaching branch"),
    probability: Optional[float] = typer.Option(None, "--probability", "-p", help="Probability of the attaching branch"),
) -> None:
    """Insert a node, optionally attached under a parent."""
    path, tree = load_or_exit(file_path, console=console)

    node = create_node(kind, label, payoff=payoff, node_id=node_id)
    tree = run_or_exit(add_node, tree, node, console=console)
    if parent is not None:
        branch = create_branch(node.id, branch_label or label, probability=probability)
        tree = run_or_exit(add_branch, tree, parent, branch, console=console)

    save_tree(tree, path)
    console.print(f"[green]Added[/green] {node.kind.value} node {node.id}")


@app.command("add-branch")
def add_branch_command(
    file_path: str = typer.Argument(..., help="Tree file"),
    parent: str = typer.Argument(..., help="Source node id"),
    target: str = typer.Argument(..., help="Destination node id"),
    label: Optional[str] = typer.Option(None, "--label", help="Branch label (defaults to the target id)"),
    probability: Optional[float] = typer.Option(None, "--probability", "-p", help="Branch probability"),
    branch_id: Optional[str] = typer.Option(None, "--id", help="Branch id (generated if omitted)"),
) -> None:
    """Attach a branch between two existing nodes."""
    path, tree = load_or_exit(file_path, console=console)

    branch = create_branch(target, label, probability=probability, branch_id=branch_id)
    tree = run_or_exit(add_branch, tree, parent, branch, console=console)

    save_tree(tree, path)
    console.print(f"[green]Added[/green] branch {branch.id}: {parent} -> {target}")


@app.command()
def update(
    file_path: str = typer.Argument(..., help="Tree file"),
    node_id: str = typer.Argument(..., help="Node to edit"),
    label: Optional[str] = typer.Option(None, "--label", help="New label"),
    payoff: Optional[float] = typer.Option(None, "--payoff", help="New payoff"),
    kind: Optional[NodeKind] = typer.Option(None, "--kind", help="New node kind"),
    description: Optional[str] = typer.Option(None, "--description", help="New description"),
) -> None:
    """Edit the label, payoff, kind or description of a node."""
    changes = {
        name: value
        for name, value in [("label", label), ("payoff", payoff), ("kind", kind), ("description", description)]
        if value is not None
    }
    if not changes:
        console.print("[yellow]Nothing to update:[/yellow] pass at least one of --label, --payoff, --kind, --description")
        raise typer.Exit(code=1)

    path, tree = load_or_exit(file_path, console=console)
    tree = run_or_exit(update_node, tree, node_id, console=console, **changes)

    save_tree(tree, path)
    console.print(f"[green]Updated[/green] {tree.nodes[node_id].describe()}")


@app.command("remove-branch")
def remove_branch_command(
    file_path: str = typer.Argument(..., help="Tree file"),
    parent: str = typer.Argument(..., help="Source node id"),
    branch_id: str = typer.Argument(..., help="Branch to detach"),
) -> None:
    """Detach a branch; its destination node stays in the tree."""
    path, tree = load_or_exit(file_path, console=console)
    tree = run_or_exit(remove_branch, tree, parent, branch_id, console=console)

    save_tree(tree, path)
    console.print(f"[green]Removed[/green] branch {branch_id} from {parent}")


@app.command()
def delete(
    file_path: str = typer.Argument(..., help="Tree file"),
    node_id: str = typer.Argument(..., help="Root of the subtree to delete"),
) -> None:
    """Delete a node and everything reachable from it."""
    path, tree = load_or_exit(file_path, console=console)
    if tree.get_node(node_id) is None:
        console.print(f"[yellow]Nothing deleted:[/yellow] no node {node_id}")
        return

    updated = delete_subtree(tree, node_id)
    save_tree(updated, path)
    console.print(f"[green]Deleted[/green] {len(tree.nodes) - len(updated.nodes)} node(s)")
    if tree.root_id is not None and updated.root_id is None:
        console.print("[yellow]The root was deleted; the tree has no root anymore[/yellow]")


@app.command()
def clone(
    file_path: str = typer.Argument(..., help="Tree file"),
    node_id: str = typer.Argument(..., help="Root of the subtree to clone"),
    parent: Optional[str] = typer.Option(None, "--parent", help="Attach the copy under this node"),
    label: Optional[str] = typer.Option(None, "--label", help="Label of the attaching branch"),
    probability: Optional[float] = typer.Option(None, "--probability", "-p", help="Probability of the attaching branch"),
) -> None:
    """Copy a subtree under fresh ids."""
    path, tree = load_or_exit(file_path, console=console)

    options = CloneOptions(target_parent_id=parent, branch_label=label, probability=probability)
    result = run_or_exit(clone_subtree, tree, node_id, options, console=console)

    save_tree(result.tree, path)
    console.print(f"[green]Cloned[/green] {node_id} as {result.root_id}")


@app.command()
def export(
    file_path: str = typer.Argument(..., help="Tree file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Destination (.json or .yaml); stdout if omitted"),
) -> None:
    """Export a tree in the JSON interchange format."""
    _, tree = load_or_exit(file_path, console=console)
    if output is None:
        typer.echo(export_json(tree))
        return
    save_tree(tree, output)
    console.print(f"Saved: {output}")


__all__ = ["app"]
