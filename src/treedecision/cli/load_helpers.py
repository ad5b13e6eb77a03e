from __future__ import annotations

"""Shared helpers for loading trees and running operations with CLI-friendly errors."""

from typing import Any, Callable, TypeVar

import typer
from rich.console import Console

from treedecision.cli.paths import find_tree_file
from treedecision.core.errors import TreeError
from treedecision.core.tree.models import DecisionTree
from treedecision.io import LoaderError, load_tree

T = TypeVar("T")


def load_or_exit(
    name_or_path: str,
    *,
    console: Console,
    verbose_errors: bool = False,
) -> tuple[str, DecisionTree]:
    """Resolve and load a tree file, exiting with code 1 on failure."""
    try:
        path = find_tree_file(name_or_path)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    try:
        return path, load_tree(path)
    except LoaderError as err:
        if verbose_errors and err.cause:
            console.print(f"[red]Failed to load tree:[/red] {err.message}\n{err.cause}")
        else:
            console.print(f"[red]Failed to load tree:[/red] {err}")
        raise typer.Exit(code=1)


def run_or_exit(operation: Callable[..., T], *args: Any, console: Console, **kwargs: Any) -> T:
    """Run a tree operation, printing tree errors and exiting with code 1."""
    try:
        return operation(*args, **kwargs)
    except TreeError as err:
        console.print(f"[red]{type(err).__name__}:[/red] {err.message}")
        raise typer.Exit(code=1)


__all__ = ["load_or_exit", "run_or_exit"]
