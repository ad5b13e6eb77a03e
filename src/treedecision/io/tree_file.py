"""
Tree files in the interchange format.

Both YAML (``.yaml`` / ``.yml``) and JSON (``.json``) carry the same
structure:

    rootId: root
    nodes:
      root: {id: root, type: decision, label: Invest?, branches: [...]}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from treedecision.core.tree.models import DecisionTree
from treedecision.io.errors import LoaderError
from treedecision.utils.logging import log_calls

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}

PathLike = Union[str, Path]


def parse_tree(data: Any, source: PathLike = "<data>", *, require_root: bool = False) -> DecisionTree:
    """
    Validate already-decoded interchange data into a tree.

    Args:
        data: Decoded mapping (``None`` is read as an empty tree)
        source: Path or pseudo-path used in error messages
        require_root: Reject trees whose root is missing or unknown

    Raises:
        LoaderError: If the data does not match the schema
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LoaderError(source, f"Expected a mapping at top level, got {type(data).__name__}")
    try:
        tree = DecisionTree.model_validate(data)
    except ValidationError as exc:
        raise LoaderError(source, "Invalid decision tree", cause=exc) from exc

    if require_root and (tree.root_id is None or tree.root_id not in tree.nodes):
        raise LoaderError(source, "Tree has no valid root")
    return tree


@log_calls()
def load_tree(path: PathLike) -> DecisionTree:
    """Load a tree from a YAML or JSON file, chosen by suffix (YAML otherwise)."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LoaderError(p, "Tree file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LoaderError(p, "Cannot read tree file", cause=exc) from exc

    if p.suffix.lower() in JSON_SUFFIXES:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LoaderError(p, "Invalid JSON", cause=exc) from exc
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise LoaderError(p, "Invalid YAML", cause=exc) from exc

    return parse_tree(data, p)


@log_calls()
def save_tree(tree: DecisionTree, path: PathLike) -> None:
    """
    Save a tree to file, as JSON for ``.json`` paths and YAML otherwise.

    Parent directories are created as needed.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if p.suffix.lower() in JSON_SUFFIXES:
        p.write_text(export_json(tree) + "\n", encoding="utf-8")
        return

    with open(p, "w", encoding="utf-8") as f:
        yaml.dump(tree.to_dict(), f, default_flow_style=False, indent=2, sort_keys=False, allow_unicode=True)


def export_json(tree: DecisionTree) -> str:
    """Indented JSON text, ready to be downloaded or copied."""
    return json.dumps(tree.to_dict(), indent=2, ensure_ascii=False)


def import_json(text: str, *, require_root: bool = True) -> DecisionTree:
    """
    Parse JSON text into a tree.

    Raises:
        LoaderError: If the text is not JSON, does not match the schema, or
            (with ``require_root``) has no valid root
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LoaderError("<json>", "Invalid JSON", cause=exc) from exc
    return parse_tree(data, "<json>", require_root=require_root)


__all__ = [
    "export_json",
    "import_json",
    "load_tree",
    "parse_tree",
    "save_tree",
]
