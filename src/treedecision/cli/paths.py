from __future__ import annotations

"""Utilities for resolving tree file locations."""

from pathlib import Path

TREE_SUFFIXES = (".yaml", ".yml", ".json")


def outputs_dir() -> Path:
    return Path.cwd() / "outputs"


def trees_dir() -> Path:
    return outputs_dir() / "trees"


def ensure_output_dirs() -> None:
    trees_dir().mkdir(parents=True, exist_ok=True)


def resolve_tree_path(name: str) -> str:
    """Resolve where a tree named ``name`` should be written.

    Names with a directory part or a known suffix are used as given; bare names
    resolve to outputs/trees/<name>.yaml.
    """
    p = Path(name)
    if p.suffix in TREE_SUFFIXES or len(p.parts) > 1:
        return str(p)
    ensure_output_dirs()
    return str(trees_dir() / f"{name}.yaml")


def find_tree_file(name_or_path: str) -> str:
    """
    Find an existing tree file.

    Resolution order:
    1. If path exists as-is, use it
    2. If path exists with a .yaml/.yml/.json suffix, use it
    3. Otherwise, look in outputs/trees/ with the same suffixes

    Raises:
        FileNotFoundError: If file cannot be found
    """
    p = Path(name_or_path)
    if p.is_file():
        return str(p)

    candidates = [Path(f"{name_or_path}{suffix}") for suffix in TREE_SUFFIXES]
    if p.suffix in TREE_SUFFIXES:
        candidates.append(trees_dir() / p.name)
    else:
        candidates.extend(trees_dir() / f"{p.name}{suffix}" for suffix in TREE_SUFFIXES)

    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)

    looked_in = "\n".join(f"  - {c}" for c in [p, *candidates])
    raise FileNotFoundError(f"Tree file not found: '{name_or_path}'\nLooked in:\n{looked_in}")


__all__ = [
    "ensure_output_dirs",
    "find_tree_file",
    "outputs_dir",
    "resolve_tree_path",
    "trees_dir",
]
