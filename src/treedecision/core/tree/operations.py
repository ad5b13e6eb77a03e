"""
Structural operations over decision trees.

Every operation takes a tree and returns a new one; the input is never
mutated. Failures are raised before any new value is built, so a caller
holding the previous tree keeps a consistent snapshot.

Example:
    tree = new_tree("Launch product?")
    market = create_node(NodeKind.CHANCE, "Market reaction")
    tree = add_node(tree, market)
    tree = add_branch(tree, tree.root_id, create_branch(market.id, "Launch"))
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from treedecision.core.errors import DuplicateIdError, InvalidOperationError, NodeNotFoundError
from treedecision.core.tree.models import Branch, DecisionTree, Node, NodeKind
from treedecision.core.tree.validation import reachable_from
from treedecision.utils.ids import generate_id
from treedecision.utils.logging import log_calls

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"kind", "label", "description", "payoff"}


# =========================================================================
# Factories
# =========================================================================


def create_node(
    kind: NodeKind | str,
    label: str,
    *,
    payoff: Optional[float] = None,
    description: Optional[str] = None,
    node_id: Optional[str] = None,
) -> Node:
    """Build a node without branches, generating an id when none is given."""
    return Node(
        id=node_id or generate_id("node"),
        kind=NodeKind(kind),
        label=label,
        payoff=payoff,
        description=description,
    )


def create_branch(
    to: str,
    label: Optional[str] = None,
    *,
    probability: Optional[float] = None,
    branch_id: Optional[str] = None,
) -> Branch:
    """Build a branch towards ``to``; the label defaults to the target id."""
    return Branch(
        id=branch_id or generate_id("branch"),
        label=label if label is not None else to,
        to=to,
        probability=probability,
    )


def new_tree(label: str = "Initial decision") -> DecisionTree:
    """A tree holding a single decision root."""
    root = create_node(NodeKind.DECISION, label, description="Starting point")
    return DecisionTree(root_id=root.id, nodes={root.id: root})


# =========================================================================
# Insertion
# =========================================================================


@log_calls()
def add_node(tree: DecisionTree, node: Node) -> DecisionTree:
    """
    Insert ``node`` under its own id.

    The node becomes the root when the tree has none. Its branches are copied
    as-is; their targets are only checked when branches are added through
    ``add_branch``.

    Raises:
        DuplicateIdError: If a node with the same id already exists
    """
    if node.id in tree.nodes:
        raise DuplicateIdError(node.id)

    copied = node.model_copy(update={"branches": tuple(b.model_copy() for b in node.branches)})
    nodes = dict(tree.nodes)
    nodes[node.id] = copied

    root_id = tree.root_id if tree.root_id is not None else node.id
    logger.debug("Inserted node %s (root=%s)", node.id, root_id)
    return DecisionTree(root_id=root_id, nodes=nodes)


@log_calls()
def add_branch(tree: DecisionTree, parent_id: str, branch: Branch) -> DecisionTree:
    """
    Append ``branch`` to the branches of ``parent_id``.

    Existing branch order is preserved; it decides ties between equally
    valued decision branches.

    Raises:
        NodeNotFoundError: If the parent or the branch target is absent
        InvalidOperationError: If the parent is a leaf
        DuplicateIdError: If the parent already has a branch with this id
    """
    parent = tree.require_node(parent_id, "parent node")
    tree.require_node(branch.to, "target node")

    if parent.kind == NodeKind.LEAF:
        raise InvalidOperationError("Cannot add a branch to a leaf node.", node_id=parent_id)

    if parent.get_branch(branch.id) is not None:
        raise DuplicateIdError(branch.id, scope=parent_id)

    attached = branch.model_copy(update={"is_optimal": False})
    return _replace_node(tree, parent.model_copy(update={"branches": parent.branches + (attached,)}))


# =========================================================================
# Editing
# =========================================================================


@log_calls()
def update_node(tree: DecisionTree, node_id: str, **changes: Any) -> DecisionTree:
    """
    Change editable fields (``kind``, ``label``, ``description``, ``payoff``) of a node.

    Raises:
        NodeNotFoundError: If the node is absent
        InvalidOperationError: If a non-editable field is given, a value does
            not validate, or the node would become a leaf while it still has
            branches
    """
    node = tree.require_node(node_id)

    unknown = sorted(set(changes) - _EDITABLE_FIELDS)
    if unknown:
        raise InvalidOperationError(f"Cannot edit field(s): {', '.join(unknown)}", node_id=node_id)

    # Edits invalidate the previous evaluation of this node
    data = {**node.model_dump(), **changes, "expected_value": None}
    try:
        edited = Node.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")}))
        raise InvalidOperationError(f"Invalid value for {fields or 'node'}.", node_id=node_id) from exc

    if "kind" in changes and edited.kind == NodeKind.LEAF and edited.branches:
        raise InvalidOperationError("Cannot turn a node with branches into a leaf.", node_id=node_id)
    return _replace_node(tree, edited)


@log_calls()
def remove_branch(tree: DecisionTree, parent_id: str, branch_id: str) -> DecisionTree:
    """
    Detach one branch from ``parent_id`` without deleting its target.

    Raises:
        NodeNotFoundError: If the parent is absent or has no such branch
    """
    parent = tree.require_node(parent_id, "parent node")
    if parent.get_branch(branch_id) is None:
        raise NodeNotFoundError(branch_id, "branch")

    remaining = tuple(b for b in parent.branches if b.id != branch_id)
    return _replace_node(tree, parent.model_copy(update={"branches": remaining}))


# =========================================================================
# Deletion
# =========================================================================


@log_calls()
def delete_subtree(tree: DecisionTree, node_id: str) -> DecisionTree:
    """
    Remove ``node_id`` and every node reachable from it.

    Removal is unconditional: descendants also referenced from outside the
    subtree are removed too, and every surviving branch pointing into the
    removed set is dropped. The root is cleared when it is removed. Returns
    the tree unchanged when ``node_id`` is absent.
    """
    if node_id not in tree.nodes:
        return tree

    removed = reachable_from(tree, node_id)

    nodes: Dict[str, Node] = {}
    for current_id, node in tree.nodes.items():
        if current_id in removed:
            continue
        kept = tuple(b for b in node.branches if b.to not in removed)
        if len(kept) != len(node.branches):
            node = node.model_copy(update={"branches": kept})
        nodes[current_id] = node

    root_id = None if tree.root_id in removed else tree.root_id
    logger.debug("Deleted subtree %s (%d node(s))", node_id, len(removed))
    return DecisionTree(root_id=root_id, nodes=nodes)


# =========================================================================
# Cloning
# =========================================================================


class CloneOptions(BaseModel):
    """Where to attach a cloned subtree, if anywhere."""

    target_parent_id: Optional[str] = None
    branch_label: Optional[str] = None
    probability: Optional[float] = None


class CloneResult(BaseModel):
    """Tree holding the clone, and the id of the clone's root."""

    tree: DecisionTree
    root_id: str


@log_calls()
def clone_subtree(
    tree: DecisionTree,
    node_id: str,
    options: Optional[CloneOptions] = None,
    *,
    id_factory: Callable[[str], str] = generate_id,
) -> CloneResult:
    """
    Deep-copy the subtree rooted at ``node_id`` under fresh ids.

    Every copied node and branch receives a new id from ``id_factory``
    (called with ``"node"`` or ``"branch"``), branch targets are rewritten to
    the copies, expected values are cleared and optimal flags reset. A node
    shared by several paths inside the subtree is copied once. The tree's
    root is left unchanged.

    Args:
        tree: Source tree
        node_id: Root of the subtree to copy
        options: Optional attachment of the copy under another node
        id_factory: Id generator, mainly for deterministic tests

    Returns:
        CloneResult with the new tree and the id of the copied root

    Raises:
        NodeNotFoundError: If ``node_id`` or a node reached from it is absent
        InvalidOperationError, DuplicateIdError: If attaching the copy fails
    """
    options = options or CloneOptions()
    tree.require_node(node_id)

    taken = set(tree.nodes)
    mapping: Dict[str, str] = {}

    def _fresh(prefix: str) -> str:
        new_id = id_factory(prefix)
        while prefix == "node" and new_id in taken:
            new_id = id_factory(prefix)
        taken.add(new_id)
        return new_id

    # Assign new ids first so shared descendants map to a single copy
    order: List[str] = []
    stack = [node_id]
    while stack:
        current = stack.pop()
        if current in mapping:
            continue
        source = tree.require_node(current)
        mapping[current] = _fresh("node")
        order.append(current)
        for branch in reversed(source.branches):
            if branch.to not in mapping:
                stack.append(branch.to)

    nodes = dict(tree.nodes)
    for source_id in order:
        source = tree.nodes[source_id]
        branches = tuple(
            b.model_copy(update={"id": _fresh("branch"), "to": mapping[b.to], "is_optimal": False})
            for b in source.branches
        )
        copy_id = mapping[source_id]
        nodes[copy_id] = source.model_copy(update={"id": copy_id, "branches": branches, "expected_value": None})

    clone_root = mapping[node_id]
    result = DecisionTree(root_id=tree.root_id, nodes=nodes)
    logger.debug("Cloned subtree %s as %s (%d node(s))", node_id, clone_root, len(mapping))

    if options.target_parent_id is not None:
        branch = Branch(
            id=_fresh("branch"),
            label=options.branch_label if options.branch_label is not None else nodes[clone_root].label,
            to=clone_root,
            probability=options.probability,
        )
        result = add_branch(result, options.target_parent_id, branch)

    return CloneResult(tree=result, root_id=clone_root)


def _replace_node(tree: DecisionTree, node: Node) -> DecisionTree:
    nodes = dict(tree.nodes)
    nodes[node.id] = node
    return DecisionTree(root_id=tree.root_id, nodes=nodes)


__all__ = [
    "CloneOptions",
    "CloneResult",
    "add_branch",
    "add_node",
    "clone_subtree",
    "create_branch",
    "create_node",
    "delete_subtree",
    "new_tree",
    "remove_branch",
    "update_node",
]
