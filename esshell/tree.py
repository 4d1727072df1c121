"""Parse tree nodes and structural operations on them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Union


class NodeKind(enum.Enum):
    """The kinds of parse tree node."""

    ASSIGN = "Assign"
    CALL = "Call"
    CLOSURE = "Closure"
    CONCAT = "Concat"
    EXTRACT = "Extract"
    FOR = "For"
    LAMBDA = "Lambda"
    LET = "Let"
    LIST = "List"
    LOCAL = "Local"
    MATCH = "Match"
    PIPE = "Pipe"
    PRIM = "Prim"
    QWORD = "Qword"
    REDIR = "Redir"
    THUNK = "Thunk"
    VAR = "Var"
    VARSUB = "Varsub"
    WORD = "Word"


STRING_KINDS = frozenset({NodeKind.WORD, NodeKind.QWORD, NodeKind.PRIM})
UNARY_KINDS = frozenset({NodeKind.CALL, NodeKind.THUNK, NodeKind.VAR})
BINARY_KINDS = frozenset({
    NodeKind.ASSIGN, NodeKind.CONCAT, NodeKind.CLOSURE, NodeKind.FOR,
    NodeKind.LAMBDA, NodeKind.LET, NodeKind.LIST, NodeKind.LOCAL,
    NodeKind.VARSUB, NodeKind.MATCH, NodeKind.EXTRACT,
})

Child = Union["Tree", str, int, None]


@dataclass(eq=False)
class Tree:
    """A parse tree node: a kind and up to two children.

    Word, quoted-word and primitive nodes hold their text in ``left``.
    A ``LIST`` node holds an element in ``left`` and the rest in ``right``.
    """

    kind: NodeKind
    left: Child = None
    right: Child = None


def node_name(kind: NodeKind) -> str:
    """Return the printable name of a node kind that can appear in a dump."""
    if kind in STRING_KINDS or kind in UNARY_KINDS or kind in BINARY_KINDS:
        return kind.value
    raise ValueError(f"nodename: bad node kind {kind}")


def deepequal(a: Tree | None, b: Tree | None) -> bool:
    """Compare two trees structurally."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if a.kind is not b.kind:
        return False
    if a.kind in STRING_KINDS:
        return a.left == b.left
    if a.kind in UNARY_KINDS:
        return deepequal(a.left, b.left)
    if a.kind in BINARY_KINDS:
        return deepequal(a.left, b.left) and deepequal(a.right, b.right)
    raise ValueError(f"deepequal: bad node kind {a.kind}")


def tree_count(tree: Tree | None) -> int:
    """Count the non-list nodes in a flattened list tree."""
    if tree is None:
        return 0
    if tree.kind is NodeKind.LIST:
        return tree_count(tree.left) + tree_count(tree.right)
    return 1


def list_items(tree: Tree | None) -> Iterator[Child]:
    """Yield the elements of a chain of ``LIST`` nodes."""
    while tree is not None:
        if tree.kind is not NodeKind.LIST:
            raise ValueError(f"expected a list node, got {tree.kind}")
        yield tree.left
        tree = tree.right