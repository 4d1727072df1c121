"""Bindings, closures, and the extraction of bindings from ``%closure`` trees."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from .errors import fail
from .lists import Term
from .tree import NodeKind, Tree, list_items

_WORD_KINDS = (NodeKind.WORD, NodeKind.QWORD)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(eq=False)
class Binding:
    """One link in a chain of lexical bindings, newest first."""

    name: str
    defn: list[Term]
    next: Binding | None = None

    def __iter__(self) -> Iterator[Binding]:
        binding: Binding | None = self
        while binding is not None:
            yield binding
            binding = binding.next

    def lookup(self, name: str) -> list[Term] | None:
        """Return the definition of the innermost binding of ``name``."""
        for binding in self:
            if binding.name == name:
                return binding.defn
        return None


@dataclass(eq=False)
class Closure:
    """A tree together with the bindings it was created in."""

    tree: Tree | None
    binding: Binding | None = None

    def __str__(self) -> str:
        from .conv import format_closure

        return format_closure(self)


def reverse_bindings(binding: Binding | None) -> Binding | None:
    """Return a chain holding the same bindings in the opposite order."""
    result: Binding | None = None
    if binding is not None:
        for link in binding:
            result = Binding(link.name, link.defn, result)
    return result


# closures under construction, innermost last, for $&nestedbinding
_chain: list[Closure] = []


def _atoi(text: str) -> int:
    found = _LEADING_INT.match(text)
    return int(found.group(1)) if found else 0


def _nested(words: Iterator[Tree]) -> Term:
    count_word = next(words, None)
    count = -1
    if (
        count_word is not None
        and count_word.kind is NodeKind.WORD
        and isinstance(count_word.left, str)
    ):
        count = _atoi(count_word.left)
    if count < 0:
        fail("$&parse", "improper use of $&nestedbinding")
    if count >= len(_chain):
        fail("$&parse", f"bad count in $&nestedbinding: {count}")
    return Term(closure=_chain[-1 - count])


def _extract(tree: Tree | None, bindings: Binding | None) -> Binding | None:
    for defn in list_items(tree):
        if defn is None:
            continue
        if not isinstance(defn, Tree):
            raise ValueError("malformed binding in %closure")
        name = defn.left
        if not isinstance(name, Tree) or name.kind not in _WORD_KINDS:
            raise ValueError("binding name in %closure is not a word")
        words = iter(reversed(list(list_items(defn.right))))
        terms: list[Term] = []
        for word in words:
            if word.kind is NodeKind.PRIM:
                if word.left != "nestedbinding":
                    fail("$&parse", f"bad unquoted primitive in %closure: $&{word.left}")
                terms.append(_nested(words))
            elif word.kind in _WORD_KINDS:
                terms.append(Term(word.left))
            else:
                raise ValueError(f"unexpected node in %closure binding: {word.kind}")
        terms.reverse()
        bindings = Binding(name.left, terms, bindings)
    return bindings


def _unwrap(tree: Tree) -> Tree:
    if tree.kind is NodeKind.LIST and tree.right is None:
        return tree.left
    return tree


def extract_bindings(tree: Tree) -> Closure:
    """Turn a (possibly nested) ``%closure`` tree into a closure."""
    tree = _unwrap(tree)
    me = Closure(None)
    bindings: Binding | None = None
    _chain.append(me)
    try:
        while tree.kind is NodeKind.CLOSURE:
            bindings = _extract(tree.left, bindings)
            tree = tree.right
            if tree is None:
                fail("$&parse", "null body in %closure")
            tree = _unwrap(tree)
    finally:
        _chain.pop()
    me.tree = tree
    me.binding = bindings
    return me