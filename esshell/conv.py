"""Conversions between internal values and their printed forms."""

from __future__ import annotations

import enum
from typing import Iterable

from .closure import Binding, Closure
from .lists import Term
from .tree import NodeKind, Tree, list_items, tree_count

ENV_SEPARATOR = "\x01"
ENV_ESCAPE = "\x02"

_NONWORD = frozenset(b"\0\t\n #$&'();<=>\\^`{|}")
_ESCAPES = {
    0x07: "\\a",
    0x08: "\\b",
    0x0C: "\\f",
    0x0A: "\\n",
    0x0D: "\\r",
    0x09: "\\t",
    0x1B: "\\e",
}
_HEX = b"0123456789abcdef"

_INFIX = {
    NodeKind.ASSIGN: ("", "=", False),
    NodeKind.CONCAT: ("", "^", True),
    NodeKind.MATCH: ("~ ", " ", False),
    NodeKind.EXTRACT: ("~~ ", " ", False),
}
_BINDERS = {
    NodeKind.LOCAL: "local",
    NodeKind.LET: "let",
    NodeKind.FOR: "for",
    NodeKind.CLOSURE: "%closure",
}
_LISP_NAMES = {
    NodeKind.CALL: "call",
    NodeKind.THUNK: "thunk",
    NodeKind.VAR: "var",
    NodeKind.ASSIGN: "assign",
    NodeKind.CONCAT: "concat",
    NodeKind.CLOSURE: "%closure",
    NodeKind.FOR: "for",
    NodeKind.LAMBDA: "lambda",
    NodeKind.LET: "let",
    NodeKind.LOCAL: "local",
    NodeKind.MATCH: "match",
    NodeKind.EXTRACT: "extract",
    NodeKind.REDIR: "redir",
    NodeKind.VARSUB: "varsub",
}


class _State(enum.Enum):
    BEGIN = 0
    QUOTED = 1
    UNQUOTED = 2


def _bytes(s: str) -> bytes:
    return s.encode("utf-8", "surrogateescape")


def _text(b: bytes) -> str:
    return b.decode("utf-8", "surrogateescape")


def _isprint(c: int) -> bool:
    return 0x20 <= c < 0x7F


def quote_string(s: str, altform: bool = False) -> str:
    """Quote a string so that it reads back as one word.

    Strings made only of word characters are left alone unless ``altform``
    forces quoting.
    """
    data = _bytes(s)
    if not altform and data and not any(c in _NONWORD or c == ord("@") for c in data):
        return s
    out = bytearray()
    state = _State.BEGIN
    for c in data:
        if not _isprint(c):
            if state is _State.QUOTED:
                out += b"'"
            if state is not _State.BEGIN:
                out += b"^"
            out += _ESCAPES.get(c, "\\%o" % c).encode("ascii")
            state = _State.UNQUOTED
        else:
            if state is _State.UNQUOTED:
                out += b"^"
            if state is not _State.QUOTED:
                out += b"'"
            if c == ord("'"):
                out += b"'"
            out.append(c)
            state = _State.QUOTED
    if state is _State.BEGIN:
        out += b"''"
    elif state is _State.QUOTED:
        out += b"'"
    return _text(bytes(out))


def format_list(terms: Iterable[Term], sep: str = " ", altform: bool = False) -> str:
    """Print a list, separating elements with ``sep``; ``altform`` quotes them."""
    return sep.join(quote_string(str(t)) if altform else str(t) for t in terms)


def _emit_bindings(out: list[str], keyword: str, tree: Tree) -> None:
    out.append(keyword + "(")
    sep = ""
    for binding in list_items(tree.left):
        if not isinstance(binding, Tree) or binding.kind is not NodeKind.ASSIGN:
            raise ValueError("binding statement holds a non-assignment")
        out.append(sep)
        _emit(out, binding.left, True)
        out.append("=")
        _emit(out, binding.right, False)
        sep = ";"
    out.append(")")


def _emit(out: list[str], n: Tree | None, group: bool) -> None:
    while True:
        if n is None:
            if group:
                out.append("()")
            return
        kind = n.kind
        if kind is NodeKind.WORD:
            out.append(n.left)
            return
        if kind is NodeKind.QWORD:
            out.append(quote_string(n.left, True))
            return
        if kind is NodeKind.PRIM:
            out.append("$&" + n.left)
            return
        if kind in _INFIX:
            prefix, suffix, tail_group = _INFIX[kind]
            out.append(prefix)
            _emit(out, n.left, True)
            out.append(suffix)
            n, group = n.right, tail_group
            continue
        if kind is NodeKind.THUNK:
            out.append("{")
            _emit(out, n.left, False)
            out.append("}")
            return
        if kind is NodeKind.VARSUB:
            out.append("$")
            _emit(out, n.left, True)
            out.append("(")
            _emit(out, n.right, False)
            out.append(")")
            return
        if kind in _BINDERS:
            _emit_bindings(out, _BINDERS[kind], n)
            n, group = n.right, False
            continue
        if kind is NodeKind.CALL:
            target = n.left
            out.append("<=")
            if target is not None and target.kind in (NodeKind.THUNK, NodeKind.PRIM):
                n, group = target, False
                continue
            out.append("{")
            _emit(out, target, False)
            out.append("}")
            return
        if kind is NodeKind.VAR:
            out.append("$")
            n = n.left
            if n is None or n.kind in (NodeKind.WORD, NodeKind.QWORD):
                continue
            out.append("(")
            _emit(out, n, True)
            out.append(")")
            return
        if kind is NodeKind.LAMBDA:
            out.append("@ ")
            if n.left is None:
                out.append("* ")
            else:
                _emit(out, n.left, False)
            out.append("{")
            _emit(out, n.right, False)
            out.append("}")
            return
        if kind is NodeKind.LIST:
            if not group:
                while n.right is not None:
                    _emit(out, n.left, False)
                    out.append(" ")
                    n = n.right
                n = n.left
                continue
            count = tree_count(n)
            if count == 0:
                out.append("()")
            elif count == 1:
                _emit(out, n.left, False)
                _emit(out, n.right, False)
            else:
                out.append("(")
                for index, item in enumerate(list_items(n)):
                    if index:
                        out.append(" ")
                    _emit(out, item, False)
                out.append(")")
            return
        raise ValueError(f"bad node kind: {kind}")


def format_tree(tree: Tree | None, group: bool = False) -> str:
    """Print a parse tree as source text; ``group`` parenthesises lists."""
    out: list[str] = []
    _emit(out, tree, group)
    return "".join(out)


def _enclose(binding: Binding) -> str:
    parts = [
        quote_string(link.name) + "=" + format_list(link.defn, " ", altform=True)
        for link in binding
    ]
    return ";".join(reversed(parts))


def format_closure(closure: Closure, altform: bool = False) -> str:
    """Print a closure, with its bindings as a ``%closure`` prefix."""
    if altform:
        return quote_string(format_closure(closure, False))
    text = ""
    if closure.binding is not None:
        text = "%closure(" + _enclose(closure.binding) + ")"
    return text + format_tree(closure.tree, False)


def format_term(term: Term, altform: bool = False) -> str:
    """Print a term, quoting it in ``altform``."""
    if term.closure is not None:
        return format_closure(term.closure, altform)
    return quote_string(term.text, False) if altform else term.text


def encode_name(name: str) -> str:
    """Protect a variable name for export to other shells' environments."""
    data = _bytes(name)
    out: list[str] = []
    for index, c in enumerate(data):
        ch = chr(c)
        following = data[index + 1] if index + 1 < len(data) else 0
        ok = ch.isascii() and (ch.isalpha() if index == 0 else ch.isalnum())
        if ok or (c == ord("_") and following != ord("_")):
            out.append(ch)
        else:
            out.append("__%02x" % c)
    return "".join(out)


def decode_name(name: str) -> str:
    """Undo ``encode_name``."""
    data = _bytes(name)
    out = bytearray()
    i = 0
    while i < len(data):
        c = data[i]
        i += 1
        if c == ord("_") and i < len(data) and data[i] == ord("_"):
            digits = data[i + 1 : i + 3]
            if len(digits) == 2 and all(d in _HEX for d in digits):
                c = int(digits.decode("ascii"), 16)
                i += 3
        out.append(c)
    return _text(bytes(out))


def format_env(terms: Iterable[Term]) -> str:
    """Join a list into one environment value, escaping separators."""
    pieces = []
    for term in terms:
        text = str(term)
        pieces.append(
            "".join(ENV_ESCAPE + ch if ch in (ENV_ESCAPE, ENV_SEPARATOR) else ch for ch in text)
        )
    return ENV_SEPARATOR.join(pieces)


def format_strlist(strings: Iterable[str], sep: str = " ") -> str:
    """Join plain strings with ``sep``."""
    return sep.join(strings)


def format_lisp(tree: Tree | None) -> str:
    """Print a parse tree as an s-expression."""
    if tree is None:
        return "nil"
    kind = tree.kind
    if kind is NodeKind.WORD:
        return f'(word "{tree.left}")'
    if kind is NodeKind.QWORD:
        return f'(qword "{tree.left}")'
    if kind is NodeKind.PRIM:
        return f"(prim {tree.left})"
    if kind is NodeKind.PIPE:
        return f"(pipe {tree.left} {tree.right})"
    if kind is NodeKind.LIST:
        return "(list" + "".join(" " + format_lisp(item) for item in list_items(tree)) + ")"
    if kind in (NodeKind.CALL, NodeKind.THUNK, NodeKind.VAR):
        return f"({_LISP_NAMES[kind]} {format_lisp(tree.left)})"
    if kind in _LISP_NAMES:
        return f"({_LISP_NAMES[kind]} {format_lisp(tree.left)} {format_lisp(tree.right)})"
    raise ValueError(f"bad node kind: {kind}")