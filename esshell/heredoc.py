"""Here documents: reading in-line files up to their end marker."""

from __future__ import annotations

from typing import NoReturn

from .errors import fail
from .input import EOF, Input
from .tree import NodeKind, Tree

_VAR_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789%*-_"
)


def _syntax_error(source: Input, message: str) -> NoReturn:
    source.report_error(message)
    fail("$&parse", source.take_error() or source.locate(message))
    raise AssertionError("unreachable")


def read_here_variable(source: Input) -> Tree:
    """Read a ``$name`` reference in a here document (the ``$`` already read).

    A ``^`` ending the name is consumed; any other terminator is pushed back.
    """
    chars: list[str] = []
    while True:
        c = source.get()
        if c == EOF or c not in _VAR_CHARS:
            break
        chars.append(c)
    if not chars:
        _syntax_error(source, "null variable name in here document")
    if c != "^":
        source.unget(c)
    return Tree(NodeKind.VAR, Tree(NodeKind.WORD, "".join(chars)))


def _build(parts: list[Tree]) -> Tree:
    if len(parts) == 1:
        return parts[0]
    tree: Tree | None = None
    for part in reversed(parts):
        tree = Tree(NodeKind.LIST, part, tree)
    assert tree is not None
    return tree


def snarf_heredoc(source: Input, eof: str, quoted: bool) -> Tree:
    """Read lines up to one that is exactly ``eof``.

    Returns a quoted word, or a list of quoted words and variable references
    when the document is unquoted and mentions ``$name`` (``$$`` is a ``$``).
    """
    if not quoted and "$" in eof:
        raise ValueError("an unquoted eof-marker cannot contain $")
    if "\n" in eof:
        _syntax_error(source, "here document eof-marker contains a newline")

    history = source.history
    source.ignore_eof = True
    if history is not None:
        history.disabled = True
    try:
        parts: list[Tree] = []
        buf: list[str] = []
        while True:
            matched = 0
            c = source.get()
            while matched < len(eof) and c == eof[matched]:
                matched += 1
                c = source.get()
            if matched == len(eof) and c in ("\n", EOF):
                if buf or not parts:
                    parts.append(Tree(NodeKind.QWORD, "".join(buf)))
                break
            buf.extend(eof[:matched])
            while True:
                if c == EOF:
                    _syntax_error(source, "incomplete here document")
                if c == "$" and not quoted:
                    c = source.get()
                    if c != "$":
                        source.unget(c)
                        if buf:
                            parts.append(Tree(NodeKind.QWORD, "".join(buf)))
                            buf = []
                        parts.append(read_here_variable(source))
                        c = source.get()
                        continue
                buf.append(c)
                if c == "\n":
                    break
                c = source.get()
        return _build(parts)
    finally:
        source.ignore_eof = False
        if history is not None:
            history.disabled = False


class HereDocQueue:
    """Here documents waiting to be read at the end of the current line."""

    def __init__(self) -> None:
        self._pending: list[Tree] = []

    def __len__(self) -> int:
        return len(self._pending)

    def queue(self, tree: Tree) -> None:
        """Queue a ``%heredoc`` command; it is renamed ``%here``.

        ``tree`` is a list whose first element is the word ``%heredoc`` and
        whose third element is the end marker, replaced later by the text.
        """
        if tree.kind is not NodeKind.LIST or not isinstance(tree.left, Tree):
            raise ValueError("here document command must be a list")
        head = tree.left
        if head.kind is not NodeKind.WORD or head.left != "%heredoc":
            raise ValueError("here document command must start with %heredoc")
        rest = tree.right
        if not isinstance(rest, Tree) or rest.kind is not NodeKind.LIST:
            raise ValueError("here document command is too short")
        marker = rest.right
        if not isinstance(marker, Tree) or marker.kind is not NodeKind.LIST:
            raise ValueError("here document command has no eof-marker")
        head.left = "%here"
        eof = marker.left
        if not isinstance(eof, Tree) or eof.kind not in (NodeKind.WORD, NodeKind.QWORD):
            fail("$&parse", "here document eof-marker not a single literal word")
        self._pending.append(marker)

    def read_all(self, source: Input, endfile: bool) -> None:
        """Read every pending document from ``source``, most recently queued first."""
        while self._pending:
            if endfile:
                _syntax_error(source, "end of file with pending here documents")
            marker = self._pending[-1]
            eof = marker.left
            marker.left = snarf_heredoc(source, eof.left, eof.kind is NodeKind.QWORD)
            self._pending.pop()

    def clear(self) -> None:
        """Drop all pending documents."""
        self._pending.clear()