"""Terms and operations on lists of terms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence


@dataclass(frozen=True)
class Term:
    """A list element: either a string or a closure."""

    text: str | None = None
    closure: Any = None

    def __post_init__(self) -> None:
        if self.text is None and self.closure is None:
            raise ValueError("a term needs a string or a closure")

    @property
    def is_closure(self) -> bool:
        return self.closure is not None

    def __str__(self) -> str:
        return self.text if self.text is not None else str(self.closure)


def nth(items: Sequence[Term], n: int) -> Term | None:
    """Return the ``n``th element, counting from 1, or ``None`` if absent."""
    if n < 1 or n > len(items):
        return None
    return items[n - 1]


def listify(strings: Iterable[str]) -> list[Term]:
    """Turn a sequence of strings into a list of terms."""
    return [Term(s) for s in strings]


def sortlist(items: list[Term]) -> list[Term]:
    """Return the list sorted by the terms' strings, as fresh string terms."""
    if len(items) <= 1:
        return items
    return listify(sorted(str(term) for term in items))