"""Building word lists: cross-product concatenation and subscripting."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from .errors import fail
from .lists import Term
from .wildcard import QUOTED, UNQUOTED, Quote

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _termcat(a: Term, b: Term) -> Term:
    return Term(str(a) + str(b))


def concat(list1: Iterable[Term], list2: Sequence[Term]) -> list[Term]:
    """Concatenate every term of ``list1`` with every term of ``list2``."""
    return [_termcat(a, b) for a in list1 for b in list2]


def _spell(quote: Quote, text: str) -> str:
    if quote is QUOTED:
        return "q" * len(text)
    if quote is UNQUOTED:
        return "r" * len(text)
    return quote


def qcat(q1: Quote, q2: Quote, s1, s2) -> Quote:
    """Combine the quote descriptions of two words being concatenated."""
    if q1 is QUOTED and q2 is QUOTED:
        return QUOTED
    if q1 is UNQUOTED and q2 is UNQUOTED:
        return UNQUOTED
    return _spell(q1, str(s1)) + _spell(q2, str(s2))


def qconcat(
    list1: Sequence[Term],
    list2: Sequence[Term],
    quotes1: Sequence[Quote],
    quotes2: Sequence[Quote],
) -> tuple[list[Term], list[Quote]]:
    """Cross-product concatenation that also combines the quote descriptions."""
    if len(list1) != len(quotes1) or len(list2) != len(quotes2):
        raise ValueError("every term needs a quote description")
    terms: list[Term] = []
    quotes: list[Quote] = []
    for a, qa in zip(list1, quotes1):
        for b, qb in zip(list2, quotes2):
            terms.append(_termcat(a, b))
            quotes.append(qcat(qa, qb, str(a), str(b)))
    return terms, quotes


def _index(text: str) -> int:
    found = _LEADING_INT.match(text)
    value = int(found.group(1)) if found else 0
    if value < 1:
        fail("es:subscript", f"bad subscript: {text}")
    return value


def subscript(items: Sequence[Term], subs: Iterable) -> list[Term]:
    """Select elements of ``items`` by 1-based subscripts and ``...`` ranges."""
    words = [str(s) for s in subs]
    count = len(items)
    result: list[Term] = []
    pos = 0
    while pos < len(words):
        if pos == 0 and words[0] == "...":
            lo = 1
            ranged = True
        else:
            lo = _index(words[pos])
            pos += 1
            ranged = pos < len(words) and words[pos] == "..."
        if ranged:
            pos += 1
            if pos >= len(words):
                hi = count
            else:
                hi = min(_index(words[pos]), count)
                pos += 1
        else:
            hi = lo
        if lo > count:
            continue
        result.extend(items[lo - 1 : hi])
    return result