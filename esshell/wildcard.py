"""Wildcard matching, tilde expansion and globbing against the file system.

A word's quoting is described by ``QUOTED`` (every character quoted),
``UNQUOTED`` (every character raw) or a string holding ``q`` or ``r``
for each character of the word.
"""

from __future__ import annotations

import enum
import os
from typing import Callable, Iterable, Optional, Sequence, Union

from .errors import fail


class _QuoteMark(enum.Enum):
    QUOTED = "QUOTED"
    UNQUOTED = "RAW"


QUOTED = _QuoteMark.QUOTED
UNQUOTED = _QuoteMark.UNQUOTED

Quote = Union[_QuoteMark, str]
HomeLookup = Callable[[Optional[str]], Sequence[str]]

_WILD = "*?["
_RANGE_FAIL = -1
_RANGE_ERROR = -2


def _is_quoted(quote: Quote, i: int) -> bool:
    if quote is QUOTED:
        return True
    if quote is UNQUOTED:
        return False
    return i < len(quote) and quote[i] == "q"


def has_tilde(s: str, quote: Quote) -> bool:
    """True if ``s`` starts with an unquoted ``~``."""
    if not s.startswith("~") or quote is QUOTED:
        return False
    return quote is UNQUOTED or quote[:1] == "r"


def has_wild(s: str, quote: Quote) -> bool:
    """True if some unquoted character of ``s`` is a wildcard."""
    if quote is QUOTED:
        return False
    if quote is UNQUOTED:
        return any(c in _WILD for c in s)
    return any(c in _WILD and r == "r" for c, r in zip(s, quote))


def _rangematch(p: str, start: int, quote: Quote, ch: str) -> int:
    i = start
    neg = False
    if i < len(p) and p[i] == "~" and not _is_quoted(quote, i):
        neg = True
        i += 1
    matched = False
    if i < len(p) and p[i] == "]" and not _is_quoted(quote, i):
        matched = ch == "]"
        i += 1
    while True:
        if i >= len(p):
            return _RANGE_ERROR
        if p[i] == "]" and not _is_quoted(quote, i):
            break
        is_range = (
            i + 2 < len(p)
            and p[i + 1] == "-"
            and not _is_quoted(quote, i + 1)
            and (p[i + 2] != "]" or _is_quoted(quote, i + 2))
        )
        if is_range:
            if p[i] <= ch <= p[i + 2]:
                matched = True
            i += 3
        else:
            if p[i] == ch:
                matched = True
            i += 1
    return i - start + 1 if matched != neg else _RANGE_FAIL


def _match(s: str, si: int, p: str, pi: int, quote: Quote) -> bool:
    while True:
        if pi >= len(p):
            return si >= len(s)
        c = p[pi]
        if _is_quoted(quote, pi) or c not in _WILD:
            if si >= len(s) or s[si] != c:
                return False
            si += 1
            pi += 1
        elif c == "?":
            if si >= len(s):
                return False
            si += 1
            pi += 1
        elif c == "*":
            while pi < len(p) and p[pi] == "*" and not _is_quoted(quote, pi):
                pi += 1
            if pi >= len(p):
                return True
            return any(_match(s, k, p, pi, quote) for k in range(si, len(s)))
        else:
            if si >= len(s):
                return False
            width = _rangematch(p, pi + 1, quote, s[si])
            if width == _RANGE_FAIL:
                return False
            if width == _RANGE_ERROR:
                if s[si] != "[":
                    return False
                si += 1
                pi += 1
            else:
                si += 1
                pi += 1 + width


def match(name: str, pattern: str, quote: Quote = UNQUOTED) -> bool:
    """Match ``name`` against a wildcard ``pattern`` with ``*``, ``?`` and ``[...]``."""
    if quote is QUOTED:
        return name == pattern
    return _match(name, 0, pattern, 0, quote)


def dirmatch(prefix: str, dirname: str, pattern: str, quote: Quote = UNQUOTED) -> list[str]:
    """Match ``pattern`` against the entries of ``dirname``, prefixing each hit."""
    if not os.path.isdir(dirname):
        return []
    if not has_wild(pattern, quote):
        name = prefix + pattern
        return [name] if os.path.lexists(name) else []
    try:
        entries = os.listdir(dirname)
    except OSError:
        return []
    return [
        prefix + entry
        for entry in [".", "..", *entries]
        if match(entry, pattern, quote)
        and (not entry.startswith(".") or pattern.startswith("."))
    ]


def _listglob(dirs: Iterable[str], pattern: str, quote: Quote, slashcount: int) -> list[str]:
    found: list[str] = []
    for directory in dirs:
        found.extend(dirmatch(directory + "/" * slashcount, directory, pattern, quote))
    return found


def glob1(pattern: str, quote: Quote = UNQUOTED) -> list[str]:
    """Expand one wildcard path against the file system, unsorted."""
    if quote is QUOTED:
        raise ValueError("a fully quoted word is never globbed")
    q = "r" * len(pattern) if quote is UNQUOTED else quote
    absolute = pattern.startswith("/")
    if absolute:
        end = len(pattern) - len(pattern.lstrip("/"))
    else:
        end = pattern.find("/")
        if end < 0:
            end = len(pattern)
    head, qhead = pattern[:end], q[:end]
    if end == len(pattern):
        return dirmatch("", ".", head, qhead)

    matched = [head] if absolute else dirmatch("", ".", head, qhead)
    pos = end
    while True:
        start = pos
        while pos < len(pattern) and pattern[pos] == "/":
            pos += 1
        slashcount = pos - start
        component = pos
        while pos < len(pattern) and pattern[pos] != "/":
            pos += 1
        matched = _listglob(matched, pattern[component:pos], q[component:pos], slashcount)
        if pos >= len(pattern) or not matched:
            return matched


def expand_home(
    word: str, quote: Quote, home_lookup: HomeLookup | None
) -> tuple[str, Quote]:
    """Replace a leading ``~`` or ``~user`` using ``home_lookup``.

    ``home_lookup`` receives the user name (``None`` for a bare ``~``) and
    returns a list of values; an empty list leaves the word alone.
    """
    if not has_tilde(word, quote):
        raise ValueError("word does not start with an unquoted ~")
    if home_lookup is None:
        return word, quote
    slash = word.find("/", 1)
    if slash < 0:
        slash = len(word)
    user = word[1:slash] if slash > 1 else None
    values = list(home_lookup(user))
    if not values:
        return word, quote
    if len(values) > 1:
        fail("es:expandhome", "%home returned more than one value")
    home = str(values[0])
    if slash == len(word):
        return home, QUOTED
    rest = word[slash:]
    if quote is UNQUOTED:
        new_quote: Quote = "q" * len(home) + "r" * len(rest)
    elif "r" not in quote:
        new_quote = QUOTED
    else:
        new_quote = "q" * len(home) + quote[slash:]
    return home + rest, new_quote


def glob(
    words: Iterable[str], quotes: Iterable[Quote], home_lookup: HomeLookup | None = None
) -> list[str]:
    """Tilde-expand and glob a list of words with their quoting.

    Words whose wildcards match nothing are kept as they are; matches are
    sorted.
    """
    word_list = list(words)
    quote_list = list(quotes)
    if len(word_list) != len(quote_list):
        raise ValueError("every word needs a quote description")
    expanded: list[tuple[str, Quote]] = []
    for word, quote in zip(word_list, quote_list):
        if quote is not QUOTED and has_tilde(word, quote):
            word, quote = expand_home(word, quote, home_lookup)
        expanded.append((word, quote))

    if not any(has_wild(word, quote) for word, quote in expanded):
        return [word for word, _ in expanded]

    result: list[str] = []
    for word, quote in expanded:
        found = glob1(word, quote) if has_wild(word, quote) else []
        result.extend(sorted(found) if found else [word])
    return result