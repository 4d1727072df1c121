"""Open-addressed hash tables keyed by strings."""

from __future__ import annotations

from typing import Any, Iterator

_INIT_SIZE = 2
_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1


class _Dead:
    __slots__ = ()

    def __repr__(self) -> str:
        return "DEAD"


_DEAD = _Dead()


def _encode(s: str) -> bytes:
    return s.encode("utf-8", "surrogateescape")


def strhash2(s1: str, s2: str | None) -> int:
    """Hash the catenation of two strings."""
    data = _encode(s1) + (_encode(s2) if s2 else b"")
    n = 0
    for i, c in enumerate(data):
        stage = i % 4
        if stage == 0:
            n = (n + ((c << 17) ^ (c << 11) ^ (c << 5) ^ (c >> 1))) & _MASK64
        elif stage == 1:
            n ^= (c << 14) + (c << 7) + (c << 4) + c
        elif stage == 2:
            n ^= (((~c & _MASK32) << 11) & _MASK32) | ((c << 3) ^ (c >> 1))
        else:
            n = (n - ((c << 16) | (c << 9) | (c << 2) | (c & 3))) & _MASK64
    return n


def strhash(s: str) -> int:
    """Hash a single string."""
    return strhash2(s, None)


class HashDict:
    """A string-keyed table with linear probing; storing ``None`` deletes."""

    def __init__(self) -> None:
        self._reset(_INIT_SIZE)

    def _reset(self, size: int) -> None:
        self._names: list[Any] = [None] * size
        self._values: list[Any] = [None] * size
        self._remain = (size * 2) // 3

    @property
    def _mask(self) -> int:
        return len(self._names) - 1

    def _probe(self, n: int, name: str) -> int | None:
        mask = self._mask
        while True:
            slot = self._names[n & mask]
            if slot is None:
                return None
            if slot is not _DEAD and slot == name:
                return n & mask
            n += 1

    def _insert(self, name: str, value: Any) -> None:
        if self._remain <= 1:
            old = list(self.items())
            self._reset(len(self._names) * 2)
            for old_name, old_value in old:
                self._insert(old_name, old_value)
        mask = self._mask
        n = strhash(name)
        while True:
            index = n & mask
            slot = self._names[index]
            if slot is _DEAD:
                break
            if slot is None:
                self._remain -= 1
                break
            n += 1
        self._names[index] = name
        self._values[index] = value

    def _remove(self, index: int) -> None:
        mask = self._mask
        self._names[index] = _DEAD
        self._values[index] = None
        n = index + 1
        while self._names[n & mask] is _DEAD:
            n += 1
        if self._names[n & mask] is not None:
            return
        n -= 1
        while self._names[n & mask] is _DEAD:
            self._names[n & mask] = None
            self._remain += 1
            n -= 1

    def get(self, name: str) -> Any:
        """Return the value stored under ``name``, or ``None``."""
        index = self._probe(strhash(name), name)
        return None if index is None else self._values[index]

    def put(self, name: str, value: Any) -> None:
        """Store ``value`` under ``name``; a value of ``None`` removes the entry."""
        index = self._probe(strhash(name), name)
        if value is not None:
            if index is None:
                self._insert(name, value)
            else:
                self._values[index] = value
        elif index is not None:
            self._remove(index)

    def get2(self, name1: str, name2: str) -> Any:
        """Look up the catenation of two names without building it first."""
        mask = self._mask
        n = strhash2(name1, name2)
        whole_len = len(name1) + len(name2)
        while True:
            slot = self._names[n & mask]
            if slot is None:
                return None
            if (
                slot is not _DEAD
                and len(slot) == whole_len
                and slot.startswith(name1)
                and slot.endswith(name2)
            ):
                return self._values[n & mask]
            n += 1

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield the live entries in table order."""
        for name, value in zip(self._names, self._values):
            if name is not None and name is not _DEAD:
                yield name, value

    def __len__(self) -> int:
        return sum(1 for _ in self.items())