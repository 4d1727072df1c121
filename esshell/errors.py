"""Exceptions raised by the shell: a thrown exception carries a list of words."""

from __future__ import annotations

from typing import Iterable


class EsException(Exception):
    """An exception thrown through the shell, carrying a list of terms.

    The first term names the exception (``error``, ``return``, ``break``,
    ``eof``, ``exit`` and so on); the rest are its arguments.
    """

    def __init__(self, terms: Iterable[str]) -> None:
        self.terms: list[str] = list(terms)
        if not self.terms:
            raise ValueError("an exception needs at least one term")
        super().__init__(" ".join(self.terms))

    @property
    def name(self) -> str:
        """The exception's name, its first term."""
        return self.terms[0]

    @property
    def arguments(self) -> list[str]:
        """Everything after the exception's name."""
        return self.terms[1:]


class EsError(EsException):
    """A user-catchable ``error`` exception naming where it came from."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(["error", source, message])
        self.source = source
        self.message = message

    def __str__(self) -> str:
        return self.message


def fail(source: str, message: str) -> None:
    """Raise an ``error`` exception from ``source`` with ``message``."""
    raise EsError(source, message)