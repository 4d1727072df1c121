"""Input sources for the parser: files, descriptors and strings, with pushback and history."""

from __future__ import annotations

import abc
import codecs
import os
import sys
from typing import TextIO

from .errors import fail

EOF = ""
"""What ``Input.get`` returns once the source is exhausted."""

MAXUNGET = 2
BUFSIZE = 4096


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


class History:
    """Appends commands read interactively to a history file."""

    def __init__(self, path: str | None = None, *, stderr: TextIO | None = None) -> None:
        self.path = path
        self.disabled = False
        self._stderr = stderr
        self._fd: int | None = None

    def __enter__(self) -> History:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def log(self, command: str) -> None:
        """Write ``command`` to the history file, skipping blank lines and comments."""
        if self.path is None or self.disabled:
            return
        if self._fd is None:
            try:
                self._fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o666)
            except OSError as exc:
                print(f"history({self.path}): {exc.strerror}", file=self._stderr or sys.stderr)
                self.path = None
                return
        for ch in command:
            if ch in "#\n":
                return
            if ch not in " \t":
                break
        data = _encode(command)
        while data:
            written = os.write(self._fd, data)
            data = data[written:]

    def set_file(self, path: str | None) -> None:
        """Switch the log to another file (or to none)."""
        self.close()
        self.path = path

    def close(self) -> None:
        """Close the history file if it is open."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None


class Input(abc.ABC):
    """A source of characters with up to two characters of pushback.

    Null characters are dropped with a warning.  When ``echo`` is a stream,
    every character read (other than pushed-back ones) is copied to it.
    """

    def __init__(
        self,
        name: str,
        *,
        interactive: bool = False,
        echo: TextIO | None = None,
        history: History | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self.name = name
        self.lineno = 1
        self.interactive = interactive
        self.echo = echo
        self.history = history
        self.ignore_eof = False
        self._stderr = stderr
        self._buf = ""
        self._pos = 0
        self._ungot: list[str] = []
        self._error: str | None = None
        self._eof = False

    def __enter__(self) -> Input:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abc.abstractmethod
    def _fill(self) -> str:
        """Refill the buffer and return its first character, or ``EOF``."""

    def close(self) -> None:
        """Release whatever the source holds."""
        self._buf = ""
        self._pos = 0

    @property
    def at_eof(self) -> bool:
        """True once the source has reported its end."""
        return self._eof

    def _warn(self, message: str) -> None:
        print(f"warning: {self.locate(message)}", file=self._stderr or sys.stderr)

    def _next(self) -> str:
        if self._pos < len(self._buf):
            c = self._buf[self._pos]
            self._pos += 1
            return c
        return self._fill()

    def get(self) -> str:
        """Return the next character, or ``EOF``."""
        if self._ungot:
            return self._ungot.pop()
        while True:
            c = self._next()
            if c != "\0":
                break
            self._warn("null character ignored")
        if self.echo is not None and c != EOF:
            self.echo.write(c)
            self.echo.flush()
        return c

    def unget(self, c: str) -> None:
        """Push back one character; at most two may be pending."""
        if self._ungot:
            if len(self._ungot) >= MAXUNGET:
                raise ValueError("too many characters pushed back")
            self._ungot.append(c)
        elif self._pos > 0 and self._buf[self._pos - 1] == c and self.echo is None:
            self._pos -= 1
        else:
            self._ungot.append(c)

    def locate(self, message: str) -> str:
        """Prefix ``message`` with the source name and line unless interactive."""
        if self.interactive:
            return message
        return f"{self.name}:{self.lineno}: {message}"

    def report_error(self, message: str) -> None:
        """Record a syntax error; only the first one is kept."""
        if self._error is None:
            self._error = self.locate(message)

    def take_error(self) -> str | None:
        """Return the recorded error, if any, and forget it."""
        error, self._error = self._error, None
        return error


class StringInput(Input):
    """Characters taken from a string."""

    def __init__(
        self,
        text: str,
        name: str | None = None,
        *,
        interactive: bool = False,
        echo: TextIO | None = None,
        history: History | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        super().__init__(
            text if name is None else name,
            interactive=interactive,
            echo=echo,
            history=history,
            stderr=stderr,
        )
        self._buf = text

    def _fill(self) -> str:
        self._eof = True
        return EOF


class FdInput(Input):
    """Characters read from a file descriptor, which is closed at end of input."""

    def __init__(
        self,
        fd: int,
        name: str | None = None,
        *,
        interactive: bool = False,
        echo: TextIO | None = None,
        history: History | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        super().__init__(
            f"fd {fd}" if name is None else name,
            interactive=interactive,
            echo=echo,
            history=history,
            stderr=stderr,
        )
        self.fd = fd
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="surrogateescape")

    def _start(self, text: str) -> str:
        self._buf = text
        self._pos = 1
        return text[0]

    def _fill(self) -> str:
        while True:
            if self.fd < 0:
                self._eof = True
                return EOF
            error: OSError | None = None
            try:
                data = os.read(self.fd, BUFSIZE)
            except InterruptedError:
                continue
            except OSError as exc:
                error = exc
                data = b""
            if not data:
                tail = self._decoder.decode(b"", final=True)
                if tail and error is None:
                    return self._start(tail)
                if not self.ignore_eof:
                    self.close()
                    self._eof = True
                    self.interactive = False
                if error is not None:
                    fail("$&parse", f"{self.name}: {os.strerror(error.errno or 0)}")
                return EOF
            text = self._decoder.decode(data)
            if self.interactive and self.history is not None:
                self.history.log(text)
            if text:
                return self._start(text)

    def close(self) -> None:
        """Close the descriptor if it is still open."""
        super().close()
        if self.fd >= 0:
            try:
                os.close(self.fd)
            except OSError:
                pass
            self.fd = -1