"""File descriptor moves, deferred descriptor operations and reserved descriptors."""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass

from .errors import fail

UNREGISTERED = -1


def _close(fd: int) -> None:
    try:
        os.close(fd)
    except OSError:
        pass


def mvfd(old: int, new: int) -> None:
    """Duplicate ``old`` onto ``new`` and close ``old``."""
    if old == new:
        return
    try:
        os.dup2(old, new)
    except OSError as exc:
        fail("es:mvfd", f"dup2: {os.strerror(exc.errno or errno.EBADF)}")
    _close(old)


@dataclass(eq=False)
class FdRef:
    """A mutable cell holding a descriptor number that the shell keeps track of."""

    fd: int = -1


@dataclass
class _Defer:
    real: FdRef
    userfd: int


@dataclass
class _Reserve:
    ref: FdRef
    closeonfork: bool


class FdTable:
    """Deferred descriptor operations and the list of descriptors the shell reserves.

    In a parent shell, moves and closes requested by the user are stacked
    and only applied by ``close_fds`` (after a fork).  Reserved descriptors
    are moved out of the way when a user descriptor needs their number.
    """

    def __init__(self) -> None:
        self._deferred: list[_Defer] = []
        self._reserved: list[_Reserve] = []

    # deferred operations

    def _do_deferred(self, realfd: int, userfd: int) -> None:
        if userfd < 0:
            raise ValueError(f"bad user descriptor {userfd}")
        self.release_fd(userfd)
        if realfd == -1:
            _close(userfd)
        else:
            mvfd(realfd, userfd)

    def _push(self, parent: bool, realfd: int, userfd: int) -> int:
        if not parent:
            self._do_deferred(realfd, userfd)
            return UNREGISTERED
        defer = _Defer(FdRef(realfd), userfd)
        self._deferred.append(defer)
        self.register(defer.real, True)
        return len(self._deferred) - 1

    def defer_mvfd(self, parent: bool, old: int, new: int) -> int:
        """Move ``old`` onto ``new``, now or (in a parent) later; return a ticket."""
        if old < 0 or new < 0:
            raise ValueError("descriptors must not be negative")
        return self._push(parent, old, new)

    def defer_close(self, parent: bool, fd: int) -> int:
        """Close ``fd``, now or (in a parent) later; return a ticket."""
        if fd < 0:
            raise ValueError("descriptors must not be negative")
        return self._push(parent, -1, fd)

    def undefer(self, ticket: int) -> None:
        """Withdraw the most recent deferred operation, closing its source."""
        if ticket == UNREGISTERED:
            return
        if not self._deferred or ticket != len(self._deferred) - 1:
            raise ValueError(f"ticket {ticket} is not the latest deferral")
        defer = self._deferred.pop()
        self.unregister(defer.real)
        if defer.real.fd != -1:
            _close(defer.real.fd)

    def fdmap(self, fd: int) -> int:
        """Map a user descriptor through the deferrals to a real one (-1 if closed)."""
        for defer in reversed(self._deferred):
            if fd == defer.userfd:
                fd = defer.real.fd
                if fd == -1:
                    return -1
        return fd

    def _remap(self) -> None:
        for defer in self._deferred:
            self.unregister(defer.real)
            self._do_deferred(defer.real.fd, defer.userfd)
        self._deferred.clear()

    def _is_deferred(self, fd: int) -> bool:
        return any(defer.userfd == fd for defer in self._deferred)

    # reserved descriptors

    def register(self, ref: FdRef, closeonfork: bool) -> None:
        """Reserve the descriptor held in ``ref`` for the shell's own use."""
        if any(entry.ref is ref for entry in self._reserved):
            raise ValueError("descriptor reference is already registered")
        self._reserved.append(_Reserve(ref, closeonfork))

    def unregister(self, ref: FdRef) -> None:
        """Give up the reservation of ``ref``."""
        for index, entry in enumerate(self._reserved):
            if entry.ref is ref:
                last = self._reserved.pop()
                if index < len(self._reserved):
                    self._reserved[index] = last
                return
        raise ValueError(f"descriptor {ref.fd} is not on the reserved list")

    def close_fds(self) -> None:
        """Apply deferred operations and close reserved descriptors after a fork."""
        self._remap()
        for entry in self._reserved:
            if entry.closeonfork:
                if entry.ref.fd >= 3:
                    _close(entry.ref.fd)
                entry.ref.fd = -1

    def release_fd(self, n: int) -> None:
        """Move any reserved descriptor numbered ``n`` to another number."""
        if n < 0:
            raise ValueError("descriptors must not be negative")
        for entry in self._reserved:
            fd = entry.ref.fd
            if fd == n:
                try:
                    entry.ref.fd = os.dup(fd)
                except OSError as exc:
                    fail("es:releasefd", os.strerror(exc.errno or errno.EBADF))
                _close(fd)

    def newfd(self) -> int:
        """Return a descriptor number from 3 up that is neither open nor deferred."""
        i = 3
        while True:
            if not self._is_deferred(i):
                try:
                    fd = os.dup(i)
                except OSError as exc:
                    if exc.errno != errno.EBADF:
                        fail("$&newfd", f"newfd: {os.strerror(exc.errno or errno.EIO)}")
                    return i
                if self._is_deferred(fd):
                    n = self.newfd()
                    _close(fd)
                    return n
                _close(fd)
                return fd
            i += 1