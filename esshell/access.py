"""File access testing and path searching."""

from __future__ import annotations

import enum
import errno
import os
import stat
from typing import Iterable

from .errors import fail

_USAGE = "access [-n name] [-1e] [-rwx] [-fdcblsp] path ..."
_USER, _GROUP, _OTHER = 6, 3, 0


class Permission(enum.IntFlag):
    """Access permissions to test for."""

    NONE = 0
    EXEC = 1
    WRITE = 2
    READ = 4


class FileKind(enum.Enum):
    """File types that can be required of a path."""

    ANY = 0
    REGULAR = 1
    DIRECTORY = 2
    CHAR = 3
    BLOCK = 4
    LINK = 5
    SOCKET = 6
    FIFO = 7


_KIND_TESTS = {
    FileKind.REGULAR: stat.S_ISREG,
    FileKind.DIRECTORY: stat.S_ISDIR,
    FileKind.BLOCK: stat.S_ISBLK,
    FileKind.LINK: stat.S_ISLNK,
    FileKind.SOCKET: stat.S_ISSOCK,
    FileKind.FIFO: stat.S_ISFIFO,
}

_PERM_FLAGS = {"r": Permission.READ, "w": Permission.WRITE, "x": Permission.EXEC}
_KIND_FLAGS = {
    "f": FileKind.REGULAR,
    "d": FileKind.DIRECTORY,
    "c": FileKind.CHAR,
    "b": FileKind.BLOCK,
    "l": FileKind.LINK,
    "s": FileKind.SOCKET,
    "p": FileKind.FIFO,
}


def _permitted(st: os.stat_result, perm: int) -> bool:
    if perm == 0:
        return True
    uid = os.geteuid()
    if uid == 0:
        mask = (perm << _USER) | (perm << _GROUP) | (perm << _OTHER)
    elif uid == st.st_uid:
        mask = perm << _USER
    elif st.st_gid == os.getegid() or st.st_gid in os.getgroups():
        mask = perm << _GROUP
    else:
        mask = perm << _OTHER
    return st.st_mode & mask == mask


def test_file(path: str, perm: Permission = Permission.NONE, kind: FileKind = FileKind.ANY) -> None:
    """Raise ``OSError`` unless ``path`` has kind ``kind`` and grants ``perm``."""
    st = os.lstat(path) if kind is FileKind.LINK else os.stat(path)
    check = _KIND_TESTS.get(kind)
    if (check is not None and not check(st.st_mode)) or not _permitted(st, int(perm)):
        raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)


def path_cat(prefix: str, suffix: str) -> str:
    """Join two path pieces with a single slash where one is needed."""
    if not prefix:
        return suffix
    if not suffix:
        return prefix
    if prefix.endswith("/"):
        return prefix + suffix
    return prefix + "/" + suffix


def _usage_error(message: str) -> None:
    fail("$&access", f"{message} -- usage: {_USAGE}")


def access(args: Iterable[str]) -> list[str]:
    """Run the ``access`` builtin on an argument list and return its result."""
    rest = list(args)
    suffix: str | None = None
    first = throws = False
    perm = Permission.NONE
    kind = FileKind.ANY

    while rest and rest[0].startswith("-") and rest[0] != "-":
        arg = rest.pop(0)
        if arg == "--":
            break
        letters = arg[1:]
        while letters:
            c, letters = letters[0], letters[1:]
            if c == "n":
                if letters:
                    suffix, letters = letters, ""
                elif rest:
                    suffix = rest.pop(0)
                else:
                    _usage_error("option -n requires an argument")
            elif c == "1":
                first = True
            elif c == "e":
                throws = True
            elif c in _PERM_FLAGS:
                perm |= _PERM_FLAGS[c]
            elif c in _KIND_FLAGS:
                kind = _KIND_FLAGS[c]
            else:
                _usage_error(f"illegal option: -{c}")

    estatus = errno.ENOENT
    results: list[str] = []
    for name in rest:
        if suffix is not None:
            name = path_cat(name, suffix)
        try:
            test_file(name, perm, kind)
            error = 0
        except OSError as exc:
            error = exc.errno or errno.EACCES
        if first:
            if error == 0:
                return [name]
            if error != errno.ENOENT:
                estatus = error
        else:
            results.append("0" if error == 0 else os.strerror(error))

    if first and throws:
        message = os.strerror(estatus)
        fail("$&access", f"{suffix}: {message}" if suffix is not None else message)
    return results


def check_executable(path: str) -> str | None:
    """Return why ``path`` cannot be executed, or ``None`` if it can."""
    try:
        test_file(path, Permission.EXEC, FileKind.REGULAR)
    except OSError as exc:
        return os.strerror(exc.errno or errno.EACCES)
    return None