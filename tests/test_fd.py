import os
import stat

import pytest

from esshell.errors import EsError
from esshell.fd import UNREGISTERED, FdRef, FdTable, mvfd


def _closed(fd):
    try:
        os.fstat(fd)
    except OSError:
        return True
    return False


def _close_all(*fds):
    for fd in fds:
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.fixture
def pipe():
    r, w = os.pipe()
    yield r, w
    _close_all(r, w)


def test_mvfd_moves_descriptor(pipe):
    r, w = pipe
    source = os.dup(w)
    target = os.dup(r)
    mvfd(source, target)
    os.write(target, b"hi")
    assert os.read(r, 2) == b"hi"
    assert _closed(source)
    _close_all(target)


def test_mvfd_same_descriptor_is_noop(pipe):
    r, w = pipe
    assert mvfd(r, r) is None
    assert stat.S_ISFIFO(os.fstat(r).st_mode)
    os.write(w, b"ok")
    assert os.read(r, 2) == b"ok"


def test_mvfd_bad_descriptor_fails():
    r, w = os.pipe()
    _close_all(r, w)
    with pytest.raises(EsError) as info:
        mvfd(r, w)
    assert info.value.message.startswith("dup2: ")
    assert info.value.source == "es:mvfd"


def test_defer_close_in_parent_maps_to_closed():
    table = FdTable()
    ticket = table.defer_close(True, 7)
    assert ticket == 0
    assert table.fdmap(7) == -1
    assert table.fdmap(8) == 8
    table.undefer(ticket)
    assert table.fdmap(7) == 7


def test_defer_mvfd_in_parent_then_undefer_closes_source(pipe):
    _, w = pipe
    source = os.dup(w)
    table = FdTable()
    ticket = table.defer_mvfd(True, source, 50)
    assert table.fdmap(50) == source
    table.undefer(ticket)
    assert table.fdmap(50) == 50
    assert _closed(source)


def test_deferrals_chain(pipe):
    _, w = pipe
    first = os.dup(w)
    second = os.dup(w)
    table = FdTable()
    t0 = table.defer_mvfd(True, first, second)
    t1 = table.defer_mvfd(True, second, 60)
    assert (t0, t1) == (0, 1)
    assert table.fdmap(60) == first
    with pytest.raises(ValueError):
        table.undefer(t0)
    table.undefer(t1)
    table.undefer(t0)
    assert _closed(first) and _closed(second)


def test_deferred_close_hides_earlier_move(pipe):
    _, w = pipe
    source = os.dup(w)
    table = FdTable()
    t0 = table.defer_mvfd(True, source, 55)
    t1 = table.defer_close(True, 55)
    assert table.fdmap(55) == -1
    table.undefer(t1)
    table.undefer(t0)


def test_defer_outside_parent_runs_immediately(pipe):
    r, w = pipe
    source = os.dup(w)
    target = os.dup(r)
    table = FdTable()
    assert table.defer_mvfd(False, source, target) == UNREGISTERED
    os.write(target, b"x")
    assert os.read(r, 1) == b"x"
    assert _closed(source)
    _close_all(target)


def test_defer_rejects_negative():
    table = FdTable()
    with pytest.raises(ValueError):
        table.defer_close(True, -1)


def test_register_twice_rejected():
    table = FdTable()
    ref = FdRef(5)
    table.register(ref, False)
    with pytest.raises(ValueError):
        table.register(ref, True)


def test_unregister_unknown_rejected():
    table = FdTable()
    table.register(FdRef(3), False)
    with pytest.raises(ValueError):
        table.unregister(FdRef(3))


def test_close_fds_closes_only_close_on_fork(pipe):
    _, w = pipe
    closing = FdRef(os.dup(w))
    keeping = FdRef(os.dup(w))
    number = closing.fd
    table = FdTable()
    table.register(closing, True)
    table.register(keeping, False)
    table.close_fds()
    assert closing.fd == -1
    assert _closed(number)
    assert stat.S_ISFIFO(os.fstat(keeping.fd).st_mode)
    _close_all(keeping.fd)


def test_close_fds_applies_deferrals(pipe):
    r, w = pipe
    source = os.dup(w)
    target = os.dup(r)
    table = FdTable()
    table.defer_mvfd(True, source, target)
    table.close_fds()
    assert table.fdmap(target) == target
    os.write(target, b"z")
    assert os.read(r, 1) == b"z"
    _close_all(target)


def test_release_fd_moves_reserved_descriptor(pipe):
    r, w = pipe
    ref = FdRef(os.dup(w))
    old = ref.fd
    table = FdTable()
    table.register(ref, True)
    table.release_fd(old)
    assert _closed(old)
    os.write(ref.fd, b"y")
    assert os.read(r, 1) == b"y"
    _close_all(ref.fd)


def test_newfd_returns_unused_descriptor():
    table = FdTable()
    n = table.newfd()
    assert n >= 3
    assert _closed(n)


def test_newfd_skips_deferred_descriptor():
    table = FdTable()
    n = table.newfd()
    ticket = table.defer_close(True, n)
    m = table.newfd()
    assert m != n
    assert table.fdmap(m) == m
    assert _closed(m)
    table.undefer(ticket)