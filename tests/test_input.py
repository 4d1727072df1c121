import io
import os

import pytest

from esshell.errors import EsError
from esshell.input import EOF, FdInput, History, StringInput


def read_all(source):
    out = []
    while (c := source.get()) != EOF:
        out.append(c)
    return "".join(out)


def test_string_input_reads_then_eof():
    source = StringInput("ab", name="t")
    assert source.get() == "a"
    assert source.get() == "b"
    assert source.get() == EOF
    assert source.at_eof
    assert source.get() == EOF


def test_string_input_name_defaults_to_text():
    assert StringInput("echo hi").name == "echo hi"


def test_null_character_dropped_with_warning():
    err = io.StringIO()
    source = StringInput("re\0sult 6\n", name="t", stderr=err)
    assert read_all(source) == "result 6\n"
    assert "null character ignored" in err.getvalue()
    assert err.getvalue().startswith("warning: t:1: ")


def test_unget_same_character():
    source = StringInput("ab")
    c = source.get()
    source.unget(c)
    assert source.get() == "a"
    assert source.get() == "b"


def test_unget_other_characters_is_lifo():
    source = StringInput("ab")
    source.get()
    source.unget("x")
    source.unget("y")
    assert source.get() == "y"
    assert source.get() == "x"
    assert source.get() == "b"


def test_unget_limit():
    source = StringInput("ab")
    source.unget("x")
    source.unget("y")
    with pytest.raises(ValueError):
        source.unget("z")


def test_unget_eof():
    source = StringInput("")
    assert source.get() == EOF
    source.unget(EOF)
    assert source.get() == EOF


def test_echo_does_not_repeat_pushback():
    echo = io.StringIO()
    source = StringInput("abc", echo=echo)
    source.get()
    c = source.get()
    source.unget(c)
    assert read_all(source) == "bc"
    assert echo.getvalue() == "abc"


def test_locate_and_errors():
    source = StringInput("x", name="script")
    source.lineno = 4
    assert source.locate("oops") == "script:4: oops"
    source.report_error("first")
    source.report_error("second")
    assert source.take_error() == "script:4: first"
    assert source.take_error() is None


def test_locate_interactive_is_bare():
    source = StringInput("x", interactive=True)
    assert source.locate("oops") == "oops"


def test_fd_input_reads_pipe_and_closes():
    r, w = os.pipe()
    os.write(w, "héllo\n".encode())
    os.close(w)
    source = FdInput(r)
    assert source.name == f"fd {r}"
    assert read_all(source) == "héllo\n"
    assert source.fd == -1
    assert source.at_eof


def test_fd_input_ignore_eof_keeps_descriptor():
    r, w = os.pipe()
    os.close(w)
    source = FdInput(r, name="p")
    source.ignore_eof = True
    assert source.get() == EOF
    assert source.fd == r
    source.ignore_eof = False
    assert source.get() == EOF
    assert source.fd == -1


def test_fd_input_read_error_fails():
    r, w = os.pipe()
    source = FdInput(w, name="x")
    try:
        with pytest.raises(EsError) as info:
            source.get()
        assert info.value.source == "$&parse"
        assert str(info.value).startswith("x: ")
        assert source.fd == -1
    finally:
        os.close(r)


def test_fd_input_context_manager_closes():
    r, w = os.pipe()
    os.close(w)
    with FdInput(r) as source:
        pass
    assert source.fd == -1


def test_interactive_fd_input_logs_history(tmp_path):
    path = tmp_path / "hist"
    r, w = os.pipe()
    os.write(w, b"ls -l\n")
    os.close(w)
    with History(str(path)) as history:
        source = FdInput(r, interactive=True, history=history)
        assert read_all(source) == "ls -l\n"
    assert path.read_text() == "ls -l\n"


def test_history_skips_comments_and_blank_lines(tmp_path):
    path = tmp_path / "hist"
    with History(str(path)) as history:
        history.log("  # comment\n")
        history.log("\n")
        history.log("echo a\n")
        history.disabled = True
        history.log("echo b\n")
    assert path.read_text() == "echo a\n"


def test_history_set_file(tmp_path):
    first, second = tmp_path / "one", tmp_path / "two"
    with History(str(first)) as history:
        history.log("a\n")
        history.set_file(str(second))
        history.log("b\n")
        history.set_file(None)
        history.log("c\n")
    assert first.read_text() == "a\n"
    assert second.read_text() == "b\n"


def test_history_unopenable_path(tmp_path):
    err = io.StringIO()
    bad = str(tmp_path / "missing" / "hist")
    history = History(bad, stderr=err)
    history.log("echo\n")
    assert history.path is None
    assert err.getvalue().startswith(f"history({bad}): ")