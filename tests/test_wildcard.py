import pytest

from esshell.errors import EsError
from esshell.wildcard import (
    QUOTED,
    UNQUOTED,
    dirmatch,
    expand_home,
    glob,
    glob1,
    has_tilde,
    has_wild,
    match,
)


@pytest.fixture
def tree(tmp_path):
    for name in ("a.txt", "b.txt", "c.log", ".hidden.txt"):
        (tmp_path / name).write_text("")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "x.py").write_text("")
    (sub / "y.py").write_text("")
    return tmp_path


def test_has_wild():
    assert has_wild("a*b", UNQUOTED)
    assert has_wild("a[b", UNQUOTED)
    assert not has_wild("abc", UNQUOTED)
    assert not has_wild("a*b", QUOTED)
    assert not has_wild("a*b", "rqr")
    assert has_wild("a*b", "rrr")


def test_has_tilde():
    assert has_tilde("~/x", UNQUOTED)
    assert has_tilde("~/x", "rrr")
    assert not has_tilde("~/x", "qrr")
    assert not has_tilde("~/x", QUOTED)
    assert not has_tilde("a~", UNQUOTED)


@pytest.mark.parametrize(
    "name, pattern, expected",
    [
        ("foo.c", "*.c", True),
        ("foo.h", "*.c", False),
        ("abc", "a?c", True),
        ("ac", "a?c", False),
        ("bx", "[a-c]x", True),
        ("dx", "[a-c]x", False),
        ("dx", "[~a-c]x", True),
        ("bx", "[~a-c]x", False),
        ("]", "[]]", True),
        ("-", "[a-]", True),
        ("[x", "[x", True),
        ("", "*", True),
        ("abc", "a*", True),
        ("abc", "*b", False),
        ("abc", "a**c", True),
    ],
)
def test_match(name, pattern, expected):
    assert match(name, pattern, UNQUOTED) is expected


def test_match_respects_quoting():
    assert match("a*", "a*", "rq")
    assert not match("ab", "a*", "rq")
    assert match("ab", "a*", "rr")
    assert match("a*", "a*", QUOTED)
    assert not match("ab", "a*", QUOTED)


def test_dirmatch_wildcard(tree):
    prefix = str(tree) + "/"
    found = sorted(dirmatch(prefix, str(tree), "*.txt", UNQUOTED))
    assert found == [prefix + "a.txt", prefix + "b.txt"]


def test_dirmatch_hidden_needs_explicit_dot(tree):
    prefix = str(tree) + "/"
    assert dirmatch(prefix, str(tree), ".*.txt", UNQUOTED) == [prefix + ".hidden.txt"]


def test_dirmatch_literal(tree):
    prefix = str(tree) + "/"
    assert dirmatch(prefix, str(tree), "c.log", UNQUOTED) == [prefix + "c.log"]
    assert dirmatch(prefix, str(tree), "missing", UNQUOTED) == []


def test_dirmatch_not_a_directory(tree):
    assert dirmatch("", str(tree / "a.txt"), "*", UNQUOTED) == []


def test_glob1_relative(tree, monkeypatch):
    monkeypatch.chdir(tree)
    assert sorted(glob1("*.txt", UNQUOTED)) == ["a.txt", "b.txt"]
    assert sorted(glob1("s*/*.py", UNQUOTED)) == ["sub/x.py", "sub/y.py"]
    assert sorted(glob1("sub//?.py", UNQUOTED)) == ["sub//x.py", "sub//y.py"]
    assert glob1("nothing*/x", UNQUOTED) == []


def test_glob1_absolute(tree):
    base = str(tree) + "/"
    pattern = base + "*.txt"
    quote = "q" * len(base) + "r" * len("*.txt")
    assert sorted(glob1(pattern, quote)) == [base + "a.txt", base + "b.txt"]


def test_glob1_rejects_quoted():
    with pytest.raises(ValueError):
        glob1("*", QUOTED)


def test_glob_without_wildcards_is_identity():
    assert glob(["plain", "words"], [UNQUOTED, QUOTED]) == ["plain", "words"]


def test_glob_expands_and_keeps_unmatched(tree, monkeypatch):
    monkeypatch.chdir(tree)
    words = ["x", "*.txt", "*.none"]
    assert glob(words, [UNQUOTED] * 3) == ["x", "a.txt", "b.txt", "*.none"]


def test_glob_leaves_quoted_wildcards(tree, monkeypatch):
    monkeypatch.chdir(tree)
    assert glob(["*.txt"], [QUOTED]) == ["*.txt"]


def test_glob_tilde_then_wildcard(tree):
    home = str(tree)
    result = glob(["~/*.txt"], [UNQUOTED], lambda user: [home])
    assert result == [home + "/a.txt", home + "/b.txt"]


def test_expand_home_with_path():
    word, quote = expand_home("~/f", UNQUOTED, lambda user: ["/home/u"])
    assert word == "/home/u/f"
    assert quote == "q" * 7 + "rr"


def test_expand_home_alone_is_quoted():
    assert expand_home("~", UNQUOTED, lambda user: ["/home/u"]) == ("/home/u", QUOTED)


def test_expand_home_passes_user():
    seen = []

    def lookup(user):
        seen.append(user)
        return ["/h"]

    results = [
        expand_home("~bob/x", UNQUOTED, lookup),
        expand_home("~/x", UNQUOTED, lookup),
    ]
    assert seen == ["bob", None]
    assert results == [("/h/x", "qqrr"), ("/h/x", "qqrr")]


def test_expand_home_unchanged_without_lookup_or_value():
    assert expand_home("~/x", UNQUOTED, None) == ("~/x", UNQUOTED)
    assert expand_home("~/x", UNQUOTED, lambda user: []) == ("~/x", UNQUOTED)


def test_expand_home_too_many_values():
    with pytest.raises(EsError) as info:
        expand_home("~/x", UNQUOTED, lambda user: ["/a", "/b"])
    assert info.value.message == "%home returned more than one value"