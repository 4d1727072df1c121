# esshell

Building blocks for an extensible shell in the style of `es`: the parse-tree
model, lexical bindings and closures, list and word expansion, wildcard
matching and globbing, quoting rules, file-descriptor bookkeeping, input
sources with pushback and history, and here documents.

The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `esshell.errors` | `EsException` (an exception carrying a list of words), `EsError` (an `error` exception with `source` and `message`) and `fail(source, message)` |
| `esshell.hashdict` | `HashDict`, a linear-probing string-keyed table where storing `None` deletes; the hash functions `strhash` and `strhash2` |
| `esshell.tree` | `NodeKind`, `Tree`, `deepequal`, `node_name`, `tree_count`, `list_items` |
| `esshell.lists` | `Term` (a string or a closure), `nth`, `sortlist`, `listify` |
| `esshell.closure` | `Binding` (a chain of lexical bindings with `lookup` and iteration), `Closure`, `reverse_bindings`, `extract_bindings` |
| `esshell.conv` | printing lists, trees, closures and terms (`format_list`, `format_tree`, `format_closure`, `format_term`, `format_lisp`); `quote_string`; `encode_name` / `decode_name` for environment names; `format_env`, `format_strlist` |
| `esshell.access` | `Permission`, `FileKind`, `test_file`, `path_cat`, the `access` builtin and `check_executable` |
| `esshell.fd` | `mvfd`, `FdRef` and `FdTable` (deferred moves and closes, reserved descriptors, `newfd`) |
| `esshell.wildcard` | `QUOTED` / `UNQUOTED` quote marks, `has_wild`, `has_tilde`, `match`, `dirmatch`, `glob1`, `expand_home`, `glob` |
| `esshell.glom` | `concat`, `qcat`, `qconcat`, `subscript` |
| `esshell.input` | `Input`, `StringInput`, `FdInput` and `History` |
| `esshell.heredoc` | `read_here_variable`, `snarf_heredoc` and `HereDocQueue` |

## Examples

Quoting a word the way the shell prints it:

```python
from esshell.conv import quote_string

quote_string("hello")              # 'hello' is returned unchanged: hello
quote_string("hello", altform=True)  # "'hello'"
quote_string("it's")               # "'it''s'"
quote_string("")                   # "''"
```

Making variable names safe for the environment, and back again:

```python
from esshell.conv import encode_name, decode_name

encoded = encode_name("fn-ls")   # 'fn__2dls'
decode_name(encoded)             # 'fn-ls'
```

Subscripting a list of terms with 1-based indices and `...` ranges:

```python
from esshell.glom import subscript
from esshell.lists import listify

words = listify(["a", "b", "c", "d"])
[str(t) for t in subscript(words, ["2", "...", "3"])]   # ['b', 'c']
```

Errors that a script can catch are raised as `EsError`:

```python
from esshell.errors import EsError, fail

try:
    fail("$&access", "permission denied")
except EsError as exc:
    print(exc.source, exc.message, exc.terms)
```

Wildcard matching and globbing. A word's quoting is `QUOTED`, `UNQUOTED`, or
a string with `q` (quoted) or `r` (raw) for each character:

```python
from esshell.wildcard import UNQUOTED, glob, glob1, match

match("main.py", "*.py")                 # True
match("a*b", "a*b", "rqr")               # True: the * is literal
glob1("*.py", UNQUOTED)                  # files in the current directory, unsorted
glob(["*.py", "README*"], [UNQUOTED, UNQUOTED])   # sorted matches; unmatched words kept
```

Reading a here document from a string source:

```python
from esshell.input import StringInput
from esshell.heredoc import snarf_heredoc

doc = snarf_heredoc(StringInput("hello\nEOF\n"), "EOF", quoted=True)
doc.left    # 'hello\n'
```

## What the package does not do

There is no lexer or parser for shell syntax, no evaluator, no primitives
other than `access`, no variable store and no process or pipeline handling,
and so no command to start an interactive shell. Trees are built directly
from `Tree` nodes, and expansions such as `glob` take a callable
(`home_lookup`) where a running shell would call its own functions.