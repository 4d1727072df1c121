"""Building blocks for an extensible shell: trees, bindings, quoting, globbing, input and here documents."""

__version__ = "0.1.0"