"""A small interactive shell: lexer, expander, parser, builtins and executor."""

__version__ = "0.1.0"

__all__ = ["__version__"]