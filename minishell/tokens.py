"""Tokens of a command line and the lexer that produces them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

SPACES = frozenset(" \t\n\v\f\r")
OPERATORS = frozenset("|<>&")
PARENTHESES = frozenset("()")
QUOTES = frozenset("'\"")

UNQUOTED = "0"
SINGLE_QUOTED = "1"
DOUBLE_QUOTED = "2"

UNCLOSED_QUOTE_STATUS = 258


class TokenType(enum.Enum):
    """Kinds of token the lexer recognises."""

    WORD = 0
    PIPE = 1
    REDIR_IN = 2
    REDIR_OUT = 3
    HEREDOC = 4
    APPEND = 5
    LOGICAL_AND = 6
    LOGICAL_OR = 7
    OPEN_PAREN = 8
    CLOSE_PAREN = 9


_OPERATOR_TYPES = {
    "|": TokenType.PIPE,
    "<": TokenType.REDIR_IN,
    ">": TokenType.REDIR_OUT,
    "(": TokenType.OPEN_PAREN,
    ")": TokenType.CLOSE_PAREN,
    "<<": TokenType.HEREDOC,
    ">>": TokenType.APPEND,
    "&&": TokenType.LOGICAL_AND,
    "||": TokenType.LOGICAL_OR,
}

_REDIRECT_TYPES = frozenset(
    {TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.HEREDOC, TokenType.APPEND}
)


@dataclass
class Token:
    """A lexed token.

    ``quote_map`` holds one character per character of ``value``: ``0`` for
    unquoted, ``1`` for single-quoted and ``2`` for double-quoted text.
    Operator tokens have no quote map.
    """

    type: TokenType
    value: str
    quote_map: Optional[str] = None
    heredoc_expand: bool = False
    expanded: bool = False


class LexerError(Exception):
    """Raised when a command line cannot be split into tokens."""

    def __init__(
        self,
        message: str = "syntax error: unclosed quote",
        status: int = UNCLOSED_QUOTE_STATUS,
    ) -> None:
        super().__init__(message)
        self.status = status


def get_token_type(value: str, quote_map: Optional[str]) -> TokenType:
    """Classify a token value; any quoted character makes it a word."""
    if quote_map and (SINGLE_QUOTED in quote_map or DOUBLE_QUOTED in quote_map):
        return TokenType.WORD
    return _OPERATOR_TYPES.get(value, TokenType.WORD)


def is_heredoc_expand(prev: Optional[Token], quote_map: Optional[str]) -> bool:
    """Tell whether a heredoc body introduced by this delimiter gets expanded."""
    return (
        prev is not None
        and prev.type is TokenType.HEREDOC
        and quote_map is not None
        and quote_map[:1] != SINGLE_QUOTED
    )


def is_token_operator(c: str) -> bool:
    return c in OPERATORS


def is_meta_token(c: str) -> bool:
    return c in PARENTHESES or is_token_operator(c)


def is_redirect_token(token_type: TokenType) -> bool:
    return token_type in _REDIRECT_TYPES


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in SPACES:
        pos += 1
    return pos


def _read_meta(text: str, pos: int) -> tuple[str, int]:
    length = 1
    if is_token_operator(text[pos]) and text[pos + 1 : pos + 2] == text[pos]:
        length = 2
    return text[pos : pos + length], pos + length


def _read_quoted(text: str, pos: int) -> tuple[str, str, int]:
    """Read a quoted run starting at the opening quote.

    Returns the contents, their quote map and the position after the
    closing quote.
    """
    quote = text[pos]
    mark = DOUBLE_QUOTED if quote == '"' else SINGLE_QUOTED
    chars: list[str] = []
    pos += 1
    while pos < len(text):
        c = text[pos]
        if c == quote:
            contents = "".join(chars)
            return contents, mark * len(contents), pos + 1
        if quote == '"' and c == "\\" and pos + 1 < len(text):
            pos += 1
        chars.append(text[pos])
        pos += 1
    raise LexerError()


def _read_word(text: str, pos: int) -> tuple[str, str, int]:
    values: list[str] = []
    marks: list[str] = []
    while pos < len(text) and text[pos] not in SPACES and not is_meta_token(text[pos]):
        if text[pos] in QUOTES:
            contents, quote_map, pos = _read_quoted(text, pos)
            values.append(contents)
            marks.append(quote_map)
            continue
        values.append(text[pos])
        marks.append(UNQUOTED)
        pos += 1
    return "".join(values), "".join(marks), pos


def fetch_token(text: str, pos: int = 0) -> tuple[Token, int]:
    """Read one token from ``text`` at ``pos``.

    Returns the token and the position of the next token, past any spaces.
    Raises LexerError on an unclosed quote.
    """
    pos = _skip_spaces(text, pos)
    quote_map: Optional[str]
    if pos < len(text) and is_meta_token(text[pos]):
        value, pos = _read_meta(text, pos)
        quote_map = None
    else:
        value, quote_map, pos = _read_word(text, pos)
    token = Token(get_token_type(value, quote_map), value, quote_map)
    return token, _skip_spaces(text, pos)


def tokenize(text: str) -> list[Token]:
    """Split a command line into tokens."""
    tokens: list[Token] = []
    pos = _skip_spaces(text, 0)
    while pos < len(text):
        token, pos = fetch_token(text, pos)
        prev = tokens[-1] if tokens else None
        token.heredoc_expand = is_heredoc_expand(prev, token.quote_map)
        tokens.append(token)
    return tokens


def format_token(token: Token) -> str:
    """Render a token on one line for debugging output."""
    parts = [
        f'token: [value="{token.value}"]',
        " " * max(0, 13 - len(token.value)),
        f" [type={token.type.name:<12}]",
    ]
    if token.quote_map is not None:
        parts.append(f' [quote_map="{token.quote_map}"]')
        parts.append(" " * max(0, 14 - len(token.quote_map)))
    else:
        parts.append(f" [quote_map={'NULL':<14}]")
    parts.append(
        f" [heredoc_expand={int(token.heredoc_expand):<2d}"
        f" expanded={int(token.expanded):<2d}]"
    )
    return "".join(parts)


def format_token_list(tokens: Iterable[Token]) -> str:
    return "\n".join(format_token(token) for token in tokens)