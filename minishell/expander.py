"""Variable and wildcard expansion of lexed tokens."""

from __future__ import annotations

import fnmatch
import os
from typing import Iterable, Mapping, Optional, Union

from minishell.tokens import (
    SINGLE_QUOTED,
    DOUBLE_QUOTED,
    UNQUOTED,
    Token,
    TokenType,
    get_token_type,
)

PathLike = Union[str, "os.PathLike[str]"]


def _is_name_start(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalpha())


def _is_name_char(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalnum())


def expand_dollar_sign(
    value: str, index: int, env: Mapping[str, str], exit_status: int = 0
) -> tuple[str, int]:
    """Expand the ``$`` at ``index`` in ``value``.

    Returns the replacement text and the index just past what it replaced.
    """
    following = value[index + 1 : index + 2]
    if following == "?":
        return str(exit_status), index + 2
    if following and _is_name_start(following):
        end = index + 1
        while end < len(value) and _is_name_char(value[end]):
            end += 1
        return env.get(value[index + 1 : end]) or "", end
    return "$", index + 1


def _expand_with_map(
    value: str, quote_map: str, env: Mapping[str, str], exit_status: int
) -> tuple[str, str]:
    pieces: list[str] = []
    marks: list[str] = []
    i = 0
    while i < len(value):
        mark = quote_map[i] if i < len(quote_map) else UNQUOTED
        if value[i] == "$" and i + 1 < len(value) and mark != SINGLE_QUOTED:
            text, i = expand_dollar_sign(value, i, env, exit_status)
            pieces.append(text)
            marks.append(mark * len(text))
        else:
            pieces.append(value[i])
            marks.append(mark)
            i += 1
    return "".join(pieces), "".join(marks)


def expand_token_value(
    value: str, quote_map: str, env: Mapping[str, str], exit_status: int = 0
) -> str:
    """Expand every ``$`` outside single quotes in ``value``."""
    return _expand_with_map(value, quote_map, env, exit_status)[0]


def handle_dollar_expansion(
    token: Token, env: Mapping[str, str], exit_status: int = 0
) -> Token:
    """Expand variables in a word token in place and reclassify it."""
    value, quote_map = _expand_with_map(
        token.value, token.quote_map or "", env, exit_status
    )
    if value != token.value:
        token.expanded = True
    token.value = value
    token.quote_map = quote_map
    token.type = get_token_type(value, quote_map)
    return token


def has_unquoted_wildcard(value: str, quote_map: str) -> bool:
    return any(
        c == "*" and mark not in (SINGLE_QUOTED, DOUBLE_QUOTED)
        for c, mark in zip(value, quote_map)
    )


def match_wildcard(pattern: str, directory: PathLike = ".") -> list[str]:
    """Names of the non-hidden entries of ``directory`` matching ``pattern``."""
    return sorted(
        name
        for name in os.listdir(directory)
        if not name.startswith(".") and fnmatch.fnmatchcase(name, pattern)
    )


def _is_expandable(token: Token) -> bool:
    return token.type is TokenType.WORD and token.quote_map is not None


def expand(
    tokens: Iterable[Token],
    env: Mapping[str, str],
    exit_status: int = 0,
    directory: Optional[PathLike] = ".",
) -> list[Token]:
    """Expand variables, then wildcards, across a token list.

    A wildcard word with no matches is left as it is.
    """
    tokens = list(tokens)
    for token in tokens:
        if _is_expandable(token):
            handle_dollar_expansion(token, env, exit_status)
    result: list[Token] = []
    for token in tokens:
        if _is_expandable(token) and has_unquoted_wildcard(
            token.value, token.quote_map or ""
        ):
            matches = match_wildcard(token.value, directory or ".")
            if matches:
                result.extend(Token(TokenType.WORD, name) for name in matches)
                continue
        result.append(token)
    return result