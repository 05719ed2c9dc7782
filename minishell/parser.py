"""Recursive-descent parser turning tokens into a command tree."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

from minishell.tokens import Token, TokenType, is_redirect_token


class NodeType(enum.Enum):
    """Kinds of node in the command tree."""

    COMMAND = "COMMAND"
    PIPE = "PIPE"
    AND = "AND"
    OR = "OR"
    SUBSHELL = "SUBSHELL"


@dataclass
class Redirection:
    """One redirection of a simple command.

    ``heredoc`` holds the collected body of a ``<<`` redirection once it
    has been read.
    """

    type: TokenType
    filename: str
    heredoc_expand: bool = False
    heredoc: Optional[str] = None


@dataclass
class Command:
    """A simple command: its words and its redirections, in order."""

    argv: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)


@dataclass
class AstNode:
    """A node of the command tree.

    Command nodes carry ``command``; pipe, and and or nodes carry ``left``
    and ``right``; a subshell node carries its body in ``left``.
    """

    type: NodeType
    left: Optional[AstNode] = None
    right: Optional[AstNode] = None
    command: Optional[Command] = None


class ParseError(Exception):
    """Raised on a syntax error; ``token`` is the offending token, if known."""

    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token
        if token is None:
            message = "syntax error"
        else:
            message = f"syntax error near unexpected token `{token}'"
        super().__init__(message)


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _at(self, token_type: TokenType) -> bool:
        token = self.peek()
        return token is not None and token.type is token_type

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _binary(
        self,
        operator: TokenType,
        node_type: NodeType,
        operand: Callable[[], AstNode],
    ) -> AstNode:
        left = operand()
        while self._at(operator):
            op = self._advance()
            try:
                right = operand()
            except ParseError as exc:
                if exc.token is not None:
                    raise
                raise ParseError(op.value) from exc
            left = AstNode(node_type, left, right)
        return left

    def logical_or(self) -> AstNode:
        return self._binary(TokenType.LOGICAL_OR, NodeType.OR, self._logical_and)

    def _logical_and(self) -> AstNode:
        return self._binary(TokenType.LOGICAL_AND, NodeType.AND, self._pipeline)

    def _pipeline(self) -> AstNode:
        return self._binary(TokenType.PIPE, NodeType.PIPE, self._command)

    def _command(self) -> AstNode:
        if self._at(TokenType.OPEN_PAREN):
            return self._subshell()
        return AstNode(NodeType.COMMAND, command=self._simple_command())

    def _subshell(self) -> AstNode:
        self._advance()
        body = self.logical_or()
        if not self._at(TokenType.CLOSE_PAREN):
            raise ParseError()
        self._advance()
        return AstNode(NodeType.SUBSHELL, body)

    def _redirection(self) -> Redirection:
        op = self._advance()
        target = self.peek()
        if target is None or target.type is not TokenType.WORD:
            raise ParseError(op.value)
        self._advance()
        return Redirection(op.type, target.value, target.heredoc_expand)

    def _simple_command(self) -> Command:
        command = Command()
        while (token := self.peek()) is not None:
            if token.type is TokenType.WORD:
                command.argv.append(token.value)
                self._advance()
            elif is_redirect_token(token.type):
                command.redirections.append(self._redirection())
            else:
                break
        if not command.argv and not command.redirections:
            raise ParseError()
        return command


def parse(tokens: Iterable[Token]) -> AstNode:
    """Build the command tree for a token list.

    ``||`` binds loosest, then ``&&``, then ``|``. Raises ParseError on a
    syntax error, including an empty token list.
    """
    token_list = list(tokens)
    if not token_list:
        raise ParseError()
    parser = _Parser(token_list)
    tree = parser.logical_or()
    leftover = parser.peek()
    if leftover is not None:
        raise ParseError(leftover.value)
    return tree


def _describe(node: AstNode) -> str:
    if node.type is NodeType.COMMAND and node.command is not None:
        parts = [f"COMMAND argv={node.command.argv!r}"]
        parts.extend(
            f"{redir.type.name} {redir.filename!r}"
            for redir in node.command.redirections
        )
        return " ".join(parts)
    return node.type.value


def _lines(node: Optional[AstNode], depth: int) -> Iterator[str]:
    if node is None:
        return
    yield "  " * depth + _describe(node)
    yield from _lines(node.left, depth + 1)
    yield from _lines(node.right, depth + 1)


def format_ast(node: Optional[AstNode]) -> str:
    """Render a command tree, one node per line, children indented."""
    return "\n".join(_lines(node, 0))