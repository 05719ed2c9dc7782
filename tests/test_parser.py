import pytest

from minishell.parser import (
    AstNode,
    Command,
    NodeType,
    ParseError,
    Redirection,
    format_ast,
    parse,
)
from minishell.tokens import TokenType, tokenize


def _parse(line):
    return parse(tokenize(line))


def test_simple_command():
    tree = _parse("ls -l /tmp")
    assert tree.type is NodeType.COMMAND
    assert tree.command.argv == ["ls", "-l", "/tmp"]
    assert tree.command.redirections == []


def test_pipe_is_left_associative():
    tree = _parse("a | b | c")
    assert tree.type is NodeType.PIPE
    assert tree.right.command.argv == ["c"]
    assert tree.left.type is NodeType.PIPE
    assert tree.left.left.command.argv == ["a"]
    assert tree.left.right.command.argv == ["b"]


def test_and_binds_tighter_than_or():
    tree = _parse("a || b && c")
    assert tree.type is NodeType.OR
    assert tree.left.command.argv == ["a"]
    assert tree.right.type is NodeType.AND
    assert tree.right.left.command.argv == ["b"]
    assert tree.right.right.command.argv == ["c"]


def test_pipe_binds_tighter_than_and():
    tree = _parse("a | b && c")
    assert tree.type is NodeType.AND
    assert tree.left.type is NodeType.PIPE


def test_redirections_keep_order_and_words():
    tree = _parse("cat < in > out >> log arg")
    command = tree.command
    assert command.argv == ["cat", "arg"]
    assert [r.type for r in command.redirections] == [
        TokenType.REDIR_IN,
        TokenType.REDIR_OUT,
        TokenType.APPEND,
    ]
    assert [r.filename for r in command.redirections] == ["in", "out", "log"]


def test_redirection_only_command_is_accepted():
    tree = _parse("> out")
    assert tree.command.argv == []
    assert tree.command.redirections[0].filename == "out"


def test_heredoc_expand_flag_follows_delimiter_quoting():
    plain = _parse("cat << EOF").command.redirections[0]
    quoted = _parse("cat << 'EOF'").command.redirections[0]
    assert plain.type is TokenType.HEREDOC
    assert plain.heredoc_expand is True
    assert quoted.heredoc_expand is False
    assert quoted.filename == "EOF"


def test_subshell():
    tree = _parse("(a && b) | c")
    assert tree.type is NodeType.PIPE
    sub = tree.left
    assert sub.type is NodeType.SUBSHELL
    assert sub.right is None
    assert sub.left.type is NodeType.AND


@pytest.mark.parametrize(
    "line, token",
    [
        ("a |", "|"),
        ("a &&", "&&"),
        ("a ||", "||"),
        ("a && || b", "&&"),
        ("cat >", ">"),
        ("cat < | b", "<"),
        ("a )", ")"),
        ("(a) b", "b"),
        ("a | (b", "|"),
    ],
)
def test_syntax_errors_name_the_token(line, token):
    with pytest.raises(ParseError) as info:
        _parse(line)
    assert info.value.token == token
    assert f"`{token}'" in str(info.value)


@pytest.mark.parametrize("line", ["| a", "(a", "()"])
def test_syntax_errors_without_token(line):
    with pytest.raises(ParseError) as info:
        _parse(line)
    assert info.value.token is None


def test_empty_token_list_is_an_error():
    with pytest.raises(ParseError):
        parse([])


def test_quoted_operator_is_an_argument():
    tree = _parse("echo '|' \"&&\"")
    assert tree.type is NodeType.COMMAND
    assert tree.command.argv == ["echo", "|", "&&"]


def test_format_ast_one_line_per_node_with_indent():
    tree = _parse("a x | b > f")
    lines = format_ast(tree).splitlines()
    assert len(lines) == 3
    assert lines[0] == NodeType.PIPE.value
    assert lines[1].startswith("  ") and "'a'" in lines[1] and "'x'" in lines[1]
    assert "REDIR_OUT 'f'" in lines[2]


def test_format_ast_of_hand_built_tree():
    node = AstNode(
        NodeType.SUBSHELL,
        AstNode(
            NodeType.COMMAND,
            command=Command(["ls"], [Redirection(TokenType.REDIR_IN, "in")]),
        ),
    )
    text = format_ast(node)
    assert text.splitlines()[0] == "SUBSHELL"
    assert text.splitlines()[1].startswith("  COMMAND")
    assert format_ast(None) == ""