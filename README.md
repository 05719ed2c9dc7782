# minishell

A small interactive shell for POSIX systems. It reads command lines at a
`minishell$ ` prompt, expands them and runs them, much like a stripped-down
`bash`.

## Features

- Words, single quotes and double quotes; inside double quotes a backslash
  escapes the next character
- `$NAME` and `$?` expansion, except inside single quotes
- Unquoted `*` wildcards matched against the names in the current directory
  (hidden names are skipped, matches are sorted; a pattern with no match is
  kept as written)
- Pipes `|`, logical `&&` and `||`, and subshells `( ... )`; `||` binds
  loosest, then `&&`, then `|`
- Redirections `<`, `>`, `>>` and here-documents `<<`
- Builtins: `echo [-n]`, `cd`, `pwd`, `export`, `unset`, `env`, `exit`
- Other commands are looked up along `PATH`, or run directly when the name
  contains `/`
- Ctrl-C at the prompt starts a new line and sets `$?` to 130; end of input
  (Ctrl-D) prints `exit` and leaves the shell

Exit statuses follow the usual conventions: 127 when a command is not found,
126 when it cannot be started, 128 plus the signal number when a child is
killed by a signal, and 258 for syntax errors such as an unclosed quote or a
misplaced operator.

## Installation

```
pip install .
```

## Usage

Start the shell:

```
minishell
```

Then type commands at the prompt:

```
echo "hello $USER" | cat > greeting.txt
ls *.txt && echo found || echo none
(cd /tmp && pwd)
cat << EOF
some text
EOF
exit 0
```

`exit` takes an optional numeric status, used modulo 256; a non-numeric
argument exits with status 255, and more than one argument is refused with
status 1. `export` with no arguments lists every variable as
`declare -x NAME="value"`, sorted by name; it stops at the first invalid
name and returns 1. `unset` reports invalid names but still returns 0.

## Using it from Python

Each stage of the shell can be used on its own:

```python
from minishell.tokens import tokenize, format_token_list
from minishell.expander import expand
from minishell.parser import parse, format_ast
from minishell.builtin_commands import Environment

env = Environment({"USER": "alice"})
tokens = expand(tokenize('echo "hi $USER" | wc -c'), env, 0, ".")
print(format_token_list(tokens))
print(format_ast(parse(tokens)))
```

- `minishell.tokens.tokenize` raises `LexerError` on an unclosed quote.
- `minishell.parser.parse` raises `ParseError` on a syntax error.
- `minishell.executor.exec_ast(tree, env)` runs a tree and returns its status.
- `minishell.shell.Shell` ties the stages together. `Shell.handle_input(line)`
  runs one command line and returns its status; `Shell.run()` runs the read
  loop. `Shell(envp, input_stream=stream)` reads lines from a text stream
  instead of the terminal, and `debug=True` prints the tokens and tree of
  each line before running it.

## What it does not do

- It only runs interactively or from a stream given to `Shell`; the
  `minishell` command takes no script file or `-c` option.
- There is no `;`, `&` background jobs, job control, file-descriptor
  redirections such as `2>`, or backslash escapes outside double quotes.
- Here-document bodies are passed through as typed; variables in them are
  not expanded.

## Running the tests

```
pip install ".[test]"
pytest
```