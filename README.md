# minishell

A small shell in the spirit of bash, as a Python library. It splits command
lines into tokens, expands variables, builds a syntax tree, and runs programs
and built-in commands with pipes, redirections and `&&` / `||`.

## Installing

```
pip install .
```

## Using it

```python
from minishell.environment import Environment, ShellState
from minishell.executor import execute
from minishell.parser import parse_line

state = ShellState(env=Environment.from_envp(["PATH=/usr/bin:/bin", "HOME=/tmp"]))
tree = parse_line("echo hello && echo $?", state)
if tree is not None:
    try:
        state.exit_status = execute(tree, state)
    finally:
        tree.cleanup()
```

- `parse_line(line, state, read_line=None)` tokenizes, expands and parses a
  line. It returns `None` when there is nothing to run. On a syntax error it
  sets `state.exit_status` to 2 and raises `minishell.lexer.LexerError` or
  `minishell.syntax_tree.ShellSyntaxError`.
- Here-documents are read when the line is parsed. `read_line` takes a prompt
  and returns a line, or `None` at end of input; by default `input()` is used.
  A `KeyboardInterrupt` from it raises `minishell.heredoc.HeredocInterrupted`
  and sets the exit status to 130. The documents are stored in temporary files
  under `/tmp`, which `Node.cleanup()` removes.
- `execute(node, state)` runs a tree and returns its exit status. The `exit`
  builtin sets `state.should_exit` rather than ending the process.

## What it understands

- Simple commands found on `PATH` or given by a path containing `/`.
- Pipes: `ls | grep py`
- Redirections: `<`, `>`, `>>`, and here-documents with `<<`.
- Logical operators: `&&` and `||`.
- Single quotes, double quotes and `$'...'` strings with `\n`, `\t`, `\r`,
  `\\` and `\'` escapes.
- Variable expansion: `$NAME`, `$?` for the last exit status and `$$` for the
  process id. Unquoted expansions that produce spaces are split into words.
- Here-document bodies are expanded unless the delimiter is quoted.

## Built-in commands

| Command  | Behaviour |
|----------|-----------|
| `echo`   | Prints its arguments; `-n` (and `-nnn`) suppresses the newline. |
| `cd`     | Changes directory; supports `~`, `-` and no argument (`HOME`). |
| `pwd`    | Prints `PWD`, or the working directory when it is unset. |
| `env`    | Lists variables that have a value. |
| `export` | Sets variables (`NAME=value`, `NAME+=value`) or lists them sorted. |
| `unset`  | Removes variables. |
| `exit`   | Requests exit with an optional numeric status (taken modulo 256). |

Each is available from `minishell.executor.run_builtin(args, state)`, where
`args[0]` is the command name. A command that cannot be found returns 127.

## What it does not do

The package has no interactive prompt and installs no command: there is no
read-eval loop, no line history and no start-up setup of the environment
(such as `SHLVL`). A program that wants an interactive shell reads lines
itself and passes each one to `parse_line` and `execute`, stopping when
`state.should_exit` becomes true.

## Tests

```
pip install .[test]
pytest
```